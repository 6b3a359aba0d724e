"""Unit tests for reference-update filtering and validation."""

from __future__ import annotations

import pytest

from commitgate.engine.refchange import should_validate, validate_ref_change
from commitgate.errors import ConfigurationError
from commitgate.settings import GateSettings
from commitgate.types import (
    AcceptMode,
    ChangeSet,
    Group,
    Identity,
    MatchMode,
    RefChangeType,
    ReferenceUpdate,
    Rule,
)

ACTOR = Identity(name="Ada", email="ada@example.com")
GROUP = Group(name="group-1", accept=AcceptMode.ACCEPT, match=MatchMode.ONE, rules=(Rule(pattern=r"^ISSUE-\d+"),))


class _Provider:
    def __init__(self, changesets: list[ChangeSet]):
        self.changesets = changesets
        self.calls: list[ReferenceUpdate] = []

    def list_new_changesets(self, ref_update: ReferenceUpdate) -> list[ChangeSet]:
        self.calls.append(ref_update)
        return self.changesets


def _update(ref_id: str, change_type: RefChangeType = RefChangeType.UPDATE) -> ReferenceUpdate:
    return ReferenceUpdate(ref_id=ref_id, from_hash="1" * 40, to_hash="2" * 40, change_type=change_type)


def _changeset(sha: str, message: str) -> ChangeSet:
    return ChangeSet(id=sha, message=message, committer=ACTOR)


def test_delete_is_skipped_without_fetching() -> None:
    provider = _Provider([_changeset("c1", "bad")])

    outcome = validate_ref_change(_update("refs/heads/main", RefChangeType.DELETE), GateSettings(), provider, ACTOR)

    assert outcome.is_empty()
    assert provider.calls == []


def test_branch_filter_excludes_non_matching_refs() -> None:
    provider = _Provider([_changeset("c1", "bad")])
    settings = GateSettings(groups=(GROUP,), branches=r"^refs/heads/release/.*")

    outcome = validate_ref_change(_update("refs/heads/feature/x"), settings, provider, ACTOR)

    assert outcome.is_empty()
    assert provider.calls == []


def test_branch_filter_searches_full_ref_id() -> None:
    settings = GateSettings(branches="release")
    assert should_validate(_update("refs/heads/release/1.0"), settings)
    assert not should_validate(_update("refs/heads/main"), settings)


def test_empty_branch_filter_matches_everything() -> None:
    assert should_validate(_update("refs/heads/anything"), GateSettings(branches=""))


def test_note_refs_are_always_skipped() -> None:
    assert not should_validate(_update("refs/notes/commits"), GateSettings())


def test_tag_refs_skipped_only_when_excluded() -> None:
    tag = _update("refs/tags/v1.0", RefChangeType.ADD)
    assert should_validate(tag, GateSettings())
    assert not should_validate(tag, GateSettings(exclude_tag_commits=True))


def test_malformed_branch_filter_raises() -> None:
    with pytest.raises(ConfigurationError, match="branch filter"):
        should_validate(_update("refs/heads/main"), GateSettings(branches="[oops"))


def test_changeset_outcomes_preserve_provider_order() -> None:
    changesets = [_changeset("c3", "ISSUE-1 ok"), _changeset("c1", "bad"), _changeset("c2", "ISSUE-2 ok")]
    provider = _Provider(changesets)
    ref_update = _update("refs/heads/main")

    outcome = validate_ref_change(ref_update, GateSettings(groups=(GROUP,)), provider, ACTOR)

    assert provider.calls == [ref_update]
    assert [changeset.id for changeset in outcome.changeset_outcomes] == ["c3", "c1", "c2"]
    assert outcome.has_reportable()
    assert not outcome.changeset_outcomes[changesets[0]].has_reportable()
    assert outcome.changeset_outcomes[changesets[1]].has_reportable()


def test_update_without_new_changesets_is_empty() -> None:
    outcome = validate_ref_change(_update("refs/heads/main"), GateSettings(), _Provider([]), ACTOR)
    assert outcome.is_empty()
    assert not outcome.has_reportable()
