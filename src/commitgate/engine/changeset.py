"""Validation of a single changeset."""

from __future__ import annotations

from commitgate.engine.identity import check_email, check_name
from commitgate.engine.matching import evaluate_group
from commitgate.engine.results import ChangeSetOutcome, GroupOutcome
from commitgate.settings import GateSettings
from commitgate.types import ChangeSet, Group, Identity


def validate_groups(changeset: ChangeSet, settings: GateSettings) -> dict[Group, GroupOutcome]:
    """Run every configured group against the changeset message, in declaration order."""
    if changeset.is_merge and settings.exclude_merge_commits:
        return {}

    outcomes: dict[Group, GroupOutcome] = {}
    for group in settings.groups:
        outcome = evaluate_group(group, changeset.message)
        if outcome is not None:
            outcomes[group] = outcome
    return outcomes


def validate_changeset(changeset: ChangeSet, settings: GateSettings, actor: Identity) -> ChangeSetOutcome:
    """Evaluate groups and identity checks for one changeset."""
    name_matched = True
    if settings.require_matching_author_name:
        name_matched = check_name(actor.name, changeset.committer.name)

    email_matched = True
    if settings.require_matching_author_email:
        email_matched = check_email(actor.email, changeset.committer.email)

    return ChangeSetOutcome(
        changeset=changeset,
        group_outcomes=validate_groups(changeset, settings),
        email_matched=email_matched,
        name_matched=name_matched,
    )
