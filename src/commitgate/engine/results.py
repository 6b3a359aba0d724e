"""Verification result tree.

The tree is built bottom-up by the validators: a ``VerificationResult`` holds one
``RefChangeOutcome`` per validated reference update, each of which holds one
``ChangeSetOutcome`` per changeset, each of which holds the ``GroupOutcome`` of
every group that had something to report.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from commitgate.types import AcceptMode, ChangeSet, Group, MatchMode, ReferenceUpdate, Rule


@dataclass(frozen=True)
class GroupOutcome:
    """Reportable result of one group for one changeset."""

    group: Group
    match: MatchMode
    matching_rules: tuple[Rule, ...]

    @property
    def is_violation(self) -> bool:
        return self.group.accept is AcceptMode.ACCEPT


@dataclass(frozen=True)
class ChangeSetOutcome:
    changeset: ChangeSet
    group_outcomes: dict[Group, GroupOutcome] = field(default_factory=dict)
    email_matched: bool = True
    name_matched: bool = True

    def has_reportable(self) -> bool:
        return bool(self.group_outcomes) or not self.email_matched or not self.name_matched

    def violations(self) -> list[GroupOutcome]:
        return [outcome for outcome in self.group_outcomes.values() if outcome.is_violation]


@dataclass(frozen=True)
class RefChangeOutcome:
    ref_change: ReferenceUpdate
    changeset_outcomes: dict[ChangeSet, ChangeSetOutcome] = field(default_factory=dict)

    def has_reportable(self) -> bool:
        return any(outcome.has_reportable() for outcome in self.changeset_outcomes.values())

    def is_empty(self) -> bool:
        """True when the update was filtered out or introduced no changesets."""
        return not self.changeset_outcomes


@dataclass(frozen=True)
class VerificationResult:
    ref_change_outcomes: tuple[RefChangeOutcome, ...] = ()

    def group_outcomes(self) -> Iterator[GroupOutcome]:
        for ref_outcome in self.ref_change_outcomes:
            for changeset_outcome in ref_outcome.changeset_outcomes.values():
                yield from changeset_outcome.group_outcomes.values()

    def is_accepted(self) -> bool:
        """True iff no ACCEPT-mode group produced an outcome anywhere in the tree.

        Identity mismatches and SHOW_MESSAGE outcomes are advisory.
        """
        return not any(
            changeset_outcome.violations()
            for ref_outcome in self.ref_change_outcomes
            for changeset_outcome in ref_outcome.changeset_outcomes.values()
        )

    def has_reportable(self) -> bool:
        return any(outcome.has_reportable() for outcome in self.ref_change_outcomes)
