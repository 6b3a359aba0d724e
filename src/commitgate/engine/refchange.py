"""Validation of one reference update."""

from __future__ import annotations

import logging

from commitgate.engine.changeset import validate_changeset
from commitgate.engine.matching import compile_pattern
from commitgate.engine.results import ChangeSetOutcome, RefChangeOutcome
from commitgate.settings import GateSettings
from commitgate.types import ChangeSet, ChangeSetProvider, Identity, RefChangeType, ReferenceUpdate

logger = logging.getLogger(__name__)


def should_validate(ref_update: ReferenceUpdate, settings: GateSettings) -> bool:
    """Apply reference-level filters in order: deletions, branch filter, notes, tags."""
    if ref_update.change_type is RefChangeType.DELETE:
        return False
    branch_filter = compile_pattern(settings.branch_filter, what="branch filter")
    if branch_filter.search(ref_update.ref_id) is None:
        return False
    if ref_update.is_note:
        return False
    return not (ref_update.is_tag and settings.exclude_tag_commits)


def validate_ref_change(
    ref_update: ReferenceUpdate,
    settings: GateSettings,
    provider: ChangeSetProvider,
    actor: Identity,
) -> RefChangeOutcome:
    """Validate the changesets a reference update introduces.

    Filtered updates yield an empty outcome without asking the provider for
    changesets.
    """
    logger.info(
        "refChange %s %s -> %s %s",
        ref_update.ref_id,
        ref_update.from_hash,
        ref_update.to_hash,
        ref_update.change_type.value,
    )
    if not should_validate(ref_update, settings):
        logger.info("skipping %s", ref_update.ref_id)
        return RefChangeOutcome(ref_change=ref_update)

    outcomes: dict[ChangeSet, ChangeSetOutcome] = {}
    for changeset in provider.list_new_changesets(ref_update):
        logger.info(
            "changeset %s parents=%d committer=%s <%s>",
            changeset.id,
            changeset.parent_count,
            changeset.committer.name,
            changeset.committer.email,
        )
        outcomes[changeset] = validate_changeset(changeset, settings, actor)
    return RefChangeOutcome(ref_change=ref_update, changeset_outcomes=outcomes)
