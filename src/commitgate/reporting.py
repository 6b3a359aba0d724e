"""Plain-text report of a verification result."""

from __future__ import annotations

from commitgate.engine.results import ChangeSetOutcome, GroupOutcome, VerificationResult
from commitgate.rendering import MessageRenderer
from commitgate.settings import GateSettings
from commitgate.types import AcceptMode, ChangeSet, ReferenceUpdate

HASH_DISPLAY_LENGTH = 10


def _ref_line(ref_update: ReferenceUpdate) -> str:
    return (
        f"{ref_update.ref_id} {ref_update.from_hash[:HASH_DISPLAY_LENGTH]}"
        f" -> {ref_update.to_hash[:HASH_DISPLAY_LENGTH]}"
    )


def _commit_lines(changeset: ChangeSet) -> list[str]:
    committer = changeset.committer
    return [
        "",
        f"{changeset.id} {committer.name} <{committer.email}>",
        f">>> {changeset.message.rstrip()}",
    ]


def _identity_lines(
    outcome: ChangeSetOutcome,
    settings: GateSettings,
    renderer: MessageRenderer,
    ref_update: ReferenceUpdate,
) -> list[str]:
    lines: list[str] = []
    changeset = outcome.changeset
    render_args = {"changeset": changeset, "ref_update": ref_update}
    if not outcome.email_matched:
        lines.append(f"* Actor: '{renderer.actor.email}' != Commit: '{changeset.committer.email}'")
        message = renderer.render(settings.messages.require_matching_author_email, **render_args)
        if message:
            lines.append(message)
    if not outcome.name_matched:
        lines.append(f"* Actor: '{renderer.actor.name}' != Commit: '{changeset.committer.name}'")
        message = renderer.render(settings.messages.require_matching_author_name, **render_args)
        if message:
            lines.append(message)
    return lines


def _group_lines(
    group_outcome: GroupOutcome,
    renderer: MessageRenderer,
    changeset: ChangeSet,
    ref_update: ReferenceUpdate,
) -> list[str]:
    group = group_outcome.group
    render_args = {"changeset": changeset, "ref_update": ref_update}
    lines: list[str] = []
    message = renderer.render(group.message, **render_args)
    if message:
        lines.append(message)
    if group.accept is AcceptMode.ACCEPT:
        for rule in group.rules:
            rule_message = renderer.render(rule.message, **render_args)
            if rule_message:
                lines.append(f"* {rule.pattern}")
                lines.append(f"  {rule_message}")
    return lines


def render_report(
    result: VerificationResult,
    settings: GateSettings,
    renderer: MessageRenderer,
) -> str:
    """Render accept/reject status plus every reportable changeset."""
    lines: list[str] = []
    status_message = settings.messages.accept if result.is_accepted() else settings.messages.reject
    rendered_status = renderer.render(status_message)
    if rendered_status:
        lines.append(rendered_status)

    for ref_outcome in result.ref_change_outcomes:
        if not ref_outcome.has_reportable():
            continue
        ref_update = ref_outcome.ref_change
        lines.append(_ref_line(ref_update))
        for changeset, outcome in ref_outcome.changeset_outcomes.items():
            if not outcome.has_reportable():
                continue
            lines.extend(_commit_lines(changeset))
            lines.extend(_identity_lines(outcome, settings, renderer, ref_update))
            for group_outcome in outcome.group_outcomes.values():
                lines.extend(_group_lines(group_outcome, renderer, changeset, ref_update))

    lines.append("")
    if settings.dry_run:
        dry_run_message = renderer.render(settings.messages.dry_run)
        if dry_run_message:
            lines.append(dry_run_message)
    return "\n".join(lines) + "\n"
