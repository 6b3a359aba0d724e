"""Top-level validation pass over a batch of reference updates."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from commitgate.engine.refchange import validate_ref_change
from commitgate.engine.results import RefChangeOutcome, VerificationResult
from commitgate.rendering import MessageRenderer
from commitgate.reporting import render_report
from commitgate.settings import DEFAULT_HOOK_NAME, GateSettings
from commitgate.types import ChangeSetProvider, Identity, IdentityProvider, ReferenceUpdate

logger = logging.getLogger(__name__)

FAIL_OPEN_MESSAGE = 'Error while validating reference changes. Will allow all of them. "{error}"'


@dataclass(frozen=True)
class Decision:
    """Final allow/reject decision plus the detail needed to report it."""

    allowed: bool
    accepted: bool
    dry_run: bool = False
    result: VerificationResult | None = None
    report: str = ""
    summary: str | None = None
    diagnostic: str | None = None


def verify_ref_updates(
    ref_updates: Iterable[ReferenceUpdate],
    settings: GateSettings,
    provider: ChangeSetProvider,
    actor: Identity,
) -> VerificationResult:
    """Build the verification tree, keeping only non-empty reference outcomes."""
    outcomes: list[RefChangeOutcome] = []
    for ref_update in ref_updates:
        outcome = validate_ref_change(ref_update, settings, provider, actor)
        if not outcome.is_empty():
            outcomes.append(outcome)
    return VerificationResult(ref_change_outcomes=tuple(outcomes))


class ValidationOrchestrator:
    """Run one validation pass and turn it into a decision.

    Any exception raised while evaluating is converted into an ALLOW decision
    carrying a diagnostic: a defect in configuration or infrastructure must never
    block a push.
    """

    def __init__(
        self,
        provider: ChangeSetProvider,
        identity_provider: IdentityProvider,
        *,
        hook_name: str = DEFAULT_HOOK_NAME,
    ) -> None:
        self.provider = provider
        self.identity_provider = identity_provider
        self.hook_name = hook_name

    def run(self, ref_updates: Iterable[ReferenceUpdate], settings: GateSettings) -> Decision:
        try:
            return self._decide(ref_updates, settings)
        except Exception as exc:
            diagnostic = FAIL_OPEN_MESSAGE.format(error=exc)
            logger.exception(diagnostic)
            return Decision(
                allowed=True,
                accepted=True,
                dry_run=settings.dry_run,
                report=self._with_banner(diagnostic + "\n"),
                diagnostic=diagnostic,
            )

    def _with_banner(self, text: str) -> str:
        if not self.hook_name:
            return text
        return f"{self.hook_name}\n\n{text}"

    def _decide(self, ref_updates: Iterable[ReferenceUpdate], settings: GateSettings) -> Decision:
        actor = self.identity_provider.current_identity()
        if actor.name in settings.ignore_users:
            logger.info("ignoring checks for %s", actor.name)
            return Decision(allowed=True, accepted=True, dry_run=settings.dry_run)

        renderer = MessageRenderer(actor)
        result = verify_ref_updates(ref_updates, settings, self.provider, actor)
        accepted = result.is_accepted()
        report = self._with_banner(render_report(result, settings, renderer))

        if settings.dry_run:
            logger.info("dry run, accepted=%s", accepted)
            return Decision(allowed=True, accepted=accepted, dry_run=True, result=result, report=report)

        if accepted:
            logger.info("accepting\n%s", report)
            return Decision(allowed=True, accepted=True, result=result, report=report)

        summary = renderer.render(settings.messages.reject_summary)
        logger.info("rejecting: %s", summary)
        return Decision(allowed=False, accepted=False, result=result, report=report, summary=summary)
