"""Rule matching and group quantifier evaluation."""

from __future__ import annotations

import re
from collections.abc import Callable

from commitgate.engine.results import GroupOutcome
from commitgate.errors import ConfigurationError
from commitgate.types import AcceptMode, Group, MatchMode, Rule

# (matched, total) -> quantifier satisfied
QUANTIFIERS: dict[MatchMode, Callable[[int, int], bool]] = {
    MatchMode.ALL: lambda matched, total: matched == total,
    MatchMode.NONE: lambda matched, total: matched == 0,
    MatchMode.ONE: lambda matched, total: matched >= 1,
}

# Quantifier state that produces an outcome for each accept mode.
#
#   accept        | match | outcome when     | meaning
#   SHOW_MESSAGE  | ALL   | satisfied        | info: every rule matched
#   SHOW_MESSAGE  | NONE  | satisfied        | info: no rule matched
#   SHOW_MESSAGE  | ONE   | satisfied        | info: some rule matched
#   ACCEPT        | ALL   | not satisfied    | violation: a rule did not match
#   ACCEPT        | NONE  | not satisfied    | violation: a forbidden rule matched
#   ACCEPT        | ONE   | not satisfied    | violation: no required rule matched
REPORT_WHEN_SATISFIED: dict[AcceptMode, bool] = {
    AcceptMode.SHOW_MESSAGE: True,
    AcceptMode.ACCEPT: False,
}


def compile_pattern(pattern: str, *, what: str = "rule") -> re.Pattern[str]:
    """Compile a configured pattern, surfacing syntax errors as configuration errors."""
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid {what} pattern `{pattern}`: {exc}") from exc


def rule_matches(rule: Rule, message: str) -> bool:
    """Return True when the rule pattern is found anywhere in the message."""
    return compile_pattern(rule.pattern).search(message) is not None


def quantifier_satisfied(match: MatchMode, matched: int, total: int) -> bool:
    return QUANTIFIERS[match](matched, total)


def evaluate_group(group: Group, message: str) -> GroupOutcome | None:
    """Evaluate one group against a commit message.

    Returns a ``GroupOutcome`` when the group has something to report: an
    informational hit for SHOW_MESSAGE groups or a violation for ACCEPT groups.
    Returns None otherwise.
    """
    matching = tuple(rule for rule in group.rules if rule_matches(rule, message))
    satisfied = quantifier_satisfied(group.match, len(matching), len(group.rules))
    if satisfied != REPORT_WHEN_SATISFIED[group.accept]:
        return None
    return GroupOutcome(group=group, match=group.match, matching_rules=matching)
