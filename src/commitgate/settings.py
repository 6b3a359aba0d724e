"""Load and validate commitgate settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml  # type: ignore[import-untyped]

from commitgate.types import AcceptMode, Group, MatchMode, Rule

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_HOOK_NAME = "commitgate"
DEFAULT_BRANCH_FILTER = ".*"
DEFAULT_REJECT_SUMMARY = "At least one change is not ok"

SETTINGS_REASON_PARSE_ERROR = "SETTINGS_PARSE_ERROR"
SETTINGS_REASON_SCHEMA_INVALID = "SETTINGS_SCHEMA_INVALID"

# Keep this literal deterministic and sorted in write path.
SETTINGS_TEMPLATE: dict[str, Any] = {
    "hook_name": DEFAULT_HOOK_NAME,
    "branches": DEFAULT_BRANCH_FILTER,
    "dry_run": False,
    "exclude_merge_commits": True,
    "exclude_tag_commits": True,
    "require_matching_author_name": False,
    "require_matching_author_email": False,
    "ignore_users": [],
    "messages": {
        "accept": "Thanks ${ACTOR_NAME}, all commits look good.",
        "reject": "Sorry ${ACTOR_NAME}, at least one commit was rejected.",
        "dry_run": "Dry run: nothing was blocked.",
        "reject_summary": DEFAULT_REJECT_SUMMARY,
        "require_matching_author_name": "Commit as yourself: committer name must be ${ACTOR_NAME}.",
        "require_matching_author_email": "Commit as yourself: committer email must be ${ACTOR_EMAIL}.",
    },
    "groups": [
        {
            "accept": "accept",
            "match": "one",
            "message": "Reference an issue in the commit message.",
            "rules": [
                {"regexp": r"^[A-Z][A-Z0-9]+-\d+", "message": "Issue key, e.g. PROJ-123"},
            ],
        },
        {
            "accept": "show_message",
            "match": "one",
            "message": "Work-in-progress commits should be squashed before release.",
            "rules": [{"regexp": r"(?i)\bwip\b"}],
        },
    ],
}


class SettingsError(ValueError):
    """Settings file validation error."""

    reason_code: str

    def __init__(self, message: str, reason_code: str = SETTINGS_REASON_SCHEMA_INVALID) -> None:
        super().__init__(message)
        self.reason_code = reason_code


@dataclass(frozen=True)
class GateMessages:
    """Configured messages, unrendered."""

    accept: str | None = None
    reject: str | None = None
    dry_run: str | None = None
    reject_summary: str = DEFAULT_REJECT_SUMMARY
    require_matching_author_name: str | None = None
    require_matching_author_email: str | None = None


@dataclass(frozen=True)
class GateSettings:
    """Normalized gate settings."""

    groups: tuple[Group, ...] = ()
    branches: str = DEFAULT_BRANCH_FILTER
    dry_run: bool = False
    exclude_merge_commits: bool = False
    exclude_tag_commits: bool = False
    require_matching_author_name: bool = False
    require_matching_author_email: bool = False
    ignore_users: tuple[str, ...] = ()
    hook_name: str = DEFAULT_HOOK_NAME
    messages: GateMessages = field(default_factory=GateMessages)

    @property
    def branch_filter(self) -> str:
        return self.branches or DEFAULT_BRANCH_FILTER


def settings_path_for_repo(repo_root: Path) -> Path:
    """Return canonical settings file path for a repository."""
    return repo_root.resolve() / ".commitgate" / "config.yaml"


def write_default_settings(repo_root: Path, *, force: bool = False) -> Path:
    """Create default settings YAML deterministically."""
    output_path = settings_path_for_repo(repo_root)
    if output_path.exists() and not force:
        raise FileExistsError(f"Settings file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    rendered = yaml.safe_dump(SETTINGS_TEMPLATE, sort_keys=True)
    output_path.write_text(rendered, encoding="utf-8")
    return output_path


def load_settings(path: Path) -> GateSettings:
    """Load and validate a settings file."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise SettingsError(f"{path.name} parse error: {exc}", SETTINGS_REASON_PARSE_ERROR) from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise SettingsError(
            f"{path.name} parse error: expected mapping at top level",
            SETTINGS_REASON_PARSE_ERROR,
        )
    return settings_from_dict(raw)


def settings_from_dict(raw: dict[str, Any]) -> GateSettings:
    """Normalize a raw settings mapping."""
    groups_raw = raw.get("groups", [])
    if not isinstance(groups_raw, list):
        raise SettingsError("`groups` must be a list")
    groups = tuple(_parse_group(entry, index) for index, entry in enumerate(groups_raw, start=1))

    messages_raw = raw.get("messages", {})
    if not isinstance(messages_raw, dict):
        raise SettingsError("`messages` must be a mapping")

    branches = raw.get("branches")
    if branches is not None and not isinstance(branches, str):
        raise SettingsError("`branches` must be a regular expression string")

    return GateSettings(
        groups=groups,
        branches=branches or DEFAULT_BRANCH_FILTER,
        dry_run=bool(raw.get("dry_run", False)),
        exclude_merge_commits=bool(raw.get("exclude_merge_commits", False)),
        exclude_tag_commits=bool(raw.get("exclude_tag_commits", False)),
        require_matching_author_name=bool(raw.get("require_matching_author_name", False)),
        require_matching_author_email=bool(raw.get("require_matching_author_email", False)),
        ignore_users=tuple(_normalize_string_list(raw.get("ignore_users"), "ignore_users")),
        hook_name=str(raw.get("hook_name", DEFAULT_HOOK_NAME) or ""),
        messages=GateMessages(
            accept=_optional_text(messages_raw, "accept"),
            reject=_optional_text(messages_raw, "reject"),
            dry_run=_optional_text(messages_raw, "dry_run"),
            reject_summary=_optional_text(messages_raw, "reject_summary") or DEFAULT_REJECT_SUMMARY,
            require_matching_author_name=_optional_text(messages_raw, "require_matching_author_name"),
            require_matching_author_email=_optional_text(messages_raw, "require_matching_author_email"),
        ),
    )


def _parse_group(entry: Any, index: int) -> Group:
    label = f"groups[{index}]"
    if not isinstance(entry, dict):
        raise SettingsError(f"{label} must be a mapping")

    accept = _parse_enum(AcceptMode, entry.get("accept"), f"{label}.accept")
    match = _parse_enum(MatchMode, entry.get("match"), f"{label}.match")

    rules_raw = entry.get("rules", [])
    if not isinstance(rules_raw, list):
        raise SettingsError(f"{label}.rules must be a list")
    rules: list[Rule] = []
    for rule_index, rule_raw in enumerate(rules_raw, start=1):
        if not isinstance(rule_raw, dict):
            raise SettingsError(f"{label}.rules[{rule_index}] must be a mapping")
        pattern = rule_raw.get("regexp")
        if not isinstance(pattern, str) or not pattern:
            raise SettingsError(f"{label}.rules[{rule_index}].regexp must be a non-empty string")
        rules.append(Rule(pattern=pattern, message=_optional_text(rule_raw, "message")))

    return Group(
        name=f"group-{index}",
        accept=accept,
        match=match,
        rules=tuple(rules),
        message=_optional_text(entry, "message"),
    )


def _parse_enum(enum_type: type[AcceptMode] | type[MatchMode], value: Any, label: str) -> Any:
    allowed = tuple(member.value for member in enum_type)
    normalized = str(value or "").strip().upper()
    if normalized not in allowed:
        raise SettingsError(f"{label} must be one of {allowed}, got `{value}`")
    return enum_type(normalized)


def _optional_text(mapping: dict[str, Any], key: str) -> str | None:
    value = mapping.get(key)
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _normalize_string_list(value: Any, label: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SettingsError(f"`{label}` must be a list of strings")
    items = [str(item).strip() for item in value]
    return [item for item in items if item]
