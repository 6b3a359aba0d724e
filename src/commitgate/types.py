"""Domain types for commit validation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

TAG_REF_PREFIX = "refs/tags/"
NOTE_REF_PREFIX = "refs/notes/"


class AcceptMode(str, Enum):
    """What a satisfied group quantifier means."""

    ACCEPT = "ACCEPT"
    SHOW_MESSAGE = "SHOW_MESSAGE"


class MatchMode(str, Enum):
    """How many rules of a group must match."""

    ALL = "ALL"
    ONE = "ONE"
    NONE = "NONE"


class RefChangeType(str, Enum):
    ADD = "ADD"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Rule:
    """Single regex rule with an optional advisory message."""

    pattern: str
    message: str | None = None


@dataclass(frozen=True)
class Group:
    """Named set of rules plus match quantifier and accept mode."""

    name: str
    accept: AcceptMode
    match: MatchMode
    rules: tuple[Rule, ...] = ()
    message: str | None = None


@dataclass(frozen=True)
class Identity:
    name: str
    email: str


@dataclass(frozen=True)
class ChangeSet:
    """One commit introduced by a reference update."""

    id: str
    message: str
    committer: Identity
    parent_count: int = 1

    @property
    def is_merge(self) -> bool:
        return self.parent_count > 1


@dataclass(frozen=True)
class ReferenceUpdate:
    """Requested movement of a ref from one hash to another."""

    ref_id: str
    from_hash: str
    to_hash: str
    change_type: RefChangeType

    @property
    def is_tag(self) -> bool:
        return self.ref_id.startswith(TAG_REF_PREFIX)

    @property
    def is_note(self) -> bool:
        return self.ref_id.startswith(NOTE_REF_PREFIX)


class ChangeSetProvider(Protocol):
    def list_new_changesets(self, ref_update: ReferenceUpdate) -> Sequence[ChangeSet]:
        """Return the changesets newly introduced by ``ref_update``."""
        ...


class IdentityProvider(Protocol):
    def current_identity(self) -> Identity:
        """Return the authenticated actor pushing the update."""
        ...


@dataclass(frozen=True)
class StaticIdentityProvider:
    """Identity provider backed by a fixed, already-authenticated identity."""

    identity: Identity

    def current_identity(self) -> Identity:
        return self.identity


def is_zero_hash(value: str) -> bool:
    """True for the all-zero object id git uses for a missing side of a ref update."""
    return bool(value) and set(value) == {"0"}
