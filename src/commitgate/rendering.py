"""Variable substitution for configured messages."""

from __future__ import annotations

from dataclasses import dataclass
from string import Template

from commitgate.types import ChangeSet, Identity, ReferenceUpdate


@dataclass(frozen=True)
class MessageRenderer:
    """Render ``${VARIABLE}`` placeholders in configured messages.

    Unknown variables are left as written.
    """

    actor: Identity

    def variables(
        self,
        *,
        changeset: ChangeSet | None = None,
        ref_update: ReferenceUpdate | None = None,
    ) -> dict[str, str]:
        values = {
            "ACTOR_NAME": self.actor.name,
            "ACTOR_EMAIL": self.actor.email,
        }
        if changeset is not None:
            values["COMMIT_ID"] = changeset.id
            values["COMMITTER_NAME"] = changeset.committer.name
            values["COMMITTER_EMAIL"] = changeset.committer.email
        if ref_update is not None:
            values["REF_ID"] = ref_update.ref_id
        return values

    def render(
        self,
        template: str | None,
        *,
        changeset: ChangeSet | None = None,
        ref_update: ReferenceUpdate | None = None,
    ) -> str | None:
        if template is None:
            return None
        values = self.variables(changeset=changeset, ref_update=ref_update)
        return Template(template).safe_substitute(values)
