"""Changeset listing backed by the git command line."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from commitgate.errors import ProviderError
from commitgate.git.exec import run_git
from commitgate.types import ChangeSet, Identity, RefChangeType, ReferenceUpdate, is_zero_hash

logger = logging.getLogger(__name__)

_FIELD_SEP = "\x00"
_SHOW_FORMAT = "%H%x00%P%x00%cn%x00%ce%x00%B"


def parse_ref_updates(lines: Iterable[str]) -> list[ReferenceUpdate]:
    """Parse pre-receive style ``<old> <new> <ref>`` lines."""
    updates: list[ReferenceUpdate] = []
    for line_no, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            continue
        parts = stripped.split()
        if len(parts) != 3:
            raise ValueError(f"line {line_no}: expected `<old> <new> <ref>`, got `{stripped}`")
        from_hash, to_hash, ref_id = parts
        if is_zero_hash(from_hash):
            change_type = RefChangeType.ADD
        elif is_zero_hash(to_hash):
            change_type = RefChangeType.DELETE
        else:
            change_type = RefChangeType.UPDATE
        updates.append(
            ReferenceUpdate(ref_id=ref_id, from_hash=from_hash, to_hash=to_hash, change_type=change_type)
        )
    return updates


def parse_show_output(text: str) -> ChangeSet:
    """Parse ``git show -s`` output produced with the commitgate format."""
    fields = text.split(_FIELD_SEP, 4)
    if len(fields) != 5:
        raise ProviderError(f"unexpected git show output: {text[:80]!r}")
    sha, parents, name, email, body = fields
    return ChangeSet(
        id=sha.strip(),
        message=body.strip("\n"),
        committer=Identity(name=name, email=email),
        parent_count=len(parents.split()),
    )


class GitChangeSetProvider:
    """List the commits a reference update introduces.

    With ``new_only`` the commits already reachable from any existing ref are
    excluded, which is what "new" means inside a pre-receive hook. Without it the
    plain ``from..to`` range is listed.
    """

    def __init__(self, repo_root: Path, *, new_only: bool = True) -> None:
        self.repo_root = repo_root
        self.new_only = new_only

    def rev_list_args(self, ref_update: ReferenceUpdate) -> list[str]:
        if self.new_only:
            return ["rev-list", "--reverse", ref_update.to_hash, "--not", "--all"]
        if is_zero_hash(ref_update.from_hash):
            return ["rev-list", "--reverse", ref_update.to_hash]
        return ["rev-list", "--reverse", f"{ref_update.from_hash}..{ref_update.to_hash}"]

    def list_new_changesets(self, ref_update: ReferenceUpdate) -> list[ChangeSet]:
        listed = run_git(self.rev_list_args(ref_update), repo_root=self.repo_root, context=ref_update.ref_id)
        shas = [line.strip() for line in listed.stdout.splitlines() if line.strip()]
        logger.info("%s introduces %d changeset(s)", ref_update.ref_id, len(shas))
        return [self._read_changeset(sha, ref_update.ref_id) for sha in shas]

    def _read_changeset(self, sha: str, ref_id: str) -> ChangeSet:
        shown = run_git(["show", "-s", f"--format={_SHOW_FORMAT}", sha], repo_root=self.repo_root, context=ref_id)
        return parse_show_output(shown.stdout)
