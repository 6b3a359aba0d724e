"""Subprocess wrapper for the git plumbing commands commitgate issues."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from commitgate.errors import ProviderError


@dataclass(frozen=True)
class GitResult:
    """Captured output of one git invocation."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str

    @property
    def subcommand(self) -> str:
        return self.argv[1] if len(self.argv) > 1 else self.argv[0]

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitCommandError(ProviderError):
    """A git command exited non-zero.

    ``context`` names what the command was run for (usually a ref id) so the
    fail-open diagnostic points at the offending update.
    """

    def __init__(self, result: GitResult, *, context: str | None = None):
        detail = (result.stderr or result.stdout).strip() or "no output"
        target = f" for {context}" if context else ""
        super().__init__(f"git {result.subcommand}{target} failed ({result.returncode}): {detail}")
        self.result = result
        self.context = context

    @property
    def subcommand(self) -> str:
        return self.result.subcommand


def run_git(
    args: list[str],
    *,
    repo_root: Path,
    check: bool = True,
    context: str | None = None,
) -> GitResult:
    """Run ``git <args>`` inside ``repo_root``.

    With ``check`` a non-zero exit raises :class:`GitCommandError`; a missing git
    binary or repository directory raises :class:`ProviderError` either way.
    """
    argv = ("git", *args)
    try:
        completed = subprocess.run(argv, cwd=repo_root, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise ProviderError(f"cannot run git {args[0] if args else ''} in {repo_root}: {exc}") from exc
    result = GitResult(
        argv=argv,
        cwd=repo_root,
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
    if check and not result.ok:
        raise GitCommandError(result, context=context)
    return result
