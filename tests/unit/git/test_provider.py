"""Unit tests for the git-backed changeset provider."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from commitgate.errors import ProviderError
from commitgate.git.exec import GitCommandError, GitResult
from commitgate.git.provider import GitChangeSetProvider, parse_ref_updates, parse_show_output
from commitgate.types import RefChangeType, ReferenceUpdate

ZERO = "0" * 40
OLD = "1" * 40
NEW = "2" * 40


class _GitStub:
    def __init__(self, outputs: dict[tuple[str, ...], GitResult]):
        self.outputs = outputs
        self.calls: list[tuple[str, ...]] = []

    def __call__(
        self, args: list[str], *, repo_root: Path, check: bool = True, context: str | None = None
    ) -> GitResult:
        _ = repo_root
        key = tuple(args)
        self.calls.append(key)
        if key not in self.outputs:
            raise AssertionError(f"missing stub for args: {args}")
        result = self.outputs[key]
        if check and not result.ok:
            raise GitCommandError(result, context=context)
        return result


def _result(args: list[str], stdout: str = "", stderr: str = "", code: int = 0) -> GitResult:
    return GitResult(argv=tuple(["git", *args]), cwd=Path("/repo"), returncode=code, stdout=stdout, stderr=stderr)


def _run(cmd: list[str], *, cwd: Path) -> str:
    result = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout.strip()


def _init_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir(parents=True, exist_ok=True)
    _run(["git", "init", "-b", "main"], cwd=repo)
    _run(["git", "config", "user.email", "test@example.com"], cwd=repo)
    _run(["git", "config", "user.name", "Test User"], cwd=repo)
    (repo / "README.md").write_text("# repo\n", encoding="utf-8")
    _run(["git", "add", "README.md"], cwd=repo)
    _run(["git", "commit", "-m", "init"], cwd=repo)
    return repo


def test_parse_ref_updates_derives_change_type() -> None:
    updates = parse_ref_updates(
        [
            f"{ZERO} {NEW} refs/heads/feature\n",
            f"{OLD} {NEW} refs/heads/main\n",
            "\n",
            f"{OLD} {ZERO} refs/tags/v1\n",
        ]
    )

    assert [(update.ref_id, update.change_type) for update in updates] == [
        ("refs/heads/feature", RefChangeType.ADD),
        ("refs/heads/main", RefChangeType.UPDATE),
        ("refs/tags/v1", RefChangeType.DELETE),
    ]


def test_parse_ref_updates_rejects_malformed_line() -> None:
    with pytest.raises(ValueError, match="line 1"):
        parse_ref_updates(["not a ref update line"])


def test_parse_show_output_counts_parents() -> None:
    changeset = parse_show_output(f"{NEW}\x00{OLD} {'3' * 40}\x00Ada\x00ada@example.com\x00Merge x\n\nbody\n")

    assert changeset.id == NEW
    assert changeset.is_merge
    assert changeset.committer.email == "ada@example.com"
    assert changeset.message == "Merge x\n\nbody"


def test_new_only_excludes_existing_refs(monkeypatch: pytest.MonkeyPatch) -> None:
    rev_list = ["rev-list", "--reverse", NEW, "--not", "--all"]
    show = ["show", "-s", "--format=%H%x00%P%x00%cn%x00%ce%x00%B", NEW]
    stub = _GitStub(
        {
            tuple(rev_list): _result(rev_list, stdout=f"{NEW}\n"),
            tuple(show): _result(show, stdout=f"{NEW}\x00{OLD}\x00Ada\x00ada@example.com\x00ISSUE-1 work\n"),
        }
    )
    monkeypatch.setattr("commitgate.git.provider.run_git", stub)

    provider = GitChangeSetProvider(Path("/repo"))
    changesets = provider.list_new_changesets(
        ReferenceUpdate(ref_id="refs/heads/main", from_hash=OLD, to_hash=NEW, change_type=RefChangeType.UPDATE)
    )

    assert [changeset.message for changeset in changesets] == ["ISSUE-1 work"]
    assert stub.calls[0] == tuple(rev_list)


def test_range_mode_uses_from_to_range() -> None:
    provider = GitChangeSetProvider(Path("/repo"), new_only=False)
    update = ReferenceUpdate(ref_id="refs/heads/main", from_hash=OLD, to_hash=NEW, change_type=RefChangeType.UPDATE)
    created = ReferenceUpdate(ref_id="refs/heads/x", from_hash=ZERO, to_hash=NEW, change_type=RefChangeType.ADD)

    assert provider.rev_list_args(update) == ["rev-list", "--reverse", f"{OLD}..{NEW}"]
    assert provider.rev_list_args(created) == ["rev-list", "--reverse", NEW]


def test_git_failure_raises_provider_error(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path)
    provider = GitChangeSetProvider(repo, new_only=False)
    update = ReferenceUpdate(ref_id="refs/heads/main", from_hash=OLD, to_hash=NEW, change_type=RefChangeType.UPDATE)

    with pytest.raises(ProviderError, match="git rev-list for refs/heads/main failed"):
        provider.list_new_changesets(update)


def test_lists_range_from_real_repository_oldest_first(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path)
    base = _run(["git", "rev-parse", "HEAD"], cwd=repo)
    _run(["git", "commit", "--allow-empty", "-m", "ISSUE-1 first"], cwd=repo)
    _run(["git", "commit", "--allow-empty", "-m", "second\n\nwith body"], cwd=repo)
    tip = _run(["git", "rev-parse", "HEAD"], cwd=repo)

    provider = GitChangeSetProvider(repo, new_only=False)
    changesets = provider.list_new_changesets(
        ReferenceUpdate(ref_id="refs/heads/main", from_hash=base, to_hash=tip, change_type=RefChangeType.UPDATE)
    )

    assert [changeset.message for changeset in changesets] == ["ISSUE-1 first", "second\n\nwith body"]
    assert changesets[-1].id == tip
    assert all(changeset.committer.name == "Test User" for changeset in changesets)
    assert all(changeset.parent_count == 1 for changeset in changesets)


def test_show_failure_names_subcommand_and_ref(monkeypatch: pytest.MonkeyPatch) -> None:
    rev_list = ["rev-list", "--reverse", f"{OLD}..{NEW}"]
    show = ["show", "-s", "--format=%H%x00%P%x00%cn%x00%ce%x00%B", NEW]
    stub = _GitStub(
        {
            tuple(rev_list): _result(rev_list, stdout=f"{NEW}\n"),
            tuple(show): _result(show, stderr="fatal: bad object\n", code=128),
        }
    )
    monkeypatch.setattr("commitgate.git.provider.run_git", stub)
    provider = GitChangeSetProvider(Path("/repo"), new_only=False)

    with pytest.raises(GitCommandError) as exc_info:
        provider.list_new_changesets(
            ReferenceUpdate(ref_id="refs/heads/main", from_hash=OLD, to_hash=NEW, change_type=RefChangeType.UPDATE)
        )

    assert exc_info.value.subcommand == "show"
    assert exc_info.value.context == "refs/heads/main"
    assert str(exc_info.value) == "git show for refs/heads/main failed (128): fatal: bad object"
