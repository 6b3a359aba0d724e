"""commitgate CLI - git hook entry points."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console

from commitgate import __version__
from commitgate.engine.orchestrator import FAIL_OPEN_MESSAGE, Decision, ValidationOrchestrator
from commitgate.git.exec import run_git
from commitgate.git.provider import GitChangeSetProvider, parse_ref_updates
from commitgate.settings import (
    DEFAULT_HOOK_NAME,
    SettingsError,
    load_settings,
    settings_path_for_repo,
    write_default_settings,
)
from commitgate.types import (
    Identity,
    RefChangeType,
    ReferenceUpdate,
    StaticIdentityProvider,
    is_zero_hash,
)

logger = logging.getLogger(__name__)

EXIT_REJECTED = 1
EXIT_USAGE = 2

ZERO_OID = "0" * 40

console = Console(highlight=False, emoji=False, soft_wrap=True)

cli = typer.Typer(
    name="commitgate",
    help="Regex commit-message gate for git reference updates.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"commitgate {__version__}")
        raise typer.Exit()


@cli.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log evaluation details to stderr."),
) -> None:
    """Validate commits introduced by reference updates."""
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _repo_root(repo: Path | None) -> Path:
    return (repo or Path.cwd()).resolve()


def _git_config_identity(repo_root: Path) -> Identity:
    name = run_git(["config", "user.name"], repo_root=repo_root, check=False).stdout.strip()
    email = run_git(["config", "user.email"], repo_root=repo_root, check=False).stdout.strip()
    return Identity(name=name, email=email)


def _print_decision(decision: Decision) -> None:
    if decision.report:
        console.print(decision.report, end="", markup=False)
    if decision.diagnostic:
        logger.warning("failed open: %s", decision.diagnostic)
    if not decision.allowed and decision.summary:
        console.print(decision.summary, style="bold red", markup=False)


def _fail_open(exc: BaseException) -> None:
    message = FAIL_OPEN_MESSAGE.format(error=exc)
    logger.error("%s", message)
    console.print(f"{DEFAULT_HOOK_NAME}> {message}", style="yellow", markup=False)


def _run_gate(
    *,
    repo_root: Path,
    config: Path | None,
    ref_updates: list[ReferenceUpdate],
    identity: Identity,
    provider: GitChangeSetProvider,
) -> None:
    settings_path = config or settings_path_for_repo(repo_root)
    if not settings_path.exists():
        logger.info("no settings at %s, accepting", settings_path)
        return

    try:
        settings = load_settings(settings_path)
    except (SettingsError, OSError, UnicodeError) as exc:
        _fail_open(exc)
        return

    orchestrator = ValidationOrchestrator(
        provider,
        StaticIdentityProvider(identity),
        hook_name=settings.hook_name,
    )
    decision = orchestrator.run(ref_updates, settings)
    _print_decision(decision)
    if not decision.allowed:
        raise typer.Exit(EXIT_REJECTED)


@cli.command("pre-receive")
def pre_receive(
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository path (defaults to current working directory).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Settings file (defaults to <repo>/.commitgate/config.yaml).",
    ),
    actor_name: str = typer.Option(
        "",
        "--actor-name",
        envvar="COMMITGATE_ACTOR_NAME",
        help="Authenticated pusher name.",
    ),
    actor_email: str = typer.Option(
        "",
        "--actor-email",
        envvar="COMMITGATE_ACTOR_EMAIL",
        help="Authenticated pusher email.",
    ),
    new_only: bool = typer.Option(
        True,
        "--new-only/--range",
        help="Only check commits not yet reachable from any ref, or the full old..new range.",
    ),
) -> None:
    """Check ref updates read from stdin (`<old> <new> <ref>` per line)."""
    repo_root = _repo_root(repo)
    try:
        ref_updates = parse_ref_updates(sys.stdin.read().splitlines())
    except (ValueError, OSError, UnicodeError) as exc:
        _fail_open(exc)
        return

    _run_gate(
        repo_root=repo_root,
        config=config,
        ref_updates=ref_updates,
        identity=Identity(name=actor_name, email=actor_email),
        provider=GitChangeSetProvider(repo_root, new_only=new_only),
    )


@cli.command("check")
def check(
    ref: str = typer.Option(..., "--ref", help="Full ref name, e.g. refs/heads/main."),
    to_rev: str = typer.Option("HEAD", "--to", help="New tip of the ref."),
    from_rev: str | None = typer.Option(
        None,
        "--from",
        help="Previous tip of the ref (omit to check every commit reachable from --to).",
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository path (defaults to current working directory).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Settings file (defaults to <repo>/.commitgate/config.yaml).",
    ),
    actor_name: str = typer.Option("", "--actor-name", envvar="COMMITGATE_ACTOR_NAME"),
    actor_email: str = typer.Option("", "--actor-email", envvar="COMMITGATE_ACTOR_EMAIL"),
) -> None:
    """Check the commits between two revisions of a working repository."""
    repo_root = _repo_root(repo)
    try:
        to_hash = run_git(["rev-parse", "--verify", to_rev], repo_root=repo_root).stdout.strip()
        from_hash = ZERO_OID
        if from_rev:
            from_hash = run_git(["rev-parse", "--verify", from_rev], repo_root=repo_root).stdout.strip()
        identity = _git_config_identity(repo_root)
    except RuntimeError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(EXIT_USAGE) from exc

    identity = Identity(name=actor_name or identity.name, email=actor_email or identity.email)
    change_type = RefChangeType.ADD if is_zero_hash(from_hash) else RefChangeType.UPDATE
    _run_gate(
        repo_root=repo_root,
        config=config,
        ref_updates=[ReferenceUpdate(ref_id=ref, from_hash=from_hash, to_hash=to_hash, change_type=change_type)],
        identity=identity,
        provider=GitChangeSetProvider(repo_root, new_only=False),
    )


@cli.command("init")
def init(
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository path (defaults to current working directory).",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing settings file."),
) -> None:
    """Write the default settings file."""
    try:
        path = write_default_settings(_repo_root(repo), force=force)
    except FileExistsError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(EXIT_USAGE) from exc
    typer.echo(f"settings={path}")


if __name__ == "__main__":
    cli()
