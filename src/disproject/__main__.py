"""CLI entry point: menu session, one-shot custom commands, project management."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.text import Text

from . import __version__
from .commands import CommandDispatcher, CustomCommandRegistry, TrustStore
from .core.config import Config, load_config
from .core.utils import git_branch, short_path
from .execution import (
    EnvironmentExecutor,
    ExecutionContext,
    ExecutionInstance,
    SubprocessBackend,
)
from .projects import KnownProjectsRegistry, ProjectResolver, Workspace
from .scope import ScopeStore
from .tui import MenuSession, TerminalPrompter, run_session
from .tui.renderer import render_projects

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_session(config: Config, prompter=None, environ=None) -> MenuSession:
    """Wire resolver, scope store, registry, executor and back end into a session."""
    prompter = prompter or TerminalPrompter()
    registry = KnownProjectsRegistry(config.registry_path)
    resolver = ProjectResolver(registry, Workspace(config.project_markers))
    trust = TrustStore(config.trust_path, ask=prompter.ask_trust)
    commands = CustomCommandRegistry(trust, defaults=config.custom_commands)
    store = ScopeStore(
        resolver, commands, config.cwd, prefer_other_window=config.prefer_other_window
    )
    executor = EnvironmentExecutor(ExecutionContext.ambient(config, environ))
    backend = SubprocessBackend(
        config.output_dir, shell=config.shell_command, confirm=prompter.confirm
    )
    dispatcher = CommandDispatcher(executor, backend)
    store.build()
    return MenuSession(config, resolver, store, dispatcher, backend, prompter)


# ── Banner ──────────────────────────────────────────────────────────


def _print_banner(session: MenuSession) -> None:
    console.print()
    info = Text("  ")
    info.append("disproject", style="bold")
    info.append(f" v{__version__}", style="dim")
    info.append("  ")
    project = session.scope.default_project
    if project is not None:
        info.append(project.name, style="bold")
        info.append("  ")
        info.append(short_path(project.root))
        branch = git_branch(project.root) if project.is_vcs("git") else None
        if branch:
            info.append(f" ({branch})")
    else:
        info.append(f"{short_path(session.config.cwd)} (no project)", style="dim")
    console.print(info)
    console.print("  type a key and press enter | q: back | Ctrl-C twice to exit", style="dim")


# ── projects subcommand ─────────────────────────────────────────────


def _projects_usage() -> None:
    console.print("usage: disproject projects <command>", style="dim")
    console.print()
    console.print("  [bold]list[/bold]                        List known projects")
    console.print("  [bold]forget[/bold] <path>               Forget one project")
    console.print("  [bold]forget-under[/bold] <path>         Forget projects under a directory")
    console.print("  [bold]forget-zombies[/bold]              Forget missing projects")
    console.print("  [bold]remember-under[/bold] <path> [-d N]  Register projects below a dir")


def _handle_projects_cli(args: list[str]) -> int:
    """Handle `disproject projects list|forget|forget-under|forget-zombies|remember-under`."""
    if not args:
        _projects_usage()
        return 2

    sub, rest = args[0], args[1:]
    config = load_config()
    resolver = ProjectResolver(
        KnownProjectsRegistry(config.registry_path), Workspace(config.project_markers)
    )

    if sub == "list":
        render_projects(resolver.known_projects())

    elif sub == "forget":
        if not rest:
            console.print("usage: disproject projects forget <path>", style="dim")
            return 2
        if resolver.forget(Path(rest[0])):
            console.print(f"forgot [bold]{escape(rest[0])}[/bold]")
        else:
            console.print(f"[bold]{escape(rest[0])}[/bold] is not a known project", style="dim")
            return 1

    elif sub == "forget-under":
        if not rest:
            console.print("usage: disproject projects forget-under <path>", style="dim")
            return 2
        removed = resolver.forget_under(rest[0])
        console.print(f"forgot {len(removed)} project(s)")

    elif sub == "forget-zombies":
        removed = resolver.forget_zombies()
        for root in removed:
            console.print(f"  forgot [dim]{escape(str(root))}[/dim]")
        console.print(f"forgot {len(removed)} missing project(s)")

    elif sub == "remember-under":
        depth = 3
        positional: list[str] = []
        i = 0
        while i < len(rest):
            if rest[i] in ("--depth", "-d") and i + 1 < len(rest):
                try:
                    depth = int(rest[i + 1])
                except ValueError:
                    console.print(f"invalid depth: {escape(rest[i + 1])}", style="bold")
                    return 2
                i += 2
            else:
                positional.append(rest[i])
                i += 1
        if not positional:
            console.print(
                "usage: disproject projects remember-under <path> [--depth N]", style="dim"
            )
            return 2
        added = resolver.remember_under(positional[0], max_depth=depth)
        for root in added:
            console.print(f"  [green]+[/green] {escape(short_path(root))}")
        console.print(f"remembered {len(added)} new project(s)")

    else:
        _projects_usage()
        return 2
    return 0


# ── run subcommand ──────────────────────────────────────────────────


def _handle_run_cli(args: list[str]) -> int:
    """Handle `disproject run <key> [path] [--other-window]`: dispatch one custom command."""
    other_window = "--other-window" in args or "-o" in args
    positional = [a for a in args if a not in ("--other-window", "-o")]
    if not positional:
        console.print("usage: disproject run <key> [path] [--other-window]", style="dim")
        return 2
    key = positional[0]
    cwd = Path(positional[1]).resolve() if len(positional) > 1 else None

    config = load_config(cwd=cwd, prefer_other_window=other_window or None)
    session = build_session(config)
    if session.scope.find_command(key) is None:
        console.print(f"no custom command bound to {escape(key)!r}", style="bold")
        return 1
    result = session.run_custom(key)
    if isinstance(result, ExecutionInstance) and result.returncode:
        return result.returncode
    return 0


# ── CLI entry point ─────────────────────────────────────────────────


@click.command()
@click.argument("path", required=False, default=None, type=click.Path(exists=True))
@click.option(
    "--other-window/--same-window",
    default=None,
    help="Run command output in the background (other window) or attached",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def _click_main(path: str | None, other_window: bool | None, verbose: bool):
    """disproject: project command dispatch menu."""
    cwd = Path(path).resolve() if path else None
    config = load_config(cwd=cwd, prefer_other_window=other_window, verbose=verbose)
    session = build_session(config)
    _print_banner(session)
    run_session(session)


def main():
    """True entry point. Intercepts subcommands before click."""
    verbose = "--verbose" in sys.argv or "-v" in sys.argv
    _setup_logging(verbose)
    if len(sys.argv) > 1 and sys.argv[1] == "projects":
        sys.exit(_handle_projects_cli([a for a in sys.argv[2:] if a not in ("-v", "--verbose")]))
    if len(sys.argv) > 1 and sys.argv[1] == "run":
        sys.exit(_handle_run_cli([a for a in sys.argv[2:] if a not in ("-v", "--verbose")]))
    _click_main()


if __name__ == "__main__":
    main()
