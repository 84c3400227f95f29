"""Interactive menu loop built on prompt_toolkit."""

from __future__ import annotations

import time

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.formatted_text import HTML, FormattedText
from prompt_toolkit.formatted_text.html import html_escape
from prompt_toolkit.history import FileHistory

from .renderer import console, render_menu
from .session import MenuSession


class _KeyCompleter(Completer):
    """Complete the keys of the menu currently shown."""

    def __init__(self, session: MenuSession):
        self._session = session

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor.strip()
        for item in self._session.items():
            if item.visible and item.key.startswith(text):
                yield Completion(
                    item.key, start_position=-len(text), display_meta=item.description
                )


def _build_prompt(session: MenuSession) -> FormattedText:
    return FormattedText([("class:prompt", f"{session.menu.value}> ")])


def _build_toolbar(session: MenuSession):
    def _toolbar():
        scope = session.scope
        project = scope.selected_project.name if scope.selected_project else "no project"
        project = html_escape(project)
        placement = "other window" if scope.prefer_other_window else "this window"
        running = len(session.backend.live_instances())
        parts = [f" <b>{project}</b> | {placement}"]
        if running:
            parts.append(f" | {running} running")
        parts.append(" | q: back")
        return HTML("".join(parts))

    return _toolbar


def run_session(session: MenuSession) -> None:
    config = session.config
    config.global_dir.mkdir(parents=True, exist_ok=True)

    prompt_session: PromptSession = PromptSession(
        history=FileHistory(str(config.history_path)),
        completer=_KeyCompleter(session),
        bottom_toolbar=_build_toolbar(session),
    )
    _run_session_loop(session, prompt_session)


def _run_session_loop(session: MenuSession, prompt_session) -> None:
    last_interrupt: float = 0
    show_menu = True

    while not session.closed:
        if show_menu:
            render_menu(session)
        show_menu = True
        try:
            key = prompt_session.prompt(_build_prompt(session)).strip()
            last_interrupt = 0
        except KeyboardInterrupt:
            now = time.time()
            if now - last_interrupt < 1.0:
                console.print("\nbye", style="dim")
                break
            last_interrupt = now
            console.print("\npress Ctrl-C again to exit", style="dim")
            show_menu = False
            continue
        except EOFError:
            console.print()
            break

        if not key:
            show_menu = False
            continue

        try:
            if not session.handle_key(key):
                console.print(f"no action bound to {key!r}", style="dim")
                show_menu = False
        except KeyboardInterrupt:
            console.print("\ninterrupted", style="dim")
        except Exception as e:
            console.print(f"\nerror: {e}", style="bold")
            if session.config.verbose:
                console.print_exception()
