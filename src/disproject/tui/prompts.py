"""Terminal prompts: choice, confirmation, free text, and trust questions."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from prompt_toolkit import prompt as pt_prompt
from rich.markup import escape

from ..commands.trust import TRUST_ALWAYS, TRUST_NO, TRUST_ONCE
from .picker import pick_tui
from .renderer import console


class TerminalPrompter:
    """prompt_toolkit-backed prompts. Every method returns None on cancel."""

    def choose(self, title: str, options: list[tuple[Any, str, str]], current: Any = None) -> Any:
        return pick_tui(title, options, current=current)

    def read(self, message: str, default: str = "") -> str | None:
        try:
            answer = pt_prompt(message, default=default).strip()
        except (KeyboardInterrupt, EOFError):
            return None
        return answer or None

    def confirm(self, message: str) -> bool:
        try:
            answer = pt_prompt(f"{message} [y/N] ").strip().lower()
        except (KeyboardInterrupt, EOFError):
            return False
        return answer in ("y", "yes")

    def ask_trust(self, root: Path) -> str | None:
        console.print(
            f"\n[bold yellow]{escape(str(root))}[/bold yellow] defines custom commands "
            "that can run code."
        )
        try:
            answer = pt_prompt("Trust it? [y]es / [!] always / [N]o ").strip().lower()
        except (KeyboardInterrupt, EOFError):
            return None
        if answer in ("y", "yes"):
            return TRUST_ONCE
        if answer == TRUST_ALWAYS:
            return TRUST_ALWAYS
        return TRUST_NO
