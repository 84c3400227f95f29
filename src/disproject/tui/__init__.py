"""Public API for the disproject TUI package."""

from .picker import pick_tui
from .prompts import TerminalPrompter
from .repl import run_session
from .session import MenuId, MenuItem, MenuSession

__all__ = ["MenuId", "MenuItem", "MenuSession", "TerminalPrompter", "pick_tui", "run_session"]
