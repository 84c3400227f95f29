"""Inline project picker: numbered, aligned rows with a current-project tag."""

from __future__ import annotations

from typing import Any

from prompt_toolkit import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import HSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl

from .renderer import console

# rows 1-9 can be picked by number
_DIGITS = "123456789"


def pick_tui(
    title: str,
    options: list[tuple[Any, str, str]],
    current: Any = None,
) -> Any:
    """Show ``(value, label, detail)`` options and return the picked value or None.

    Labels are padded to one column so details line up; the row holding
    *current* is tagged ``(current)`` and starts out selected.
    """
    if not options:
        console.print("nothing to choose from", style="dim")
        return None

    selected = [0]
    if current is not None:
        for i, (value, _, _) in enumerate(options):
            if value == current:
                selected[0] = i
    result: list[Any] = [None]
    width = max(len(label) for _, label, _ in options)

    def _get_text():
        lines = [("bold", f" {title}"), ("dim", f" ({len(options)})\n")]
        for i, (value, label, detail) in enumerate(options):
            number = _DIGITS[i] if i < len(_DIGITS) else " "
            lines.append(("dim", f"  {number} "))
            lines.append(("reverse" if i == selected[0] else "", f" {label:<{width}} "))
            if detail:
                lines.append(("dim", f"  {detail}"))
            if current is not None and value == current:
                lines.append(("green", "  (current)"))
            lines.append(("", "\n"))
        lines.append(("dim", "  j/k move  1-9 pick  enter choose  esc cancel"))
        return lines

    kb = KeyBindings()

    @kb.add("up")
    @kb.add("k")
    def _up(event):
        selected[0] = max(0, selected[0] - 1)

    @kb.add("down")
    @kb.add("j")
    def _down(event):
        selected[0] = min(len(options) - 1, selected[0] + 1)

    @kb.add("home")
    @kb.add("g")
    def _first(event):
        selected[0] = 0

    @kb.add("end")
    @kb.add("G")
    def _last(event):
        selected[0] = len(options) - 1

    @kb.add("enter")
    def _select(event):
        result[0] = options[selected[0]][0]
        event.app.exit()

    def _pick_number(event):
        result[0] = options[_DIGITS.index(event.data)][0]
        event.app.exit()

    for digit in _DIGITS[: len(options)]:
        kb.add(digit)(_pick_number)

    @kb.add("escape")
    @kb.add("q")
    @kb.add("c-c")
    def _cancel(event):
        event.app.exit()

    layout = Layout(HSplit([Window(FormattedTextControl(_get_text))]))
    app: Application = Application(layout=layout, key_bindings=kb, full_screen=False)
    app.run()
    return result[0]
