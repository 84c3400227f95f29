"""Tests for disproject.tui.prompts.TerminalPrompter."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from disproject.commands import TRUST_ALWAYS, TRUST_NO, TRUST_ONCE
from disproject.tui import TerminalPrompter


@pytest.fixture(autouse=True)
def quiet_console():
    with patch("disproject.tui.prompts.console"):
        yield


def _answer(value):
    if isinstance(value, BaseException):
        return patch("disproject.tui.prompts.pt_prompt", side_effect=value)
    return patch("disproject.tui.prompts.pt_prompt", return_value=value)


class TestRead:
    def test_stripped(self):
        with _answer("  make -k "):
            assert TerminalPrompter().read("compile: ") == "make -k"

    def test_empty_is_none(self):
        with _answer("   "):
            assert TerminalPrompter().read("compile: ") is None

    def test_cancel(self):
        with _answer(KeyboardInterrupt()):
            assert TerminalPrompter().read("compile: ") is None

    def test_default_passed(self):
        with _answer("x") as prompt:
            TerminalPrompter().read("compile: ", default="make -k")
        assert prompt.call_args[1]["default"] == "make -k"


class TestConfirm:
    @pytest.mark.parametrize("answer,expected", [("y", True), ("YES", True), ("", False)])
    def test_answers(self, answer, expected):
        with _answer(answer):
            assert TerminalPrompter().confirm("kill it?") is expected

    def test_eof(self):
        with _answer(EOFError()):
            assert TerminalPrompter().confirm("kill it?") is False


class TestAskTrust:
    @pytest.mark.parametrize(
        "answer,expected",
        [("y", TRUST_ONCE), ("!", TRUST_ALWAYS), ("n", TRUST_NO), ("", TRUST_NO)],
    )
    def test_answers(self, answer, expected):
        with _answer(answer):
            assert TerminalPrompter().ask_trust(Path("/w/a")) == expected

    def test_cancel(self):
        with _answer(KeyboardInterrupt()):
            assert TerminalPrompter().ask_trust(Path("/w/a")) is None


class TestChoose:
    def test_delegates_to_picker(self):
        options = [("a", "alpha", "")]
        with patch("disproject.tui.prompts.pick_tui", return_value="a") as pick:
            assert TerminalPrompter().choose("select", options, current="a") == "a"
        pick.assert_called_once_with("select", options, current="a")
