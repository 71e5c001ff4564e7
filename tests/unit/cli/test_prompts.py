"""Unit tests for cli.prompts module."""

import io
from unittest.mock import patch

import pytest
from rich.console import Console

from wsync.cli.prompts import AutoDecisions, RichPrompts

OPTIONS = [("Both (keep conflict)", "both"), ("Server (force pull)", "server"), ("Local (force push)", "local")]


class TestAutoDecisions:
    """Test cases for AutoDecisions."""

    def test_choose_returns_default(self):
        """choose always takes the default."""
        assert AutoDecisions().choose("Which?", OPTIONS, default="both") == "both"

    def test_confirm_uses_answers_then_default(self):
        """confirm answers from the table, else the default."""
        decisions = AutoDecisions(answers={"Sure?": True})

        assert decisions.confirm("Sure?") is True
        assert decisions.confirm("Other?") is False

    def test_ask_uses_answers_then_default(self):
        """ask answers from the table, else the default or empty."""
        decisions = AutoDecisions(answers={"Username": "alice"})

        assert decisions.ask("Username") == "alice"
        assert decisions.ask("URL", default="https://w.example.com") == "https://w.example.com"
        assert decisions.ask("Password", password=True) == ""

    def test_select_many_keeps_preselection(self):
        """select_many returns the pre-selected options in option order."""
        assert AutoDecisions().select_many("Pick", ["a", "b", "c"], ["c", "a"]) == ["a", "c"]


@pytest.fixture
def prompts():
    return RichPrompts(Console(file=io.StringIO(), no_color=True))


class TestRichPrompts:
    """Test cases for RichPrompts."""

    @patch("wsync.cli.prompts.Prompt.ask")
    def test_choose_maps_number_to_value(self, mock_ask, prompts):
        """The chosen number maps back to the option value."""
        mock_ask.return_value = "2"

        result = prompts.choose("Which?", OPTIONS, default="local")

        assert result == "server"
        assert mock_ask.call_args[1]["default"] == "3"
        assert mock_ask.call_args[1]["choices"] == ["1", "2", "3"]

    @patch("wsync.cli.prompts.Confirm.ask")
    def test_confirm(self, mock_confirm, prompts):
        """confirm delegates to rich Confirm."""
        mock_confirm.return_value = True

        assert prompts.confirm("Sure?", default=False) is True
        assert mock_confirm.call_args[1]["default"] is False

    @patch("wsync.cli.prompts.Prompt.ask")
    def test_ask_without_default(self, mock_ask, prompts):
        """ask without default does not pass one to rich."""
        mock_ask.return_value = "secret"

        assert prompts.ask("Password", password=True) == "secret"
        assert "default" not in mock_ask.call_args[1]
        assert mock_ask.call_args[1]["password"] is True

    @patch("wsync.cli.prompts.Prompt.ask")
    def test_select_many_toggles(self, mock_ask, prompts):
        """Listed numbers toggle their options."""
        mock_ask.return_value = "1, 3"

        result = prompts.select_many("Pick", ["a", "b", "c"], ["a", "b"])

        assert result == ["b", "c"]

    @patch("wsync.cli.prompts.Prompt.ask")
    def test_select_many_ignores_invalid(self, mock_ask, prompts):
        """Invalid numbers are ignored."""
        mock_ask.return_value = "9,x,,2"

        result = prompts.select_many("Pick", ["a", "b"], [])

        assert result == ["b"]

    @patch("wsync.cli.prompts.Prompt.ask")
    def test_select_many_empty_keeps_selection(self, mock_ask, prompts):
        """An empty answer keeps the pre-selection."""
        mock_ask.return_value = ""

        assert prompts.select_many("Pick", ["a", "b"], ["b"]) == ["b"]
