"""Unit tests for cli.output module."""

import io

import pytest
from rich.console import Console

from wsync.cli.models import BatchReport, OutcomeStatus, PageOutcome
from wsync.cli.output import OutputHandler


def make_handler(verbosity=0):
    buffer = io.StringIO()
    console = Console(file=buffer, no_color=True, width=200, highlight=False)
    return OutputHandler(verbosity=verbosity, console=console), buffer


class TestMessages:
    """Test cases for message methods."""

    def test_success_error_warning(self):
        """Messages are printed with their marks."""
        handler, buffer = make_handler()

        handler.success("done")
        handler.error("failed")
        handler.warning("careful")

        output = buffer.getvalue()
        assert "✓ done" in output
        assert "✗ failed" in output
        assert "⚠ careful" in output

    @pytest.mark.parametrize("verbosity,info_shown,debug_shown", [
        (0, False, False),
        (1, True, False),
        (2, True, True),
    ])
    def test_verbosity_levels(self, verbosity, info_shown, debug_shown):
        """info needs verbosity 1, debug needs verbosity 2."""
        handler, buffer = make_handler(verbosity)

        handler.info("info line")
        handler.debug("debug line")

        assert ("info line" in buffer.getvalue()) is info_shown
        assert ("debug line" in buffer.getvalue()) is debug_shown

    def test_markup_in_messages_is_escaped(self):
        """Page ids that look like markup are printed literally."""
        handler, buffer = make_handler()

        handler.print("[bold]page[/bold]")

        assert "[bold]page[/bold]" in buffer.getvalue()


class TestReports:
    """Test cases for outcome and report printing."""

    def test_print_outcome(self):
        """Each outcome shows page id and message."""
        handler, buffer = make_handler()

        handler.print_outcome(PageOutcome("welcome", OutcomeStatus.FAILED, "Local file already exists"))

        assert "✗ welcome: Local file already exists" in buffer.getvalue()

    def test_print_report_with_failures(self):
        """A report with failures says so."""
        handler, buffer = make_handler()
        report = BatchReport(command="push", outcomes=[
            PageOutcome("a", OutcomeStatus.CHANGED),
            PageOutcome("b", OutcomeStatus.FAILED),
        ])

        handler.print_report(report)

        output = buffer.getvalue()
        assert "Push Summary:" in output
        assert "Changed: 1 page(s)" in output
        assert "Failed: 1 page(s)" in output
        assert "Push completed with errors" in output

    def test_print_report_up_to_date(self):
        """A report with only unchanged pages says all are up to date."""
        handler, buffer = make_handler()
        report = BatchReport(command="sync", outcomes=[PageOutcome("a", OutcomeStatus.UNCHANGED)])

        handler.print_report(report)

        assert "All tracked pages are already up to date" in buffer.getvalue()

    def test_print_report_empty(self):
        """An empty report says there are no tracked pages."""
        handler, buffer = make_handler()

        handler.print_report(BatchReport(command="pull"))

        assert "No tracked pages" in buffer.getvalue()

    def test_print_status(self):
        """Status lists the three groups with counts."""
        handler, buffer = make_handler()

        handler.print_status(["a", "b"], ["b"], ["c"])

        output = buffer.getvalue()
        assert "2 tracked file(s) ['a', 'b']" in output
        assert "including 1 locally edited file(s) ['b']" in output
        assert "1 untracked file(s) ['c']" in output
