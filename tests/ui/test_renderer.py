"""Tests for the multi-row renderers."""

import io

import pytest
from rich.console import Console

from commit_progress.ui.renderer import (
    RowHandle,
    MultiRowRenderer,
    NullRenderer,
    RichMultiBarRenderer,
    create_renderer
)


@pytest.fixture
def fields():
    return {
        "commit": "abc1234  ",
        "author": "Ada Lovelace    ",
        "tokens": "1,200/300",
        "cost": "$0.0081",
        "status": "Analyzing...",
    }


@pytest.fixture
def terminal_console():
    """Console that behaves like a terminal but writes to a buffer."""
    return Console(file=io.StringIO(), force_terminal=True, width=140)


class TestNullRenderer:
    """NullRenderer accepts every call and draws nothing."""

    def test_rows_accept_updates(self, fields):
        renderer = NullRenderer()
        row = renderer.create_row(100, 0, fields)

        assert isinstance(row, RowHandle)
        row.update(50, fields)
        renderer.stop_all()
        renderer.stop_all()

    def test_is_multi_row_renderer(self):
        assert isinstance(NullRenderer(), MultiRowRenderer)


class TestRichMultiBarRenderer:
    """RichMultiBarRenderer draws rows with rich Progress."""

    def test_rows_rendered_to_console(self, terminal_console, fields):
        renderer = RichMultiBarRenderer(console=terminal_console)
        row = renderer.create_row(100, 0, fields)
        row.update(40, dict(fields, status="Done-ish"))
        renderer.stop_all()

        output = terminal_console.file.getvalue()
        assert "abc1234" in output
        assert "Ada Lovelace" in output
        assert "Done-ish" in output
        assert "40%" in output

    def test_field_text_not_parsed_as_markup(self, terminal_console, fields):
        renderer = RichMultiBarRenderer(console=terminal_console)
        renderer.create_row(100, 0, dict(fields, author="[bold]dev[/bold]"))
        renderer.stop_all()

        assert "[bold]dev[/bold]" in terminal_console.file.getvalue()

    def test_each_row_has_own_task(self, terminal_console, fields):
        renderer = RichMultiBarRenderer(console=terminal_console)
        first = renderer.create_row(100, 0, fields)
        second = renderer.create_row(100, 0, fields)
        try:
            assert first._task_id != second._task_id
            assert first._progress is second._progress
        finally:
            renderer.stop_all()

    def test_stop_all_idempotent(self, terminal_console, fields):
        renderer = RichMultiBarRenderer(console=terminal_console)
        renderer.stop_all()
        renderer.create_row(100, 0, fields)
        renderer.stop_all()
        renderer.stop_all()

    def test_new_display_after_stop(self, terminal_console, fields):
        renderer = RichMultiBarRenderer(console=terminal_console)
        first = renderer.create_row(100, 0, fields)
        renderer.stop_all()

        second = renderer.create_row(100, 0, fields)
        try:
            assert second._progress is not first._progress
        finally:
            renderer.stop_all()


class TestCreateRenderer:
    """create_renderer picks by terminal capability."""

    def test_non_terminal_gets_null_renderer(self):
        renderer = create_renderer(Console(file=io.StringIO()))
        assert isinstance(renderer, NullRenderer)

    def test_terminal_gets_rich_renderer(self, terminal_console):
        renderer = create_renderer(terminal_console, bar_width=10, refresh_per_second=2)

        assert isinstance(renderer, RichMultiBarRenderer)
        assert renderer.console is terminal_console
        assert renderer.bar_width == 10
        assert renderer.refresh_per_second == 2
