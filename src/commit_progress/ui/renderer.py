"""Multi-row terminal renderers for the progress display."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from rich.console import Console
from rich.progress import Progress, BarColumn, TextColumn, TaskID

# Configure logging
logger = logging.getLogger(__name__)


class RowHandle(ABC):
    """A single live row owned by one tracked item."""

    @abstractmethod
    def update(self, value: float, fields: Dict[str, str]) -> None:
        """Redraw the row.

        Args:
            value: Current bar value
            fields: Pre-formatted, fixed-width column strings
        """


class MultiRowRenderer(ABC):
    """Draws one bar per row and stops drawing on request."""

    @abstractmethod
    def create_row(self, max_value: float, initial_value: float, fields: Dict[str, str]) -> RowHandle:
        """Add a row and return its handle."""

    @abstractmethod
    def stop_all(self) -> None:
        """Stop live rendering; rows already drawn stay on screen."""


class _NullRow(RowHandle):
    def update(self, value: float, fields: Dict[str, str]) -> None:
        pass


class NullRenderer(MultiRowRenderer):
    """Renderer for non-interactive output. Draws nothing."""

    def create_row(self, max_value: float, initial_value: float, fields: Dict[str, str]) -> RowHandle:
        return _NullRow()

    def stop_all(self) -> None:
        pass


class _RichRow(RowHandle):
    """Row backed by a task of a rich Progress instance."""

    def __init__(self, progress: Progress, task_id: TaskID):
        self._progress = progress
        self._task_id = task_id

    def update(self, value: float, fields: Dict[str, str]) -> None:
        self._progress.update(self._task_id, completed=value, **fields)


class RichMultiBarRenderer(MultiRowRenderer):
    """Renders rows as a rich live Progress display.

    Each row shows ``commit | author``, a bar, the percentage and
    ``tokens | cost | status``. Field text is printed verbatim (markup is
    disabled) since author names may contain square brackets.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        bar_width: int = 25,
        refresh_per_second: float = 5
    ):
        """Initialize renderer.

        Args:
            console: Console to draw on (defaults to stderr)
            bar_width: Width of the bar column in characters
            refresh_per_second: Redraw rate of the live display
        """
        self.console = console or Console(stderr=True)
        self.bar_width = bar_width
        self.refresh_per_second = refresh_per_second
        self._progress: Optional[Progress] = None

    def _build_progress(self) -> Progress:
        return Progress(
            TextColumn("{task.fields[commit]} | {task.fields[author]}", markup=False),
            BarColumn(bar_width=self.bar_width),
            TextColumn("{task.percentage:>3.0f}%", markup=False),
            TextColumn(
                "{task.fields[tokens]} | {task.fields[cost]} | {task.fields[status]}",
                markup=False
            ),
            console=self.console,
            refresh_per_second=self.refresh_per_second,
            transient=False
        )

    def create_row(self, max_value: float, initial_value: float, fields: Dict[str, str]) -> RowHandle:
        if self._progress is None:
            self._progress = self._build_progress()
            self._progress.start()
            logger.debug("Started live progress display")

        task_id = self._progress.add_task("", total=max_value, completed=initial_value, **fields)
        return _RichRow(self._progress, task_id)

    def stop_all(self) -> None:
        if self._progress is None:
            return
        self._progress.stop()
        self._progress = None
        logger.debug("Stopped live progress display")


def create_renderer(console: Optional[Console] = None, **options) -> MultiRowRenderer:
    """Pick a renderer for the given console.

    Args:
        console: Target console (defaults to stderr)
        **options: Passed to RichMultiBarRenderer

    Returns:
        RichMultiBarRenderer for a terminal, NullRenderer otherwise
    """
    console = console or Console(stderr=True)
    if console.is_terminal:
        return RichMultiBarRenderer(console=console, **options)

    logger.info("Output is not a terminal, progress rows will not be drawn")
    return NullRenderer()
