"""Progress tracking for parallel commit evaluation.

The tracker records per-commit status, percent complete and token/cost
usage reported by concurrent workers, and mirrors that state onto one
live terminal row per commit. It is a best-effort display: updates for
unknown commits are ignored, bursts of updates are throttled per commit,
and nothing here raises into the workers that report to it.
"""

import time
import logging
import threading
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from rich.console import Console

from .renderer import MultiRowRenderer, RowHandle, create_renderer
from ..utils.cost import format_cost, format_tokens

# Configure logging
logger = logging.getLogger(__name__)

console = Console(stderr=True)

HEADER_TITLE = "Parallel Commit Evaluation Progress:"
DEFAULT_MIN_UPDATE_INTERVAL = 0.1  # seconds


class CommitStatus(str, Enum):
    """Coarse lifecycle stage of a commit evaluation.

    Declared in lifecycle order; running phases sit between PENDING and
    the two terminal statuses.
    """
    PENDING = "pending"
    VECTORIZING = "vectorizing"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    FAILED = "failed"


STATUS_LABELS: Dict[CommitStatus, str] = {
    CommitStatus.PENDING: "Pending",
    CommitStatus.VECTORIZING: "Indexing...",
    CommitStatus.ANALYZING: "Analyzing...",
    CommitStatus.COMPLETE: "✅ Complete",
    CommitStatus.FAILED: "❌ Failed",
}

UNKNOWN_STATUS_LABEL = "Unknown"

StatusValue = Union[CommitStatus, str]


def normalize_status(status: StatusValue) -> StatusValue:
    """Map a status string onto CommitStatus, keeping unrecognised values as-is."""
    try:
        return CommitStatus(status)
    except ValueError:
        return status


def get_status_text(status: StatusValue) -> str:
    """Get the display label for a status ("Unknown" if unrecognised)."""
    try:
        return STATUS_LABELS[CommitStatus(status)]
    except ValueError:
        return UNKNOWN_STATUS_LABEL


def fit_width(text: str, width: int) -> str:
    """Truncate or pad text to exactly ``width`` characters."""
    return text[:width].ljust(width)


@dataclass(frozen=True)
class CommitInfo:
    """Descriptive metadata for one commit to track."""
    hash: str
    short_hash: str = ""
    author: str = ""
    date: str = ""

    def __post_init__(self):
        if not self.short_hash:
            object.__setattr__(self, "short_hash", self.hash[:8])

    @classmethod
    def from_value(cls, value: Union["CommitInfo", Mapping[str, Any]]) -> "CommitInfo":
        """Build from a CommitInfo or a dict with the same keys."""
        if isinstance(value, cls):
            return value
        return cls(
            hash=str(value["hash"]),
            short_hash=str(value.get("short_hash") or ""),
            author=str(value.get("author") or ""),
            date=str(value.get("date") or ""),
        )


@dataclass
class ProgressState:
    """Current known state of one commit."""
    hash: str
    short_hash: str
    author: str
    date: str
    status: StatusValue = CommitStatus.PENDING
    progress: int = 0
    current_step: str = "Waiting..."
    current_step_index: Optional[int] = None
    total_steps: Optional[int] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_cost: Optional[float] = None
    last_applied_at: Optional[float] = None


@dataclass(frozen=True)
class ProgressUpdate:
    """A partial update; fields left as None keep their previous value."""
    status: Optional[StatusValue] = None
    progress: Optional[int] = None
    current_step: Optional[str] = None
    current_step_index: Optional[int] = None
    total_steps: Optional[int] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_cost: Optional[float] = None

    def is_significant(self) -> bool:
        """Significant updates bypass throttling. Malformed updates never are."""
        try:
            return is_significant_change(coerce_changes(self.changes()))
        except (TypeError, ValueError):
            return False

    def changes(self) -> Dict[str, Any]:
        """Fields present in this update."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


_INT_FIELDS = ("current_step_index", "total_steps", "input_tokens", "output_tokens")


def coerce_changes(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert update fields to their stored types.

    Args:
        changes: Present fields of a ProgressUpdate

    Returns:
        New dict with normalized status, clamped progress and numeric counters

    Raises:
        TypeError: If a field has an unusable type
        ValueError: If a field cannot be converted
    """
    values: Dict[str, Any] = {}
    for name, value in changes.items():
        if name == "status":
            if not isinstance(value, str):
                raise TypeError(f"status must be a string, got {type(value).__name__}")
            values[name] = normalize_status(value)
        elif name == "progress":
            values[name] = max(0, min(100, int(value)))
        elif name in _INT_FIELDS:
            values[name] = int(value)
        elif name == "total_cost":
            values[name] = float(value)
        else:
            values[name] = str(value)
    return values


def is_significant_change(values: Mapping[str, Any]) -> bool:
    """Completion, failure and 100% progress are never throttled."""
    if values.get("progress") == 100:
        return True
    return values.get("status") in (CommitStatus.COMPLETE, CommitStatus.FAILED)


# Counter fields on ProgressState and their running-total keys.
_COUNTERS: Tuple[str, ...] = ("input_tokens", "output_tokens", "total_cost")


class ProgressTracker:
    """Tracks and displays progress for a batch of parallel commit evaluations."""

    def __init__(
        self,
        renderer: Optional[MultiRowRenderer] = None,
        log_sink: Optional[Callable[[str], None]] = None,
        min_update_interval: float = DEFAULT_MIN_UPDATE_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        console: Optional[Console] = None,
        author_width: int = 16,
        label_width: int = 9
    ):
        """Initialize progress tracker.

        Args:
            renderer: Row renderer; chosen from the console when omitted
            log_sink: Callable receiving header/footer lines. May be swapped
                later through the ``log_sink`` attribute.
            min_update_interval: Per-commit throttle window in seconds
            clock: Monotonic time source
            console: Console used for the default renderer and log lines
            author_width: Fixed width of the author column
            label_width: Fixed width of the short-hash column
        """
        self.console = console
        self.renderer = renderer
        self.log_sink = log_sink
        self.min_update_interval = min_update_interval
        self.clock = clock
        self.author_width = author_width
        self.label_width = label_width

        self._lock = threading.Lock()
        self._commits: Dict[str, ProgressState] = {}
        self._rows: Dict[str, RowHandle] = {}
        self._display_order: Tuple[str, ...] = ()
        self._totals: Dict[str, float] = self._zero_totals()
        self._active = False

    @classmethod
    def from_config(cls, config, **overrides) -> "ProgressTracker":
        """Build a tracker from a Config, letting keyword arguments win."""
        options = config.tracker_options()
        if "renderer" not in overrides:
            overrides["renderer"] = create_renderer(overrides.get("console") or console, **config.renderer_options())
        options.update(overrides)
        return cls(**options)

    @staticmethod
    def _zero_totals() -> Dict[str, float]:
        return {"input_tokens": 0, "output_tokens": 0, "total_cost": 0.0}

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def display_order(self) -> Tuple[str, ...]:
        return self._display_order

    def _log(self, line: str, style: Optional[str] = None) -> None:
        if self.log_sink is not None:
            self.log_sink(line)
        else:
            (self.console or console).print(line, style=style, markup=False, highlight=False)

    def initialize(self, commits: Sequence[Union[CommitInfo, Mapping[str, Any]]]) -> None:
        """Start a tracking session with one pending row per commit.

        Args:
            commits: Commits to track, in display order. Duplicate hashes
                are skipped; the first occurrence wins.
        """
        with self._lock:
            if self._active:
                logger.warning("Progress tracker already active, ignoring initialize")
                return

            infos: List[CommitInfo] = []
            seen = set()
            for value in commits:
                info = CommitInfo.from_value(value)
                if info.hash in seen:
                    logger.warning(f"Duplicate commit {info.hash} ignored")
                    continue
                seen.add(info.hash)
                infos.append(info)

            if not infos:
                logger.warning("No commits to track")
                return

            if self.renderer is None:
                self.renderer = create_renderer(self.console or console)

            self._commits = {}
            self._rows = {}
            self._totals = self._zero_totals()
            for info in infos:
                state = ProgressState(
                    hash=info.hash,
                    short_hash=info.short_hash,
                    author=info.author,
                    date=info.date
                )
                self._commits[info.hash] = state
                self._rows[info.hash] = self.renderer.create_row(100, 0, self._format_fields(state))

            self._display_order = tuple(info.hash for info in infos)
            self._active = True
            header = self._format_header()
            logger.info(f"Tracking {len(infos)} commits")

        # The sink may call back into the tracker, so it runs outside the lock.
        self._log("")
        self._log(HEADER_TITLE, style="bold cyan")
        self._log(header)

    def update_progress(
        self,
        commit_hash: str,
        update: Optional[ProgressUpdate] = None,
        **changes: Any
    ) -> bool:
        """Apply a partial update for one commit and redraw its row.

        Args:
            commit_hash: Hash the commit was initialized with
            update: Update value object; keyword fields are merged over it
            **changes: ProgressUpdate fields

        Returns:
            True if the update was applied, False if ignored or throttled
        """
        try:
            if changes:
                update = replace(update, **changes) if update else ProgressUpdate(**changes)
            if update is None:
                return False
            values = coerce_changes(update.changes())
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed update for {commit_hash}: {e}")
            return False

        with self._lock:
            state = self._commits.get(commit_hash)
            if not self._active or state is None:
                logger.debug(f"Ignoring update for untracked commit {commit_hash}")
                return False

            now = self.clock()
            if (
                not is_significant_change(values)
                and state.last_applied_at is not None
                and now - state.last_applied_at < self.min_update_interval
            ):
                logger.debug(f"Throttled update for {commit_hash}")
                return False

            self._apply(state, values)
            state.last_applied_at = now
            self._render(state)
            return True

    def _apply(self, state: ProgressState, values: Mapping[str, Any]) -> None:
        """Apply coerced fields, moving running totals by each counter's delta."""
        for name, value in values.items():
            if name in _COUNTERS:
                previous = getattr(state, name) or 0
                self._totals[name] += value - previous
                setattr(state, name, value)
            else:
                setattr(state, name, value)

    def _render(self, state: ProgressState) -> None:
        try:
            self._rows[state.hash].update(state.progress, self._format_fields(state))
        except Exception as e:
            logger.warning(f"Failed to render progress for {state.hash}: {e}")

    def _format_header(self) -> str:
        return (
            f"{fit_width('Commit', self.label_width)} | "
            f"{fit_width('Author', self.author_width)} | Progress | Tokens (in/out) | Cost | Status"
        )

    def _format_fields(self, state: ProgressState) -> Dict[str, str]:
        """Fixed-width display columns for a commit's row."""
        return {
            "commit": fit_width(state.short_hash, self.label_width),
            "author": fit_width(state.author, self.author_width),
            "tokens": format_tokens(state.input_tokens or 0, state.output_tokens or 0),
            "cost": format_cost(state.total_cost or 0.0),
            "status": get_status_text(state.status),
        }

    def finalize(self) -> None:
        """Stop live rendering. Rows stay visible; later calls do nothing."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            try:
                self.renderer.stop_all()
            except Exception as e:
                logger.warning(f"Failed to stop progress display: {e}")

        self._log("")

    def get_progress(self, commit_hash: str) -> Optional[ProgressState]:
        """Get a snapshot of one commit's state, or None if untracked."""
        with self._lock:
            state = self._commits.get(commit_hash)
            return replace(state) if state else None

    def get_totals(self) -> Dict[str, float]:
        """Get token and cost totals across all commits."""
        with self._lock:
            return dict(self._totals)

    def get_summary(self) -> Dict[str, int]:
        """Get summary of results.

        Returns:
            Dictionary with total, complete, failed and pending counts.
            Every non-terminal status counts as pending.
        """
        with self._lock:
            complete = failed = pending = 0
            for state in self._commits.values():
                if state.status == CommitStatus.COMPLETE:
                    complete += 1
                elif state.status == CommitStatus.FAILED:
                    failed += 1
                else:
                    pending += 1

            return {
                "total": len(self._commits),
                "complete": complete,
                "failed": failed,
                "pending": pending
            }
