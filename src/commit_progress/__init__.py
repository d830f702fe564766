"""
Live terminal progress display for parallel commit evaluation.

This package provides the progress tracker that parallel evaluation
workers report into, the renderers that draw its rows, and token cost
helpers used for the per-commit usage columns.
"""

__version__ = "0.1.0"

from .ui.progress import (
    ProgressTracker, ProgressState, ProgressUpdate,
    CommitInfo, CommitStatus, get_status_text
)
from .ui.renderer import (
    MultiRowRenderer, RowHandle,
    RichMultiBarRenderer, NullRenderer, create_renderer
)
from .utils.config import Config
from .utils.cost import calculate_cost, format_cost, format_token_usage

__all__ = [
    "__version__",

    # Tracker
    "ProgressTracker", "ProgressState", "ProgressUpdate",
    "CommitInfo", "CommitStatus", "get_status_text",

    # Renderers
    "MultiRowRenderer", "RowHandle",
    "RichMultiBarRenderer", "NullRenderer", "create_renderer",

    # Utilities
    "Config", "calculate_cost", "format_cost", "format_token_usage"
]
