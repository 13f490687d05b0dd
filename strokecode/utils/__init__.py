"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    StrokeCodeError,
    UnknownFindingError,
    UnknownMilestoneError,
    WorkflowNavigationError,
    NoteExportError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "StrokeCodeError",
    "UnknownFindingError",
    "UnknownMilestoneError",
    "WorkflowNavigationError",
    "NoteExportError",
]
