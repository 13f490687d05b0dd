"""
Custom Exception Hierarchy

Contract errors raised at the edges of the stroke code engine. Incomplete
stage data is never an exception: gates report missing fields as values.
"""
from typing import Optional, Dict, Any


class StrokeCodeError(Exception):
    """Base exception for all stroke code engine errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class UnknownFindingError(StrokeCodeError):
    """A contraindication id that is not in the evaluator's catalog."""

    def __init__(
        self,
        finding_id: str,
        category: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"Unknown {category} finding: {finding_id}",
            code="UNKNOWN_FINDING",
            details={"finding_id": finding_id, "category": category, **(details or {})}
        )
        self.finding_id = finding_id
        self.category = category


class UnknownMilestoneError(StrokeCodeError):
    """A milestone name that the tracker does not register."""

    def __init__(self, name: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Unknown milestone: {name}",
            code="UNKNOWN_MILESTONE",
            details={"milestone": name, **(details or {})}
        )
        self.name = name


class WorkflowNavigationError(StrokeCodeError):
    """Manual navigation to a stage that has not been reached yet."""

    def __init__(
        self,
        message: str,
        stage: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="WORKFLOW_NAVIGATION_ERROR",
            details={"stage": stage, **(details or {})}
        )
        self.stage = stage


class NoteExportError(StrokeCodeError):
    """Errors while handing the rendered note to an external surface."""

    def __init__(
        self,
        message: str,
        surface: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="NOTE_EXPORT_ERROR",
            details={"surface": surface, **(details or {})}
        )
        self.surface = surface
