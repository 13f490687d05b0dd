"""
Contraindication Evaluator - Base Types

Data contracts shared by the catalog, the evaluator and the workflow.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class FindingCategory(str, Enum):
    """
    The three independently-toggleable finding sets.

    ABSOLUTE         – forbids thrombolysis
    RELATIVE         – cautions against thrombolysis (risk vs benefit)
    WINDOW_DEPENDENT – forbids thrombolysis only while onset is 3-4.5 h ago
    """
    ABSOLUTE         = "absolute"
    RELATIVE         = "relative"
    WINDOW_DEPENDENT = "window_dependent"


class EligibilityStatus(str, Enum):
    """Derived verdict, in strict precedence order (absolute > relative > none)."""
    ABSOLUTE_CONTRAINDICATION = "absoluteContraindication"
    RELATIVE_CONTRAINDICATION = "relativeContraindication"
    NO_CONTRAINDICATIONS      = "noContraindicationsFlagged"


@dataclass(frozen=True)
class StatusDisplay:
    title: str
    message: str


STATUS_DISPLAY: Dict[EligibilityStatus, StatusDisplay] = {
    EligibilityStatus.ABSOLUTE_CONTRAINDICATION: StatusDisplay(
        title="THROMBOLYSIS CONTRAINDICATED",
        message="Absolute contraindication present. Do not administer thrombolytic. Consider mechanical thrombectomy.",
    ),
    EligibilityStatus.RELATIVE_CONTRAINDICATION: StatusDisplay(
        title="RELATIVE CONTRAINDICATION",
        message="Consider risks vs benefits. May proceed with caution or consider endovascular therapy.",
    ),
    EligibilityStatus.NO_CONTRAINDICATIONS: StatusDisplay(
        title="NO CONTRAINDICATIONS FLAGGED",
        message="No contraindications selected. Proceed if no other concerns.",
    ),
}


@dataclass(frozen=True)
class Criterion:
    """
    One catalog entry.

    ``sub_criteria`` are toggleable findings in their own right; they share
    the parent's category.
    """
    criterion_id: str
    label: str
    plain_english: str = ""
    sub_criteria: Tuple["Criterion", ...] = ()


@dataclass(frozen=True)
class EligibilityAssessment:
    """
    A saved eligibility decision.

    Frozen: it records what was known and decided at ``saved_at``.
    ``elapsed_hours`` is captured as a value when saved (None when onset was
    unknown) and never re-derived.
    """
    status: EligibilityStatus
    onset: Optional[datetime]
    elapsed_hours: Optional[float]
    saved_at: datetime
    absolute: Tuple[str, ...] = ()
    relative: Tuple[str, ...] = ()
    window_dependent: Tuple[str, ...] = ()
    window_dependent_active: bool = False
    inclusion: Tuple[str, ...] = ()
    inclusion_met: bool = False
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "onset": self.onset.isoformat() if self.onset else None,
            "elapsed_hours": self.elapsed_hours,
            "saved_at": self.saved_at.isoformat(),
            "absolute": list(self.absolute),
            "relative": list(self.relative),
            "window_dependent": list(self.window_dependent),
            "window_dependent_active": self.window_dependent_active,
            "inclusion": list(self.inclusion),
            "inclusion_met": self.inclusion_met,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EligibilityAssessment":
        onset = data.get("onset")
        return cls(
            status=EligibilityStatus(data["status"]),
            onset=datetime.fromisoformat(onset) if onset else None,
            elapsed_hours=data.get("elapsed_hours"),
            saved_at=datetime.fromisoformat(data["saved_at"]),
            absolute=tuple(data.get("absolute", [])),
            relative=tuple(data.get("relative", [])),
            window_dependent=tuple(data.get("window_dependent", [])),
            window_dependent_active=bool(data.get("window_dependent_active", False)),
            inclusion=tuple(data.get("inclusion", [])),
            inclusion_met=bool(data.get("inclusion_met", False)),
            notes=data.get("notes", ""),
        )


@dataclass
class FindingSelection:
    """Mutable toggle state for the three finding sets plus the inclusion checklist."""
    absolute: Dict[str, bool] = field(default_factory=dict)
    relative: Dict[str, bool] = field(default_factory=dict)
    window_dependent: Dict[str, bool] = field(default_factory=dict)
    inclusion: Dict[str, bool] = field(default_factory=dict)

    def for_category(self, category: FindingCategory) -> Dict[str, bool]:
        return {
            FindingCategory.ABSOLUTE: self.absolute,
            FindingCategory.RELATIVE: self.relative,
            FindingCategory.WINDOW_DEPENDENT: self.window_dependent,
        }[category]

    @staticmethod
    def checked(toggles: Dict[str, bool]) -> List[str]:
        return [finding_id for finding_id, on in toggles.items() if on]
