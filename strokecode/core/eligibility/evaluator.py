"""
Contraindication Evaluator

Reduces three finding sets to an eligibility status. There are no temporal
transitions: the status is a pure function of the toggles and of whether the
window-dependent set is currently active.

Precedence (strict):
  1. any absolute finding, or any window-dependent finding while active
       -> absoluteContraindication
  2. any relative finding
       -> relativeContraindication
  3. otherwise
       -> noContraindicationsFlagged

The window-dependent set is active only while the onset lies 3-4.5 h in the
past. Toggles made while active are kept but excluded from evaluation once
the range is left; nothing re-includes them unless the range is re-entered.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from strokecode.core.timing import (
    Clock,
    elapsed_hours,
    in_window_dependent_range,
    utcnow,
)
from strokecode.utils import get_logger, UnknownFindingError
from .base import (
    EligibilityAssessment,
    EligibilityStatus,
    FindingCategory,
    FindingSelection,
    STATUS_DISPLAY,
)
from .catalog import ContraindicationCatalog, DEFAULT_CATALOG

logger = get_logger(__name__)


def derive_status(
    absolute: Iterable[str],
    relative: Iterable[str],
    window_dependent: Iterable[str],
    window_active: bool,
) -> EligibilityStatus:
    """Total, side-effect-free status reduction over the three finding sets."""
    if list(absolute) or (window_active and list(window_dependent)):
        return EligibilityStatus.ABSOLUTE_CONTRAINDICATION
    if list(relative):
        return EligibilityStatus.RELATIVE_CONTRAINDICATION
    return EligibilityStatus.NO_CONTRAINDICATIONS


class ContraindicationEvaluator:
    """
    Interactive evaluator for one encounter.

    Status is recomputed on every read; ``save()`` freezes the current
    elapsed-hours value into an :class:`EligibilityAssessment`.
    """

    def __init__(
        self,
        onset: Optional[datetime] = None,
        catalog: ContraindicationCatalog = DEFAULT_CATALOG,
        clock: Clock = utcnow,
    ):
        self.onset = onset
        self.catalog = catalog
        self._clock = clock
        self.selection = FindingSelection()
        self.notes = ""

    @classmethod
    def from_assessment(
        cls,
        assessment: EligibilityAssessment,
        catalog: ContraindicationCatalog = DEFAULT_CATALOG,
        clock: Clock = utcnow,
    ) -> "ContraindicationEvaluator":
        """Re-open a saved assessment with its toggles and notes restored."""
        evaluator = cls(onset=assessment.onset, catalog=catalog, clock=clock)
        for finding_id in assessment.absolute:
            evaluator.toggle(FindingCategory.ABSOLUTE, finding_id, True)
        for finding_id in assessment.relative:
            evaluator.toggle(FindingCategory.RELATIVE, finding_id, True)
        for finding_id in assessment.window_dependent:
            evaluator.toggle(FindingCategory.WINDOW_DEPENDENT, finding_id, True)
        for criterion_id in assessment.inclusion:
            evaluator.set_inclusion(criterion_id, True)
        evaluator.notes = assessment.notes
        return evaluator

    # ------------------------------------------------------------------
    # Live derived values
    # ------------------------------------------------------------------

    def current_elapsed_hours(self) -> Optional[float]:
        """Elapsed hours from onset right now, or None when onset is unknown."""
        if self.onset is None:
            return None
        return elapsed_hours(self.onset, self._clock())

    @property
    def window_dependent_active(self) -> bool:
        return in_window_dependent_range(self.current_elapsed_hours())

    @property
    def status(self) -> EligibilityStatus:
        return derive_status(
            self.checked(FindingCategory.ABSOLUTE),
            self.checked(FindingCategory.RELATIVE),
            self.checked(FindingCategory.WINDOW_DEPENDENT),
            self.window_dependent_active,
        )

    @property
    def inclusion_met(self) -> bool:
        return all(self.selection.inclusion.get(cid, False) for cid in self.catalog.inclusion_ids())

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------

    def toggle(
        self,
        category: FindingCategory,
        finding_id: str,
        value: Optional[bool] = None,
    ) -> EligibilityStatus:
        """
        Set (or flip, when ``value`` is None) one finding and return the new status.

        Window-dependent findings may be toggled at any time; they only count
        while the window-dependent range is active.
        """
        category = FindingCategory(category)
        if finding_id not in self.catalog.ids(category):
            raise UnknownFindingError(finding_id, category=category.value)
        toggles = self.selection.for_category(category)
        toggles[finding_id] = (not toggles.get(finding_id, False)) if value is None else bool(value)
        status = self.status
        logger.debug(f"ContraindicationEvaluator: {category.value}/{finding_id} -> {toggles[finding_id]} ({status.value})")
        return status

    def set_inclusion(self, criterion_id: str, value: bool = True) -> None:
        if criterion_id not in self.catalog.inclusion_ids():
            raise UnknownFindingError(criterion_id, category="inclusion")
        self.selection.inclusion[criterion_id] = bool(value)

    def checked(self, category: FindingCategory) -> List[str]:
        return FindingSelection.checked(self.selection.for_category(FindingCategory(category)))

    def active_findings(self) -> Dict[str, List[str]]:
        """Findings that currently contribute to the status."""
        return {
            FindingCategory.ABSOLUTE.value: self.checked(FindingCategory.ABSOLUTE),
            FindingCategory.RELATIVE.value: self.checked(FindingCategory.RELATIVE),
            FindingCategory.WINDOW_DEPENDENT.value: (
                self.checked(FindingCategory.WINDOW_DEPENDENT) if self.window_dependent_active else []
            ),
        }

    # ------------------------------------------------------------------
    # Finalisation
    # ------------------------------------------------------------------

    def save(self) -> EligibilityAssessment:
        """Freeze the current decision, capturing elapsed hours as a value."""
        now = self._clock()
        hours = elapsed_hours(self.onset, now) if self.onset is not None else None
        window_active = in_window_dependent_range(hours)
        absolute = self.checked(FindingCategory.ABSOLUTE)
        relative = self.checked(FindingCategory.RELATIVE)
        window_dependent = self.checked(FindingCategory.WINDOW_DEPENDENT)

        assessment = EligibilityAssessment(
            status=derive_status(absolute, relative, window_dependent, window_active),
            onset=self.onset,
            elapsed_hours=hours,
            saved_at=now,
            absolute=tuple(absolute),
            relative=tuple(relative),
            window_dependent=tuple(window_dependent),
            window_dependent_active=window_active,
            inclusion=tuple(FindingSelection.checked(self.selection.inclusion)),
            inclusion_met=self.inclusion_met,
            notes=self.notes,
        )
        logger.info(
            f"ContraindicationEvaluator saved: {assessment.status.value} "
            f"(absolute={len(absolute)}, relative={len(relative)}, "
            f"window_dependent={len(window_dependent) if window_active else 0})"
        )
        return assessment

    def to_emr_text(self, now: Optional[datetime] = None) -> str:
        """Copyable eligibility summary for the medical record."""
        now = now or self._clock()
        status = self.status
        display = STATUS_DISPLAY[status]
        lines = [
            "THROMBOLYSIS ELIGIBILITY ASSESSMENT",
            "=" * 50,
            "",
            "INCLUSION CRITERIA:",
        ]
        for criterion in self.catalog.inclusion:
            tick = "[x]" if self.selection.inclusion.get(criterion.criterion_id) else "[ ]"
            lines.append(f"{tick} {criterion.label}")
        lines += ["", f"ELIGIBILITY STATUS: {display.title}", display.message, ""]

        active = self.active_findings()
        for category, heading in (
            (FindingCategory.ABSOLUTE, "ABSOLUTE CONTRAINDICATIONS"),
            (FindingCategory.WINDOW_DEPENDENT, "3-4.5H WINDOW EXCLUSIONS"),
            (FindingCategory.RELATIVE, "RELATIVE CONTRAINDICATIONS"),
        ):
            ids = active[category.value]
            if ids:
                lines.append(f"{heading}:")
                lines.extend(f"- {self.catalog.label(category, fid)}" for fid in ids)
                lines.append("")
        if self.notes:
            lines += ["NOTES:", self.notes, ""]
        lines.append(f"Assessment Date: {now.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}")
        return "\n".join(lines)
