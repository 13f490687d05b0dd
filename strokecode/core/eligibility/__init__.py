"""
Contraindication Evaluator

Usage:
    from strokecode.core.eligibility import ContraindicationEvaluator, FindingCategory

    evaluator = ContraindicationEvaluator(onset=lkw)
    evaluator.toggle(FindingCategory.RELATIVE, "pregnancy")
    assessment = evaluator.save()
"""
from .base import (
    Criterion,
    EligibilityAssessment,
    EligibilityStatus,
    FindingCategory,
    FindingSelection,
    StatusDisplay,
    STATUS_DISPLAY,
)
from .catalog import ContraindicationCatalog, DEFAULT_CATALOG
from .evaluator import ContraindicationEvaluator, derive_status

__all__ = [
    "Criterion",
    "EligibilityAssessment",
    "EligibilityStatus",
    "FindingCategory",
    "FindingSelection",
    "StatusDisplay",
    "STATUS_DISPLAY",
    "ContraindicationCatalog",
    "DEFAULT_CATALOG",
    "ContraindicationEvaluator",
    "derive_status",
]
