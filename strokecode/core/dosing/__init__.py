"""
Dosing Calculator

Single source of truth for thrombolytic dosing: import from here, never
re-derive doses inline.
"""
from .calculator import (
    WeightUnit,
    AlteplaseDose,
    DosingSummary,
    round_one_decimal,
    to_kg,
    alteplase_dose,
    tenecteplase_dose,
    dosing_for,
)

__all__ = [
    "WeightUnit",
    "AlteplaseDose",
    "DosingSummary",
    "round_one_decimal",
    "to_kg",
    "alteplase_dose",
    "tenecteplase_dose",
    "dosing_for",
]
