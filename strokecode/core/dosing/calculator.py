"""
Thrombolytic Dosing Calculator

Two independent weight-based formulas:

  Alteplase (weight-proportional): 0.9 mg/kg, max 90 mg;
      10% as an immediate bolus, 90% as an infusion over 60 min.
  Tenecteplase (banded): 0.25 mg/kg in weight-tiered steps, max 25 mg.

Weight is normalised to kilograms and rounded to one decimal before any
derived value is computed. A weight of 0 (or less) yields 0 doses, which the
caller reads as "not enough data yet".
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Tuple

LB_PER_KG = 2.205

ALTEPLASE_MG_PER_KG = 0.9
ALTEPLASE_MAX_MG = 90.0
ALTEPLASE_BOLUS_FRACTION = 0.1
ALTEPLASE_INFUSION_FRACTION = 0.9

# (upper weight bound exclusive, dose mg); the last band has no upper bound
TENECTEPLASE_BANDS: List[Tuple[float, float]] = [
    (60.0, 15.0),
    (70.0, 17.5),
    (80.0, 20.0),
    (90.0, 22.5),
]
TENECTEPLASE_MAX_MG = 25.0


class WeightUnit(str, Enum):
    KG = "kg"
    LB = "lb"


def round_one_decimal(value: float) -> float:
    """Half-up rounding to one decimal place, applied identically at every step."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def to_kg(value: float, unit: WeightUnit = WeightUnit.KG) -> float:
    """Normalise a body weight to kilograms (one decimal place)."""
    if value <= 0:
        return 0.0
    if WeightUnit(unit) == WeightUnit.LB:
        return round_one_decimal(value / LB_PER_KG)
    return round_one_decimal(value)


@dataclass(frozen=True)
class AlteplaseDose:
    """Total alteplase dose and its bolus / infusion split (mg)."""
    total: float
    bolus: float
    infusion: float

    def to_dict(self) -> Dict[str, float]:
        return {"total": self.total, "bolus": self.bolus, "infusion": self.infusion}


def alteplase_dose(weight_kg: float) -> AlteplaseDose:
    """0.9 mg/kg capped at 90 mg, split 10% bolus / 90% infusion."""
    if weight_kg <= 0:
        return AlteplaseDose(total=0.0, bolus=0.0, infusion=0.0)
    weight_kg = round_one_decimal(weight_kg)
    total = min(round_one_decimal(weight_kg * ALTEPLASE_MG_PER_KG), ALTEPLASE_MAX_MG)
    return AlteplaseDose(
        total=total,
        bolus=round_one_decimal(total * ALTEPLASE_BOLUS_FRACTION),
        infusion=round_one_decimal(total * ALTEPLASE_INFUSION_FRACTION),
    )


def tenecteplase_dose(weight_kg: float) -> float:
    """Banded tenecteplase dose in mg, capped at 25 mg."""
    if weight_kg <= 0:
        return 0.0
    weight_kg = round_one_decimal(weight_kg)
    for upper, dose in TENECTEPLASE_BANDS:
        if weight_kg < upper:
            return dose
    return TENECTEPLASE_MAX_MG


@dataclass(frozen=True)
class DosingSummary:
    weight_kg: float
    alteplase: AlteplaseDose
    tenecteplase_mg: float

    def to_dict(self) -> Dict:
        return {
            "weight_kg": self.weight_kg,
            "alteplase": self.alteplase.to_dict(),
            "tenecteplase_mg": self.tenecteplase_mg,
        }


def dosing_for(weight: float, unit: WeightUnit = WeightUnit.KG) -> DosingSummary:
    """Both agents' doses for a raw weight entry."""
    kg = to_kg(weight, unit)
    return DosingSummary(
        weight_kg=kg,
        alteplase=alteplase_dose(kg),
        tenecteplase_mg=tenecteplase_dose(kg),
    )
