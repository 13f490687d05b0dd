"""
Orders Catalog

Evidence-tagged admission orders offered on the summary stage. The workflow
stores selected order ids only; labels are resolved here at render time.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional


class OrderCategory(str, Enum):
    LABS              = "labs"
    POST_THROMBOLYSIS = "post_thrombolysis"
    STROKE_WORKUP     = "stroke_workup"
    GENERAL           = "general"


CATEGORY_TITLES: Dict[OrderCategory, str] = {
    OrderCategory.LABS:              "Labs",
    OrderCategory.POST_THROMBOLYSIS: "Post-thrombolysis monitoring",
    OrderCategory.STROKE_WORKUP:     "Stroke workup",
    OrderCategory.GENERAL:           "General care",
}


@dataclass(frozen=True)
class Order:
    order_id: str
    label: str
    category: OrderCategory
    evidence: str
    default_selected: bool = False

    def to_dict(self) -> Dict:
        return {
            "order_id": self.order_id,
            "label": self.label,
            "category": self.category.value,
            "evidence": self.evidence,
            "default_selected": self.default_selected,
        }


ORDERS: List[Order] = [
    # ── Labs (ordered on arrival, not pre-selected) ───────────────────────────
    Order("pt_inr_ptt", "PT / INR / PTT", OrderCategory.LABS, "Class I, Level C"),
    Order("cbc", "CBC with Platelets", OrderCategory.LABS, "Class I, Level C"),
    Order("bmp", "Basic Metabolic Panel", OrderCategory.LABS, "Class IIa, Level C"),
    Order("troponin", "Troponin I", OrderCategory.LABS, "Class I, Level B"),
    Order("lipid", "Lipid Panel", OrderCategory.LABS, "Class I, Level A"),
    Order("hba1c_lab", "Hemoglobin A1c", OrderCategory.LABS, "Class I, Level B"),

    # ── Post-thrombolysis ─────────────────────────────────────────────────────
    Order("neuro_icu", "Admit to Neuro ICU or dedicated stroke unit",
          OrderCategory.POST_THROMBOLYSIS, "Class I, Level B", True),
    Order("neuro_checks", "Neuro checks q15min x 2h, then q30min x 6h, then q1h x 16h",
          OrderCategory.POST_THROMBOLYSIS, "Class I, Level C", True),
    Order("bp_control", "Strict BP control: maintain <180/105 mmHg x 24 hours",
          OrderCategory.POST_THROMBOLYSIS, "Class I, Level B", True),
    Order("continuous_tele", "Continuous cardiac telemetry monitoring",
          OrderCategory.POST_THROMBOLYSIS, "Class I, Level B", True),
    Order("npo_swallow", "NPO until swallow screen passed",
          OrderCategory.POST_THROMBOLYSIS, "Class I, Level B", True),
    Order("no_anticoag_24h", "No anticoagulation or antiplatelet agents x 24 hours",
          OrderCategory.POST_THROMBOLYSIS, "Class III, Level B", True),
    Order("no_invasive_24h", "Avoid invasive procedures (Foley, NG tube, central lines) x 24h",
          OrderCategory.POST_THROMBOLYSIS, "Class III, Level C", True),
    Order("repeat_ct_24h", "Repeat non-contrast head CT at 24 hours",
          OrderCategory.POST_THROMBOLYSIS, "Class I, Level B", True),
    Order("stat_ct_decline", "STAT CT head for any acute neurological decline",
          OrderCategory.POST_THROMBOLYSIS, "Class I, Level A", True),

    # ── Stroke workup ─────────────────────────────────────────────────────────
    Order("mri_dwi", "MRI brain with DWI, FLAIR, GRE, MRA head/neck",
          OrderCategory.STROKE_WORKUP, "Class I, Level A", True),
    Order("tte", "Transthoracic echocardiogram with bubble study",
          OrderCategory.STROKE_WORKUP, "Class I, Level B", True),
    Order("carotid_duplex", "Carotid duplex ultrasound",
          OrderCategory.STROKE_WORKUP, "Class I, Level A", True),
    Order("holter", "30-day cardiac event monitor",
          OrderCategory.STROKE_WORKUP, "Class I, Level B", True),
    Order("lipid_panel", "Fasting lipid panel (LDL, HDL, triglycerides)",
          OrderCategory.STROKE_WORKUP, "Class I, Level A", True),
    Order("hba1c", "HbA1c and fasting glucose",
          OrderCategory.STROKE_WORKUP, "Class I, Level B", True),

    # ── General ───────────────────────────────────────────────────────────────
    Order("dvt_prophylaxis", "DVT prophylaxis: SCDs bilaterally (no pharmacologic x 24h)",
          OrderCategory.GENERAL, "Class I, Level A", True),
    Order("aspiration_precautions", "Aspiration precautions: 30-45 degree head of bed",
          OrderCategory.GENERAL, "Class I, Level B", True),
    Order("pt_ot_speech", "PT, OT, and Speech Therapy consults",
          OrderCategory.GENERAL, "Class I, Level A", True),
    Order("statin", "High-intensity statin: atorvastatin 80mg or rosuvastatin 40mg daily",
          OrderCategory.GENERAL, "Class I, Level A", True),
    Order("glycemic_control", "Glycemic control: target 140-180 mg/dL",
          OrderCategory.GENERAL, "Class I, Level C", True),
    Order("asa_delayed", "Aspirin 325mg daily (start at 24h post-thrombolysis after CT)",
          OrderCategory.GENERAL, "Class I, Level A", True),
]

ORDERS_BY_ID: Dict[str, Order] = {order.order_id: order for order in ORDERS}


def orders_in(category: OrderCategory) -> List[Order]:
    return [order for order in ORDERS if order.category == category]


def default_orders(agent: Optional[str]) -> List[str]:
    """
    Pre-selected order ids for the summary stage.

    Post-thrombolysis orders are dropped when no agent was given
    (``agent`` is None or "none").
    """
    treated = agent not in (None, "none")
    return [
        order.order_id
        for order in ORDERS
        if order.default_selected
        and (treated or order.category != OrderCategory.POST_THROMBOLYSIS)
    ]


def order_label(order_id: str) -> str:
    """Label for an order id; unknown ids are returned verbatim."""
    order = ORDERS_BY_ID.get(order_id)
    return order.label if order else order_id


def group_orders(order_ids: Iterable[str]) -> Dict[str, List[str]]:
    """Labels grouped by category title, in catalog order. Unknown ids go under "Other"."""
    selected = list(order_ids)
    grouped: Dict[str, List[str]] = {}
    for category in OrderCategory:
        labels = [o.label for o in orders_in(category) if o.order_id in selected]
        if labels:
            grouped[CATEGORY_TITLES[category]] = labels
    unknown = [oid for oid in selected if oid not in ORDERS_BY_ID]
    if unknown:
        grouped["Other"] = unknown
    return grouped
