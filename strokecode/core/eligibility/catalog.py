"""
Thrombolysis Contraindication Catalog

Finding ids and labels for the evaluator, grouped into the three finding
sets plus the inclusion checklist. Ordered as presented to the clinician.

Catalog entries are data, not logic: the evaluator only needs ids; labels
are used when rendering the EMR text and the handoff note.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

from .base import Criterion, FindingCategory

INCLUSION_CRITERIA: Tuple[Criterion, ...] = (
    Criterion(
        "diagnosis",
        "Diagnosis of ischemic stroke causing measurable neurological deficit",
        "Clear, measurable stroke symptoms rather than vague complaints.",
    ),
    Criterion(
        "time_window",
        "Symptom onset <3 hours (or <4.5 hours for select patients)",
        "Last known well must be known. 3-4.5h carries additional exclusions.",
    ),
    Criterion(
        "age",
        "Age >=18 years",
        "Adult patients only.",
    ),
)

ABSOLUTE_CONTRAINDICATIONS: Tuple[Criterion, ...] = (
    Criterion("ich_on_ct", "Intracranial hemorrhage on CT",
              "Any bleeding visible in the brain on CT."),
    Criterion("significant_head_trauma", "Significant head trauma in previous 3 months",
              "Recent head injury leaves fragile tissue at high bleeding risk."),
    Criterion("prior_stroke_3mo", "Prior ischemic stroke in previous 3 months",
              "Recent infarct tissue is at very high risk of bleeding."),
    Criterion("prior_ich", "History of intracranial hemorrhage",
              "Any prior brain bleed."),
    Criterion("sah_symptoms", "Symptoms suggest subarachnoid hemorrhage",
              "Thunderclap headache or meningeal signs; obtain vascular imaging first."),
    Criterion("ic_surgery", "Recent intracranial or intraspinal surgery",
              "Brain or spine surgery within the past 3 months."),
    Criterion("severe_htn", "Elevated blood pressure (SBP >185 or DBP >110 mm Hg)",
              "Lower pressure first, then reassess."),
    Criterion("active_bleeding", "Active internal bleeding",
              "Current bleeding anywhere in the body."),
    Criterion(
        "bleeding_diathesis",
        "Acute bleeding diathesis, including but not limited to:",
        "Any condition that prevents normal clotting.",
        sub_criteria=(
            Criterion("platelets", "Platelet count <100,000/mm3"),
            Criterion("heparin_aptt", "Heparin within 48h resulting in elevated aPTT"),
            Criterion("warfarin_inr", "Current anticoagulant use with INR >1.7 or PT >15 seconds"),
            Criterion(
                "doac",
                "Direct thrombin or factor Xa inhibitors with elevated labs "
                "(aPTT, INR, platelet count, ECT, TT, or factor Xa assays)",
            ),
        ),
    ),
    Criterion("hypoglycemia", "Blood glucose <50 mg/dL",
              "Treat with dextrose, recheck, then reassess if deficits persist."),
    Criterion("ct_large_infarct",
              "CT shows multilobar infarction (hypodensity >1/3 cerebral hemisphere)",
              "Established large infarct; high risk of swelling and bleeding."),
)

RELATIVE_CONTRAINDICATIONS: Tuple[Criterion, ...] = (
    Criterion("minor_rapid", "Minor or rapidly improving stroke symptoms (clearing spontaneously)",
              "Disabling deficits still warrant treatment even when mild."),
    Criterion("pregnancy", "Pregnancy",
              "Obtain obstetric consult; benefit may outweigh risk in disabling stroke."),
    Criterion("seizure_onset",
              "Seizure at stroke onset with postictal residual neurological impairments",
              "Deficit may be postictal; imaging confirmation supports treatment."),
    Criterion("major_surgery", "Major surgery or serious trauma within previous 14 days"),
    Criterion("gi_gu_bleed", "Recent GI or GU hemorrhage (within previous 21 days)"),
    Criterion("recent_mi", "Recent acute myocardial infarction (within previous 3 months)"),
    Criterion("arterial_puncture",
              "Arterial puncture at non-compressible site in previous 7 days"),
)

WINDOW_DEPENDENT_EXCLUSIONS: Tuple[Criterion, ...] = (
    Criterion("age_80", "Age >80 years",
              "Excluded in the 3-4.5h window only."),
    Criterion("anticoagulant_any", "Taking oral anticoagulants regardless of INR",
              "Excluded in the 3-4.5h window even with a normal INR."),
    Criterion("nihss_25", "NIHSS >25",
              "Very severe deficits have uncertain benefit in the 3-4.5h window."),
    Criterion("stroke_diabetes", "History of both diabetes and prior stroke",
              "This combination is excluded in the 3-4.5h window only."),
    Criterion("large_infarct_imaging",
              "Imaging evidence of ischemic injury involving >1/3 MCA territory"),
)


def _flatten(criteria: Tuple[Criterion, ...]) -> Iterator[Criterion]:
    for criterion in criteria:
        yield criterion
        yield from criterion.sub_criteria


@dataclass(frozen=True)
class ContraindicationCatalog:
    """Lookup over the finding sets; sub-criteria are addressable by id."""
    absolute: Tuple[Criterion, ...] = ABSOLUTE_CONTRAINDICATIONS
    relative: Tuple[Criterion, ...] = RELATIVE_CONTRAINDICATIONS
    window_dependent: Tuple[Criterion, ...] = WINDOW_DEPENDENT_EXCLUSIONS
    inclusion: Tuple[Criterion, ...] = INCLUSION_CRITERIA

    def criteria(self, category: FindingCategory) -> Tuple[Criterion, ...]:
        return {
            FindingCategory.ABSOLUTE: self.absolute,
            FindingCategory.RELATIVE: self.relative,
            FindingCategory.WINDOW_DEPENDENT: self.window_dependent,
        }[category]

    def ids(self, category: FindingCategory) -> Tuple[str, ...]:
        return tuple(c.criterion_id for c in _flatten(self.criteria(category)))

    def inclusion_ids(self) -> Tuple[str, ...]:
        return tuple(c.criterion_id for c in self.inclusion)

    def labels(self, category: FindingCategory) -> Dict[str, str]:
        return {c.criterion_id: c.label for c in _flatten(self.criteria(category))}

    def label(self, category: FindingCategory, finding_id: str) -> str:
        """Human label for a finding id; unknown ids are returned unchanged."""
        return self.labels(category).get(finding_id, finding_id)


DEFAULT_CATALOG = ContraindicationCatalog()
