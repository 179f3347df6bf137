"""Default decision function for unpaid leave assistance.

Maps a validated :class:`EligibilityInput` to one of the five cases:

- **A** care of a sick or injured family member (725 €/month)
- **B** birth of a third or later child (500 €/month)
- **C** adoption or foster care (500 €/month)
- **D** multiple birth, adoption or foster care (500 €/month)
- **E** single-parent family (500 €/month)

The function is pure: equal inputs give equal results and nothing outside the
returned value is touched.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from eligibility_mcp.eligibility.models import (
    CaseId,
    EligibilityInput,
    EligibilityResult,
    Relationship,
    Situation,
)

CARE_BENEFIT = 725
CHILD_BENEFIT = 500
LARGE_FAMILY_THRESHOLD = 3

# Relationships that can claim a family-growth benefit (the applicant is the parent).
PARENT_RELATIONSHIPS = frozenset({
    Relationship.FATHER,
    Relationship.MOTHER,
    Relationship.PARENT,
    Relationship.FOSTER_PARENT,
})

_CASES: dict[CaseId, tuple[str, int, str]] = {
    CaseId.A: (
        "Care of a family member with a serious illness or accident",
        CARE_BENEFIT,
        "The family member must require continuous care certified by a public health "
        "service, and the applicant must be on unpaid leave to provide it.",
    ),
    CaseId.B: (
        "Birth of a third or later child",
        CHILD_BENEFIT,
        "The newborn must be the third or later child in the family unit, and the "
        "leave must start before the child turns three.",
    ),
    CaseId.C: (
        "Adoption or foster care",
        CHILD_BENEFIT,
        "The adoption or foster placement must be formalised by the competent "
        "authority, with a placement lasting at least one year.",
    ),
    CaseId.D: (
        "Multiple birth, adoption or foster care",
        CHILD_BENEFIT,
        "Two or more children must be born, adopted or placed at the same time.",
    ),
    CaseId.E: (
        "Single-parent family",
        CHILD_BENEFIT,
        "The applicant must hold the single-parent family status as recognised by "
        "the competent authority.",
    ),
}


@runtime_checkable
class DecisionFunction(Protocol):
    """Pure mapping from validated input to an eligibility determination.

    Implementations must not raise for any input that passed validation.
    """

    def __call__(self, applicant: EligibilityInput) -> EligibilityResult: ...


def evaluate(applicant: EligibilityInput) -> EligibilityResult:
    """Evaluate unpaid leave assistance eligibility for *applicant*."""
    warnings: list[str] = []
    situation = applicant.situation
    children = applicant.total_children_after

    if not situation.is_family_growth:
        if applicant.is_single_parent:
            warnings.append(
                "is_single_parent is only relevant for birth, adoption or foster care "
                "and was ignored."
            )
        if children:
            warnings.append(
                "total_children_after is only relevant for birth, adoption or foster care "
                "and was ignored."
            )
        return _eligible(CaseId.A, warnings)

    if applicant.relationship not in PARENT_RELATIONSHIPS:
        return EligibilityResult.rejected(
            [
                f"Relationship '{applicant.relationship.value}' is not valid for situation "
                f"'{situation.value}'; use 'father', 'mother', 'parent' or 'foster_parent'."
            ],
            warnings=warnings,
        )

    if children is None:
        return EligibilityResult.rejected(
            [f"total_children_after is required when situation is '{situation.value}'."],
            warnings=warnings,
        )
    if children != int(children):
        return EligibilityResult.rejected(
            [f"total_children_after must be a whole number, got {children:g}."],
            warnings=warnings,
        )

    if situation.is_multiple:
        if children < 2:
            warnings.append(
                "A multiple birth, adoption or foster care implies at least two children; "
                "check total_children_after."
            )
        return _eligible(CaseId.D, warnings)

    if children < 1:
        return EligibilityResult.rejected(
            ["total_children_after must include the new child and be at least 1."],
            warnings=warnings,
        )

    if applicant.is_single_parent:
        return _eligible(CaseId.E, warnings)

    if situation in (Situation.ADOPTION, Situation.FOSTER_CARE):
        return _eligible(CaseId.C, warnings)

    if children >= LARGE_FAMILY_THRESHOLD:
        return _eligible(CaseId.B, warnings)

    return EligibilityResult.rejected(
        [
            "Birth of a first or second child does not qualify unless the family is a "
            f"single-parent family; at least {LARGE_FAMILY_THRESHOLD} children are required."
        ],
        warnings=warnings,
    )


def _eligible(case: CaseId, warnings: list[str]) -> EligibilityResult:
    description, benefit, requirements = _CASES[case]
    return EligibilityResult(
        case=case,
        description=description,
        monthly_benefit=benefit,
        potentially_eligible=True,
        additional_requirements=requirements,
        warnings=warnings,
    )
