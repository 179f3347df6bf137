"""Input and result models for the unpaid leave eligibility tool."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, StrictBool, ValidationInfo, field_validator, model_validator


class Relationship(str, Enum):
    """Family relationship with the person who needs care."""

    FATHER = "father"
    MOTHER = "mother"
    PARENT = "parent"
    SON = "son"
    DAUGHTER = "daughter"
    SPOUSE = "spouse"
    PARTNER = "partner"
    HUSBAND = "husband"
    WIFE = "wife"
    FOSTER_PARENT = "foster_parent"


class Situation(str, Enum):
    """Situation that motivates the need for care."""

    BIRTH = "birth"
    ADOPTION = "adoption"
    FOSTER_CARE = "foster_care"
    MULTIPLE_BIRTH = "multiple_birth"
    MULTIPLE_ADOPTION = "multiple_adoption"
    MULTIPLE_FOSTER_CARE = "multiple_foster_care"
    ILLNESS = "illness"
    ACCIDENT = "accident"

    @property
    def is_family_growth(self) -> bool:
        return self not in (Situation.ILLNESS, Situation.ACCIDENT)

    @property
    def is_multiple(self) -> bool:
        return self in (
            Situation.MULTIPLE_BIRTH,
            Situation.MULTIPLE_ADOPTION,
            Situation.MULTIPLE_FOSTER_CARE,
        )


class CaseId(str, Enum):
    """Letter of the applicable case according to the regulations."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"


class EligibilityInput(BaseModel):
    """Validated applicant input.

    ``is_single_parent`` accepts a boolean or the strings ``"true"``/``"false"``
    and ``total_children_after`` a number or numeric string, since LLM clients
    frequently quote scalars.
    """

    relationship: Relationship = Field(
        ...,
        description=(
            "Family relationship with the person who needs care. "
            "Example: my mother had an accident and I'm taking care of her => 'mother'; "
            "I had a baby => 'mother', 'father' or 'parent'."
        ),
    )
    situation: Situation = Field(
        ...,
        description=(
            "Situation that motivates the need for care. If more than one child is born, "
            "adopted or fostered at the same time use the 'multiple_*' values."
        ),
    )
    is_single_parent: StrictBool = Field(
        ...,
        description=(
            "Single-parent family. Only relevant for birth/adoption/foster situations; "
            "use false when there is no information."
        ),
    )
    total_children_after: float | None = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        validate_default=True,
        description=(
            "Total number of children after the birth/adoption/foster placement. "
            "Required for those situations; 0 or omitted for illness/accident care."
        ),
    )

    @field_validator("is_single_parent", mode="before")
    @classmethod
    def _quoted_bool(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        return value

    @field_validator("total_children_after")
    @classmethod
    def _required_for_family_growth(cls, value: float | None, info: ValidationInfo) -> float | None:
        situation = info.data.get("situation")
        if value is None and isinstance(situation, Situation) and situation.is_family_growth:
            msg = f"total_children_after is required when situation is '{situation.value}'"
            raise ValueError(msg)
        return value


class EligibilityResult(BaseModel):
    """Outcome of one evaluation.

    Invariant: a result with errors is never eligible and carries no case.
    """

    case: CaseId | None = Field(default=None, description="Applicable case (A-E); absent if not eligible.")
    description: str | None = Field(default=None, description="Description of the applicable case.")
    monthly_benefit: int | None = Field(
        default=None,
        description="Monthly benefit in euros: 725 for case A, 500 for other cases, 0 if not eligible.",
    )
    potentially_eligible: bool = Field(
        ..., description="Whether the intrinsic requirements for the benefit are met."
    )
    additional_requirements: str | None = Field(
        default=None, description="Additional requirements that must also be met."
    )
    errors: list[str] = Field(default_factory=list, description="Errors or unmet requirements.")
    warnings: list[str] = Field(default_factory=list, description="Additional relevant information.")

    @model_validator(mode="after")
    def _errors_exclude_eligibility(self) -> EligibilityResult:
        if self.errors and (self.potentially_eligible or self.case is not None):
            msg = "a result with errors must not be eligible nor carry a case"
            raise ValueError(msg)
        if self.potentially_eligible and self.case is None:
            msg = "an eligible result must carry a case"
            raise ValueError(msg)
        return self

    @classmethod
    def rejected(
        cls,
        errors: list[str],
        *,
        description: str = "Not eligible",
        warnings: list[str] | None = None,
    ) -> EligibilityResult:
        return cls(
            description=description,
            monthly_benefit=0,
            potentially_eligible=False,
            errors=errors,
            warnings=warnings or [],
        )
