"""
Core Data Models for Currency Split

These models define the schemas for data flowing into and out of the
split engine. They are designed to:
1. Keep participant identity stable across edits and removals
2. Make calculation output immutable once produced
3. Be serializable for logging and export

DESIGN DECISION: The split request carries the RAW amount the user typed.
Parsing and validating it is the engine's job, because the order in which
validation failures are reported is part of the engine contract.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class SplitErrorKind(str, Enum):
    """
    Validation failures the engine can report.

    Only one is ever reported per calculation, checked in declaration order.
    """
    INVALID_AMOUNT = "invalid_amount"
    MISSING_NAME = "missing_name"
    EMPTY_PARTICIPANTS = "empty_participants"


# =============================================================================
# INPUT MODELS
# =============================================================================

class Participant(BaseModel):
    """
    One row of the split form.

    The name is stored exactly as typed. Blank names are legal here
    (a freshly added row has no name yet); the engine rejects them at
    calculation time.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(
        ...,
        ge=1,
        description="Stable identifier assigned when the row is created"
    )
    name: str = Field(
        default="",
        description="Display name as entered"
    )
    currency: str = Field(
        ...,
        min_length=1,
        max_length=10,
        description="Currency code this participant pays in"
    )


class CurrencyInfo(BaseModel):
    """Reference data for one currency."""
    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1, max_length=10)
    name: str = Field(default="", description="Display name, e.g. 'Euro'")
    symbol: str = Field(..., min_length=1)


class SplitRequest(BaseModel):
    """
    Everything needed for one calculation.

    Constructed per calculation and thrown away afterwards.
    """

    total_amount: Optional[Union[str, int, float]] = Field(
        default=None,
        description="Total bill amount as supplied by the caller (unparsed)"
    )
    base_currency: str = Field(
        ...,
        min_length=1,
        description="Currency the total is denominated in"
    )
    participants: list[Participant] = Field(
        default_factory=list,
        description="Participants in display order"
    )


# =============================================================================
# OUTPUT MODELS
# =============================================================================

class SplitPerson(BaseModel):
    """One participant's share, converted into their own currency."""
    model_config = ConfigDict(frozen=True)

    name: str
    currency: str
    amount: float = Field(
        ...,
        description="Share in the participant's currency (unrounded)"
    )
    symbol: str
    rate_applied: Optional[float] = Field(
        default=None,
        description=(
            "Rate used for conversion. None when the participant pays in "
            "the base currency or no usable rate was available."
        )
    )


class SplitResult(BaseModel):
    """
    The output of one successful calculation.

    CRITICAL: Results are immutable. A new calculation replaces the
    previous result wholesale; nothing edits a result in place.
    """
    model_config = ConfigDict(frozen=True)

    total_amount: float = Field(..., gt=0)
    base_currency: str
    amount_per_person: float = Field(
        ...,
        description="Total divided by participant count, before conversion"
    )
    people: tuple[SplitPerson, ...] = Field(
        ...,
        description="Per-participant shares in request order"
    )

    @property
    def participant_count(self) -> int:
        return len(self.people)

    @property
    def fallback_people(self) -> list[SplitPerson]:
        """People whose share stayed unconverted for lack of a rate."""
        return [
            person for person in self.people
            if person.currency != self.base_currency and person.rate_applied is None
        ]
