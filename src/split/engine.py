"""
Split Engine

Turns a split request into per-participant charges, each in the
participant's own currency.

VALIDATION ORDER:
1. Amount - must parse as a finite number greater than zero
2. Participants - at least one
3. Names - every name non-blank after trimming

Only the first failure is reported. Validation never collects a list of
problems; the caller shows one message, the user fixes it, and retries.

CONVERSION POLICY:
A participant paying in the base currency gets the equal share as-is.
Anyone else gets share * rate. When no usable rate exists (absent,
zero, None) the participant is charged the UNCONVERTED share. This is
deliberate: a stale or incomplete rate table degrades the result rather
than blocking the calculation. Callers can spot these people through
SplitResult.fallback_people.

The engine performs no I/O and never mutates its inputs.
"""

import math
from typing import Mapping, Optional

from src.models.split import (
    CurrencyInfo,
    SplitErrorKind,
    SplitPerson,
    SplitRequest,
    SplitResult,
)
from src.services.rates.cache import RateTableCache, resolve_symbol


class SplitValidationError(ValueError):
    """Base exception for requests the engine refuses to calculate."""

    kind: SplitErrorKind
    default_message = "Invalid split request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidAmountError(SplitValidationError):
    """Total amount is missing, non-numeric, non-finite, zero or negative."""

    kind = SplitErrorKind.INVALID_AMOUNT
    default_message = "Please enter a valid total amount"


class MissingNameError(SplitValidationError):
    """At least one participant has a blank name."""

    kind = SplitErrorKind.MISSING_NAME
    default_message = "Please enter names for all people"

    def __init__(self, participant_ids: Optional[list[int]] = None):
        self.participant_ids = participant_ids or []
        super().__init__()


class EmptyParticipantsError(SplitValidationError):
    """No participants to split between."""

    kind = SplitErrorKind.EMPTY_PARTICIPANTS
    default_message = "Please add at least one person"


def parse_amount(raw) -> float:
    """
    Parse the total amount as typed by the user.

    Accepts ints, floats and numeric strings (surrounding whitespace is
    ignored). Anything else, including NaN and infinities, is rejected.

    Raises:
        InvalidAmountError: If the value is not a finite number > 0
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmountError()

    if isinstance(raw, str):
        text = raw.strip()
        # float() accepts digit separators; user input should not
        if not text or "_" in text:
            raise InvalidAmountError()
        try:
            amount = float(text)
        except ValueError:
            raise InvalidAmountError()
    elif isinstance(raw, (int, float)):
        try:
            amount = float(raw)
        except OverflowError:
            raise InvalidAmountError()
    else:
        raise InvalidAmountError()

    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmountError()

    return amount


def validate_request(request: SplitRequest) -> float:
    """
    Check a request in validation order and return the parsed amount.

    Raises:
        SplitValidationError: The first failure found
    """
    amount = parse_amount(request.total_amount)

    if not request.participants:
        raise EmptyParticipantsError()

    blank = [p.id for p in request.participants if not p.name.strip()]
    if blank:
        raise MissingNameError(blank)

    return amount


def calculate_split(
    request: SplitRequest,
    rates: Mapping[str, float],
    metadata: Optional[Mapping[str, CurrencyInfo]] = None,
) -> SplitResult:
    """
    Calculate each participant's share in their own currency.

    Args:
        request: Amount, base currency and participants
        rates: Units of each currency per 1 unit of the base currency
        metadata: Currency metadata keyed by code, for symbols

    Returns:
        A new SplitResult with one entry per participant, in request order

    Raises:
        SplitValidationError: If the request is invalid, or
            InvalidAmountError if a converted share is too large to
            represent
    """
    metadata = metadata if metadata is not None else {}
    total = validate_request(request)
    base = request.base_currency

    amount_per_person = total / len(request.participants)

    people = []
    for participant in request.participants:
        amount = amount_per_person
        rate_applied = None

        if participant.currency != base:
            rate = rates.get(participant.currency)
            if rate:
                amount = amount_per_person * rate
                rate_applied = float(rate)

        # A huge total times a large rate can overflow to inf
        if not math.isfinite(amount):
            raise InvalidAmountError()

        people.append(SplitPerson(
            name=participant.name,
            currency=participant.currency,
            amount=amount,
            symbol=resolve_symbol(participant.currency, metadata),
            rate_applied=rate_applied,
        ))

    return SplitResult(
        total_amount=total,
        base_currency=base,
        amount_per_person=amount_per_person,
        people=tuple(people),
    )


class SplitEngine:
    """
    Runs calculations against whatever the cache currently holds.

    No snapshot is taken: if a refresh lands between two calculations,
    the second one sees the new table.
    """

    def __init__(self, cache: RateTableCache):
        self._cache = cache

    def calculate(self, request: SplitRequest) -> SplitResult:
        return calculate_split(request, self._cache.rates, self._cache.metadata)
