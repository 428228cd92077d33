"""Split calculation package."""

from src.split.engine import (
    EmptyParticipantsError,
    InvalidAmountError,
    MissingNameError,
    SplitEngine,
    SplitValidationError,
    calculate_split,
    parse_amount,
    validate_request,
)
from src.split.export import SUMMARY_TITLE, SummaryExporter, build_summary
from src.split.formatting import (
    format_money,
    format_number,
    format_person_amount,
    format_share_line,
    format_total,
)
from src.split.roster import ParticipantNotFoundError, ParticipantRoster

__all__ = [
    # Engine
    "SplitEngine",
    "calculate_split",
    "parse_amount",
    "validate_request",
    # Exceptions
    "EmptyParticipantsError",
    "InvalidAmountError",
    "MissingNameError",
    "ParticipantNotFoundError",
    "SplitValidationError",
    # Formatting and export
    "SUMMARY_TITLE",
    "SummaryExporter",
    "build_summary",
    "format_money",
    "format_number",
    "format_person_amount",
    "format_share_line",
    "format_total",
    # Roster
    "ParticipantRoster",
]
