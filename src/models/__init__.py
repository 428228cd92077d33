"""
Data Models Package

This package contains all Pydantic models used in the Currency Split system.
All data flowing through the system must conform to these schemas.
"""

from src.models.split import (
    CurrencyInfo,
    Participant,
    SplitErrorKind,
    SplitPerson,
    SplitRequest,
    SplitResult,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Split models
    "CurrencyInfo",
    "Participant",
    "SplitErrorKind",
    "SplitPerson",
    "SplitRequest",
    "SplitResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
