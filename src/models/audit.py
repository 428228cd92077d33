"""
Audit Models for Currency Split

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every calculation and rate refresh
2. Debugging information when conversions look wrong
3. Visibility into silent fallbacks (missing rates)

DESIGN DECISION: Audit events are plain records. They are emitted
once and never modified.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Participant roster
    PARTICIPANT_ADDED = "participant_added"
    PARTICIPANT_REMOVED = "participant_removed"

    # Calculation
    SPLIT_CALCULATED = "split_calculated"
    SPLIT_REJECTED = "split_rejected"
    RATE_FALLBACK_APPLIED = "rate_fallback_applied"

    # Reference data
    RATES_REFRESHED = "rates_refreshed"
    RATES_REFRESH_FAILED = "rates_refresh_failed"
    CURRENCIES_REFRESHED = "currencies_refreshed"
    CURRENCIES_REFRESH_FAILED = "currencies_refresh_failed"

    # Export
    RESULTS_COPIED = "results_copied"
    RESULTS_SHARED = "results_shared"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'split', 'participant', 'rates')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Identifier of the entity (participant id, currency code)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one calculation and its fallbacks)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    # User action tracking
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.split_calculated("USD", 300.0, 3, correlation_id)
        event = AuditEventBuilder.rates_refreshed("USD", 161, correlation_id)
    """

    @staticmethod
    def participant_added(
        participant_id: int,
        currency: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTICIPANT_ADDED,
            entity_type="participant",
            entity_id=str(participant_id),
            correlation_id=correlation_id,
            description=f"Participant {participant_id} added ({currency})",
            details={"currency": currency},
            is_user_action=True,
        )

    @staticmethod
    def participant_removed(
        participant_id: int,
        removed: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTICIPANT_REMOVED,
            entity_type="participant",
            entity_id=str(participant_id),
            correlation_id=correlation_id,
            description=(
                f"Participant {participant_id} removed"
                if removed
                else f"Participant {participant_id} not removed"
            ),
            details={"removed": removed},
            is_user_action=True,
        )

    @staticmethod
    def split_calculated(
        base_currency: str,
        total_amount: float,
        participant_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_CALCULATED,
            entity_type="split",
            correlation_id=correlation_id,
            description=f"Split {total_amount} {base_currency} {participant_count} ways",
            details={
                "base_currency": base_currency,
                "total_amount": total_amount,
                "participant_count": participant_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def split_rejected(
        error_kind: str,
        message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="split",
            correlation_id=correlation_id,
            description=f"Split rejected: {error_kind}",
            error_code=error_kind,
            error_message=message,
            is_user_action=True,
        )

    @staticmethod
    def rate_fallback_applied(
        base_currency: str,
        currency: str,
        participant_name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_FALLBACK_APPLIED,
            severity=AuditSeverity.WARNING,
            entity_type="rates",
            entity_id=currency,
            correlation_id=correlation_id,
            description=(
                f"No {base_currency}->{currency} rate; "
                f"{participant_name} charged the unconverted share"
            ),
            details={
                "base_currency": base_currency,
                "currency": currency,
                "participant": participant_name,
            },
        )

    @staticmethod
    def rates_refreshed(
        base_currency: str,
        rate_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATES_REFRESHED,
            entity_type="rates",
            entity_id=base_currency,
            correlation_id=correlation_id,
            description=f"Loaded {rate_count} rates against {base_currency}",
            details={"rate_count": rate_count},
        )

    @staticmethod
    def rates_refresh_failed(
        base_currency: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATES_REFRESH_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="rates",
            entity_id=base_currency,
            correlation_id=correlation_id,
            description=f"Rate refresh for {base_currency} failed; keeping cached rates",
            error_message=error_message,
        )

    @staticmethod
    def currencies_refreshed(
        currency_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCIES_REFRESHED,
            entity_type="currencies",
            correlation_id=correlation_id,
            description=f"Loaded {currency_count} supported currencies",
            details={"currency_count": currency_count},
        )

    @staticmethod
    def currencies_refresh_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCIES_REFRESH_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="currencies",
            correlation_id=correlation_id,
            description="Currency list refresh failed; keeping cached metadata",
            error_message=error_message,
        )

    @staticmethod
    def results_exported(
        shared: bool,
        line_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.RESULTS_SHARED if shared else AuditEventType.RESULTS_COPIED
            ),
            entity_type="split",
            correlation_id=correlation_id,
            description="Results shared" if shared else "Results copied to clipboard",
            details={"line_count": line_count},
            is_user_action=True,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
