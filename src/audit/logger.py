"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of calculations and rate refreshes
2. Debugging capability when a conversion looks wrong
3. Visibility into missing-rate fallbacks, which are never shown as errors

The audit logger:
- Is synchronous (the engine and cache never wait on anything)
- Gracefully handles failures (doesn't crash the app if a sink fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from src.config import AppSettings, get_settings
from src.models.audit import AuditEvent, AuditEventBuilder


def configure_logging(app_settings: Optional[AppSettings] = None) -> int:
    """
    Configure stdlib logging and structlog from app settings.

    debug_mode forces DEBUG and human-readable console output;
    otherwise log_level applies and records are rendered as JSON.

    Returns the effective stdlib level.
    """
    settings = app_settings or get_settings().app
    level = logging.DEBUG if settings.debug_mode else getattr(logging, settings.log_level)

    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.debug_mode
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return level


# Configure structlog for local logging
configure_logging()


AuditSink = Callable[[AuditEvent], None]


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional sink supplied by the caller (e.g. an in-app history panel)
    """

    def __init__(
        self,
        sink: Optional[AuditSink] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Extra destination for events.
                  If None, only logs locally.
            app_settings: Source of the environment name stamped on
                  every record. Defaults to the loaded settings.
        """
        settings = app_settings or get_settings().app
        self._sink = sink
        self._logger = structlog.get_logger("currency_split.audit").bind(
            environment=settings.app_environment,
        )

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Forwards to the sink if available.

        Returns True if the sink accepted the event (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                self._sink(event)
                return True
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_participant_added(
        self,
        participant_id: int,
        currency: str,
    ) -> None:
        """Log a new participant row."""
        self.log(AuditEventBuilder.participant_added(participant_id, currency))

    def log_participant_removed(
        self,
        participant_id: int,
        removed: bool,
    ) -> None:
        """Log a removal request, including refused ones."""
        self.log(AuditEventBuilder.participant_removed(participant_id, removed))

    def log_split_calculated(
        self,
        base_currency: str,
        total_amount: float,
        participant_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a successful calculation."""
        event = AuditEventBuilder.split_calculated(
            base_currency=base_currency,
            total_amount=total_amount,
            participant_count=participant_count,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_split_rejected(
        self,
        error_kind: str,
        message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a calculation refused by validation."""
        event = AuditEventBuilder.split_rejected(
            error_kind=error_kind,
            message=message,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_rate_fallback(
        self,
        base_currency: str,
        currency: str,
        participant_name: str,
        correlation_id: UUID,
    ) -> None:
        """Log a participant charged the unconverted share."""
        event = AuditEventBuilder.rate_fallback_applied(
            base_currency=base_currency,
            currency=currency,
            participant_name=participant_name,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_rates_refreshed(
        self,
        base_currency: str,
        rate_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.rates_refreshed(base_currency, rate_count, correlation_id))

    def log_rates_refresh_failed(
        self,
        base_currency: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventBuilder.rates_refresh_failed(base_currency, error_message, correlation_id)
        )

    def log_currencies_refreshed(
        self,
        currency_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.currencies_refreshed(currency_count, correlation_id))

    def log_currencies_refresh_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.currencies_refresh_failed(error_message, correlation_id))

    def log_results_exported(
        self,
        shared: bool,
        line_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a copy or share of the summary text."""
        self.log(AuditEventBuilder.results_exported(shared, line_count, correlation_id))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., pressing Calculate).
    Pass it through all subsequent operations.
    """
    return uuid4()
