"""
Main Orchestrator for Currency Split

This module ties together all the components and defines the
caller-side flows:
1. Reference data (currency list and rate table refreshes)
2. Form state (total amount, base currency, participant roster)
3. Calculation (form state -> engine -> result or error message)
4. Export (result -> summary text -> clipboard / share sheet)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The engine never performs I/O; refreshes happen here, on request
- A failed calculation leaves the previous result on display
- A failed refresh leaves the previously cached tables in place
- Every step is audited

Refreshes are explicit calls (startup, base currency change, manual
refresh button); nothing is fetched implicitly.
"""

from typing import Optional

import structlog
from pydantic import ValidationError

from src.audit import AuditLogger, create_correlation_id
from src.config import AppSettings, get_settings, validate_all_settings
from src.models.split import Participant, SplitRequest, SplitResult
from src.services.rates import (
    ExchangeRateApiProvider,
    InvalidRateTableError,
    RateProviderError,
    RateProviderInterface,
    RateTableCache,
    build_currency_metadata,
)
from src.split import (
    ParticipantRoster,
    SplitEngine,
    SplitValidationError,
    SummaryExporter,
    build_summary,
)


RATES_ERROR_MESSAGE = "Failed to fetch exchange rates. Please try again."
PROVIDER_SERVICE = "exchange_rate_provider"

logger = structlog.get_logger(__name__)


class SplitSession:
    """
    State and flows behind one bill-splitting screen.

    Flow:
    1. startup() -> currency list and rates for the default base currency
    2. User edits amount, base currency and participants
    3. refresh_rates() when the base currency changes or on demand
    4. calculate() -> result, or an error message with the old result kept
    5. copy_results() / share_results()
    """

    def __init__(
        self,
        provider: Optional[RateProviderInterface] = None,
        cache: Optional[RateTableCache] = None,
        exporter: Optional[SummaryExporter] = None,
        audit_logger: Optional[AuditLogger] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        settings = app_settings or get_settings().app

        self._provider = provider
        self._exporter = exporter
        self._audit_logger = audit_logger or AuditLogger()

        self.cache = cache or RateTableCache()
        self.engine = SplitEngine(self.cache)
        self.roster = ParticipantRoster(
            currencies=settings.initial_currencies_list,
            default_currency=settings.default_participant_currency,
        )

        # Form state
        self.total_amount: str = ""
        self.base_currency: str = settings.default_base_currency

        # Output state
        self.result: Optional[SplitResult] = None
        self.error: str = ""
        self.loading: bool = False

    # -------------------------------------------------------------------------
    # Reference data
    # -------------------------------------------------------------------------

    def _get_provider(self) -> RateProviderInterface:
        """Get or create the rate provider."""
        if self._provider is None:
            try:
                self._provider = ExchangeRateApiProvider()
            except ValidationError as e:
                raise RateProviderError(f"Exchange rate provider is not configured: {e}")
        return self._provider

    async def startup(self) -> None:
        """Load the currency list, then rates for the current base currency."""
        await self.refresh_currency_metadata()
        await self.refresh_rates()

    async def refresh_currency_metadata(self) -> bool:
        """
        Reload the supported currency list.

        Failures are audited only; the cached metadata stays in place and
        symbol lookup keeps working through the static fallback table.

        Returns True if the metadata was replaced.
        """
        correlation_id = create_correlation_id()

        try:
            pairs = await self._get_provider().fetch_supported_currencies()
            self.cache.set_metadata(build_currency_metadata(pairs))
        except RateProviderError as e:
            self._audit_logger.log_external_service_error(
                service=PROVIDER_SERVICE,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            self._audit_logger.log_currencies_refresh_failed(
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return False
        except (InvalidRateTableError, ValidationError) as e:
            self._audit_logger.log_currencies_refresh_failed(
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return False

        self._audit_logger.log_currencies_refreshed(
            currency_count=len(self.cache.metadata),
            correlation_id=correlation_id,
        )
        return True

    async def refresh_rates(self, base_currency: Optional[str] = None) -> bool:
        """
        Reload the rate table for a base currency (default: the current one).

        On failure the cached table is kept and `error` is set so the UI
        can tell the user. Calculations keep working with the old table.

        Returns True if the table was replaced.
        """
        base = base_currency or self.base_currency
        correlation_id = create_correlation_id()

        self.loading = True
        self.error = ""
        try:
            table = await self._get_provider().fetch_latest_rates(base)
            self.cache.set_rates(table, base_currency=base)
        except RateProviderError as e:
            self.error = RATES_ERROR_MESSAGE
            self._audit_logger.log_external_service_error(
                service=PROVIDER_SERVICE,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            self._audit_logger.log_rates_refresh_failed(
                base_currency=base,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return False
        except InvalidRateTableError as e:
            self.error = RATES_ERROR_MESSAGE
            self._audit_logger.log_rates_refresh_failed(
                base_currency=base,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return False
        finally:
            self.loading = False

        self._audit_logger.log_rates_refreshed(
            base_currency=base,
            rate_count=len(table),
            correlation_id=correlation_id,
        )
        return True

    # -------------------------------------------------------------------------
    # Form state
    # -------------------------------------------------------------------------

    def set_total_amount(self, text: str) -> None:
        self.total_amount = text

    async def set_base_currency(self, code: str) -> bool:
        """
        Switch the base currency and reload rates for it.

        Returns the outcome of the rate refresh (True when unchanged).
        """
        if code == self.base_currency:
            return True
        self.base_currency = code
        return await self.refresh_rates(code)

    def add_participant(self, name: str = "", currency: Optional[str] = None) -> Participant:
        participant = self.roster.add(name=name, currency=currency)
        self._audit_logger.log_participant_added(participant.id, participant.currency)
        return participant

    def remove_participant(self, participant_id: int) -> bool:
        removed = self.roster.remove(participant_id)
        self._audit_logger.log_participant_removed(participant_id, removed)
        return removed

    def update_participant(
        self,
        participant_id: int,
        name: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> Participant:
        return self.roster.update(participant_id, name=name, currency=currency)

    # -------------------------------------------------------------------------
    # Calculation
    # -------------------------------------------------------------------------

    def build_request(self) -> SplitRequest:
        return SplitRequest(
            total_amount=self.total_amount,
            base_currency=self.base_currency,
            participants=self.roster.snapshot(),
        )

    def calculate(self) -> Optional[SplitResult]:
        """
        Run the engine on the current form state.

        On success the new result replaces the old one and `error` is
        cleared. On a validation failure `error` holds the message and the
        previous result is left untouched.
        """
        correlation_id = create_correlation_id()

        try:
            result = self.engine.calculate(self.build_request())
        except SplitValidationError as e:
            self.error = e.message
            self._audit_logger.log_split_rejected(
                error_kind=e.kind.value,
                message=e.message,
                correlation_id=correlation_id,
            )
            return None

        self.result = result
        self.error = ""

        self._audit_logger.log_split_calculated(
            base_currency=result.base_currency,
            total_amount=result.total_amount,
            participant_count=result.participant_count,
            correlation_id=correlation_id,
        )
        for person in result.fallback_people:
            self._audit_logger.log_rate_fallback(
                base_currency=result.base_currency,
                currency=person.currency,
                participant_name=person.name,
                correlation_id=correlation_id,
            )

        return result

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    @property
    def base_symbol(self) -> str:
        """Symbol of the result's base currency (or the current one)."""
        code = self.result.base_currency if self.result else self.base_currency
        return self.cache.resolve_symbol(code)

    def summary(self) -> Optional[str]:
        """Summary text of the current result, if any."""
        if self.result is None:
            return None
        return build_summary(self.result, self.base_symbol)

    def _require_exporter(self) -> SummaryExporter:
        if self._exporter is None:
            raise RuntimeError("No export sinks configured for this session")
        return self._exporter

    def copy_results(self) -> Optional[str]:
        """Copy the summary to the clipboard. Does nothing without a result."""
        if self.result is None:
            return None
        text = self._require_exporter().copy_results(self.result, self.base_symbol)
        self._audit_logger.log_results_exported(shared=False, line_count=text.count("\n") + 1)
        return text

    def share_results(self) -> Optional[str]:
        """Share the summary (or copy it when sharing is unavailable)."""
        if self.result is None:
            return None
        exporter = self._require_exporter()
        text = exporter.share_results(self.result, self.base_symbol)
        self._audit_logger.log_results_exported(
            shared=exporter.can_share,
            line_count=text.count("\n") + 1,
        )
        return text


def create_app_components(
    use_provider: bool = True,
    exporter: Optional[SummaryExporter] = None,
) -> SplitSession:
    """
    Factory function to create a ready-to-use session.

    Args:
        use_provider: Whether to initialize the ExchangeRate-API provider.
                      Set to False to defer it until the first refresh.
        exporter: Clipboard and share sinks supplied by the UI

    Returns:
        A SplitSession (call `await session.startup()` to load data)
    """
    provider = None

    if use_provider:
        checks = validate_all_settings()
        if checks["exchange_rate"]:
            provider = ExchangeRateApiProvider()
        else:
            # Provider not configured - continue without it
            logger.warning(
                "rate_provider_not_configured",
                error=checks["exchange_rate_error"],
            )

    return SplitSession(
        provider=provider,
        exporter=exporter,
        audit_logger=AuditLogger(),
    )
