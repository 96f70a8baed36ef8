"""
Audit Logger

DESIGN DECISION: Every balance change and allowance payout is logged.
This provides:
1. Complete traceability of money movements
2. Debugging capability when reconciliation fails
3. A history parents can read beyond the bare ledger

The audit logger:
- Is async so it composes with the async services
- Gracefully handles failures (a broken audit store never blocks a deposit)
- Supports correlation IDs to trace the events of one allowance run
"""

import logging
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from weekly_allowance.config import get_settings
from weekly_allowance.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from weekly_allowance.models.ledger import Transaction, TransactionType
from weekly_allowance.services.storage import AuditStorageInterface


def configure_logging(json_logs: Optional[bool] = None, level: Optional[str] = None) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Defaults come from AppSettings; JSON output for production,
    a console renderer for local debugging.
    """
    app_settings = get_settings().app
    json_logs = app_settings.json_logs if json_logs is None else json_logs
    level = level or app_settings.log_level

    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger("weekly_allowance").setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
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


configure_logging()


_BALANCE_EVENTS = {
    TransactionType.DEPOSIT: AuditEventType.DEPOSIT_RECORDED,
    TransactionType.EXPENSE: AuditEventType.EXPENSE_RECORDED,
    TransactionType.ALLOWANCE: AuditEventType.ALLOWANCE_PAID,
}


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and parent visibility), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("weekly_allowance.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_child_created(
        self,
        child_id: int,
        user_id: int,
        name: str,
    ) -> None:
        """Log child account creation."""
        event = AuditEventBuilder.child_created(
            child_id=child_id,
            user_id=user_id,
            name=name,
        )
        await self.log(event)

    async def log_balance_changed(
        self,
        transaction: Transaction,
        new_balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a committed deposit, expense or allowance payment."""
        event = AuditEventBuilder.balance_changed(
            event_type=_BALANCE_EVENTS[transaction.type],
            child_id=transaction.child_id,
            transaction_id=transaction.id,
            amount=transaction.amount,
            new_balance=new_balance,
            description=transaction.description,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_allowance_configured(
        self,
        child_id: int,
        amount: Decimal,
        day_of_week: int,
        replaced: bool,
    ) -> None:
        """Log creation or replacement of a weekly allowance."""
        event = AuditEventBuilder.allowance_configured(
            child_id=child_id,
            amount=amount,
            day_of_week=day_of_week,
            replaced=replaced,
        )
        await self.log(event)

    async def log_allowance_already_paid(
        self,
        child_id: int,
        paid_on: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a same-day payment that was skipped."""
        event = AuditEventBuilder.allowance_already_paid(
            child_id=child_id,
            paid_on=paid_on,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_allowance_run_completed(
        self,
        run_date: str,
        due_count: int,
        paid_count: int,
        correlation_id: UUID,
        failed_count: int = 0,
    ) -> None:
        """Log the end of a process_allowances tick."""
        event = AuditEventBuilder.allowance_run_completed(
            run_date=run_date,
            due_count=due_count,
            paid_count=paid_count,
            failed_count=failed_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_operation_rejected(
        self,
        operation: str,
        child_id: Any,
        error: Exception,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a request refused by validation or balance checks."""
        event = AuditEventBuilder.operation_rejected(
            operation=operation,
            child_id=child_id,
            error=error,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_balance_mismatch(
        self,
        child_id: int,
        stored: Decimal,
        ledger_total: Decimal,
    ) -> None:
        """Log a failed reconciliation."""
        event = AuditEventBuilder.balance_mismatch(
            child_id=child_id,
            stored=stored,
            ledger_total=ledger_total,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    The scheduler creates one per process_allowances call and
    passes it to every payment made in that run.
    """
    return uuid4()
