"""
Audit Models for the Weekly Allowance wallet

Every balance change, allowance payout and rejected request is
recorded as an audit event. This provides:
1. Traceability of who got credited what, and when
2. Debugging information when a reconciliation fails
3. A readable history for parents beyond the raw ledger

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Accounts
    CHILD_CREATED = "child_created"

    # Balance changes
    DEPOSIT_RECORDED = "deposit_recorded"
    EXPENSE_RECORDED = "expense_recorded"

    # Allowances
    ALLOWANCE_CONFIGURED = "allowance_configured"
    ALLOWANCE_PAID = "allowance_paid"
    ALLOWANCE_ALREADY_PAID = "allowance_already_paid"
    ALLOWANCE_RUN_COMPLETED = "allowance_run_completed"

    # Failures
    OPERATION_REJECTED = "operation_rejected"
    BALANCE_MISMATCH = "balance_mismatch"
    SYSTEM_ERROR = "system_error"


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
        default_factory=_utcnow,
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
        description="Type of entity (e.g., 'child', 'transaction', 'allowance')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one allowance run)"
    )

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
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.child_created(child_id, user_id, name)
        event = AuditEventBuilder.allowance_paid(child_id, txn_id, amount, day)

    Amounts go into details as strings so the JSON log keeps
    every decimal digit.
    """

    @staticmethod
    def child_created(
        child_id: int,
        user_id: int,
        name: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHILD_CREATED,
            entity_type="child",
            entity_id=child_id,
            description=f"Child account created: {name}",
            details={
                "user_id": user_id,
                "name": name,
            },
        )

    @staticmethod
    def balance_changed(
        event_type: AuditEventType,
        child_id: int,
        transaction_id: int,
        amount: Decimal,
        new_balance: Decimal,
        description: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        verb = {
            AuditEventType.DEPOSIT_RECORDED: "Deposit",
            AuditEventType.EXPENSE_RECORDED: "Expense",
            AuditEventType.ALLOWANCE_PAID: "Allowance",
        }.get(event_type, "Transaction")
        return AuditEvent(
            event_type=event_type,
            entity_type="child",
            entity_id=child_id,
            correlation_id=correlation_id,
            description=f"{verb} of {amount} recorded",
            details={
                "transaction_id": transaction_id,
                "amount": str(amount),
                "new_balance": str(new_balance),
                "description": description,
            },
        )

    @staticmethod
    def allowance_configured(
        child_id: int,
        amount: Decimal,
        day_of_week: int,
        replaced: bool,
    ) -> AuditEvent:
        action = "updated" if replaced else "created"
        return AuditEvent(
            event_type=AuditEventType.ALLOWANCE_CONFIGURED,
            entity_type="allowance",
            entity_id=child_id,
            description=f"Weekly allowance {action}: {amount} on day {day_of_week}",
            details={
                "amount": str(amount),
                "day_of_week": day_of_week,
                "replaced": replaced,
            },
        )

    @staticmethod
    def allowance_already_paid(
        child_id: int,
        paid_on: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALLOWANCE_ALREADY_PAID,
            entity_type="allowance",
            entity_id=child_id,
            correlation_id=correlation_id,
            description=f"Allowance already paid on {paid_on}, skipped",
            details={"paid_on": paid_on},
        )

    @staticmethod
    def allowance_run_completed(
        run_date: str,
        due_count: int,
        paid_count: int,
        correlation_id: UUID,
        failed_count: int = 0,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALLOWANCE_RUN_COMPLETED,
            severity=AuditSeverity.WARNING if failed_count else AuditSeverity.INFO,
            entity_type="allowance_run",
            correlation_id=correlation_id,
            description=f"Allowance run for {run_date}: {paid_count} of {due_count} paid",
            details={
                "run_date": run_date,
                "due_count": due_count,
                "paid_count": paid_count,
                "failed_count": failed_count,
            },
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        child_id: Any,
        error: Exception,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="child",
            entity_id=child_id if isinstance(child_id, int) else None,
            correlation_id=correlation_id,
            description=f"{operation} rejected",
            details={
                "operation": operation,
                "child_id": str(child_id),
            },
            error_code=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def balance_mismatch(
        child_id: int,
        stored: Decimal,
        ledger_total: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_MISMATCH,
            severity=AuditSeverity.ERROR,
            entity_type="child",
            entity_id=child_id,
            description="Stored balance differs from ledger total",
            details={
                "stored": str(stored),
                "ledger_total": str(ledger_total),
            },
            error_code="BALANCE_MISMATCH",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"System error: {error_type}",
            details=details or {},
            error_code=error_type,
            error_message=error_message,
        )
