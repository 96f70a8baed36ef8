"""
Data Models Package

This package contains all Pydantic models used by the wallet.
All data flowing through the ledger must conform to these schemas.
"""

from weekly_allowance.models.ledger import (
    BalanceSummary,
    Child,
    DayOfWeek,
    Transaction,
    TransactionType,
    WeeklyAllowance,
)
from weekly_allowance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "BalanceSummary",
    "Child",
    "DayOfWeek",
    "Transaction",
    "TransactionType",
    "WeeklyAllowance",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
