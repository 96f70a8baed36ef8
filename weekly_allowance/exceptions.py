"""
Wallet Exceptions

Every failure the ledger can report is a synchronous, local error.
Nothing is retried internally: the caller corrects the input and
tries again. Message texts are part of the public contract, so
presentation layers can show them unchanged.
"""

from decimal import Decimal
from typing import Any


class WalletError(Exception):
    """Base exception for wallet operations."""
    pass


class LedgerValidationError(WalletError):
    """Input rejected before any state was touched."""
    pass


class EmptyNameError(LedgerValidationError):
    """A child account needs a display name."""

    def __init__(self, message: str = "Child name cannot be empty"):
        super().__init__(message)


class InvalidAmountError(LedgerValidationError):
    """Amount is zero, negative, non-numeric, too precise or too large."""

    ZERO = "Amount must be greater than zero"
    NEGATIVE = "Amount cannot be negative"
    NOT_A_NUMBER = "Amount must be a valid number"
    TOO_LARGE = "Amount is too large"

    def __init__(self, message: str, amount: Any = None):
        self.amount = amount
        super().__init__(message)


class InvalidDayOfWeekError(LedgerValidationError):
    """Day of week outside 1 (Monday) .. 7 (Sunday)."""

    def __init__(self, day: Any):
        self.day = day
        super().__init__(f"Invalid day of week: {day}")


class ChildNotFoundError(WalletError):
    """A mutating operation referenced an unknown child."""

    def __init__(self, child_id: Any):
        self.child_id = child_id
        super().__init__(f"Child with ID {child_id} not found")


class InsufficientBalanceError(WalletError):
    """Expense larger than the child's current balance."""

    def __init__(self, child_id: int, balance: Decimal, requested: Decimal):
        self.child_id = child_id
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient balance: child {child_id} has {balance}, "
            f"requested {requested}"
        )


class BalanceMismatchError(WalletError):
    """Stored balance no longer equals the signed sum of the ledger."""

    def __init__(self, child_id: int, stored: Decimal, ledger_total: Decimal):
        self.child_id = child_id
        self.stored = stored
        self.ledger_total = ledger_total
        super().__init__(
            f"Balance mismatch for child {child_id}: "
            f"stored {stored}, ledger {ledger_total}"
        )
