"""
Core Data Models for the Weekly Allowance wallet

These models define the schemas for every record the ledger keeps:
1. Child - a wallet owned by a parent user
2. Transaction - an immutable, append-only ledger entry
3. WeeklyAllowance - the single recurring-credit rule of a child
4. BalanceSummary - read model produced by ledger queries

DESIGN DECISION: Amounts are Decimal, never float.
Equality in tests and reconciliation is exact (123.45 == 123.45),
which binary floating point cannot promise.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Kinds of ledger entry.

    DESIGN DECISION: Closed set. Deposits and allowances credit the
    wallet, expenses debit it. There is no "adjustment" type: the
    only way to change a balance is a new transaction.
    """
    DEPOSIT = "deposit"
    EXPENSE = "expense"
    ALLOWANCE = "allowance"

    @property
    def sign(self) -> int:
        """+1 for credits, -1 for debits."""
        return -1 if self is TransactionType.EXPENSE else 1


class DayOfWeek(IntEnum):
    """ISO-8601 weekday numbering, same as date.isoweekday()."""
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class Child(BaseModel):
    """
    A child's wallet.

    CRITICAL: balance is only ever changed through
    ChildRegistry.apply_balance_delta. Storage hands out copies,
    so editing a returned Child has no effect on the stored one.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(
        ...,
        ge=1,
        description="System-assigned identifier, never reused"
    )
    user_id: int = Field(
        ...,
        description="Owning parent (opaque external reference)"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Display name"
    )
    balance: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        description="Current spendable amount"
    )
    created_at: datetime = Field(
        ...,
        description="When the account was created"
    )


class Transaction(BaseModel):
    """
    An immutable ledger entry.

    The amount is always positive; the type decides the direction.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        ge=1,
        description="Unique, creation-ordered identifier"
    )
    child_id: int = Field(
        ...,
        description="Child this entry belongs to"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount moved"
    )
    type: TransactionType
    description: str = ""
    created_at: datetime = Field(
        ...,
        description="Assigned by the ledger at append time"
    )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the direction applied."""
        return self.amount * self.type.sign


class WeeklyAllowance(BaseModel):
    """
    Recurring weekly credit for one child.

    DESIGN DECISION: One slot per child. Setting a new allowance
    replaces the old one instead of keeping a history.
    """
    model_config = ConfigDict(validate_assignment=True)

    child_id: int
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount credited on each due day"
    )
    day_of_week: int = Field(
        ...,
        ge=1,
        le=7,
        description="1=Monday .. 7=Sunday"
    )
    is_active: bool = Field(
        default=True,
        description="Inactive allowances are never paid"
    )
    last_payment_date: Optional[date] = Field(
        default=None,
        description="Calendar day of the most recent payment"
    )
    created_at: datetime
    updated_at: datetime

    def is_due_on(self, day: date) -> bool:
        """True when this allowance should pay out on ``day``."""
        return self.is_active and day.isoweekday() == self.day_of_week

    def was_paid_on(self, day: date) -> bool:
        return self.last_payment_date == day


# =============================================================================
# QUERY MODELS
# =============================================================================

class BalanceSummary(BaseModel):
    """
    Per-child totals computed from the ledger.

    is_consistent is False when the stored balance and the ledger
    disagree, which should never happen.
    """

    child_id: int
    balance: Decimal
    total_deposits: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    total_allowances: Decimal = Decimal("0")
    transaction_count: int = Field(default=0, ge=0)

    @property
    def ledger_total(self) -> Decimal:
        """Signed sum of every transaction."""
        return self.total_deposits + self.total_allowances - self.total_expenses

    @property
    def is_consistent(self) -> bool:
        return self.balance == self.ledger_total
