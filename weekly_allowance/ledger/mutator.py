"""
Balance Mutator

Deposits, expenses and allowance credits all share one protocol:

1. VALIDATE the amount (no lock, no storage access)
2. LOCK the child (one asyncio.Lock per known child id)
3. RESOLVE the child under the lock - ChildNotFoundError if unknown
4. CHECK sufficiency (expenses only)
5. COMMIT - apply the balance delta, then append the transaction

CRITICAL: Step 5 is all-or-nothing. The transaction log is
append-only, so the balance moves first; if the append then fails
the delta is reversed through the same registry path before the
error propagates. Nobody ever observes a transaction without its
balance change or the other way round.
"""

import asyncio
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import structlog

from weekly_allowance.audit import AuditLogger
from weekly_allowance.exceptions import InsufficientBalanceError, WalletError
from weekly_allowance.ledger.transactions import TransactionLedger
from weekly_allowance.models.ledger import Transaction, TransactionType
from weekly_allowance.registry import ChildRegistry
from weekly_allowance.validation import LedgerValidator

logger = structlog.get_logger(__name__)


class BalanceMutator:
    """
    The only component that moves money.

    Mutations on the same child are serialized; different children
    proceed independently.
    """

    def __init__(
        self,
        registry: ChildRegistry,
        ledger: TransactionLedger,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._registry = registry
        self._ledger = ledger
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger
        self._locks: dict[int, asyncio.Lock] = {}

    async def deposit(
        self,
        child_id: int,
        amount: Any,
        description: str = "",
    ) -> Transaction:
        """
        Credit a child's wallet.

        Raises:
            InvalidAmountError: If amount is zero, negative or malformed
            ChildNotFoundError: If the child doesn't exist
        """
        return await self._mutate(
            "deposit", child_id, amount, TransactionType.DEPOSIT, description
        )

    async def record_expense(
        self,
        child_id: int,
        amount: Any,
        description: str = "",
    ) -> Transaction:
        """
        Debit a child's wallet.

        Spending the exact balance is allowed and leaves it at zero.

        Raises:
            InvalidAmountError: If amount is zero, negative or malformed
            ChildNotFoundError: If the child doesn't exist
            InsufficientBalanceError: If amount exceeds the balance
        """
        return await self._mutate(
            "record_expense", child_id, amount, TransactionType.EXPENSE, description
        )

    async def credit_allowance(
        self,
        child_id: int,
        amount: Any,
        description: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """Credit a scheduled allowance payment (type 'allowance')."""
        return await self._mutate(
            "credit_allowance",
            child_id,
            amount,
            TransactionType.ALLOWANCE,
            description,
            correlation_id=correlation_id,
        )

    async def _mutate(
        self,
        operation: str,
        child_id: int,
        amount: Any,
        transaction_type: TransactionType,
        description: str,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        try:
            value = self._validator.validate_amount(amount)
            lock = await self._lock_for(child_id)
            async with lock:
                child = await self._registry.require_child(child_id)
                if transaction_type is TransactionType.EXPENSE and value > child.balance:
                    raise InsufficientBalanceError(child_id, child.balance, value)
                transaction, new_balance = await self._commit(
                    child_id, value, transaction_type, description
                )
        except WalletError as e:
            if self._audit_logger:
                await self._audit_logger.log_operation_rejected(
                    operation=operation,
                    child_id=child_id,
                    error=e,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_balance_changed(
                transaction=transaction,
                new_balance=new_balance,
                correlation_id=correlation_id,
            )
        return transaction

    async def _lock_for(self, child_id: int) -> asyncio.Lock:
        """
        The lock of an existing child.

        Locks are only created for ids the registry knows, so unknown ids
        never add entries. Children are never deleted, so a cached lock
        stays valid.

        Raises:
            ChildNotFoundError: If the id is unknown
        """
        lock = self._locks.get(child_id)
        if lock is None:
            await self._registry.require_child(child_id)
            lock = self._locks.setdefault(child_id, asyncio.Lock())
        return lock

    async def _commit(
        self,
        child_id: int,
        amount: Decimal,
        transaction_type: TransactionType,
        description: str,
    ) -> tuple[Transaction, Decimal]:
        """Apply the delta and append the entry as one unit. Lock must be held."""
        delta = amount * transaction_type.sign
        child = await self._registry.apply_balance_delta(child_id, delta)
        try:
            transaction = await self._ledger.append(
                child_id, amount, transaction_type, description
            )
        except Exception:
            logger.error(
                "ledger_append_failed_reverting_balance",
                child_id=child_id,
                delta=str(delta),
            )
            await self._registry.apply_balance_delta(child_id, -delta)
            raise
        return transaction, child.balance
