"""
Transaction Ledger

Append-only log of money movements. The ledger assigns ids and
timestamps; amounts are expected to be validated by the caller.

History is returned newest first. Ordering is by created_at, with
ties (two appends inside the same clock tick) broken by append
order. Ids are never used for ordering: a distributed store may
hand them out out of order.
"""

from decimal import Decimal
from typing import Optional, Union

from weekly_allowance.clock import SystemClock
from weekly_allowance.models.ledger import Transaction, TransactionType
from weekly_allowance.services.storage import TransactionStorageInterface


class TransactionLedger:
    """Owns Transaction records."""

    def __init__(
        self,
        storage: TransactionStorageInterface,
        clock: Optional[SystemClock] = None,
    ):
        self._storage = storage
        self._clock = clock or SystemClock()

    async def append(
        self,
        child_id: int,
        amount: Decimal,
        transaction_type: Union[TransactionType, str],
        description: str = "",
    ) -> Transaction:
        """Create, store and return a new transaction."""
        transaction = Transaction(
            id=await self._storage.next_transaction_id(),
            child_id=child_id,
            amount=amount,
            type=TransactionType(transaction_type),
            description=description or "",
            created_at=self._clock.now(),
        )
        await self._storage.append_transaction(transaction)
        return transaction

    async def get_transactions_for_child(self, child_id: int) -> list[Transaction]:
        """
        All transactions of a child, most recent first.

        Returns an empty list for a child without history.
        """
        in_append_order = await self._storage.list_transactions(child_id)
        # sorted() is stable: reversing first makes later appends win ties.
        return sorted(
            reversed(in_append_order),
            key=lambda transaction: transaction.created_at,
            reverse=True,
        )

    async def signed_total(self, child_id: int) -> Decimal:
        """Sum of all amounts, credits positive and expenses negative."""
        transactions = await self._storage.list_transactions(child_id)
        return sum((t.signed_amount for t in transactions), Decimal(0))
