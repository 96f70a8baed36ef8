"""
Ledger Query Engine

DESIGN DECISION: Queries are read-only and DETERMINISTIC.
They only aggregate what is stored; nothing is estimated.

Besides filtered history, this engine checks the core invariant:

    child.balance == sum(deposits) + sum(allowances) - sum(expenses)

reconcile() raises when the stored balance and the ledger disagree,
which points at a storage problem outside the mutator's control.
"""

from decimal import Decimal
from typing import Optional, Union

from weekly_allowance.audit import AuditLogger
from weekly_allowance.exceptions import BalanceMismatchError
from weekly_allowance.ledger import TransactionLedger
from weekly_allowance.models.ledger import BalanceSummary, Child, Transaction, TransactionType
from weekly_allowance.registry import ChildRegistry


class LedgerQueryExecutor:
    """
    Read-side views over the registry and the ledger.
    """

    def __init__(
        self,
        registry: ChildRegistry,
        ledger: TransactionLedger,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._registry = registry
        self._ledger = ledger
        self._audit_logger = audit_logger

    async def transaction_history(
        self,
        child_id: int,
        transaction_type: Optional[Union[TransactionType, str]] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """
        Newest-first history, optionally filtered by type and capped.

        Raises:
            ValueError: If limit is smaller than 1
        """
        if limit is not None and limit < 1:
            raise ValueError("limit must be at least 1")

        transactions = await self._ledger.get_transactions_for_child(child_id)
        if transaction_type is not None:
            wanted = TransactionType(transaction_type)
            transactions = [t for t in transactions if t.type is wanted]
        if limit is not None:
            transactions = transactions[:limit]
        return transactions

    async def balance_summary(self, child_id: int) -> BalanceSummary:
        """
        Totals per transaction type next to the stored balance.

        Raises:
            ChildNotFoundError: If the child doesn't exist
        """
        child = await self._registry.require_child(child_id)
        return await self._summarize(child)

    async def _summarize(self, child: Child) -> BalanceSummary:
        totals = {t: Decimal(0) for t in TransactionType}
        transactions = await self._ledger.get_transactions_for_child(child.id)
        for transaction in transactions:
            totals[transaction.type] += transaction.amount

        return BalanceSummary(
            child_id=child.id,
            balance=child.balance,
            total_deposits=totals[TransactionType.DEPOSIT],
            total_expenses=totals[TransactionType.EXPENSE],
            total_allowances=totals[TransactionType.ALLOWANCE],
            transaction_count=len(transactions),
        )

    async def reconcile(self, child_id: int) -> BalanceSummary:
        """
        Verify the stored balance against the ledger.

        Raises:
            ChildNotFoundError: If the child doesn't exist
            BalanceMismatchError: If they disagree
        """
        summary = await self.balance_summary(child_id)
        if not summary.is_consistent:
            if self._audit_logger:
                await self._audit_logger.log_balance_mismatch(
                    child_id=child_id,
                    stored=summary.balance,
                    ledger_total=summary.ledger_total,
                )
            raise BalanceMismatchError(child_id, summary.balance, summary.ledger_total)
        return summary

    async def family_overview(self, user_id: int) -> list[BalanceSummary]:
        """One summary per child of a parent, in creation order."""
        children = await self._registry.get_children_for_user(user_id)
        return [await self._summarize(child) for child in children]
