"""
Main Orchestrator for the Weekly Allowance wallet

This module ties together all the components and exposes the
operations a presentation layer (HTTP, CLI, UI) needs:

1. Accounts   - create_child, get_child_by_id, get_children_for_user
2. Money      - deposit, record_expense
3. History    - get_transactions_for_child, balance_summary, reconcile
4. Allowances - set_allowance, get_allowance, process_allowances

DESIGN DECISION: No global state. Every store is an explicit object
created here (or injected) and owned by the wallet instance, so two
wallets never see each other's children.
"""

from datetime import date
from typing import Any, Optional

from weekly_allowance.audit import AuditLogger
from weekly_allowance.clock import SystemClock
from weekly_allowance.config import Settings, get_settings
from weekly_allowance.ledger import BalanceMutator, TransactionLedger
from weekly_allowance.models.ledger import (
    BalanceSummary,
    Child,
    Transaction,
    WeeklyAllowance,
)
from weekly_allowance.queries import LedgerQueryExecutor
from weekly_allowance.registry import ChildRegistry
from weekly_allowance.scheduling import AllowanceScheduler
from weekly_allowance.services.storage import (
    AllowanceStorageInterface,
    ChildStorageInterface,
    InMemoryAllowanceStorage,
    InMemoryAuditStorage,
    InMemoryChildStorage,
    InMemoryTransactionStorage,
    TransactionStorageInterface,
)
from weekly_allowance.validation import LedgerValidator


class AllowanceWallet:
    """
    Facade over registry, ledger, mutator, scheduler and queries.

    Components are public attributes so callers can reach the
    lower-level API (e.g. wallet.registry.apply_balance_delta) when
    they need to.
    """

    def __init__(
        self,
        child_storage: ChildStorageInterface,
        transaction_storage: TransactionStorageInterface,
        allowance_storage: AllowanceStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[SystemClock] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        allowance_settings = settings.allowance

        self.clock = clock or SystemClock(allowance_settings.timezone)
        self.audit_logger = audit_logger
        self.validator = LedgerValidator(settings.ledger.amount_decimal_places)

        self.registry = ChildRegistry(
            child_storage,
            validator=self.validator,
            audit_logger=audit_logger,
            clock=self.clock,
        )
        self.ledger = TransactionLedger(transaction_storage, clock=self.clock)
        self.mutator = BalanceMutator(
            self.registry,
            self.ledger,
            validator=self.validator,
            audit_logger=audit_logger,
        )
        self.scheduler = AllowanceScheduler(
            self.registry,
            self.mutator,
            allowance_storage,
            validator=self.validator,
            audit_logger=audit_logger,
            clock=self.clock,
            settings=allowance_settings,
        )
        self.queries = LedgerQueryExecutor(
            self.registry,
            self.ledger,
            audit_logger=audit_logger,
        )

    # Accounts

    async def create_child(self, user_id: int, name: str) -> Child:
        return await self.registry.create_child(user_id, name)

    async def get_child_by_id(self, child_id: int) -> Optional[Child]:
        return await self.registry.get_child_by_id(child_id)

    async def get_children_for_user(self, user_id: int) -> list[Child]:
        return await self.registry.get_children_for_user(user_id)

    # Money

    async def deposit(self, child_id: int, amount: Any, description: str = "") -> Transaction:
        return await self.mutator.deposit(child_id, amount, description)

    async def record_expense(
        self,
        child_id: int,
        amount: Any,
        description: str = "",
    ) -> Transaction:
        return await self.mutator.record_expense(child_id, amount, description)

    # History

    async def get_transactions_for_child(self, child_id: int) -> list[Transaction]:
        return await self.ledger.get_transactions_for_child(child_id)

    async def balance_summary(self, child_id: int) -> BalanceSummary:
        return await self.queries.balance_summary(child_id)

    async def reconcile(self, child_id: int) -> BalanceSummary:
        return await self.queries.reconcile(child_id)

    # Allowances

    async def set_allowance(
        self,
        child_id: int,
        amount: Any,
        day_of_week: Any,
    ) -> WeeklyAllowance:
        return await self.scheduler.set_allowance(child_id, amount, day_of_week)

    async def get_allowance(self, child_id: int) -> Optional[WeeklyAllowance]:
        return await self.scheduler.get_allowance(child_id)

    async def process_allowances(self, today: Optional[date] = None) -> list[Transaction]:
        return await self.scheduler.process_allowances(today)


def create_app_components(
    settings: Optional[Settings] = None,
    clock: Optional[SystemClock] = None,
    persist_audit: bool = True,
) -> AllowanceWallet:
    """
    Factory function to create a wallet on in-memory storage.

    Args:
        settings: Settings to use instead of the cached environment settings
        clock: Clock override (tests pin the date with it)
        persist_audit: Keep audit events in an in-memory audit store.
                       Set to False for local structured logging only.

    Returns:
        A fully wired AllowanceWallet
    """
    audit_storage = InMemoryAuditStorage() if persist_audit else None

    return AllowanceWallet(
        child_storage=InMemoryChildStorage(),
        transaction_storage=InMemoryTransactionStorage(),
        allowance_storage=InMemoryAllowanceStorage(),
        audit_logger=AuditLogger(audit_storage),
        clock=clock,
        settings=settings,
    )
