"""
In-Memory Storage Implementation

Process-local storage backing the abstract interfaces. Used by the
test suite and by embedders that persist elsewhere (or not at all).

Every read and write goes through model_copy(deep=True): callers
never hold a reference to the stored object, the same way a real
database hands out fresh rows. Mutating a returned Child therefore
cannot bypass the registry.
"""

import itertools
from typing import Optional
from uuid import UUID

from weekly_allowance.models.audit import AuditEvent
from weekly_allowance.models.ledger import Child, Transaction, WeeklyAllowance
from weekly_allowance.services.storage.interface import (
    AllowanceStorageInterface,
    AuditStorageInterface,
    ChildStorageInterface,
    DuplicateError,
    NotFoundError,
    TransactionStorageInterface,
)


class InMemoryChildStorage(ChildStorageInterface):
    """Children keyed by id; dict order is creation order."""

    def __init__(self):
        self._children: dict[int, Child] = {}
        self._ids = itertools.count(1)

    async def next_child_id(self) -> int:
        return next(self._ids)

    async def save_child(self, child: Child) -> bool:
        if child.id in self._children:
            raise DuplicateError(f"Child {child.id} already exists")
        self._children[child.id] = child.model_copy(deep=True)
        return True

    async def get_child_by_id(self, child_id: int) -> Optional[Child]:
        child = self._children.get(child_id)
        return child.model_copy(deep=True) if child else None

    async def update_child(self, child: Child) -> bool:
        if child.id not in self._children:
            raise NotFoundError(f"Child {child.id} not found")
        self._children[child.id] = child.model_copy(deep=True)
        return True

    async def list_children(self, user_id: Optional[int] = None) -> list[Child]:
        return [
            child.model_copy(deep=True)
            for child in self._children.values()
            if user_id is None or child.user_id == user_id
        ]


class InMemoryTransactionStorage(TransactionStorageInterface):
    """
    Append-only transaction log.

    Transactions are frozen models, so they are shared as-is.
    """

    def __init__(self):
        self._by_child: dict[int, list[Transaction]] = {}
        self._ids_seen: set[int] = set()
        self._ids = itertools.count(1)

    async def next_transaction_id(self) -> int:
        return next(self._ids)

    async def append_transaction(self, transaction: Transaction) -> bool:
        if transaction.id in self._ids_seen:
            raise DuplicateError(f"Transaction {transaction.id} already exists")
        self._ids_seen.add(transaction.id)
        self._by_child.setdefault(transaction.child_id, []).append(transaction)
        return True

    async def list_transactions(self, child_id: int) -> list[Transaction]:
        return list(self._by_child.get(child_id, []))


class InMemoryAllowanceStorage(AllowanceStorageInterface):
    """Single allowance slot per child."""

    def __init__(self):
        self._allowances: dict[int, WeeklyAllowance] = {}

    async def save_allowance(self, allowance: WeeklyAllowance) -> bool:
        # Replacing keeps the original dict position.
        self._allowances[allowance.child_id] = allowance.model_copy(deep=True)
        return True

    async def get_allowance(self, child_id: int) -> Optional[WeeklyAllowance]:
        allowance = self._allowances.get(child_id)
        return allowance.model_copy(deep=True) if allowance else None

    async def list_allowances(self, active_only: bool = True) -> list[WeeklyAllowance]:
        return [
            allowance.model_copy(deep=True)
            for allowance in self._allowances.values()
            if allowance.is_active or not active_only
        ]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: int,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
