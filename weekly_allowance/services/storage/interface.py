"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger rules independent of any database
2. Use in-memory storage for testing and embedding
3. Swap in SQL or document stores later without touching services

The interface is intentionally simple - load and save by id, plus
the few listings the services need. Storage never applies business
rules; it only keeps what it is given.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from weekly_allowance.models.audit import AuditEvent
from weekly_allowance.models.ledger import Child, Transaction, WeeklyAllowance


class ChildStorageInterface(ABC):
    """
    Abstract interface for child account storage.
    """

    @abstractmethod
    async def next_child_id(self) -> int:
        """
        Reserve a fresh child id.

        Ids are never handed out twice, even if the caller
        ends up not saving a child with it.
        """
        pass

    @abstractmethod
    async def save_child(self, child: Child) -> bool:
        """
        Save a new child.

        Raises:
            DuplicateError: If a child with the same id exists
        """
        pass

    @abstractmethod
    async def get_child_by_id(self, child_id: int) -> Optional[Child]:
        """
        Retrieve a child by id.

        Returns:
            A copy of the stored child if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_child(self, child: Child) -> bool:
        """
        Replace a stored child.

        Raises:
            NotFoundError: If the child doesn't exist
        """
        pass

    @abstractmethod
    async def list_children(self, user_id: Optional[int] = None) -> list[Child]:
        """
        List children in creation order, optionally for one parent.
        """
        pass


class TransactionStorageInterface(ABC):
    """
    Abstract interface for the transaction log.

    The log is append-only - there is no update or delete.
    """

    @abstractmethod
    async def next_transaction_id(self) -> int:
        """Reserve a fresh, monotonically increasing transaction id."""
        pass

    @abstractmethod
    async def append_transaction(self, transaction: Transaction) -> bool:
        """
        Append a transaction.

        Raises:
            DuplicateError: If the id was already used
        """
        pass

    @abstractmethod
    async def list_transactions(self, child_id: int) -> list[Transaction]:
        """
        All transactions of a child, in append order (oldest first).
        """
        pass


class AllowanceStorageInterface(ABC):
    """
    Abstract interface for weekly allowance rules.

    Keyed by child id: saving replaces any previous rule.
    """

    @abstractmethod
    async def save_allowance(self, allowance: WeeklyAllowance) -> bool:
        """Insert or replace the allowance of allowance.child_id."""
        pass

    @abstractmethod
    async def get_allowance(self, child_id: int) -> Optional[WeeklyAllowance]:
        pass

    @abstractmethod
    async def list_allowances(self, active_only: bool = True) -> list[WeeklyAllowance]:
        """
        List allowances in the order they were first configured.
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one allowance run).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: int,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
