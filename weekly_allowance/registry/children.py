"""
Child Registry

Owns child accounts: creation, lookup, and the single code path
that is allowed to change a stored balance.

BOUNDARIES:
- Pure lookups return None for unknown ids, never raise
- Mutations on unknown ids raise ChildNotFoundError
- A balance can never go below zero
"""

from decimal import Decimal
from typing import Optional

import structlog

from weekly_allowance.audit import AuditLogger
from weekly_allowance.clock import SystemClock
from weekly_allowance.exceptions import (
    ChildNotFoundError,
    EmptyNameError,
    InsufficientBalanceError,
)
from weekly_allowance.models.ledger import Child
from weekly_allowance.services.storage import ChildStorageInterface
from weekly_allowance.validation import LedgerValidator

logger = structlog.get_logger(__name__)


class ChildRegistry:
    """
    Child accounts backed by a ChildStorageInterface.
    """

    def __init__(
        self,
        storage: ChildStorageInterface,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[SystemClock] = None,
    ):
        self._storage = storage
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger
        self._clock = clock or SystemClock()

    async def create_child(self, user_id: int, name: str) -> Child:
        """
        Create a child account with a zero balance.

        Raises:
            EmptyNameError: If name is empty
        """
        try:
            name = self._validator.validate_child_name(name)
        except EmptyNameError as e:
            if self._audit_logger:
                await self._audit_logger.log_operation_rejected(
                    operation="create_child",
                    child_id=None,
                    error=e,
                )
            raise

        child = Child(
            id=await self._storage.next_child_id(),
            user_id=user_id,
            name=name,
            balance=self._validator.normalize_balance(Decimal(0)),
            created_at=self._clock.now(),
        )
        await self._storage.save_child(child)

        if self._audit_logger:
            await self._audit_logger.log_child_created(
                child_id=child.id,
                user_id=user_id,
                name=name,
            )
        return child

    async def get_child_by_id(self, child_id: int) -> Optional[Child]:
        """Return the child, or None if no such id exists."""
        return await self._storage.get_child_by_id(child_id)

    async def get_children_for_user(self, user_id: int) -> list[Child]:
        """All children of a parent, in creation order."""
        return await self._storage.list_children(user_id=user_id)

    async def require_child(self, child_id: int) -> Child:
        """
        Return the child or raise.

        Raises:
            ChildNotFoundError: If the id is unknown
        """
        child = await self._storage.get_child_by_id(child_id)
        if child is None:
            raise ChildNotFoundError(child_id)
        return child

    async def apply_balance_delta(self, child_id: int, signed_delta: Decimal) -> Child:
        """
        Add ``signed_delta`` to the stored balance.

        This is the only way a balance changes. Callers are expected
        to serialize calls per child (see BalanceMutator).

        Raises:
            ChildNotFoundError: If the id is unknown
            InsufficientBalanceError: If the result would be negative
            InvalidAmountError: If the result is too large to store
        """
        child = await self.require_child(child_id)
        new_balance = self._validator.normalize_balance(child.balance + signed_delta)
        if new_balance < 0:
            raise InsufficientBalanceError(child_id, child.balance, -signed_delta)

        child.balance = new_balance
        await self._storage.update_child(child)
        logger.debug(
            "balance_updated",
            child_id=child_id,
            delta=str(signed_delta),
            balance=str(new_balance),
        )
        return child
