"""
Weekly Allowance Scheduler

Turns calendar state into ledger entries. An external cron calls
process_allowances() once a day; there is no timer in here.

A tick:
1. Lists active allowances whose day_of_week is today's ISO weekday
2. Pays each one through BalanceMutator.credit_allowance
3. Stamps last_payment_date = today

DESIGN DECISIONS:
- Same-day idempotency: an allowance whose last_payment_date is
  today is skipped, so a cron that fires twice does not double-pay
  (AllowanceSettings.skip_if_paid_today).
- Replacing an allowance keeps last_payment_date, so moving this
  week's payday to a later weekday cannot pay twice in one week
  unless AllowanceSettings.reset_last_payment_on_update is set.
- Each child is handled under its own lock and children are paid
  concurrently. Lock order is always scheduler lock -> mutator lock.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import structlog

from weekly_allowance.audit import AuditLogger, create_correlation_id
from weekly_allowance.clock import SystemClock
from weekly_allowance.config import AllowanceSettings, get_settings
from weekly_allowance.exceptions import WalletError
from weekly_allowance.ledger import BalanceMutator
from weekly_allowance.models.ledger import Transaction, WeeklyAllowance
from weekly_allowance.registry import ChildRegistry
from weekly_allowance.services.storage import AllowanceStorageInterface
from weekly_allowance.validation import LedgerValidator

logger = structlog.get_logger(__name__)


class AllowanceScheduler:
    """
    Owns one WeeklyAllowance per child and pays them out.
    """

    def __init__(
        self,
        registry: ChildRegistry,
        mutator: BalanceMutator,
        storage: AllowanceStorageInterface,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[SystemClock] = None,
        settings: Optional[AllowanceSettings] = None,
    ):
        self._registry = registry
        self._mutator = mutator
        self._storage = storage
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().allowance
        self._clock = clock or SystemClock(self._settings.timezone)
        self._locks: dict[int, asyncio.Lock] = {}

    async def set_allowance(
        self,
        child_id: int,
        amount: Any,
        day_of_week: Any,
    ) -> WeeklyAllowance:
        """
        Create or replace the weekly allowance of a child.

        Checks run in order: amount, day of week, child existence.

        Raises:
            InvalidAmountError: If amount is zero, negative or malformed
            InvalidDayOfWeekError: If day_of_week is not an int in 1..7
            ChildNotFoundError: If the child doesn't exist
        """
        try:
            value = self._validator.validate_amount(amount)
            day = self._validator.validate_day_of_week(day_of_week)
            lock = await self._lock_for(child_id)
            async with lock:
                allowance, replaced = await self._upsert(child_id, value, day)
        except WalletError as e:
            if self._audit_logger:
                await self._audit_logger.log_operation_rejected(
                    operation="set_allowance",
                    child_id=child_id,
                    error=e,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_allowance_configured(
                child_id=child_id,
                amount=value,
                day_of_week=day,
                replaced=replaced,
            )
        return allowance

    async def _upsert(
        self,
        child_id: int,
        amount: Decimal,
        day: int,
    ) -> tuple[WeeklyAllowance, bool]:
        now = self._clock.now()
        existing = await self._storage.get_allowance(child_id)

        if existing is None:
            allowance = WeeklyAllowance(
                child_id=child_id,
                amount=amount,
                day_of_week=day,
                created_at=now,
                updated_at=now,
            )
        else:
            last_payment = existing.last_payment_date
            if self._settings.reset_last_payment_on_update:
                last_payment = None
            allowance = existing.model_copy(update={
                "amount": amount,
                "day_of_week": day,
                "is_active": True,
                "last_payment_date": last_payment,
                "updated_at": now,
            })

        await self._storage.save_allowance(allowance)
        return allowance, existing is not None

    async def get_allowance(self, child_id: int) -> Optional[WeeklyAllowance]:
        """The child's current allowance, or None."""
        return await self._storage.get_allowance(child_id)

    async def process_allowances(self, today: Optional[date] = None) -> list[Transaction]:
        """
        Pay every allowance due today.

        Args:
            today: Override the calendar day (defaults to the clock)

        Returns:
            The created transactions, in allowance-registration order.
            Empty if nothing is due. A child whose payment fails is
            logged and audited; the other children are still paid.
        """
        today = today or self._clock.today()
        correlation_id = create_correlation_id()

        allowances = await self._storage.list_allowances(active_only=True)
        due = [a for a in allowances if a.is_due_on(today)]
        logger.info(
            "allowance_run_started",
            run_date=today.isoformat(),
            weekday=today.isoweekday(),
            active=len(allowances),
            due=len(due),
        )

        results = await asyncio.gather(
            *(self._pay(a.child_id, today, correlation_id) for a in due),
            return_exceptions=True,
        )

        transactions = []
        failed = 0
        for allowance, result in zip(due, results):
            if isinstance(result, Exception):
                failed += 1
                await self._report_failure(allowance.child_id, today, result, correlation_id)
            elif isinstance(result, BaseException):
                raise result
            elif result is not None:
                transactions.append(result)

        if self._audit_logger:
            await self._audit_logger.log_allowance_run_completed(
                run_date=today.isoformat(),
                due_count=len(due),
                paid_count=len(transactions),
                failed_count=failed,
                correlation_id=correlation_id,
            )
        return transactions

    async def _lock_for(self, child_id: int) -> asyncio.Lock:
        """
        The scheduler lock of an existing child.

        Raises:
            ChildNotFoundError: If the id is unknown
        """
        lock = self._locks.get(child_id)
        if lock is None:
            await self._registry.require_child(child_id)
            lock = self._locks.setdefault(child_id, asyncio.Lock())
        return lock

    async def _report_failure(
        self,
        child_id: int,
        today: date,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        logger.error(
            "allowance_payment_failed",
            child_id=child_id,
            run_date=today.isoformat(),
            error_type=type(error).__name__,
            error=str(error),
        )
        if self._audit_logger:
            await self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=str(error),
                details={"child_id": child_id, "run_date": today.isoformat()},
                correlation_id=correlation_id,
            )

    async def _pay(
        self,
        child_id: int,
        today: date,
        correlation_id: UUID,
    ) -> Optional[Transaction]:
        """Pay one child's allowance unless it changed or was already paid."""
        lock = await self._lock_for(child_id)
        async with lock:
            # Re-read under the lock: a concurrent tick or set_allowance may have won.
            allowance = await self._storage.get_allowance(child_id)
            if allowance is None or not allowance.is_due_on(today):
                return None

            if self._settings.skip_if_paid_today and allowance.was_paid_on(today):
                if self._audit_logger:
                    await self._audit_logger.log_allowance_already_paid(
                        child_id=child_id,
                        paid_on=today.isoformat(),
                        correlation_id=correlation_id,
                    )
                return None

            transaction = await self._mutator.credit_allowance(
                child_id,
                allowance.amount,
                self._settings.payment_description,
                correlation_id=correlation_id,
            )
            allowance.last_payment_date = today
            await self._storage.save_allowance(allowance)
            return transaction
