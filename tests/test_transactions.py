"""
Tests for the transaction ledger and history queries.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from weekly_allowance.ledger import TransactionLedger
from weekly_allowance.models.ledger import TransactionType
from weekly_allowance.services.storage import InMemoryTransactionStorage


class _FrozenClock:
    """Returns the same instant on every call."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def today(self):
        return self._instant.date()


class TestTransactionHistory:
    """Tests for get_transactions_for_child."""

    def test_history_is_newest_first(self, wallet, child):
        """Test A, B, C come back as C, B, A."""
        async def scenario():
            await wallet.deposit(child.id, 10.0, "A")
            await wallet.deposit(child.id, 20.0, "B")
            await wallet.deposit(child.id, 30.0, "C")
            return await wallet.get_transactions_for_child(child.id)

        history = asyncio.run(scenario())
        assert [t.description for t in history] == ["C", "B", "A"]

    def test_history_mixes_types(self, wallet, funded_child):
        """Test deposits and expenses share one history."""
        asyncio.run(wallet.record_expense(funded_child.id, 40.0, "Game"))

        history = asyncio.run(wallet.get_transactions_for_child(funded_child.id))
        assert [t.type for t in history] == [TransactionType.EXPENSE, TransactionType.DEPOSIT]

    def test_history_is_isolated_per_child(self, wallet):
        """Test one child never sees another child's entries."""
        async def scenario():
            tom = await wallet.create_child(1, "Tom")
            sarah = await wallet.create_child(1, "Sarah")
            await wallet.deposit(tom.id, 5.0, "Tom's")
            await wallet.deposit(sarah.id, 7.0, "Sarah's")
            return (
                await wallet.get_transactions_for_child(tom.id),
                await wallet.get_transactions_for_child(sarah.id),
            )

        tom_history, sarah_history = asyncio.run(scenario())

        assert [t.description for t in tom_history] == ["Tom's"]
        assert [t.description for t in sarah_history] == ["Sarah's"]

    def test_history_of_child_without_transactions(self, wallet, child):
        """Test an empty history is an empty list."""
        assert asyncio.run(wallet.get_transactions_for_child(child.id)) == []

    def test_history_of_unknown_child(self, wallet):
        """Test an unknown id is not an error for reads."""
        assert asyncio.run(wallet.get_transactions_for_child(999)) == []

    def test_amounts_are_exact(self, wallet, child):
        """Test 123.45 and 67.89 are stored without float drift."""
        async def scenario():
            await wallet.deposit(child.id, 123.45, "Odd amount")
            await wallet.record_expense(child.id, 67.89, "Another odd amount")
            return (
                await wallet.get_transactions_for_child(child.id),
                await wallet.get_child_by_id(child.id),
            )

        history, updated = asyncio.run(scenario())

        assert history[0].amount == Decimal("67.89")
        assert history[1].amount == Decimal("123.45")
        assert updated.balance == Decimal("55.56")

    def test_transaction_ids_are_unique(self, wallet, funded_child):
        """Test every entry gets its own id."""
        async def scenario():
            for i in range(5):
                await wallet.deposit(funded_child.id, 1.0, f"#{i}")
            return await wallet.get_transactions_for_child(funded_child.id)

        history = asyncio.run(scenario())
        assert len({t.id for t in history}) == len(history) == 6


class TestLedgerOrdering:
    """Tests for TransactionLedger tie-breaking."""

    def test_same_timestamp_breaks_ties_by_append_order(self):
        """Test later appends come first when created_at is identical."""
        ledger = TransactionLedger(
            InMemoryTransactionStorage(),
            clock=_FrozenClock(datetime(2024, 6, 5, 12, 0, tzinfo=timezone.utc)),
        )

        async def scenario():
            for label in ("first", "second", "third"):
                await ledger.append(1, Decimal("1.00"), TransactionType.DEPOSIT, label)
            return await ledger.get_transactions_for_child(1)

        history = asyncio.run(scenario())
        assert [t.description for t in history] == ["third", "second", "first"]

    def test_created_at_wins_over_append_order(self):
        """Test a later timestamp is listed first even if appended earlier."""
        clock = _FrozenClock(datetime(2024, 6, 5, 12, 0, tzinfo=timezone.utc))
        ledger = TransactionLedger(InMemoryTransactionStorage(), clock=clock)

        async def scenario():
            clock._instant += timedelta(hours=1)
            await ledger.append(1, Decimal("1.00"), "deposit", "later")
            clock._instant -= timedelta(hours=2)
            await ledger.append(1, Decimal("1.00"), "deposit", "earlier")
            return await ledger.get_transactions_for_child(1)

        history = asyncio.run(scenario())
        assert [t.description for t in history] == ["later", "earlier"]

    def test_signed_total(self):
        """Test expenses count negative in the ledger total."""
        ledger = TransactionLedger(
            InMemoryTransactionStorage(),
            clock=_FrozenClock(datetime(2024, 6, 5, tzinfo=timezone.utc)),
        )

        async def scenario():
            await ledger.append(1, Decimal("50.00"), TransactionType.DEPOSIT)
            await ledger.append(1, Decimal("10.00"), TransactionType.ALLOWANCE)
            await ledger.append(1, Decimal("15.50"), TransactionType.EXPENSE)
            return await ledger.signed_total(1)

        assert asyncio.run(scenario()) == Decimal("44.50")


class TestFilteredHistory:
    """Tests for LedgerQueryExecutor.transaction_history."""

    def test_filter_by_type(self, wallet, funded_child):
        """Test only the requested type is returned."""
        async def scenario():
            await wallet.record_expense(funded_child.id, 10.0, "Sweets")
            await wallet.deposit(funded_child.id, 5.0, "Gift")
            return await wallet.queries.transaction_history(
                funded_child.id, transaction_type="deposit"
            )

        history = asyncio.run(scenario())
        assert [t.description for t in history] == ["Gift", "Initial deposit"]

    def test_limit(self, wallet, funded_child):
        """Test limit keeps the newest entries."""
        async def scenario():
            await wallet.deposit(funded_child.id, 1.0, "Newer")
            return await wallet.queries.transaction_history(funded_child.id, limit=1)

        history = asyncio.run(scenario())
        assert [t.description for t in history] == ["Newer"]

    def test_invalid_limit(self, wallet, funded_child):
        """Test limit must be positive."""
        with pytest.raises(ValueError):
            asyncio.run(wallet.queries.transaction_history(funded_child.id, limit=0))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
