"""
End-to-end wallet flows.

Each test drives the public AllowanceWallet API the way a parent
would and checks the balance against the ledger at the end.
"""

import asyncio
from decimal import Decimal

import pytest

from weekly_allowance.exceptions import InsufficientBalanceError
from weekly_allowance.models.ledger import TransactionType
from weekly_allowance.orchestrator import create_app_components


class TestWalletFlows:
    """Full scenarios across registry, mutator, scheduler and queries."""

    def test_deposit_spend_and_history(self, wallet):
        """Test create, deposit 50, spend 20, then read the history."""
        async def scenario():
            tom = await wallet.create_child(1, "Tom")
            await wallet.deposit(tom.id, 50.0, "Birthday money")
            await wallet.record_expense(tom.id, 20.0, "Comic")
            return (
                await wallet.get_child_by_id(tom.id),
                await wallet.get_transactions_for_child(tom.id),
            )

        tom, history = asyncio.run(scenario())

        assert tom.balance == Decimal("30.00")
        assert [(t.type, t.amount) for t in history] == [
            (TransactionType.EXPENSE, Decimal("20.00")),
            (TransactionType.DEPOSIT, Decimal("50.00")),
        ]

    def test_allowance_then_spend(self, wallet):
        """Test an allowance credited today can be spent right away."""
        async def scenario():
            sarah = await wallet.create_child(1, "Sarah")
            await wallet.set_allowance(sarah.id, 15.0, 3)
            await wallet.process_allowances()
            await wallet.record_expense(sarah.id, 15.0, "Cinema")
            return await wallet.reconcile(sarah.id)

        summary = asyncio.run(scenario())

        assert summary.balance == Decimal("0")
        assert summary.total_allowances == Decimal("15.00")

    def test_failed_expense_keeps_wallet_intact(self, wallet, funded_child):
        """Test an overdraft attempt between valid operations changes nothing."""
        async def scenario():
            await wallet.record_expense(funded_child.id, 60.0, "Shoes")
            with pytest.raises(InsufficientBalanceError):
                await wallet.record_expense(funded_child.id, 60.0, "More shoes")
            await wallet.deposit(funded_child.id, 5.0, "Found coin")
            return await wallet.reconcile(funded_child.id)

        summary = asyncio.run(scenario())

        assert summary.balance == Decimal("45.00")
        assert summary.transaction_count == 3

    def test_balance_matches_ledger_after_mixed_operations(self, wallet):
        """Test the stored balance equals the signed ledger sum."""
        async def scenario():
            tom = await wallet.create_child(1, "Tom")
            await wallet.set_allowance(tom.id, 7.25, 3)
            operations = [
                wallet.deposit(tom.id, 10.10, "a"),
                wallet.deposit(tom.id, 0.05, "b"),
                wallet.record_expense(tom.id, 3.33, "c"),
                wallet.process_allowances(),
                wallet.record_expense(tom.id, 1.01, "d"),
                wallet.deposit(tom.id, 99.99, "e"),
            ]
            await asyncio.gather(*operations)
            return await wallet.reconcile(tom.id)

        summary = asyncio.run(scenario())

        assert summary.balance == Decimal("113.05")
        assert summary.is_consistent

    def test_children_do_not_share_money(self, wallet):
        """Test siblings' wallets are fully independent."""
        async def scenario():
            tom = await wallet.create_child(1, "Tom")
            sarah = await wallet.create_child(1, "Sarah")
            await asyncio.gather(
                wallet.deposit(tom.id, 10.0, "Tom"),
                wallet.deposit(sarah.id, 20.0, "Sarah"),
            )
            with pytest.raises(InsufficientBalanceError):
                await wallet.record_expense(tom.id, 15.0, "Too much for Tom")
            return await wallet.get_children_for_user(1)

        tom, sarah = asyncio.run(scenario())

        assert tom.balance == Decimal("10.00")
        assert sarah.balance == Decimal("20.00")

    def test_wallets_are_isolated(self, clock):
        """Test two wallet instances share no state."""
        first = create_app_components(clock=clock)
        second = create_app_components(clock=clock)

        asyncio.run(first.create_child(1, "Tom"))

        assert asyncio.run(second.get_children_for_user(1)) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
