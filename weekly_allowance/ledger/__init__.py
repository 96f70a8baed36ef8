"""Ledger package: the transaction log and the balance mutator."""

from weekly_allowance.ledger.mutator import BalanceMutator
from weekly_allowance.ledger.transactions import TransactionLedger

__all__ = ["BalanceMutator", "TransactionLedger"]
