"""Ledger queries package."""

from weekly_allowance.queries.executor import LedgerQueryExecutor

__all__ = ["LedgerQueryExecutor"]
