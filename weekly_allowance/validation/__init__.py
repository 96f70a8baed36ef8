"""Validation package."""

from weekly_allowance.validation.validator import LedgerValidator

__all__ = ["LedgerValidator"]
