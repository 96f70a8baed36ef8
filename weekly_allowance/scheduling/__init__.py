"""Allowance scheduling package."""

from weekly_allowance.scheduling.allowances import AllowanceScheduler

__all__ = ["AllowanceScheduler"]
