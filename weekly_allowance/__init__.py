"""
Weekly Allowance - Source Package

Per-child virtual wallets for a household allowance tool: parents
create child accounts, deposit and withdraw, configure a weekly
allowance and review the transaction history.

DESIGN PRINCIPLES:
1. Balance always equals the signed sum of the ledger
2. Validate first, touch state last
3. No partial state after a failed operation
4. An allowance is paid at most once per due day
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Weekly Allowance Team"
