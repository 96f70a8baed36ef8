"""Child registry package."""

from weekly_allowance.registry.children import ChildRegistry

__all__ = ["ChildRegistry"]
