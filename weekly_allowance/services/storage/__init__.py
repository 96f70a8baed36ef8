"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements an in-memory backend, but designed to be swappable.
"""

from weekly_allowance.services.storage.interface import (
    AllowanceStorageInterface,
    AuditStorageInterface,
    ChildStorageInterface,
    DuplicateError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)
from weekly_allowance.services.storage.memory import (
    InMemoryAllowanceStorage,
    InMemoryAuditStorage,
    InMemoryChildStorage,
    InMemoryTransactionStorage,
)

__all__ = [
    # Interfaces
    "AllowanceStorageInterface",
    "AuditStorageInterface",
    "ChildStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAllowanceStorage",
    "InMemoryAuditStorage",
    "InMemoryChildStorage",
    "InMemoryTransactionStorage",
]
