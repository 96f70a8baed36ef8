"""Services package."""

from weekly_allowance.services.storage import (
    AllowanceStorageInterface,
    AuditStorageInterface,
    ChildStorageInterface,
    DuplicateError,
    InMemoryAllowanceStorage,
    InMemoryAuditStorage,
    InMemoryChildStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    # Storage services
    "AllowanceStorageInterface",
    "AuditStorageInterface",
    "ChildStorageInterface",
    "DuplicateError",
    "InMemoryAllowanceStorage",
    "InMemoryAuditStorage",
    "InMemoryChildStorage",
    "InMemoryTransactionStorage",
    "NotFoundError",
    "StorageError",
    "TransactionStorageInterface",
]
