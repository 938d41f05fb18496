# src/parkchain/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions that represent
precondition violations and simulated delivery failures. Every error
carries a human-readable message suitable for showing to the user.
"""


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class UnknownTierError(DomainError):
    """Raised when a tier id does not match any known tier."""
    pass


class BatchError(DomainError):
    """Base exception for batch precondition violations."""
    pass


class BatchingNotSupportedError(BatchError):
    """Raised when the current tier's max batch size does not allow batching."""
    pass


class BatchNotFoundError(BatchError):
    """Raised when no active batch has the requested id."""
    pass


class BatchStateError(BatchError):
    """Raised when a batch operation is not allowed in the batch's current status."""
    pass


class BatchFullError(BatchError):
    """Raised when a batch already holds its maximum number of items."""
    pass


class BatchItemNotFoundError(BatchError):
    """Raised when an item id is not part of the batch."""
    pass


class EmptyBatchError(BatchError):
    """Raised when executing a batch with no items."""
    pass


class DeliveryError(DomainError):
    """Raised when a simulated channel fails to deliver a transaction."""

    def __init__(self, message: str, channel: str = ""):
        super().__init__(message)
        self.channel = channel


class BatchExecutionError(BatchError):
    """Raised when an atomic batch aborts on its first failed item."""

    def __init__(self, message: str, batch_id: str = ""):
        super().__init__(message)
        self.batch_id = batch_id


class StorageError(RuntimeError):
    """Raised by persistence adapters when a document cannot be written."""
    pass
