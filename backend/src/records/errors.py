"""Record store exceptions."""

from __future__ import annotations


class RecordStoreError(RuntimeError):
    """Raised when a read or write against the record store fails."""

    def __init__(self, action: str, message: str | None = None) -> None:
        self.action = action
        super().__init__(message or f"Record store failed to {action}")


class SubscriptionError(RuntimeError):
    """Delivered to subscribers when a collection snapshot cannot be produced."""

    def __init__(self, collection: str, message: str | None = None) -> None:
        self.collection = collection
        super().__init__(message or f"Change feed for '{collection}' failed")
