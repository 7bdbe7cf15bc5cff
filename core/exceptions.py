"""
Custom exceptions for order tracking with structured error context.

Every exception carries a context dictionary and, where one was caught, the
original exception, so that callers and the HTTP layer can log or render
failures uniformly.

Exception Hierarchy:
    TrackingException (base)
    ├── StoreError
    │   ├── PersistenceError
    │   ├── TrackedOrderNotFoundError
    │   └── CheckpointNotFoundError
    ├── ReversionError
    └── CollaboratorError
        ├── OrderLookupError
        ├── NotificationError
        └── ServiceUnavailableError (retryable)
"""

from typing import Optional, Dict, Any
from datetime import datetime


class TrackingException(Exception):
    """
    Base exception for all order-tracking errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (ids, operation, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Store Errors
# ============================================================================

class StoreError(TrackingException):
    """Base exception for checkpoint store failures."""
    pass


class PersistenceError(StoreError):
    """
    Exception raised when a database operation fails.

    Context should include:
        - operation: Type of database operation (INSERT, UPDATE, DELETE, SELECT)
        - table_name: Name of the table
    """
    pass


class TrackedOrderNotFoundError(StoreError):
    """Raised when no tracked order exists for the requested id."""
    pass


class CheckpointNotFoundError(StoreError):
    """Raised when no order checkpoint exists for the requested id."""
    pass


# ============================================================================
# Reversion Errors
# ============================================================================

class ReversionError(TrackingException):
    """
    Exception raised when a tracked order cannot be reverted to its previous
    checkpoint.

    Context should include:
        - tracked_order_id: The tracked order being reverted
        - checkpoint_id: The checkpoint that could not be removed (if any)
    """
    pass


# ============================================================================
# Collaborator Errors
# ============================================================================

class CollaboratorError(TrackingException):
    """Base exception for failures of the order and notification services."""
    pass


class OrderLookupError(CollaboratorError):
    """
    Exception raised when the buyer of an order cannot be resolved.

    Context should include:
        - order_id: The order that was looked up
        - status_code: HTTP status code (if applicable)
    """
    pass


class NotificationError(CollaboratorError):
    """
    Exception raised when a shipping-progress notification is rejected.

    Context should include:
        - buyer_id: Recipient of the notification
        - tracked_order_id: Tracked order the notification is about
        - status_code: HTTP status code (if applicable)
    """
    pass


class ServiceUnavailableError(CollaboratorError):
    """
    Transient collaborator failure (timeouts, connection errors, HTTP 5xx)
    that is retried before being surfaced.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        retry_count: int = 0
    ):
        super().__init__(message, context, original_exception)
        self.retry_count = retry_count
        self.context["retry_count"] = retry_count
