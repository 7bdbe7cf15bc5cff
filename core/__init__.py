"""
Core utilities and configuration for the order tracking service.

Modules:
    config: Application configuration and environment variable management
    database: Database engine and async session factory
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import TrackedOrderNotFoundError, ReversionError
    from core.logging import setup_logging

Example:
    setup_logging()
    
    async with async_session_maker() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "async_session_maker",
    "setup_logging",
    # Exceptions
    "TrackingException",
    "StoreError",
    "PersistenceError",
    "TrackedOrderNotFoundError",
    "CheckpointNotFoundError",
    "ReversionError",
    "CollaboratorError",
    "OrderLookupError",
    "NotificationError",
    "ServiceUnavailableError",
]
