"""
Storage module for persisting claims and their reference data.

Provides SQLite-based storage for:
- Claims and attached documents
- Policies, employees and the HR roster
- In-app notifications
"""

from .claim_store import ClaimStore, get_claim_store
from .database import Database, get_database
from .directory_store import DirectoryStore
from .notification_store import NotificationStore, get_notification_store

__all__ = [
    "ClaimStore",
    "Database",
    "DirectoryStore",
    "NotificationStore",
    "get_claim_store",
    "get_database",
    "get_notification_store",
]
