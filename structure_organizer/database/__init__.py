from .database import DatabaseManager
from .session import transaction, is_busy_error

__all__ = ["DatabaseManager", "transaction", "is_busy_error"]
