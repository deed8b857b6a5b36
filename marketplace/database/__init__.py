from marketplace.database.base import Base, IntegerPrimaryKeyMixin, TimestampMixin
from marketplace.database.engine import async_session, engine
from marketplace.database.session import get_db

__all__ = [
    "Base",
    "IntegerPrimaryKeyMixin",
    "TimestampMixin",
    "async_session",
    "engine",
    "get_db",
]
