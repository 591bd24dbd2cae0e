"""ORM models exposed for metadata discovery."""
from profitbot.db.models.kv_entry import KeyValueEntry

__all__ = ["KeyValueEntry"]
