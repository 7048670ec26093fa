"""Database connection management."""

from monet.db.database import Database


__all__ = ["Database"]
