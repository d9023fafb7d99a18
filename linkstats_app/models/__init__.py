"""
Database models for the SQL entity store.

Short links and click events are not separate ORM tables: they are rows of
one generic entity table, partitioned the same way as the Redis and
in-memory stores.
"""

from .entity import EntityRecord

__all__ = ["EntityRecord"]
