"""
Database Module

Declarative base, ORM models and engine/session management for the
durable store.
"""

from brainbolt.database.base import Base, ModelBase, metadata
from brainbolt.database.init_db import Database

__all__ = ['Base', 'ModelBase', 'metadata', 'Database']
