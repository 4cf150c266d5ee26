"""Persistent store for confirmed drop candidates."""

from dropwatch_store.models import Base, DomainRow
from dropwatch_store.repository import DomainStore

__all__ = [
    "Base",
    "DomainRow",
    "DomainStore",
]
