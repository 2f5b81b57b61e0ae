"""
Base repository interface.

Records are create/read only: there is no update or delete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Base repository interface."""

    @abstractmethod
    def get(self, id: str) -> T | None:
        """Get an entity by ID, or None when absent."""

    @abstractmethod
    def create(self, payload: Any) -> T:
        """Create a new entity with server-assigned identity."""
