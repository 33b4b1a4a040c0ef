from abc import ABC, abstractmethod
from typing import Any


class ResultCache(ABC):
    """Port for the TTL-bounded store of computed search payloads."""

    @abstractmethod
    def get(self, key: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def set(self, key: str, value: dict[str, Any], ttl_seconds: float) -> None:
        ...

    @abstractmethod
    def sweep(self) -> int:
        """Drop expired entries; return how many were removed."""
        ...
