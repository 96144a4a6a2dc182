from abc import abstractmethod
from typing import Protocol

from cardscope.domain.shared.port import Port


class SessionStore(Port, Protocol):
    """Session-scoped key -> JSON string store. Last writer wins per key."""

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def pop(self, key: str) -> str | None: ...
