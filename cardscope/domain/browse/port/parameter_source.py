from abc import abstractmethod
from collections.abc import Mapping
from typing import Protocol

from cardscope.domain.shared.port import Port


class ParameterSource(Port, Protocol):
    """The navigation state's parameter map."""

    @abstractmethod
    def current(self) -> dict[str, str]: ...

    @abstractmethod
    def push(self, params: Mapping[str, str]) -> None: ...
