"""Ports onto the rendered result list."""

from abc import abstractmethod
from collections.abc import Sequence
from typing import Protocol

from cardscope.domain.browse.model.restore import RenderedNode, Viewport
from cardscope.domain.shared.port import Port


class ScrollContainer(Port, Protocol):
    @property
    @abstractmethod
    def scroll_top(self) -> float: ...

    @scroll_top.setter
    @abstractmethod
    def scroll_top(self, value: float) -> None: ...

    @abstractmethod
    def viewport(self) -> Viewport: ...


class RenderedNodeQuery(Port, Protocol):
    """Currently rendered item nodes; a pure read."""

    @abstractmethod
    def nodes(self, container: ScrollContainer) -> Sequence[RenderedNode]: ...
