"""Query and QueryHandler base classes."""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, dataclass_transform

from pydantic import BaseModel


class Query(BaseModel): ...


class Result(BaseModel): ...


C = TypeVar("C", bound=Query)
R = TypeVar("R", bound=Result)


@dataclass_transform()
class _QueryHandlerMeta(ABCMeta):
    """Metaclass that combines ABC with auto-dataclass for subclasses."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)
        return cls


class QueryHandler(Generic[C, R], metaclass=_QueryHandlerMeta):
    """Base class for query handlers. Subclasses are automatically dataclasses.

    Browsing is read-only and public, so handlers carry no authorization gate:
        class MyHandler(QueryHandler[MyQuery, MyResult]):
            source: CardSource

            async def run(self, cmd: MyQuery) -> MyResult: ...
    """

    @abstractmethod
    async def run(self, cmd: C) -> R: ...
