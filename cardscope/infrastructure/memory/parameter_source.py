from collections.abc import Mapping

from cardscope.domain.browse.port.parameter_source import ParameterSource


class InMemoryParameterSource(ParameterSource):
    """Parameter map with a navigation history, newest last."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self.history: list[dict[str, str]] = [dict(initial or {})]

    def current(self) -> dict[str, str]:
        return dict(self.history[-1])

    def push(self, params: Mapping[str, str]) -> None:
        self.history.append(dict(params))
