from cardscope.domain.browse.port.session_store import SessionStore


class InMemorySessionStore(SessionStore):
    """Session store living as long as the browsing session object."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def pop(self, key: str) -> str | None:
        return self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
