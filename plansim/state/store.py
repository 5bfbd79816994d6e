"""Mutable key/value state shared by every step of a plan run.

The engine only borrows a store; it never owns or persists one. Any object
with the StateStore methods can be passed to the runner.
"""

from typing import Optional, Protocol, runtime_checkable

# Key namespaces inside the store.
KEY_PREFIX = b"\x00"
PROGRAM_PREFIX = b"\x01"


@runtime_checkable
class StateStore(Protocol):
    """Byte-keyed mutable state. Not safe for concurrent plan runs."""

    def get(self, key: bytes) -> Optional[bytes]:
        ...

    def set(self, key: bytes, value: bytes) -> None:
        ...

    def has(self, key: bytes) -> bool:
        ...

    def delete(self, key: bytes) -> None:
        ...


class MemoryStore:
    """Dict-backed StateStore. Lives as long as the process (or the runner using it)."""

    def __init__(self, initial: Optional[dict[bytes, bytes]] = None):
        self._data: dict[bytes, bytes] = dict(initial or {})

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(bytes(key))

    def set(self, key: bytes, value: bytes) -> None:
        self._data[bytes(key)] = bytes(value)

    def has(self, key: bytes) -> bool:
        return bytes(key) in self._data

    def delete(self, key: bytes) -> None:
        self._data.pop(bytes(key), None)

    def keys(self, prefix: bytes = b"") -> list[bytes]:
        """All keys under ``prefix``, sorted."""
        return sorted(k for k in self._data if k.startswith(prefix))

    def __len__(self) -> int:
        return len(self._data)
