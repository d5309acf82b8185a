# backend/services/storage.py
import threading
from typing import Dict, Optional, Protocol


class KeyValueStorage(Protocol):
    """Port for client-side style state (carts, wishlists).

    Values are opaque strings; callers own their encoding.
    """

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStorage:
    # Process-local storage; sync handlers run in a threadpool, hence the lock
    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __len__(self):
        with self._lock:
            return len(self._data)
