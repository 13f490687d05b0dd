"""
Key/Value Ports

Minimal string-keyed storage the session store writes through. Two
backends: a process-local dict and a diskcache directory for hosts that
restart between requests.
"""
from __future__ import annotations

from typing import Dict, Optional, Protocol

from diskcache import Cache

from strokecode import config
from strokecode.utils import get_logger

logger = get_logger(__name__)


class KeyValuePort(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)


class DiskCacheKeyValueStore:
    """
    diskcache-backed port.

    ``expire`` is a coarse backstop; freshness is still decided by the
    session store's own write timestamp.
    """

    def __init__(self, directory: str, expire: Optional[float] = None):
        self.cache = Cache(directory)
        self.expire = expire
        logger.info(f"Session cache at {directory}")

    def get(self, key: str) -> Optional[str]:
        return self.cache.get(key)

    def set(self, key: str, value: str) -> None:
        self.cache.set(key, value, expire=self.expire)

    def remove(self, key: str) -> None:
        self.cache.delete(key)

    def close(self) -> None:
        self.cache.close()


def build_port(backend: str = None) -> KeyValuePort:
    """Port for the configured backend (``memory`` or ``disk``)."""
    backend = (backend or config.SESSION_BACKEND).lower()
    if backend == "disk":
        return DiskCacheKeyValueStore(config.SESSION_CACHE_DIR, expire=config.SESSION_TTL_SECONDS * 2)
    if backend != "memory":
        logger.warning(f"Unknown session backend '{backend}', using memory")
    return InMemoryKeyValueStore()
