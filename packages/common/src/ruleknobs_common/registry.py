"""Named lookup tables shared across validation managers.

The engine keeps condition classes keyed by condition type, converters and
comparers keyed by lookup key, and value host classes keyed by value host
type. Each of those tables is a ``Registry``. Registries are usually filled
once and then read by every manager in the process, so access is guarded by
a re-entrant lock.

Lookup keys such as ``Integer`` or ``CaseInsensitive`` come from
configuration written by hand, which is why a registry can be told to ignore
case. The spelling used at registration is kept for ``list_keys``.
"""

import threading
from typing import Dict, Generic, List, TypeVar

from ruleknobs_common.exceptions import NotFoundError, OperationError

T = TypeVar("T")


class Registry(Generic[T]):
    """Thread-safe mapping from a string key to an item.

    Args:
        name: Registry name, reported in error context
        case_sensitive: When False, ``"integer"`` finds ``"Integer"``
    """

    def __init__(self, name: str, case_sensitive: bool = True):
        self._name = name
        self._case_sensitive = case_sensitive
        self._items: Dict[str, T] = {}
        self._spellings: Dict[str, str] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    def _key(self, key: str) -> str:
        return key if self._case_sensitive else key.lower()

    def register(self, key: str, item: T, allow_overwrite: bool = False) -> None:
        """Add ``item`` under ``key``.

        Raises:
            OperationError: If the key is taken and ``allow_overwrite`` is False
        """
        normalized = self._key(key)
        with self._lock:
            if normalized in self._items and not allow_overwrite:
                raise OperationError(
                    f"'{key}' is already registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            self._items[normalized] = item
            self._spellings[normalized] = key

    def get(self, key: str) -> T:
        """Return the item for ``key``.

        Raises:
            NotFoundError: If nothing is registered under the key
        """
        with self._lock:
            try:
                return self._items[self._key(key)]
            except KeyError:
                raise NotFoundError(
                    f"'{key}' is not registered in {self._name}",
                    context={"key": key, "registry": self._name, "available_keys": self.list_keys()},
                ) from None

    def get_optional(self, key: str) -> T | None:
        with self._lock:
            return self._items.get(self._key(key))

    def has(self, key: str) -> bool:
        with self._lock:
            return self._key(key) in self._items

    def list_keys(self) -> List[str]:
        """Registered keys, spelled as they were registered."""
        with self._lock:
            return list(self._spellings.values())

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, count={self.count()})"


__all__ = ["Registry"]
