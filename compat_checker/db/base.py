"""
Compatibility Store - Persisted key-value cache.

The store holds three keys:
    - lastCheckTimestamp: epoch milliseconds of the last successful report fetch
    - reportData: the remote report, verbatim
    - addonData: the derived per-add-on compatibility table

It owns no behavior beyond get/set. All reads take a default for absent keys
and a multi-key set is applied together.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict

LAST_CHECK_KEY = "lastCheckTimestamp"
REPORT_KEY = "reportData"
ADDON_DATA_KEY = "addonData"


class CompatibilityStore(ABC):
    """Abstract async key-value persistence."""

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default when absent."""
        pass

    @abstractmethod
    async def set(self, **values: Any) -> None:
        """Store one or more keys."""
        pass

    async def get_many(self, defaults: Dict[str, Any]) -> Dict[str, Any]:
        """Read several keys at once, each with its own default."""
        return {key: await self.get(key, default) for key, default in defaults.items()}


class MemoryStore(CompatibilityStore):
    """
    In-process store.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the cache.
    """

    def __init__(self, initial: Dict[str, Any] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    async def set(self, **values: Any) -> None:
        for key, value in values.items():
            self._data[key] = copy.deepcopy(value)

    def snapshot(self) -> Dict[str, Any]:
        """Return a copy of everything stored (for tests and debugging)."""
        return copy.deepcopy(self._data)
