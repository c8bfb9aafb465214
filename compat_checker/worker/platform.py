"""
Platform Capabilities - Interfaces to the host application.

The engine never reaches for host globals. Everything it needs from the host
is injected through these interfaces:

    - AddonSource: enumerate installed add-ons
    - BadgeSink: badge text/color and interaction enable/disable
    - HostInfo: build information of the running host

In-process implementations are provided for the API server and CLI, where
the host pushes its state in rather than being queried.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ..models import AddonEvent, LocalAddon

logger = logging.getLogger("compat.worker.platform")


def is_bundled(addon_id: str, bundled_id_suffixes: Sequence[str]) -> bool:
    """True for host-signed/built-in add-on ids."""
    return any(addon_id.endswith(suffix) for suffix in bundled_id_suffixes)


def filter_user_extensions(
    addons: Iterable[LocalAddon],
    bundled_id_suffixes: Sequence[str],
) -> List[LocalAddon]:
    """Keep user-installed extensions, dropping themes, dictionaries and built-ins."""
    return [
        addon for addon in addons
        if addon.install_type == "normal"
        and addon.type == "extension"
        and not is_bundled(addon.id, bundled_id_suffixes)
    ]


class AddonSource(ABC):
    """Enumerates add-ons installed in the host."""

    @abstractmethod
    async def get_all(self) -> List[LocalAddon]:
        pass


class BadgeSink(ABC):
    """Receives badge updates from the engine."""

    @abstractmethod
    async def set_text(self, text: str) -> None:
        pass

    @abstractmethod
    async def set_color(self, color: str) -> None:
        pass

    @abstractmethod
    async def enable(self) -> None:
        pass

    @abstractmethod
    async def disable(self) -> None:
        pass


@dataclass(frozen=True)
class HostBuildInfo:
    name: str
    version: Optional[str]


class HostInfo(ABC):
    """Environment query for the running host build."""

    @abstractmethod
    async def get_host_build_info(self) -> HostBuildInfo:
        pass


class InventoryAddonSource(AddonSource):
    """
    In-memory add-on inventory.

    The host replaces it wholesale (replace) and keeps it current through
    lifecycle events (apply_event).
    """

    def __init__(self, addons: Iterable[LocalAddon] = ()):
        self._addons: Dict[str, LocalAddon] = {addon.id: addon for addon in addons}

    async def get_all(self) -> List[LocalAddon]:
        return [addon.model_copy() for addon in self._addons.values()]

    def replace(self, addons: Iterable[LocalAddon]) -> None:
        self._addons = {addon.id: addon for addon in addons}
        logger.debug(f"Inventory replaced: {len(self._addons)} add-on(s)")

    def apply_event(self, kind: str, event: AddonEvent) -> None:
        if kind == "uninstalled":
            self._addons.pop(event.id, None)
        elif kind == "installed":
            self._addons[event.id] = LocalAddon(id=event.id, name=event.name, enabled=event.enabled)
        elif kind in ("enabled", "disabled"):
            addon = self._addons.get(event.id)
            if addon is not None:
                self._addons[event.id] = addon.model_copy(update={"enabled": kind == "enabled"})


class StateBadgeSink(BadgeSink):
    """Badge sink that retains the current badge for readers."""

    def __init__(self):
        self.text = ""
        self.color: Optional[str] = None
        self.enabled = True

    async def set_text(self, text: str) -> None:
        self.text = text

    async def set_color(self, color: str) -> None:
        self.color = color

    async def enable(self) -> None:
        self.enabled = True

    async def disable(self) -> None:
        self.enabled = False

    def snapshot(self) -> dict:
        return {"text": self.text, "color": self.color, "enabled": self.enabled}


class StaticHostInfo(HostInfo):
    """Host build info fixed at construction (from config or the CLI)."""

    def __init__(self, version: Optional[str] = None, name: str = "host"):
        self._info = HostBuildInfo(name=name, version=version)

    async def get_host_build_info(self) -> HostBuildInfo:
        return self._info
