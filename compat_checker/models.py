"""
Data Models

Pydantic models for the remote compatibility report, the derived per-add-on
compatibility table and lifecycle event payloads.

Field names follow the report's camelCase wire format via aliases so records
can be copied from the report verbatim and persisted unchanged. Unknown report
fields (icons, homepage, ...) are preserved through extra="allow".
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer


class Channel(str, Enum):
    """Host release channels tracked for compatibility."""
    RELEASE = "release"
    NEXT_ESR = "next-esr"
    CURRENT_ESR = "current-esr"


# Column order used by the detail view
CHANNEL_ORDER = [Channel.CURRENT_ESR, Channel.NEXT_ESR, Channel.RELEASE]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @model_serializer(mode="wrap")
    def _drop_unset_nones(self, handler):
        # Declared optional fields left at None are omitted; explicit nulls
        # from the report (declared or extra) are kept as they came.
        data = handler(self)
        for name, field in type(self).model_fields.items():
            key = field.alias if field.alias and field.alias in data else name
            if key in data and data[key] is None and name not in self.model_fields_set:
                del data[key]
        return data

    def to_wire(self) -> Dict[str, Any]:
        """Dump to the camelCase representation used by the report and store."""
        return self.model_dump(by_alias=True)


class CompatEntry(_WireModel):
    """Compatibility of one add-on on one channel."""
    type: str
    ext_version: Optional[str] = Field(default=None, alias="extVersion")
    is_experiment: bool = Field(default=False, alias="isExperiment")
    app_version: Optional[str] = Field(default=None, alias="appVersion")

    @field_validator("is_experiment", mode="before")
    @classmethod
    def _null_flag(cls, value):
        return False if value is None else value

    @property
    def is_compatible(self) -> bool:
        return bool(self.ext_version)


class Alternative(_WireModel):
    """Suggested replacement for a release-incompatible add-on."""
    id: Optional[str] = None
    name: Optional[str] = None
    link: Optional[str] = None

    @property
    def is_builtin_feature(self) -> bool:
        # Name and link but no id: the feature now ships with the host
        return bool(self.name and self.link and not self.id)


class AddonRecord(_WireModel):
    """One entry of the compatibility table, keyed by add-on id."""
    id: str
    name: Optional[str] = None
    enabled: bool = True
    compat: List[CompatEntry] = Field(default_factory=list)
    is_unknown: bool = Field(default=False, alias="isUnknown")
    alternatives: List[Alternative] = Field(default_factory=list)
    dedicated_support_on_release: bool = Field(default=False, alias="dedicatedSupportOnRelease")

    # A single report entry with nulls must not invalidate the whole report
    @field_validator("is_unknown", "dedicated_support_on_release", mode="before")
    @classmethod
    def _null_flag(cls, value):
        return False if value is None else value

    @field_validator("enabled", mode="before")
    @classmethod
    def _null_enabled(cls, value):
        return True if value is None else value

    @field_validator("compat", "alternatives", mode="before")
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value

    def compat_for(self, channel: str) -> Optional[CompatEntry]:
        channel = getattr(channel, "value", channel)
        for entry in self.compat:
            if entry.type == channel:
                return entry
        return None


class RemoteReport(_WireModel):
    """The remote compatibility report, cached verbatim."""
    generated: Optional[Any] = None
    addons: List[AddonRecord] = Field(default_factory=list)

    def find(self, addon_id: str) -> Optional[AddonRecord]:
        for entry in self.addons:
            if entry.id == addon_id:
                return entry
        return None


class LocalAddon(BaseModel):
    """An installed add-on as reported by the host's enumeration."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    enabled: bool = True
    type: str = "extension"
    install_type: str = Field(default="normal", alias="installType")


class AddonEvent(BaseModel):
    """Payload of an installed/uninstalled/enabled/disabled lifecycle event."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    enabled: bool = True


CompatibilityTable = Dict[str, AddonRecord]


def table_from_wire(data: Optional[Dict[str, Any]]) -> Optional[CompatibilityTable]:
    """Parse a persisted table; None stays None (no table yet)."""
    if data is None:
        return None
    return {addon_id: AddonRecord.model_validate(record) for addon_id, record in data.items()}


def table_to_wire(table: CompatibilityTable) -> Dict[str, Any]:
    return {addon_id: record.to_wire() for addon_id, record in table.items()}
