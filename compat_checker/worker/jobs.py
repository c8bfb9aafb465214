"""
Refresh jobs.

Jobs only live in the in-memory queue; they are never persisted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import AddonEvent


class JobKind(str, Enum):
    REBUILD = "rebuild"
    REFRESH_TABLE = "refreshTable"
    INSTALLED = "installed"
    UNINSTALLED = "uninstalled"
    ENABLED = "enabled"
    DISABLED = "disabled"


LIFECYCLE_KINDS = (JobKind.INSTALLED, JobKind.UNINSTALLED, JobKind.ENABLED, JobKind.DISABLED)
PATCH_KINDS = frozenset(LIFECYCLE_KINDS)


@dataclass
class Job:
    """A unit of work for the refresh scheduler."""
    kind: JobKind
    addon: Optional[AddonEvent] = None
    throttle: bool = True

    @property
    def addon_id(self) -> Optional[str]:
        return self.addon.id if self.addon else None

    @classmethod
    def from_event(cls, kind: str, event: AddonEvent, throttle: bool = True) -> "Job":
        """Build a patch job from a lifecycle event."""
        job_kind = JobKind(kind)
        if job_kind not in PATCH_KINDS:
            raise ValueError(f"Not a lifecycle event kind: '{kind}'")
        return cls(kind=job_kind, addon=event, throttle=throttle)

    def describe(self) -> str:
        if self.addon_id:
            return f"{self.kind.value}({self.addon_id})"
        return self.kind.value
