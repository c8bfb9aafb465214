"""
Status Reducer - Badge summary and compatibility ranking.

reduce_status() folds the compatibility table into three mutually exclusive
counts and a badge. Each add-on is classified once, first match wins:

    1. release-incompatible: no release entry, or it has no extVersion
    2. esr-only-experiment: release entry is an experiment without
       dedicated release support
    3. unknown: not listed in the remote report

Badge:
    - nothing flagged                       -> "✓", ok color
    - only esr-only experiments flagged     -> "✓", esr experiment color
    - otherwise                             -> "-<incompatible + unknown>", alert color

compatibility_rank() is the ordering key for the detailed view: lower is
more concerning. It is not persisted.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..config import BADGE_COLOR_ALERT, BADGE_COLOR_OK, BADGE_TEXT_OK
from ..models import AddonRecord, Channel, CompatibilityTable

RELEASE_INCOMPATIBLE = "release_incompatible"
ESR_ONLY_EXPERIMENT = "esr_only_experiment"
UNKNOWN = "unknown"

RELEASE_COMPATIBLE_CERTAIN = 8
RELEASE_COMPATIBLE_UNCERTAIN = 4
NEXT_ESR_COMPATIBLE = 2
ESR_COMPATIBLE = 1
DISABLED_WEIGHT = 16


@dataclass(frozen=True)
class BadgePolicy:
    """
    Badge colors.

    esr_experiment_color is the color shown when the only findings are
    experiments without release support. Deployments disagree on whether
    that state is a failure or a warning, so it is configurable.
    """
    ok_color: str = BADGE_COLOR_OK
    alert_color: str = BADGE_COLOR_ALERT
    esr_experiment_color: str = BADGE_COLOR_ALERT

    @classmethod
    def from_settings(cls, settings) -> "BadgePolicy":
        return cls(esr_experiment_color=settings.esr_experiment_badge_color)


@dataclass
class StatusSummary:
    """Aggregate counts and the resulting badge."""
    release_incompatible_count: int
    esr_only_experiment_count: int
    unknown_count: int
    badge_text: str
    badge_color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "releaseIncompatibleCount": self.release_incompatible_count,
            "esrOnlyExperimentCount": self.esr_only_experiment_count,
            "unknownCount": self.unknown_count,
            "badgeText": self.badge_text,
            "badgeColor": self.badge_color,
        }


def is_release_incompatible(record: AddonRecord) -> bool:
    release = record.compat_for(Channel.RELEASE)
    return release is None or not release.ext_version


def is_esr_only_experiment(record: AddonRecord) -> bool:
    release = record.compat_for(Channel.RELEASE)
    return (
        release is not None
        and release.is_experiment
        and not record.dedicated_support_on_release
    )


def is_release_experiment(record: AddonRecord) -> bool:
    """Experiment with committed release support."""
    release = record.compat_for(Channel.RELEASE)
    return (
        release is not None
        and release.is_experiment
        and record.dedicated_support_on_release
    )


def classify(record: AddonRecord) -> Optional[str]:
    """Return the single risk class of an add-on, or None when it is fine."""
    if is_release_incompatible(record):
        return RELEASE_INCOMPATIBLE
    if is_esr_only_experiment(record):
        return ESR_ONLY_EXPERIMENT
    if record.is_unknown:
        return UNKNOWN
    return None


def reduce_status(
    table: CompatibilityTable,
    policy: Optional[BadgePolicy] = None,
) -> StatusSummary:
    """Reduce the compatibility table to counts and a badge."""
    policy = policy or BadgePolicy()
    counts = {RELEASE_INCOMPATIBLE: 0, ESR_ONLY_EXPERIMENT: 0, UNKNOWN: 0}

    for record in table.values():
        risk = classify(record)
        if risk:
            counts[risk] += 1

    release_incompatible = counts[RELEASE_INCOMPATIBLE]
    esr_only = counts[ESR_ONLY_EXPERIMENT]
    unknown = counts[UNKNOWN]

    if release_incompatible == 0 and esr_only == 0 and unknown == 0:
        text, color = BADGE_TEXT_OK, policy.ok_color
    elif release_incompatible == 0 and unknown == 0:
        # Some experiments without release support
        text, color = BADGE_TEXT_OK, policy.esr_experiment_color
    else:
        text, color = f"-{release_incompatible + unknown}", policy.alert_color

    return StatusSummary(
        release_incompatible_count=release_incompatible,
        esr_only_experiment_count=esr_only,
        unknown_count=unknown,
        badge_text=text,
        badge_color=color,
    )


def compatibility_rank(record: AddonRecord) -> int:
    """Additive rank; lower sorts first (most concerning)."""
    rank = 0

    release = record.compat_for(Channel.RELEASE)
    if release is not None and release.ext_version:
        if not release.is_experiment or record.dedicated_support_on_release:
            rank += RELEASE_COMPATIBLE_CERTAIN
        else:
            rank += RELEASE_COMPATIBLE_UNCERTAIN

    next_esr = record.compat_for(Channel.NEXT_ESR)
    if next_esr is not None and next_esr.ext_version:
        rank += NEXT_ESR_COMPATIBLE

    current_esr = record.compat_for(Channel.CURRENT_ESR)
    if current_esr is not None and current_esr.ext_version:
        rank += ESR_COMPATIBLE

    if not record.enabled:
        rank += DISABLED_WEIGHT

    return rank


def rank_addons(table: CompatibilityTable) -> List[Tuple[AddonRecord, int]]:
    """Return (record, rank) pairs in ascending rank, ties broken by name."""
    ranked = [(record, compatibility_rank(record)) for record in table.values()]
    ranked.sort(key=lambda pair: (pair[1], (pair[0].name or pair[0].id).lower()))
    return ranked
