"""
Detail View - Ranked per-add-on compatibility data for the popup.

Builds the data contract the presentation layer renders: which channel
columns exist, one ranked row per add-on with a cell per channel, the
subtext that explains the row, a suggested alternative, and the overall
status box. No markup or localization happens here; suggestion values are
message keys.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from ..config import DEFAULT_FINDER_URL
from ..models import (
    CHANNEL_ORDER,
    AddonRecord,
    Alternative,
    Channel,
    CompatibilityTable,
    RemoteReport,
)
from ..version import compare_versions
from .reducer import (
    is_esr_only_experiment,
    is_release_experiment,
    is_release_incompatible,
    rank_addons,
)

# Cell states
COMPATIBLE = "compatible"
COMPATIBLE_EXPERIMENT = "compatible_experiment"
INCOMPATIBLE = "incompatible"
UNLISTED = "unlisted"

# Row subtexts
SUBTEXT_COMMITTED_EXPERIMENT = "committed_experiment"
SUBTEXT_EXPERIMENT = "experiment"
SUBTEXT_ALTERNATIVE = "alternative"
SUBTEXT_NOT_LISTED = "not_listed"


@dataclass
class Column:
    type: str
    app_version: Optional[str]


@dataclass
class Cell:
    state: str
    ext_version: Optional[str] = None
    is_experiment: bool = False


@dataclass
class SuggestedAlternative:
    name: str
    link: Optional[str] = None


@dataclass
class DetailRow:
    id: str
    name: str
    enabled: bool
    rank: int
    subtext: Optional[str]
    alternative: Optional[SuggestedAlternative]
    cells: Dict[str, Cell] = field(default_factory=dict)


@dataclass
class StatusBox:
    state: str
    suggestion: str


@dataclass
class DetailCounts:
    webextensions: int = 0
    release_incompatible: int = 0
    esr_only_experiments: int = 0
    release_experiments: int = 0
    unknown: int = 0


@dataclass
class DetailView:
    last_update: Any
    host_is_release: bool
    columns: List[Column]
    rows: List[DetailRow]
    counts: DetailCounts
    status: Optional[StatusBox]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_release_compatible_in_report(addon_id: str, report: Optional[RemoteReport]) -> bool:
    if report is None:
        return False
    entry = report.find(addon_id)
    if entry is None:
        return False
    release = entry.compat_for(Channel.RELEASE)
    return bool(release and release.ext_version)


def pick_alternative(
    record: AddonRecord,
    report: Optional[RemoteReport],
    finder_url: str = DEFAULT_FINDER_URL,
) -> Optional[SuggestedAlternative]:
    """
    Pick the first alternative worth suggesting.

    Built-in features (name and link, no id) always qualify; other
    alternatives must themselves be release-compatible in the report.
    """
    chosen: Optional[Alternative] = None
    for alternative in record.alternatives:
        if alternative.is_builtin_feature or (
            alternative.id and _is_release_compatible_in_report(alternative.id, report)
        ):
            chosen = alternative
            break

    if chosen is None or not chosen.name:
        return None

    if chosen.id and chosen.link:
        link = chosen.link
    elif chosen.link:
        query = urlencode({"id": record.id, "q": record.name or ""})
        link = f"{finder_url}?{query}"
    else:
        link = None
    return SuggestedAlternative(name=chosen.name, link=link)


def _build_cells(record: AddonRecord, esr_only_experiment: bool) -> Dict[str, Cell]:
    cells = {}
    for entry in record.compat:
        if not entry.is_compatible:
            state = INCOMPATIBLE
        elif entry.type == Channel.RELEASE.value and esr_only_experiment:
            state = COMPATIBLE_EXPERIMENT
        else:
            state = COMPATIBLE
        cells[entry.type] = Cell(
            state=state,
            ext_version=entry.ext_version,
            is_experiment=entry.is_experiment,
        )
    return cells


def _status_box(
    counts: DetailCounts,
    host_is_release: bool,
    esr_experiment_status: str,
) -> Optional[StatusBox]:
    if counts.webextensions == 0:
        return None

    if counts.release_incompatible > 0:
        suggestion = (
            "move_back_to_esr_incompatible" if host_is_release
            else "stay_on_esr_incompatible"
        )
        return StatusBox(state="incompatible", suggestion=suggestion)

    if counts.esr_only_experiments > 0:
        suggestion = (
            "move_back_to_esr_unsupported_experiments" if host_is_release
            else "stay_on_esr_unsupported_experiments"
        )
        return StatusBox(state=esr_experiment_status, suggestion=suggestion)

    if not host_is_release:
        return StatusBox(state="compatible", suggestion="upgrade_to_release")

    # Already on release and nothing to flag
    return None


def build_detail_view(
    report: Optional[RemoteReport],
    table: CompatibilityTable,
    host_version: Optional[str] = None,
    esr_experiment_status: str = "incompatible",
    finder_url: str = DEFAULT_FINDER_URL,
) -> DetailView:
    """
    Build the ranked detail view.

    Args:
        report: Cached remote report (used for alternatives and last update)
        table: The reconciled compatibility table
        host_version: Version of the running host build, if known
        esr_experiment_status: Status box state when the only findings are
            experiments without release support ("incompatible" or "warning")
        finder_url: Search page linked for built-in alternatives
    """
    counts = DetailCounts()
    app_versions: Dict[str, Optional[str]] = {}
    rows = []

    for record, rank in rank_addons(table):
        counts.webextensions += 1

        release_incompatible = is_release_incompatible(record)
        esr_only_experiment = is_esr_only_experiment(record)
        subtext = None
        alternative = None

        if release_incompatible:
            counts.release_incompatible += 1

        if is_release_experiment(record):
            counts.release_experiments += 1
            subtext = SUBTEXT_COMMITTED_EXPERIMENT

        if esr_only_experiment:
            counts.esr_only_experiments += 1
            subtext = SUBTEXT_EXPERIMENT

        if release_incompatible and record.alternatives:
            alternative = pick_alternative(record, report, finder_url)
            if alternative:
                subtext = SUBTEXT_ALTERNATIVE

        if record.is_unknown:
            counts.unknown += 1
            subtext = SUBTEXT_NOT_LISTED

        for entry in record.compat:
            app_versions[entry.type] = entry.app_version

        rows.append(DetailRow(
            id=record.id,
            name=record.name or record.id,
            enabled=record.enabled,
            rank=rank,
            subtext=subtext,
            alternative=alternative,
            cells=_build_cells(record, esr_only_experiment),
        ))

    columns = [
        Column(type=channel.value, app_version=app_versions[channel.value])
        for channel in CHANNEL_ORDER
        if channel.value in app_versions
    ]

    # Add-ons missing from a column get an explicit "unlisted" cell
    for row in rows:
        for column in columns:
            row.cells.setdefault(column.type, Cell(state=UNLISTED))

    release_version = app_versions.get(Channel.RELEASE.value)
    host_is_release = bool(
        host_version and release_version
        and compare_versions(host_version, release_version) >= 0
    )

    return DetailView(
        last_update=report.generated if report else None,
        host_is_release=host_is_release,
        columns=columns,
        rows=rows,
        counts=counts,
        status=_status_box(counts, host_is_release, esr_experiment_status),
    )
