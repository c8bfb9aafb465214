"""
Status reduction and the ranked detail view.
"""

from .reducer import (
    BadgePolicy,
    StatusSummary,
    classify,
    compatibility_rank,
    rank_addons,
    reduce_status,
)
from .detail import DetailView, build_detail_view

__all__ = [
    "BadgePolicy",
    "StatusSummary",
    "classify",
    "compatibility_rank",
    "rank_addons",
    "reduce_status",
    "DetailView",
    "build_detail_view",
]
