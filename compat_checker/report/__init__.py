"""
Remote compatibility report access.
"""

from .client import ReportClient, ReportFetchError

__all__ = ["ReportClient", "ReportFetchError"]
