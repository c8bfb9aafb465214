"""
Report Client - HTTP client for the remote compatibility report.

A single unauthenticated GET returning the report JSON. Every failure mode
(timeout, connection error, non-2xx status, non-JSON body, document without
an addons list) raises ReportFetchError so the engine can abort the job.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from ..models import RemoteReport

logger = logging.getLogger("compat.report")


class ReportFetchError(Exception):
    """Raised when the remote report is unavailable or malformed."""

    def __init__(self, url: str, message: str, original_error: Exception = None):
        self.url = url
        self.original_error = original_error
        super().__init__(f"Report fetch from '{url}' failed: {message}")


class ReportClient:
    """
    Fetches the remote compatibility report.

    Usage:
        client = ReportClient(settings.report_url, timeout=settings.fetch_timeout)
        report = await client.fetch()
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_sync(self) -> Dict[str, Any]:
        """Fetch and validate the report, returning the raw document."""
        logger.info(f"GET {self.url}")

        try:
            response = self.session.get(self.url, timeout=self.timeout)
        except requests.Timeout as e:
            raise ReportFetchError(self.url, f"timed out after {self.timeout}s", e)
        except requests.ConnectionError as e:
            raise ReportFetchError(self.url, f"connection failed - {str(e)}", e)
        except requests.RequestException as e:
            raise ReportFetchError(self.url, f"request failed - {str(e)}", e)

        if not 200 <= response.status_code < 300:
            raise ReportFetchError(self.url, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ReportFetchError(self.url, "response is not JSON", e)

        if not isinstance(data, dict) or not isinstance(data.get("addons"), list):
            raise ReportFetchError(self.url, "document has no 'addons' list")

        try:
            RemoteReport.model_validate(data)
        except ValidationError as e:
            raise ReportFetchError(self.url, f"malformed report - {e.error_count()} error(s)", e)

        logger.info(
            f"Report received: generated={data.get('generated')}, "
            f"addons={len(data['addons'])}"
        )
        return data

    async def fetch(self) -> Dict[str, Any]:
        # requests is blocking; keep the event loop free while waiting
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.fetch_sync)
