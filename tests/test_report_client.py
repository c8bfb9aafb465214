"""
Tests for ReportClient failure handling, using a mocked requests session.
"""

from unittest.mock import MagicMock

import pytest
import requests

from compat_checker.models import RemoteReport
from compat_checker.report import ReportClient, ReportFetchError

from conftest import SAMPLE_REPORT, run

URL = "https://reports.example/all.json"


def response(status=200, json_data=None, json_error=None):
    resp = MagicMock()
    resp.status_code = status
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = json_data
    return resp


def client_returning(result):
    session = MagicMock(spec=requests.Session)
    if isinstance(result, Exception):
        session.get.side_effect = result
    else:
        session.get.return_value = result
    return ReportClient(URL, timeout=5, session=session), session


def test_success():
    client, session = client_returning(response(json_data=SAMPLE_REPORT))
    data = run(client.fetch())
    assert data == SAMPLE_REPORT
    session.get.assert_called_once_with(URL, timeout=5)


@pytest.mark.parametrize("result, fragment", [
    (requests.Timeout("slow"), "timed out"),
    (requests.ConnectionError("refused"), "connection failed"),
    (requests.RequestException("odd"), "request failed"),
    (response(status=503), "HTTP 503"),
    (response(json_error=ValueError("bad json")), "not JSON"),
    (response(json_data={"generated": "x"}), "no 'addons' list"),
    (response(json_data=["not", "a", "dict"]), "no 'addons' list"),
    (response(json_data={"addons": [{"name": "missing id"}]}), "malformed report"),
])
def test_failures_raise_report_fetch_error(result, fragment):
    client, _ = client_returning(result)
    with pytest.raises(ReportFetchError) as exc_info:
        client.fetch_sync()
    assert fragment in str(exc_info.value)
    assert exc_info.value.url == URL


def test_original_error_is_kept():
    error = requests.ConnectionError("refused")
    client, _ = client_returning(error)
    with pytest.raises(ReportFetchError) as exc_info:
        run(client.fetch())
    assert exc_info.value.original_error is error


@pytest.mark.parametrize("entry", [
    {"id": "a@example.com", "compat": [{"type": "release", "extVersion": "1.0", "isExperiment": None}]},
    {"id": "a@example.com", "dedicatedSupportOnRelease": None, "compat": []},
    {"id": "a@example.com", "compat": None},
    {"id": "a@example.com", "alternatives": None, "isUnknown": None, "enabled": None},
])
def test_null_fields_in_one_entry_are_tolerated(entry):
    document = {"generated": "2024-11-20T06:00:00Z", "addons": [entry, SAMPLE_REPORT["addons"][0]]}
    client, _ = client_returning(response(json_data=document))

    assert client.fetch_sync() == document

    record = RemoteReport.model_validate(document).find("a@example.com")
    assert record.compat_for("release") is None or record.compat_for("release").is_experiment is False
    assert record.dedicated_support_on_release is False
    assert record.enabled is True
    assert record.alternatives == []


def test_null_addons_list_still_rejected():
    client, _ = client_returning(response(json_data={"addons": None}))
    with pytest.raises(ReportFetchError):
        client.fetch_sync()
