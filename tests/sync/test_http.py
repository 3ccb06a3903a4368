"""Tests for daybook.sync.http."""

from __future__ import annotations

import io
import json
import urllib.error
from unittest.mock import patch

import pytest

from daybook.core.exceptions import APIError
from daybook.sync.http import HttpResponse, http_request


class _DummyResp:
    def __init__(self, payload: object, status: int = 200):
        self._payload = json.dumps(payload).encode("utf-8")
        self.status = status
        self.headers = {"Content-Type": "application/json"}

    def read(self):
        return self._payload

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


@patch("daybook.sync.http.urllib.request.urlopen")
def test_success(mock_urlopen):
    mock_urlopen.return_value = _DummyResp({"id": "1"})

    resp = http_request("put", "https://graph.example/x", headers={"Authorization": "Bearer t"}, data=b"hi")

    assert resp.ok
    assert resp.json() == {"id": "1"}
    req = mock_urlopen.call_args[0][0]
    assert req.get_method() == "PUT"
    assert req.data == b"hi"
    assert req.get_header("Authorization") == "Bearer t"


@patch("daybook.sync.http.urllib.request.urlopen")
def test_http_error_is_returned(mock_urlopen):
    mock_urlopen.side_effect = urllib.error.HTTPError(
        "https://graph.example/x", 404, "Not Found", {}, io.BytesIO(b'{"error": "gone"}')
    )

    resp = http_request("GET", "https://graph.example/x")

    assert resp.status == 404
    assert not resp.ok
    assert resp.json() == {"error": "gone"}


@patch("daybook.sync.http.urllib.request.urlopen")
def test_connection_error_raises(mock_urlopen):
    mock_urlopen.side_effect = urllib.error.URLError("refused")

    with pytest.raises(APIError, match="refused"):
        http_request("GET", "https://graph.example/x")


@patch("daybook.sync.http.urllib.request.urlopen")
def test_timeout_raises(mock_urlopen):
    mock_urlopen.side_effect = TimeoutError()

    with pytest.raises(APIError, match="timed out"):
        http_request("GET", "https://graph.example/x")


def test_response_helpers():
    resp = HttpResponse(status=204)
    assert resp.ok
    assert resp.json() == {}
    assert HttpResponse(status=200, body="café".encode()).text == "café"
