"""Minimal blocking HTTP helper over ``urllib``.

Non-2xx responses are returned, not raised, so each caller can map the
status to its own failure type. Transport failures (DNS, refused
connection, timeout) raise :class:`~daybook.core.exceptions.APIError`.
Callers on the event loop run this through ``asyncio.to_thread``.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any

from daybook.core.exceptions import APIError

DEFAULT_TIMEOUT = 30


@dataclass
class HttpResponse:
    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        if not self.body:
            return {}
        return json.loads(self.text)


def http_request(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    data: bytes | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> HttpResponse:
    req = urllib.request.Request(url=url, data=data, method=method.upper(), headers=headers or {})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return HttpResponse(status=resp.status, body=resp.read(), headers=dict(resp.headers.items()))
    except urllib.error.HTTPError as e:
        body = e.read() if hasattr(e, "read") else b""
        return HttpResponse(status=e.code, body=body or b"", headers=dict(e.headers.items()) if e.headers else {})
    except urllib.error.URLError as e:
        raise APIError(f"{method.upper()} {url} failed: {e.reason}") from e
    except TimeoutError as e:
        raise APIError(f"{method.upper()} {url} timed out") from e
