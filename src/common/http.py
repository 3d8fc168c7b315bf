"""Lightweight HTTP helpers (stdlib only)."""

from __future__ import annotations

import json
import socket
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from src.common.constants import HTTP_TIMEOUT

_UA = "FleetAgent/1.0"


class CoordinatorUnreachable(Exception):
    """A round trip to the coordinator produced no usable response."""

    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


def _request(
    url: str,
    *,
    method: str = "GET",
    data: bytes | None = None,
    headers: dict | None = None,
    timeout: float = HTTP_TIMEOUT,
) -> bytes:
    """Core request with User-Agent; every transport error becomes CoordinatorUnreachable.

    No retries happen here: the caller owns the retry policy.
    """
    hdr = {"User-Agent": _UA, **(headers or {})}
    req = Request(url, method=method, data=data, headers=hdr)
    try:
        with urlopen(req, timeout=timeout) as resp:
            return resp.read()
    except HTTPError as exc:
        raise CoordinatorUnreachable(url, f"HTTP {exc.code}") from exc
    except (URLError, HTTPException, socket.timeout, ConnectionError) as exc:
        raise CoordinatorUnreachable(url, exc) from exc


def _decode_json(url: str, body: bytes) -> Any:
    if not body.strip():
        return None
    try:
        return json.loads(body.decode())
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CoordinatorUnreachable(url, f"invalid JSON: {exc}") from exc


def http_get_text(url: str, timeout: float = HTTP_TIMEOUT) -> str:
    """Perform a GET request and return the body as text."""
    body = _request(url, method="GET", headers={"Accept": "text/plain"}, timeout=timeout)
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CoordinatorUnreachable(url, f"undecodable body: {exc}") from exc


def http_post_json(url: str, payload: Any, timeout: float = HTTP_TIMEOUT) -> Any:
    """POST *payload* as JSON and return the parsed JSON body (``None`` for ``null``/empty)."""
    body = _request(
        url,
        method="POST",
        data=json.dumps(payload).encode(),
        headers={"Accept": "application/json", "Content-Type": "application/json"},
        timeout=timeout,
    )
    return _decode_json(url, body)
