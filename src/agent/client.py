"""Coordinator wire protocol: register, report, fetch program."""

from __future__ import annotations

from typing import Any

from src.agent.report import Report
from src.common.constants import API_PREFIX, HTTP_TIMEOUT, PROGRAM_NAME
from src.common.http import CoordinatorUnreachable, http_get_text, http_post_json


class CoordinatorClient:
    """Blocking client for the three coordinator endpoints.

    Every method raises :class:`CoordinatorUnreachable` when the round
    trip yields no usable response.
    """

    def __init__(self, host: str, port: int, *, timeout: float = HTTP_TIMEOUT) -> None:
        self.base_url = f"http://{host}:{port}{API_PREFIX}"
        self._timeout = timeout

    def register(self, info: dict) -> dict:
        """POST the bootstrap info; returns ``{"id", "name" or "label", "command"}``."""
        url = f"{self.base_url}/new"
        data = http_post_json(url, info, timeout=self._timeout)
        if not isinstance(data, dict) or "id" not in data:
            raise CoordinatorUnreachable(url, f"unexpected registration response: {data!r}")
        return data

    def report(self, agent_id: str, report: Report) -> Any:
        """Submit one report; returns the next raw command payload (may be None)."""
        return http_post_json(
            f"{self.base_url}/{agent_id}/update", report.to_wire(), timeout=self._timeout
        )

    def fetch_program(self) -> str:
        return http_get_text(f"{self.base_url}/{PROGRAM_NAME}", timeout=self._timeout)
