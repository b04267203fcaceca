from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class RemoteTableError(Exception):
    """Transport or service failure talking to the remote reports table."""


class SupabaseReportTable:
    """
    The ``reports`` table behind a Supabase project's REST (PostgREST) API.

    Columns: id, title, date, data (jsonb), created_at (server default).
    """

    def __init__(
        self,
        url: str,
        key: str,
        table_name: str = "reports",
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.base_url = url.rstrip("/")
        self.table_name = table_name
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)
        self._headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table_name}"

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            msg = body.get("message") or body.get("error") or body.get("hint")
            if msg:
                return str(msg)
        return f"HTTP {resp.status_code}"

    def _request(self, method: str, **kwargs: Any) -> httpx.Response:
        headers = dict(self._headers)
        headers.update(kwargs.pop("headers", {}) or {})
        try:
            resp = self._client.request(method, self.endpoint, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteTableError(str(e) or e.__class__.__name__) from e
        if resp.is_error:
            raise RemoteTableError(self._error_message(resp))
        return resp

    def select_all(self) -> List[Dict[str, Any]]:
        resp = self._request("GET", params={"select": "*", "order": "created_at.desc"})
        try:
            rows = resp.json()
        except ValueError as e:
            raise RemoteTableError("Invalid JSON from remote table") from e
        if not isinstance(rows, list):
            raise RemoteTableError("Unexpected response shape from remote table")
        return rows

    def insert(self, row: Dict[str, Any]) -> None:
        self._request("POST", json=[row], headers={"Prefer": "return=minimal"})

    def delete(self, report_id: str) -> None:
        self._request("DELETE", params={"id": f"eq.{report_id}"})

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
