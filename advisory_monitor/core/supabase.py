from __future__ import annotations

from threading import Lock
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from advisory_monitor.core.config import get_settings

IN_FILTER_CHUNK_SIZE = 100


def in_filter(values: Iterable[object]) -> Optional[str]:
    """Build a PostgREST ``in.(...)`` operand, quoting each value; None when nothing is left."""
    sanitized = [str(value).strip() for value in values if value is not None and str(value).strip()]
    if not sanitized:
        return None
    escaped = ['"' + value.replace('"', '\\"') + '"' for value in sanitized]
    return f"in.({','.join(escaped)})"


def chunked(values: List[str], size: int = IN_FILTER_CHUNK_SIZE) -> Iterable[List[str]]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


class _SharedHttpClient:
    _shared_client: httpx.Client | None = None
    _client_lock: Lock = Lock()

    @classmethod
    def _get_shared_client(cls) -> httpx.Client:
        if _SharedHttpClient._shared_client is not None:
            return _SharedHttpClient._shared_client
        with _SharedHttpClient._client_lock:
            if _SharedHttpClient._shared_client is None:
                _SharedHttpClient._shared_client = httpx.Client(
                    timeout=30.0,
                    limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
                )
        return _SharedHttpClient._shared_client


class SupabaseClient(_SharedHttpClient):
    def __init__(self) -> None:
        settings = get_settings()
        self.base_url = settings.supabase_url.rstrip("/") + "/rest/v1"
        self.api_key = settings.supabase_service_role_key or settings.supabase_anon_key
        if not self.api_key:
            raise ValueError("Supabase API key is required")
        self._client = self._get_shared_client()

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    def select(
        self,
        table: str,
        select: str,
        filters: Optional[List[Tuple[str, str]]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order: Optional[str] = None,
        count: bool | str = False,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        params: List[Tuple[str, str]] = [("select", select)]
        if filters:
            params.extend(filters)
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))
        if order:
            params.append(("order", order))

        headers = self._headers()
        if count:
            if count is True:
                headers["Prefer"] = "count=exact"
            elif isinstance(count, str):
                headers["Prefer"] = f"count={count}"

        url = f"{self.base_url}/{table}?{urlencode(params, doseq=True)}"
        response = self._client.get(url, headers=headers)
        response.raise_for_status()
        total_count = None
        if count and "content-range" in response.headers:
            content_range = response.headers["content-range"]
            if "/" in content_range:
                total = content_range.split("/")[-1]
                total_count = int(total) if total.isdigit() else None
        return response.json(), total_count

    def count(self, table: str, filters: Optional[List[Tuple[str, str]]] = None) -> int:
        # Only the content-range total matters; fetch a single id to keep the payload small.
        _, total = self.select(table=table, select="id", filters=filters, limit=1, count=True)
        return total or 0

    def insert(
        self,
        table: str,
        payload: Dict[str, Any] | List[Dict[str, Any]],
        upsert: bool = False,
        on_conflict: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: List[Tuple[str, str]] = []
        if on_conflict:
            params.append(("on_conflict", on_conflict))
        url = f"{self.base_url}/{table}"
        if params:
            url = f"{url}?{urlencode(params, doseq=True)}"
        headers = self._headers()
        headers["Content-Type"] = "application/json"
        headers["Prefer"] = "return=representation"
        if upsert:
            headers["Prefer"] = "resolution=merge-duplicates,return=representation"
        response = self._client.post(url, headers=headers, json=payload)
        response.raise_for_status()
        if not response.content:
            return []
        data = response.json()
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return [data]
        return []

    def update(
        self,
        table: str,
        payload: Dict[str, Any],
        filters: List[Tuple[str, str]],
    ) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{table}?{urlencode(filters, doseq=True)}"
        headers = self._headers()
        headers["Content-Type"] = "application/json"
        headers["Prefer"] = "return=representation"
        response = self._client.patch(url, headers=headers, json=payload)
        response.raise_for_status()
        if not response.content:
            return []
        data = response.json()
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return [data]
        return []

    def delete(self, table: str, filters: List[Tuple[str, str]]) -> int:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        url = f"{self.base_url}/{table}?{urlencode(filters, doseq=True)}"
        headers = self._headers()
        headers["Prefer"] = "return=representation"
        response = self._client.delete(url, headers=headers)
        response.raise_for_status()
        if not response.content:
            return 0
        data = response.json()
        return len(data) if isinstance(data, list) else 1


class SupabaseAuthClient(_SharedHttpClient):
    """Resolves end-user access tokens against the hosted auth service."""

    def __init__(self) -> None:
        settings = get_settings()
        self.base_url = settings.supabase_url.rstrip("/") + "/auth/v1"
        self.api_key = settings.supabase_anon_key or settings.supabase_service_role_key
        if not self.api_key:
            raise ValueError("Supabase API key is required")
        self._client = self._get_shared_client()

    def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        response = self._client.get(
            f"{self.base_url}/user",
            headers={"apikey": self.api_key, "Authorization": f"Bearer {access_token}"},
        )
        if response.status_code in (401, 403):
            return None
        response.raise_for_status()
        data = response.json()
        return data if isinstance(data, dict) else None
