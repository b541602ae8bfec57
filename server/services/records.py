"""Async client for the managed records database (PostgREST interface).

All persistence and row-level security live in the external service; this
client only shapes requests and turns failures into ``RecordsError``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from core.config import Settings
from core.logging import get_logger
from services.exceptions import RecordNotFoundError, RecordsError

logger = get_logger(__name__)


class RecordsService:
    """Thin CRUD wrapper over ``/rest/v1/<table>``."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize client from settings.

        Args:
            settings: Supplies ``records_url``, ``records_api_key`` and ``records_timeout``.
            transport: Optional httpx transport, used by tests to stub the backend.
        """
        headers = {"Content-Type": "application/json"}
        if settings.records_api_key:
            headers["apikey"] = settings.records_api_key
            headers["Authorization"] = f"Bearer {settings.records_api_key}"

        self._client = httpx.AsyncClient(
            base_url=f"{settings.records_url}/rest/v1",
            headers=headers,
            timeout=settings.records_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def list_records(
        self,
        table: str,
        page: int = 1,
        limit: int = 20,
        sort_field: str = "created_at",
        sort_order: str = "desc",
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch one page of rows ordered by ``sort_field``."""
        params = {
            "select": "*",
            "order": f"{sort_field}.{sort_order}",
            "limit": str(limit),
            "offset": str((page - 1) * limit),
        }
        if status:
            params["status"] = f"eq.{status}"
        return await self._request("GET", table, params=params)

    async def get_record(self, table: str, record_id: str) -> Dict[str, Any]:
        rows = await self._request("GET", table, params={"select": "*", "id": f"eq.{record_id}"})
        if not rows:
            raise RecordNotFoundError(table, record_id)
        return rows[0]

    async def create_record(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        rows = await self._request("POST", table, json=data, returning=True)
        return rows[0] if rows else data

    async def update_record(self, table: str, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}
        rows = await self._request(
            "PATCH", table, params={"id": f"eq.{record_id}"}, json=payload, returning=True
        )
        if not rows:
            raise RecordNotFoundError(table, record_id)
        return rows[0]

    async def delete_record(self, table: str, record_id: str) -> None:
        rows = await self._request("DELETE", table, params={"id": f"eq.{record_id}"}, returning=True)
        if not rows:
            raise RecordNotFoundError(table, record_id)

    async def ping(self) -> bool:
        """Check backend reachability."""
        try:
            response = await self._client.get("/")
            return response.status_code < 500
        except httpx.HTTPError:
            return False

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        returning: bool = False,
    ) -> List[Dict[str, Any]]:
        headers = {"Prefer": "return=representation"} if returning else None
        try:
            response = await self._client.request(method, f"/{table}", params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Records request failed", method=method, table=table, error=str(e))
            raise RecordsError(f"Records backend unreachable: {e}") from e

        if response.is_error:
            logger.error("Records request rejected", method=method, table=table,
                         status=response.status_code, body=response.text[:500])
            raise RecordsError(f"Records backend returned {response.status_code}")

        if not response.content:
            return []
        return response.json()
