# access_console/services/backend_client.py
"""
Async REST client for the access-control backend.

Every call carries "Authorization: Bearer <token>"; a client built without
a token refuses to issue any request (AuthMissingError). Network errors and
non-2xx answers become FetchFailedError. Check-in/check-out rejections that
mean "already inside" / "not inside" are surfaced as the matching
transition error so a stale client-side guard still reports the right reason.

No timeout by default and no retries: a failed fetch is reported once and
the operator retries by hand.
"""

from datetime import date
from typing import Any, Optional
import httpx
from access_console.config import settings
from access_console.errors import (
    AlreadyInsideError, AuthMissingError, FetchFailedError, NotInsideError,
)
from access_console.schemas.access_log import AccessLogEntry
from access_console.schemas.person import Person
from access_console.services import payload_parser
from access_console.utils.json_parser import get_nested, unwrap_collection
from access_console.utils.logger import get_logger
from access_console.utils.time_utils import month_key

logger = get_logger(__name__)


class BackendClient:
    def __init__(self, token: Optional[str], base_url: str = None,
                 timeout: Optional[float] = None, transport: httpx.AsyncBaseTransport = None):
        if not token:
            raise AuthMissingError()
        self.base_url = (base_url or settings.BACKEND_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.BACKEND_TIMEOUT_SECONDS
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }
        self._transport = transport   # httpx.MockTransport in tests

    # ── Transport ─────────────────────────────────────────────────────────
    async def _request(self, method: str, path: str, resource: str,
                       params: dict = None, body: dict = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(headers=self._headers, timeout=self.timeout,
                                         transport=self._transport) as client:
                response = await client.request(method, url, params=params, json=body)
        except httpx.HTTPError as e:
            logger.warning(f"❌ {method} {path} — {type(e).__name__}: {e}")
            raise FetchFailedError(resource, str(e) or type(e).__name__) from e
        logger.debug(f"{method} {path} → {response.status_code}")
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(data, dict):
            return data.get("message") or data.get("error") or f"HTTP {response.status_code}"
        return f"HTTP {response.status_code}"

    async def _get_json(self, path: str, resource: str, params: dict = None) -> Any:
        response = await self._request("GET", path, resource, params=params)
        if response.status_code == 401:
            raise AuthMissingError(f"Backend rejected the session token while fetching {resource}")
        if not response.is_success:
            raise FetchFailedError(resource, self._error_message(response), response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise FetchFailedError(resource, "response is not JSON", response.status_code) from e

    # ── Roster ────────────────────────────────────────────────────────────
    async def get_suppliers(self) -> list[Person]:
        payload = await self._get_json("/suppliers", "suppliers")
        records = unwrap_collection(payload, "suppliers")
        return [p for p in map(payload_parser.parse_supplier, records) if p]

    async def get_personnel(self) -> list[Person]:
        payload = await self._get_json("/leoni-personnel", "personnel")
        records = unwrap_collection(payload, "personnel")
        return [p for p in map(payload_parser.parse_personnel, records) if p]

    async def get_schedules(self) -> list[dict]:
        payload = await self._get_json("/schedule-presence", "schedules")
        records = unwrap_collection(payload, "schedules")
        return [s for s in map(payload_parser.parse_schedule, records) if s]

    # ── Logs ──────────────────────────────────────────────────────────────
    async def get_active_logs(self) -> list[AccessLogEntry]:
        payload = await self._get_json("/logs/active", "active logs")
        records = unwrap_collection(payload, "logs", "data.logs")
        return [entry for entry in map(payload_parser.parse_log, records) if entry]

    async def get_recent_logs(self, limit: int, start_date: Optional[date] = None,
                              end_date: Optional[date] = None) -> list[AccessLogEntry]:
        params = {"limit": limit, "sortBy": "logDate", "sortOrder": "desc"}
        if start_date:
            params["startDate"] = start_date.isoformat()
        if end_date:
            params["endDate"] = end_date.isoformat()
        payload = await self._get_json("/logs", "recent logs", params=params)
        records = unwrap_collection(payload, "logs", "data.logs")
        return [entry for entry in map(payload_parser.parse_log, records) if entry]

    async def get_monthly_stats(self, month: date) -> dict[str, int]:
        payload = await self._get_json("/logs/monthly-stats", "monthly stats",
                                       params={"month": month_key(month)})
        if not isinstance(payload, dict) or payload.get("success") is False \
                or get_nested(payload, "data", "supplierStats") is None:
            raise FetchFailedError("monthly stats", "aggregate missing from response")
        try:
            return payload_parser.parse_monthly_stats(payload)
        except (ValueError, TypeError) as e:
            raise FetchFailedError("monthly stats", f"unreadable aggregate ({e})") from e

    async def get_stats(self) -> dict:
        payload = await self._get_json("/logs/stats", "log stats")
        return payload.get("data", payload) if isinstance(payload, dict) else {}

    # ── Transitions ───────────────────────────────────────────────────────
    async def _post_transition(self, path: str, resource: str, body: dict,
                               person_name: str) -> AccessLogEntry:
        response = await self._request("POST", path, resource, body=body)
        if response.status_code == 401:
            raise AuthMissingError(f"Backend rejected the session token on {resource}")
        if not response.is_success:
            message = self._error_message(response)
            lowered = message.lower()
            if response.status_code in (400, 409):
                if "already" in lowered:
                    raise AlreadyInsideError(person_name)
                if "not checked in" in lowered or "no active" in lowered or "not inside" in lowered:
                    raise NotInsideError(person_name)
            raise FetchFailedError(resource, message, response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchFailedError(resource, "response is not JSON", response.status_code) from e
        record = payload.get("data", payload) if isinstance(payload, dict) else {}
        entry = payload_parser.parse_log(record) if isinstance(record, dict) else None
        if entry is None:
            raise FetchFailedError(resource, "backend answered without a log record", response.status_code)
        return entry

    async def check_in(self, body: dict, person_name: str) -> AccessLogEntry:
        return await self._post_transition("/logs/checkin", "check-in", body, person_name)

    async def check_out(self, body: dict, person_name: str) -> AccessLogEntry:
        return await self._post_transition("/logs/checkout", "check-out", body, person_name)
