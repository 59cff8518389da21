# access_console/services/presence_engine.py
"""
Holds the Provide Access view between requests.

refresh()           load roster + logs, reconcile, keep the rows
check_in/check_out  validate against the held rows, submit, refresh again

A roster failure does not raise: the view becomes an empty degraded report
carrying the error for the screen banner, and the operator retries with
POST /access/refresh. Missing authentication does raise.
"""

from datetime import date, datetime
from typing import Optional
from access_console.config import settings
from access_console.errors import FetchFailedError
from access_console.schemas.access_log import CheckInRequest, CheckOutRequest, TransitionResult
from access_console.schemas.person import PersonType
from access_console.schemas.presence import PresenceReport, PresenceView
from access_console.services import access_service
from access_console.services.presence_service import reconcile
from access_console.services.roster_loader import load_access_data
from access_console.utils.logger import get_logger

logger = get_logger(__name__)


class PresenceEngine:
    def __init__(self, history_limit: int = None):
        self.history_limit = history_limit or settings.HISTORY_LIMIT
        self.report: Optional[PresenceReport] = None

    @property
    def rows(self) -> list[PresenceView]:
        return self.report.rows if self.report else []

    async def refresh(self, client, today: Optional[date] = None) -> PresenceReport:
        try:
            snapshot = await load_access_data(client, self.history_limit, today)
        except FetchFailedError as e:
            self.report = PresenceReport(rows=[], refreshed_at=datetime.now().astimezone(),
                                         degraded=True, error=e.message)
            return self.report

        rows = reconcile(snapshot.roster, snapshot.active_logs, snapshot.recent_logs,
                         snapshot.monthly_stats, today)
        self.report = PresenceReport(
            rows=rows,
            refreshed_at=datetime.now().astimezone(),
            monthly_count_source="server" if snapshot.monthly_stats is not None else "client",
            degraded=bool(snapshot.warnings),
            warnings=snapshot.warnings,
        )
        inside = sum(1 for row in rows if row.is_inside)
        logger.info(f"🔄 Presence refreshed: {len(rows)} people, {inside} inside")
        return self.report

    async def current(self, client, today: Optional[date] = None) -> PresenceReport:
        """The held view, loading it first if nothing was loaded yet."""
        if self.report is None or self.report.error:
            return await self.refresh(client, today)
        return self.report

    def lookup(self, person_id: str, person_type: PersonType) -> Optional[PresenceView]:
        return next((row for row in self.rows if row.key == (person_id, person_type)), None)

    def filter_rows(self, search: str = None, person_type: PersonType = None) -> list[PresenceView]:
        """Provide Access search box: name / code / plate substring, plus type."""
        needle = (search or "").strip().lower()

        def matches(row: PresenceView) -> bool:
            if person_type and row.person_type != person_type:
                return False
            if not needle:
                return True
            plate = row.vehicle.plate if row.vehicle else None
            return any(needle in (value or "").lower() for value in (row.name, row.code, plate))

        return [row for row in self.rows if matches(row)]

    async def _submit(self, transition, client, row, request, today):
        try:
            return await transition(client, row, request)
        except FetchFailedError:
            # The backend may have recorded the transition before the answer failed
            await self.refresh(client, today)
            raise

    async def check_in(self, client, request: CheckInRequest, today: Optional[date] = None) -> TransitionResult:
        await self.current(client, today)
        row = self.lookup(request.person_id, request.person_type)
        log = await self._submit(access_service.check_in, client, row, request, today)
        await self.refresh(client, today)
        return TransitionResult(
            message=f"{row.name} has checked in successfully at {request.time:%H:%M}.", log=log)

    async def check_out(self, client, request: CheckOutRequest, today: Optional[date] = None) -> TransitionResult:
        await self.current(client, today)
        row = self.lookup(request.person_id, request.person_type)
        log = await self._submit(access_service.check_out, client, row, request, today)
        await self.refresh(client, today)
        return TransitionResult(
            message=f"{row.name} has checked out successfully at {request.time:%H:%M}.", log=log)


presence_engine = PresenceEngine()


def get_presence_engine() -> PresenceEngine:
    """FastAPI dependency — the process-wide presence view."""
    return presence_engine
