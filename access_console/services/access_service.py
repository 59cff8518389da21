# access_console/services/access_service.py
"""
Check-in / check-out submitter.

Validates one state transition against the current presence row, then
submits it as a single backend request:
  Outside ──check_in──▶ Inside ──check_out──▶ Outside
Any other transition raises (AlreadyInsideError, NotInsideError,
InvalidTimeOrderError, UnknownPersonReferenceError) before a request is sent.

Entry/exit times are the operator's picked date + time-of-day in local time.
"""

from typing import Optional
from access_console.errors import (
    AlreadyInsideError, InvalidTimeOrderError, NotInsideError, UnknownPersonReferenceError,
)
from access_console.schemas.access_log import AccessLogEntry, CheckInRequest, CheckOutRequest
from access_console.schemas.presence import PresenceView
from access_console.utils.logger import get_logger
from access_console.utils.time_utils import combine_local

logger = get_logger(__name__)


def _require_row(row: Optional[PresenceView], request) -> PresenceView:
    if row is None:
        raise UnknownPersonReferenceError(request.person_id, request.person_type.value)
    return row


async def check_in(client, row: Optional[PresenceView], request: CheckInRequest) -> AccessLogEntry:
    row = _require_row(row, request)
    if row.is_inside:
        logger.warning(f"[CHECK-IN] Refused: {row.name} ({row.person_type.value} {row.person_id}) already inside")
        raise AlreadyInsideError(row.name)

    entry_time = combine_local(request.date, request.time)
    body = {
        "personId": row.person_id,
        "personType": row.person_type.value,
        "vehicleId": request.vehicle_id or (row.vehicle.id if row.vehicle else None),
        "entryTime": entry_time.isoformat(),
        "notes": request.notes,
        "parkingLocation": request.parking_location,
    }
    log = await client.check_in(body, row.name)
    logger.info(f"[CHECK-IN] {row.name} | {row.person_type.value} {row.person_id} | at {entry_time:%Y-%m-%d %H:%M}")
    return log


async def check_out(client, row: Optional[PresenceView], request: CheckOutRequest) -> AccessLogEntry:
    row = _require_row(row, request)
    if not row.is_inside or row.latest_entry_time is None:
        logger.warning(f"[CHECK-OUT] Refused: {row.name} ({row.person_type.value} {row.person_id}) not inside")
        raise NotInsideError(row.name)

    exit_time = combine_local(request.date, request.time)
    if exit_time < row.latest_entry_time:
        logger.warning(f"[CHECK-OUT] Refused: {row.name} exit {exit_time:%H:%M} "
                       f"before entry {row.latest_entry_time:%H:%M}")
        raise InvalidTimeOrderError(row.name, row.latest_entry_time, exit_time)

    body = {
        "personId": row.person_id,
        "personType": row.person_type.value,
        "logId": row.active_log_id,
        "exitTime": exit_time.isoformat(),
        "notes": request.notes,
    }
    log = await client.check_out(body, row.name)
    minutes = int((exit_time - row.latest_entry_time).total_seconds() // 60)
    logger.info(f"[CHECK-OUT] {row.name} | {row.person_type.value} {row.person_id} | "
                f"at {exit_time:%Y-%m-%d %H:%M} after {minutes // 60}h {minutes % 60}m")
    return log
