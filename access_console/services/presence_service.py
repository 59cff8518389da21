# access_console/services/presence_service.py
"""
Presence reconciliation: (roster, active logs, recent logs) → one PresenceView per person.

How it works:
  - every active log (entry, no exit) marks its person INSIDE
  - everyone else takes the state of their most recent log in the history
    window: an exit record means OUTSIDE, no record means no status yet
  - suppliers get a visit count for the current month, from the server
    aggregate when it was loaded, otherwise from the history window
  - logs naming a (person_id, person_type) absent from the roster are dropped

Pure: no I/O, the same input always yields the same rows.
"""

from datetime import date, datetime, timezone
from typing import Iterable, Optional
from access_console.errors import UnknownPersonReferenceError
from access_console.schemas.access_log import AccessLogEntry, LogStatus
from access_console.schemas.person import Person, PersonType
from access_console.schemas.presence import PresenceStatus, PresenceView
from access_console.utils.logger import get_logger
from access_console.utils.time_utils import local_today, same_month

logger = get_logger(__name__)

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def recency_key(log: AccessLogEntry) -> tuple:
    """Sort key: log date, then the latest of its entry/exit times."""
    stamps = [t for t in (log.entry_time, log.exit_time) if t is not None]
    return (log.log_date or date.min, max(stamps) if stamps else _EARLIEST)


def most_recent(logs: Iterable[AccessLogEntry]) -> Optional[AccessLogEntry]:
    return max(logs, key=recency_key, default=None)


def _check_known(log: AccessLogEntry, known: set) -> None:
    if log.key not in known:
        raise UnknownPersonReferenceError(log.person_id, log.person_type.value)


def _index_by_person(roster: list[Person], logs: list[AccessLogEntry]) -> dict[tuple, list[AccessLogEntry]]:
    known = {person.key for person in roster}
    grouped: dict[tuple, list[AccessLogEntry]] = {}
    for log in logs:
        try:
            _check_known(log, known)
        except UnknownPersonReferenceError as e:
            logger.warning(f"[RECONCILE] {e.message} in log {log.id} — dropped")
            continue
        grouped.setdefault(log.key, []).append(log)
    return grouped


def client_monthly_counts(recent_logs: list[AccessLogEntry], today: date) -> dict[str, int]:
    """Distinct supplier logs dated in today's month. Undercounts if history exceeds the window."""
    seen: dict[str, set] = {}
    for log in recent_logs:
        if log.person_type == PersonType.SUPPLIER and same_month(log.log_date, today):
            seen.setdefault(log.person_id, set()).add(log.id or id(log))
    return {person_id: len(ids) for person_id, ids in seen.items()}


def reconcile(roster: list[Person], active_logs: list[AccessLogEntry],
              recent_logs: list[AccessLogEntry], monthly_stats: Optional[dict[str, int]] = None,
              today: Optional[date] = None) -> list[PresenceView]:
    today = today or local_today()
    active_by_person = _index_by_person(roster, [log for log in active_logs if log.is_active])
    history_by_person = _index_by_person(roster, recent_logs)

    # One source for the whole view: server aggregate, else the history scan
    visit_counts = monthly_stats if monthly_stats is not None else client_monthly_counts(
        [log for logs in history_by_person.values() for log in logs], today)

    rows = []
    for person in roster:
        row = PresenceView(
            person_id=person.id,
            person_type=person.person_type,
            name=person.name,
            code=person.code,
            email=person.email,
            phone=person.phone,
            vehicle=person.vehicle,
            scheduled_visit=person.scheduled_visit,
        )

        active = active_by_person.get(person.key)
        if active:
            if len(active) > 1:
                logger.warning(f"[RECONCILE] {len(active)} active logs for {person.person_type.value} "
                               f"{person.id} — using the most recent")
            current = most_recent(active)
            row.current_status = PresenceStatus.INSIDE
            row.latest_entry_time = current.entry_time
            row.active_log_id = current.id
        else:
            last = most_recent(history_by_person.get(person.key, []))
            if last is not None:
                row.latest_entry_time = last.entry_time
                if last.status == LogStatus.EXIT:
                    row.current_status = PresenceStatus.OUTSIDE
                    row.latest_exit_time = last.exit_time
                # An open entry the active list did not report stays without status

        row.can_check_in = not row.is_inside
        row.can_check_out = row.is_inside
        if person.person_type == PersonType.SUPPLIER:
            row.monthly_visit_count = visit_counts.get(person.id, 0)
        rows.append(row)

    return rows
