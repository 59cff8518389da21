# access_console/services/log_service.py
"""
Logs table helpers: filtering, per-visit duration, and per-person grouping.
Works on whatever window of logs the backend returned.
"""

from datetime import date, timedelta
from typing import Optional
from access_console.schemas.access_log import AccessLogEntry, LogRowOut, PersonLogGroup
from access_console.schemas.person import PersonType
from access_console.services.presence_service import recency_key
from access_console.utils.time_utils import same_month


def log_state(log: AccessLogEntry) -> str:
    return "Exited" if log.exit_time else "Inside"


def visit_duration(log: AccessLogEntry) -> Optional[timedelta]:
    if log.entry_time is None or log.exit_time is None:
        return None
    return log.exit_time - log.entry_time


def format_duration(duration: Optional[timedelta]) -> Optional[str]:
    if duration is None:
        return None
    minutes = int(duration.total_seconds() // 60)
    return f"{minutes // 60}h {minutes % 60}m"


def filter_logs(logs: list[AccessLogEntry], log_date: Optional[date] = None,
                owner: Optional[str] = None, owner_type: Optional[PersonType] = None) -> list[AccessLogEntry]:
    """Date equality, owner substring (name / CIN / matricule / plate), owner type."""
    needle = (owner or "").strip().lower()

    def matches(log: AccessLogEntry) -> bool:
        if log_date and log.log_date != log_date:
            return False
        if owner_type and log.person_type != owner_type:
            return False
        if needle:
            fields = (log.person_name, log.person_code, log.vehicle_plate)
            return any(needle in (value or "").lower() for value in fields)
        return True

    return [log for log in logs if matches(log)]


def to_rows(logs: list[AccessLogEntry]) -> list[LogRowOut]:
    return [LogRowOut(log=log, state=log_state(log), duration=format_duration(visit_duration(log)))
            for log in logs]


def monthly_visit_counts(logs: list[AccessLogEntry], month: date) -> dict[str, int]:
    """Visits per supplier in the month containing `month`."""
    counts: dict[str, int] = {}
    for log in logs:
        if log.person_type == PersonType.SUPPLIER and same_month(log.log_date, month):
            counts[log.person_id] = counts.get(log.person_id, 0) + 1
    return counts


def group_logs_by_person(logs: list[AccessLogEntry], today: date) -> list[PersonLogGroup]:
    """One group per (person_id, person_type), most recently active person first."""
    grouped: dict[tuple, list[AccessLogEntry]] = {}
    for log in logs:
        grouped.setdefault(log.key, []).append(log)

    groups = []
    for (person_id, person_type), person_logs in grouped.items():
        person_logs.sort(key=recency_key, reverse=True)
        durations = [d for d in map(visit_duration, person_logs) if d is not None]
        named = next((log for log in person_logs if log.person_name), person_logs[0])
        groups.append(PersonLogGroup(
            person_id=person_id,
            person_type=person_type,
            person_name=named.person_name,
            person_code=named.person_code,
            visit_count=len(person_logs),
            monthly_visit_count=sum(1 for log in person_logs if same_month(log.log_date, today)),
            currently_inside=any(log.is_active for log in person_logs),
            total_minutes=int(sum(durations, timedelta(0)).total_seconds() // 60),
            logs=person_logs,
        ))

    groups.sort(key=lambda g: recency_key(g.logs[0]), reverse=True)
    return groups
