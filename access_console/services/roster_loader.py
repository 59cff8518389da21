# access_console/services/roster_loader.py
"""
Roster & log loader — pulls everything the Provide Access view needs.

Fetched concurrently:
  - suppliers + personnel   (the roster; either failing is fatal to the load)
  - schedules               (attached to suppliers; failure = no scheduled visits)
  - active logs             (entry without exit; failure = treated as empty)
  - recent logs             (bounded history window, newest first; failure = empty)
  - monthly stats           (server visit aggregate; failure = None, client scan instead)
"""

import asyncio
from dataclasses import dataclass, field
from datetime import date
from typing import Optional
from access_console.errors import FetchFailedError
from access_console.schemas.access_log import AccessLogEntry
from access_console.schemas.person import Person, PersonType
from access_console.utils.logger import get_logger
from access_console.utils.time_utils import local_today

logger = get_logger(__name__)


@dataclass
class AccessSnapshot:
    roster: list[Person]
    active_logs: list[AccessLogEntry] = field(default_factory=list)
    recent_logs: list[AccessLogEntry] = field(default_factory=list)
    monthly_stats: Optional[dict[str, int]] = None
    warnings: list[str] = field(default_factory=list)


def attach_schedules(roster: list[Person], schedules: list[dict]) -> None:
    """Give each supplier its pending scheduled visit, matched by id, else by name."""
    for person in roster:
        if person.person_type != PersonType.SUPPLIER:
            continue
        name = person.name.strip().lower()
        match = next((s for s in schedules if s["supplier_id"] == person.id), None) \
            or next((s for s in schedules if s["supplier_name"] and s["supplier_name"] == name), None)
        if match:
            person.scheduled_visit = match["visit"]


async def load_access_data(client, history_limit: int, today: Optional[date] = None) -> AccessSnapshot:
    today = today or local_today()
    suppliers, personnel, schedules, active, recent, monthly = await asyncio.gather(
        client.get_suppliers(),
        client.get_personnel(),
        client.get_schedules(),
        client.get_active_logs(),
        client.get_recent_logs(history_limit),
        client.get_monthly_stats(today),
        return_exceptions=True,
    )

    # Anything other than a fetch failure (e.g. AuthMissingError) stops the load
    for result in (suppliers, personnel, schedules, active, recent, monthly):
        if isinstance(result, BaseException) and not isinstance(result, FetchFailedError):
            raise result

    for result in (suppliers, personnel):
        if isinstance(result, FetchFailedError):
            logger.error(f"Roster unavailable — {result.message}")
            raise result

    warnings = []

    def _degraded(result, fallback, what):
        if isinstance(result, FetchFailedError):
            logger.warning(f"⚠️  {result.message} — continuing without {what}")
            warnings.append(result.message)
            return fallback
        return result

    schedules = _degraded(schedules, [], "scheduled visits")
    active = _degraded(active, [], "active logs")
    recent = _degraded(recent, [], "log history")
    if isinstance(monthly, FetchFailedError):
        # Not a warning for the operator: counts fall back to the history scan
        logger.info(f"Monthly stats unavailable ({monthly.reason}) — counting from recent logs")
        monthly = None

    roster = list(suppliers) + list(personnel)
    attach_schedules(roster, schedules)
    logger.info(
        f"📥 Loaded roster={len(roster)} (suppliers={len(suppliers)}, personnel={len(personnel)}) "
        f"schedules={len(schedules)} active={len(active)} recent={len(recent)} "
        f"monthly_stats={'yes' if monthly is not None else 'no'}"
    )
    return AccessSnapshot(roster=roster, active_logs=active, recent_logs=recent,
                          monthly_stats=monthly, warnings=warnings)
