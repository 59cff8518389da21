# access_console/routers/logs.py
"""Entry/exit log table, per-person grouping, and dashboard counters."""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends
from access_console.config import settings
from access_console.dependencies import get_backend_client, requires_role
from access_console.schemas.access_log import LogRowOut, PersonLogGroup
from access_console.schemas.person import PersonType
from access_console.services.backend_client import BackendClient
from access_console.services.log_service import filter_logs, group_logs_by_person, to_rows
from access_console.utils.time_utils import local_today

router = APIRouter(dependencies=[Depends(requires_role("admin", "sos"))])


@router.get("/logs", response_model=list[LogRowOut], summary="Entry/exit log, newest first")
async def get_logs(log_date: Optional[date] = None, owner: Optional[str] = None,
                   owner_type: Optional[PersonType] = None, limit: int = None,
                   client: BackendClient = Depends(get_backend_client)):
    """Filter by date, owner (name, CIN, matricule or plate) and owner type."""
    logs = await client.get_recent_logs(limit or settings.HISTORY_LIMIT,
                                        start_date=log_date, end_date=log_date)
    return to_rows(filter_logs(logs, log_date, owner, owner_type))


@router.get("/logs/grouped", response_model=list[PersonLogGroup], summary="Logs grouped per person")
async def get_grouped_logs(owner_type: Optional[PersonType] = None, limit: int = None,
                           client: BackendClient = Depends(get_backend_client)):
    """Visit totals, visits this month and inside/outside state per person."""
    logs = await client.get_recent_logs(limit or settings.HISTORY_LIMIT)
    return group_logs_by_person(filter_logs(logs, owner_type=owner_type), local_today())


@router.get("/logs/stats", summary="Today's entry and vehicle counters")
async def get_log_stats(client: BackendClient = Depends(get_backend_client)):
    return await client.get_stats()
