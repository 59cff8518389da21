# access_console/routers/access.py
"""Provide Access: presence view + check-in / check-out."""

from typing import Optional
from fastapi import APIRouter, Depends
from access_console.dependencies import get_backend_client, requires_role
from access_console.schemas.access_log import CheckInRequest, CheckOutRequest, TransitionResult
from access_console.schemas.person import PersonType
from access_console.schemas.presence import PresenceReport
from access_console.services.backend_client import BackendClient
from access_console.services.presence_engine import PresenceEngine, get_presence_engine

router = APIRouter()


@router.get("/access", response_model=PresenceReport, summary="Current presence of every rostered person",
            dependencies=[Depends(requires_role("sos", "admin"))])
async def get_access_view(search: Optional[str] = None, person_type: Optional[PersonType] = None,
                          client: BackendClient = Depends(get_backend_client),
                          engine: PresenceEngine = Depends(get_presence_engine)):
    """Held view (loaded on first call). Filter by name / CIN / plate and by person type."""
    report = await engine.current(client)
    return report.model_copy(update={"rows": engine.filter_rows(search, person_type)})


@router.post("/access/refresh", response_model=PresenceReport, summary="Reload roster and logs",
             dependencies=[Depends(requires_role("sos", "admin"))])
async def refresh_access_view(client: BackendClient = Depends(get_backend_client),
                              engine: PresenceEngine = Depends(get_presence_engine)):
    return await engine.refresh(client)


@router.post("/access/check-in", response_model=TransitionResult, summary="Record an entry",
             dependencies=[Depends(requires_role("sos"))])
async def check_in(body: CheckInRequest, client: BackendClient = Depends(get_backend_client),
                   engine: PresenceEngine = Depends(get_presence_engine)):
    return await engine.check_in(client, body)


@router.post("/access/check-out", response_model=TransitionResult, summary="Record an exit",
             dependencies=[Depends(requires_role("sos"))])
async def check_out(body: CheckOutRequest, client: BackendClient = Depends(get_backend_client),
                    engine: PresenceEngine = Depends(get_presence_engine)):
    return await engine.check_out(client, body)
