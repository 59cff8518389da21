# access_console/routers/health.py
"""
System health check endpoint.
Returns status of console + state DB + backend reachability.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from access_console.database import get_db
from access_console.config import settings
from access_console.services.state_store import AppStateStore, get_state_store
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), store: AppStateStore = Depends(get_state_store)):
    """
    Returns:
    - Console status
    - State database connectivity
    - Backend reachability (GET on the backend server root)
    - Whether an operator session is stored
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "console": "ok",
        "database": "unknown",
        "backend": "unknown",
        "session": "present" if store.token else "missing",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    try:
        resp = requests.get(settings.BACKEND_ROOT_URL, timeout=3)
        result["backend"] = "ok" if resp.ok else f"http_{resp.status_code}"
        if not resp.ok:
            result["status"] = "degraded"
    except requests.exceptions.ConnectionError:
        result["backend"] = "unreachable"
        result["status"] = "degraded"
    except requests.exceptions.RequestException as e:
        result["backend"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
