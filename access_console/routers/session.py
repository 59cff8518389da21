# access_console/routers/session.py
"""
Operator session — token and role handed over by the sign-in flow.
The token itself is issued by the backend; the console only stores it.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from access_console.database import get_db
from access_console.schemas.session import SessionIn, SessionOut
from access_console.services.authorization import landing_page
from access_console.services.presence_engine import PresenceEngine, get_presence_engine
from access_console.services.state_store import AppStateStore, get_state_store
from access_console.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _session_out(store: AppStateStore) -> SessionOut:
    return SessionOut(authenticated=store.token is not None, role=store.role,
                      username=store.username, landing_page=landing_page(store.role))


@router.get("/session", response_model=SessionOut, summary="Current operator session")
def get_session(store: AppStateStore = Depends(get_state_store)):
    return _session_out(store)


@router.post("/session", response_model=SessionOut, summary="Record the signed-in operator")
def open_session(body: SessionIn, db: Session = Depends(get_db),
                 store: AppStateStore = Depends(get_state_store),
                 engine: PresenceEngine = Depends(get_presence_engine)):
    store.set_session(body.token, body.role, body.username)
    store.save(db)
    engine.report = None   # a different operator must not see the previous view
    logger.info(f"🔑 Session opened: {body.username or 'unknown'} ({body.role})")
    return _session_out(store)


@router.delete("/session", response_model=SessionOut, summary="Sign out")
def close_session(db: Session = Depends(get_db), store: AppStateStore = Depends(get_state_store),
                  engine: PresenceEngine = Depends(get_presence_engine)):
    store.clear_session()
    store.save(db)
    engine.report = None
    logger.info("🔒 Session closed")
    return _session_out(store)
