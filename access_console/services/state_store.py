# access_console/services/state_store.py
"""
Explicit application-state store.

Holds what the browser console used to keep in localStorage (the session
token, the operator's role and name). Values live in memory and are mirrored
into the app_state table:
  - load(db)  at startup, replaces the in-memory map with the table contents
  - save(db)  after every change and at shutdown, upserts every key
Routers receive the store through the get_state_store dependency.
"""

import json
from datetime import datetime
from typing import Any, Optional
from sqlalchemy.orm import Session
from access_console.models.app_state import AppStateEntry
from access_console.utils.logger import get_logger

logger = get_logger(__name__)

SESSION_KEY = "session"


class AppStateStore:
    def __init__(self):
        self._values: dict[str, Any] = {}
        self._removed: set[str] = set()

    # ── Lifecycle ─────────────────────────────────────────────────────────
    def load(self, db: Session) -> None:
        values = {}
        for row in db.query(AppStateEntry).all():
            try:
                values[row.key] = json.loads(row.value)
            except json.JSONDecodeError:
                logger.warning(f"[STATE] Unreadable value for key '{row.key}' — ignored")
        self._values = values
        self._removed.clear()
        logger.info(f"[STATE] Loaded {len(values)} key(s): {sorted(values)}")

    def save(self, db: Session) -> None:
        now = datetime.utcnow()
        for key in self._removed:
            db.query(AppStateEntry).filter(AppStateEntry.key == key).delete()
        for key, value in self._values.items():
            row = db.query(AppStateEntry).filter(AppStateEntry.key == key).first()
            if row is None:
                row = AppStateEntry(key=key)
                db.add(row)
            row.value = json.dumps(value)
            row.updated_at = now
        db.commit()
        self._removed.clear()
        logger.debug(f"[STATE] Saved {len(self._values)} key(s)")

    # ── Key/value access ──────────────────────────────────────────────────
    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._removed.discard(key)

    def delete(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            self._removed.add(key)

    # ── Session helpers ───────────────────────────────────────────────────
    def set_session(self, token: str, role: str, username: Optional[str] = None) -> None:
        self.set(SESSION_KEY, {"token": token, "role": role, "username": username})

    def clear_session(self) -> None:
        self.delete(SESSION_KEY)

    @property
    def token(self) -> Optional[str]:
        return (self.get(SESSION_KEY) or {}).get("token") or None

    @property
    def role(self) -> Optional[str]:
        return (self.get(SESSION_KEY) or {}).get("role") or None

    @property
    def username(self) -> Optional[str]:
        return (self.get(SESSION_KEY) or {}).get("username")


state_store = AppStateStore()


def get_state_store() -> AppStateStore:
    """FastAPI dependency — the process-wide state store."""
    return state_store
