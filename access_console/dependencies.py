# access_console/dependencies.py
"""
FastAPI dependencies shared by the routers:
backend client built from the stored session, and role gates.
"""

from fastapi import Depends, HTTPException, status
from access_console.services.authorization import AuthorizationResult, require_role
from access_console.services.backend_client import BackendClient
from access_console.services.state_store import AppStateStore, get_state_store


def get_backend_client(store: AppStateStore = Depends(get_state_store)) -> BackendClient:
    """Raises AuthMissingError (→ 401) when no session token is stored."""
    return BackendClient(store.token)


def requires_role(*roles: str):
    """Dependency factory: 403 with a redirect hint unless the session role is one of roles."""
    def _check(store: AppStateStore = Depends(get_state_store)) -> AuthorizationResult:
        result = require_role(store.role, *roles)
        if not result.allowed:
            code = status.HTTP_401_UNAUTHORIZED if result.role is None else status.HTTP_403_FORBIDDEN
            raise HTTPException(status_code=code,
                                detail={"message": result.reason, "redirect": result.redirect})
        return result
    return _check
