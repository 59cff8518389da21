# access_console/services/authorization.py
"""
Role gating for console screens.
Two roles exist: "admin" (dashboards, logs) and "sos" (security desk:
check-in/check-out). A denied result names the page the caller should be
sent back to, which depends on the role they do hold.
"""

from dataclasses import dataclass
from typing import Optional
from access_console.utils.logger import get_logger

logger = get_logger(__name__)

ROLE_LANDING_PAGES = {
    "sos": "/provide-access",
    "admin": "/dashboard",
}
SIGN_IN_PAGE = "/signin"


@dataclass
class AuthorizationResult:
    allowed: bool
    role: Optional[str]
    redirect: Optional[str] = None
    reason: Optional[str] = None


def landing_page(role: Optional[str]) -> str:
    return ROLE_LANDING_PAGES.get(role, SIGN_IN_PAGE)


def require_role(current_role: Optional[str], *roles: str) -> AuthorizationResult:
    """Check that current_role is one of roles."""
    if not current_role:
        return AuthorizationResult(False, None, SIGN_IN_PAGE, "Not signed in")
    if current_role in roles:
        return AuthorizationResult(True, current_role)

    logger.warning(f"[AUTH] Role '{current_role}' denied (requires one of {list(roles)})")
    return AuthorizationResult(
        allowed=False,
        role=current_role,
        redirect=landing_page(current_role),
        reason=f"Access denied: requires role {' or '.join(roles)}",
    )
