# access_console/schemas/session.py
from pydantic import BaseModel
from typing import Literal, Optional


class SessionIn(BaseModel):
    token: str
    role: Literal["admin", "sos"]
    username: Optional[str] = None


class SessionOut(BaseModel):
    authenticated: bool
    role: Optional[str] = None
    username: Optional[str] = None
    landing_page: str
