# access_console/schemas/presence.py
from datetime import datetime
from enum import Enum
from pydantic import BaseModel
from typing import Optional

from access_console.schemas.person import PersonType, ScheduledVisit, VehicleInfo


class PresenceStatus(str, Enum):
    INSIDE = "inside"
    OUTSIDE = "outside"


class PresenceView(BaseModel):
    person_id: str
    person_type: PersonType
    name: str
    code: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    vehicle: Optional[VehicleInfo] = None
    current_status: Optional[PresenceStatus] = None   # None = no history seen
    can_check_in: bool = True
    can_check_out: bool = False
    monthly_visit_count: int = 0
    latest_entry_time: Optional[datetime] = None
    latest_exit_time: Optional[datetime] = None
    active_log_id: Optional[str] = None
    scheduled_visit: Optional[ScheduledVisit] = None

    @property
    def key(self) -> tuple:
        return (self.person_id, self.person_type)

    @property
    def is_inside(self) -> bool:
        return self.current_status == PresenceStatus.INSIDE


class PresenceReport(BaseModel):
    rows: list[PresenceView]
    refreshed_at: datetime
    monthly_count_source: Optional[str] = None   # server | client
    degraded: bool = False
    error: Optional[str] = None                  # screen-level banner, retry with POST /access/refresh
    warnings: list[str] = []
