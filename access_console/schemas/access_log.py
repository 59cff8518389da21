# access_console/schemas/access_log.py
from datetime import date, datetime, time
from enum import Enum
from pydantic import BaseModel, field_validator, model_validator
from typing import Optional

from access_console.schemas.person import PersonType
from access_console.utils.time_utils import as_local


class LogStatus(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


class AccessLogEntry(BaseModel):
    id: Optional[str] = None
    person_id: str
    person_type: PersonType
    person_name: Optional[str] = None
    person_code: Optional[str] = None
    vehicle_id: Optional[str] = None
    vehicle_plate: Optional[str] = None
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    status: LogStatus = LogStatus.ENTRY
    log_date: Optional[date] = None
    notes: Optional[str] = None
    parking_location: Optional[str] = None

    @field_validator("entry_time", "exit_time")
    @classmethod
    def _to_local(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_local(value)

    @model_validator(mode="after")
    def _exit_not_before_entry(self):
        if self.entry_time and self.exit_time and self.exit_time < self.entry_time:
            raise ValueError(f"exit_time {self.exit_time.isoformat()} is before entry_time "
                             f"{self.entry_time.isoformat()}")
        return self

    @property
    def key(self) -> tuple:
        return (self.person_id, self.person_type)

    @property
    def is_active(self) -> bool:
        """Entry recorded, exit still missing — the person is inside."""
        return self.entry_time is not None and self.exit_time is None


class CheckInRequest(BaseModel):
    person_id: str
    person_type: PersonType
    date: date
    time: time
    vehicle_id: Optional[str] = None
    notes: Optional[str] = None
    parking_location: Optional[str] = None


class CheckOutRequest(BaseModel):
    person_id: str
    person_type: PersonType
    date: date
    time: time
    notes: Optional[str] = None


class TransitionResult(BaseModel):
    message: str
    log: AccessLogEntry


class LogRowOut(BaseModel):
    """One line of the logs table."""
    log: AccessLogEntry
    state: str                        # Inside | Exited
    duration: Optional[str] = None    # "Xh Ym" once exited


class PersonLogGroup(BaseModel):
    person_id: str
    person_type: PersonType
    person_name: Optional[str] = None
    person_code: Optional[str] = None
    visit_count: int
    monthly_visit_count: int
    currently_inside: bool
    total_minutes: int
    logs: list[AccessLogEntry]
