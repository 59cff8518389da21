# access_console/schemas/person.py
from enum import Enum
from pydantic import BaseModel
from typing import Optional


class PersonType(str, Enum):
    SUPPLIER = "Supplier"
    LEONI_PERSONNEL = "LeoniPersonnel"


class VehicleInfo(BaseModel):
    id: Optional[str] = None
    plate: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    color: Optional[str] = None


class ScheduledVisit(BaseModel):
    date: Optional[str] = None       # YYYY-MM-DD
    time: Optional[str] = None       # HH:MM
    reason: Optional[str] = None


class Person(BaseModel):
    """A roster entry. Identity is the (id, person_type) pair."""
    id: str
    person_type: PersonType
    name: str
    code: Optional[str] = None       # CIN for suppliers, matricule for personnel
    email: Optional[str] = None
    phone: Optional[str] = None
    vehicle: Optional[VehicleInfo] = None
    scheduled_visit: Optional[ScheduledVisit] = None   # suppliers only

    @property
    def key(self) -> tuple:
        return (self.id, self.person_type)

    @property
    def plate(self) -> Optional[str]:
        return self.vehicle.plate if self.vehicle else None
