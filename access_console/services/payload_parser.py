# access_console/services/payload_parser.py
"""
Normalises backend JSON records into console schemas.

The backend is a Mongo-style API: ids come as "_id", log records embed a
populated "person" object (or just its id), suppliers carry a "vehicles"
array and field spellings differ between collections. Everything
downstream works on Person / AccessLogEntry only.

A record that cannot be read (unparseable timestamp, exit before entry,
wrong shape) is logged and skipped; the rest of the collection still loads.
"""

from datetime import datetime
from typing import Any, Callable, Optional
from pydantic import ValidationError
from access_console.schemas.access_log import AccessLogEntry, LogStatus
from access_console.schemas.person import Person, PersonType, ScheduledVisit, VehicleInfo
from access_console.utils.json_parser import first_present, get_nested
from access_console.utils.logger import get_logger

logger = get_logger(__name__)

ENTRY_STATUSES = {"entry", "present", "active", "inside"}
EXIT_STATUSES = {"exit", "exited", "completed"}
ACTIVE_SCHEDULE_STATUSES = {"scheduled", "rescheduled"}

_PERSON_TYPE_ALIASES = {
    "supplier": PersonType.SUPPLIER,
    "leonipersonnel": PersonType.LEONI_PERSONNEL,
    "personnel": PersonType.LEONI_PERSONNEL,
    "leoni_personnel": PersonType.LEONI_PERSONNEL,
}


def parse_person_type(raw) -> Optional[PersonType]:
    if isinstance(raw, PersonType):
        return raw
    if not raw:
        return None
    return _PERSON_TYPE_ALIASES.get(str(raw).strip().lower().replace(" ", ""))


def _text(value) -> Optional[str]:
    if value in (None, ""):
        return None
    return str(value).strip() or None


def _describe(error: Exception) -> str:
    if isinstance(error, ValidationError):
        return "; ".join(f"{'.'.join(map(str, err['loc'])) or 'record'}: {err['msg']}"
                         for err in error.errors())
    return f"{type(error).__name__}: {error}"


def _skip_malformed(kind: str, parse: Callable[[dict], Any], record) -> Optional[Any]:
    if not isinstance(record, dict):
        logger.warning(f"Malformed {kind} record skipped: expected an object, got {type(record).__name__}")
        return None
    try:
        return parse(record)
    except (ValidationError, ValueError, TypeError) as e:
        logger.warning(f"Malformed {kind} record {first_present(record, '_id', 'id')} skipped: {_describe(e)}")
        return None


def _parse_vehicle(record: dict) -> Optional[VehicleInfo]:
    vehicles = record.get("vehicles")
    vehicle = vehicles[0] if isinstance(vehicles, list) and vehicles else record.get("vehicle")
    if isinstance(vehicle, dict):
        year = first_present(vehicle, "year", "modelYear")
        return VehicleInfo(
            id=_text(first_present(vehicle, "_id", "id")),
            plate=_text(first_present(vehicle, "lic_plate_string", "plate", "licensePlate")),
            make=_text(first_present(vehicle, "make", "brand")),
            model=_text(vehicle.get("model")),
            year=int(year) if str(year or "").isdigit() else None,
            color=_text(first_present(vehicle, "color", "colour")),
        )
    plate = _text(first_present(record, "vehiclePlate", "plate"))
    return VehicleInfo(plate=plate) if plate else None


def _supplier(record: dict) -> Optional[Person]:
    person_id = _text(first_present(record, "_id", "id"))
    if not person_id:
        logger.warning(f"Supplier record without id skipped: {record.get('name')!r}")
        return None
    return Person(
        id=person_id,
        person_type=PersonType.SUPPLIER,
        name=_text(record.get("name")) or "Unknown Supplier",
        code=_text(record.get("cin")),
        email=_text(record.get("email")),
        phone=_text(first_present(record, "phonenumber", "phone_num", "phone")),
        vehicle=_parse_vehicle(record),
    )


def _personnel(record: dict) -> Optional[Person]:
    person_id = _text(first_present(record, "_id", "id"))
    if not person_id:
        logger.warning(f"Personnel record without id skipped: {record.get('worker_name')!r}")
        return None
    return Person(
        id=person_id,
        person_type=PersonType.LEONI_PERSONNEL,
        name=_text(first_present(record, "worker_name", "name")) or "Unknown Personnel",
        code=_text(first_present(record, "matricule", "cin")),
        email=_text(record.get("email")),
        phone=_text(first_present(record, "phonenumber", "phone_num", "phone")),
        vehicle=_parse_vehicle(record),
    )


def _schedule(record: dict) -> Optional[dict]:
    status = str(record.get("status") or "").lower()
    if status not in ACTIVE_SCHEDULE_STATUSES:
        return None
    supplier = record.get("supplier")
    supplier_id = supplier.get("_id") if isinstance(supplier, dict) else supplier
    raw_date = first_present(record, "date", "sch_date")
    return {
        "supplier_id": _text(supplier_id),
        "supplier_name": (_text(first_present(record, "supplierName", "supplier_name")) or "").lower(),
        "visit": ScheduledVisit(
            date=str(raw_date)[:10] if raw_date else None,
            time=_text(record.get("time")),
            reason=_text(record.get("reason")),
        ),
    }


def _parse_status(raw, exit_time) -> LogStatus:
    value = str(raw or "").strip().lower()
    if value in EXIT_STATUSES:
        return LogStatus.EXIT
    if value in ENTRY_STATUSES:
        return LogStatus.ENTRY
    return LogStatus.EXIT if exit_time else LogStatus.ENTRY


def _log(record: dict) -> Optional[AccessLogEntry]:
    person = record.get("person")
    if isinstance(person, dict):
        person_id = _text(first_present(person, "_id", "id"))
    else:
        person_id = _text(person) or _text(record.get("personId"))
    person_type = parse_person_type(record.get("personType"))
    if not person_id or person_type is None:
        logger.warning(f"Log {first_present(record, '_id', 'id')} has no usable person reference — skipped")
        return None

    person = person if isinstance(person, dict) else {}
    vehicle = record.get("vehicle")
    entry_time = record.get("entryTime") or None
    exit_time = record.get("exitTime") or None
    raw_log_date = record.get("logDate")

    entry = AccessLogEntry(
        id=_text(first_present(record, "_id", "id")),
        person_id=person_id,
        person_type=person_type,
        person_name=_text(first_present(person, "name", "worker_name")),
        person_code=_text(first_present(person, "cin", "matricule")),
        vehicle_id=_text(vehicle.get("_id") if isinstance(vehicle, dict) else vehicle),
        vehicle_plate=_text(get_nested(vehicle, "lic_plate_string")) if isinstance(vehicle, dict) else None,
        entry_time=entry_time,
        exit_time=exit_time,
        status=_parse_status(record.get("status"), exit_time),
        log_date=str(raw_log_date)[:10] if raw_log_date else None,
        notes=_text(record.get("notes")),
        parking_location=_text(record.get("parkingLocation")),
    )
    if entry.log_date is None:
        stamp: Optional[datetime] = entry.entry_time or entry.exit_time
        entry.log_date = stamp.date() if stamp else None
    return entry


def parse_supplier(record: dict) -> Optional[Person]:
    return _skip_malformed("supplier", _supplier, record)


def parse_personnel(record: dict) -> Optional[Person]:
    return _skip_malformed("personnel", _personnel, record)


def parse_schedule(record: dict) -> Optional[dict]:
    """
    Returns {"supplier_id", "supplier_name", "visit"} for schedules still
    pending (scheduled / rescheduled); None for anything else.
    """
    return _skip_malformed("schedule", _schedule, record)


def parse_log(record: dict) -> Optional[AccessLogEntry]:
    """Build an AccessLogEntry; None (with a warning) when the record is unusable."""
    return _skip_malformed("log", _log, record)


def parse_monthly_stats(payload: dict) -> dict[str, int]:
    """
    {supplier_id: visit_count} from the monthly-stats aggregate.
    Raises ValueError / TypeError on an unreadable aggregate: the counts are
    all-or-nothing, the caller falls back to counting from recent logs.
    """
    stats = {}
    for stat in get_nested(payload, "data", "supplierStats", default=[]) or []:
        if not isinstance(stat, dict):
            raise TypeError(f"supplier stat is {type(stat).__name__}, expected an object")
        supplier = stat.get("supplier")
        supplier_id = supplier.get("_id") if isinstance(supplier, dict) else supplier
        if supplier_id:
            stats[str(supplier_id)] = int(stat.get("visitCount") or 0)
    return stats
