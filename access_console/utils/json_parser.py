# access_console/utils/json_parser.py
"""
Helpers for reading backend JSON payloads.
The backend wraps collections inconsistently ({suppliers: [...]},
{data: [...]}, {data: {logs: [...]}} or a bare list).
"""

from typing import Optional, Any


def get_nested(data: dict, *keys: str, default: Any = None) -> Any:
    """Safely navigate nested dict keys. Returns default if any key is missing."""
    current = data
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key, default)
        if current is default:
            return default
    return current


def unwrap_collection(payload: Any, *keys: str) -> list:
    """
    Return the list inside a backend response.
    Tries each key in order (dotted keys descend), then "data"; returns []
    when nothing list-shaped is found.
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    for key in (*keys, "data"):
        value = get_nested(payload, *key.split("."))
        if isinstance(value, list):
            return value
    return []


def first_present(data: dict, *keys: str) -> Optional[Any]:
    """First non-empty value among keys, so '_id' and 'id' spellings both work."""
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None
