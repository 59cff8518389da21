# access_console/errors.py
"""
Error taxonomy for the access console.
Each error carries the HTTP status the console answers with; the exception
handler in main.py renders them as {"detail": ..., "error": ...}.
"""

from typing import Optional


class AccessConsoleError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthMissingError(AccessConsoleError):
    """No bearer token recorded — every backend fetch is blocked."""
    status_code = 401

    def __init__(self, message: str = "Not authenticated: sign in to load access data"):
        super().__init__(message)


class FetchFailedError(AccessConsoleError):
    """Network error or non-2xx answer from the backend."""
    status_code = 502

    def __init__(self, resource: str, reason: str, status: Optional[int] = None):
        super().__init__(f"Failed to fetch {resource}: {reason}")
        self.resource = resource
        self.reason = reason
        self.status = status


class AlreadyInsideError(AccessConsoleError):
    status_code = 409

    def __init__(self, person_name: str):
        super().__init__(f"{person_name} is already checked in")
        self.person_name = person_name


class NotInsideError(AccessConsoleError):
    status_code = 409

    def __init__(self, person_name: str):
        super().__init__(f"{person_name} must check in first")
        self.person_name = person_name


class InvalidTimeOrderError(AccessConsoleError):
    status_code = 422

    def __init__(self, person_name: str, entry_time, exit_time):
        super().__init__(
            f"Exit time {exit_time:%Y-%m-%d %H:%M} for {person_name} "
            f"is before entry time {entry_time:%Y-%m-%d %H:%M}"
        )
        self.entry_time = entry_time
        self.exit_time = exit_time


class UnknownPersonReferenceError(AccessConsoleError):
    """A log or a submission names a (person_id, person_type) absent from the roster."""
    status_code = 404

    def __init__(self, person_id: str, person_type: str):
        super().__init__(f"Unknown person reference: {person_type} {person_id}")
        self.person_id = person_id
        self.person_type = person_type
