"""
Domain exceptions mapped to HTTP responses in main.py
"""


class StudyTrackerError(Exception):
    """Base class for errors raised by the tracker core"""

    status_code = 500
    error = "internal_server_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StudyTrackerError):
    """An id-based lookup found no record"""

    status_code = 404
    error = "not_found"

    @classmethod
    def for_entity(cls, entity: str) -> "NotFoundError":
        return cls(f"{entity} not found")


class ConflictError(StudyTrackerError):
    """A write would violate a uniqueness or reference rule"""

    status_code = 409
    error = "conflict"


class StoreError(StudyTrackerError):
    """The underlying store failed; the current transaction was rolled back"""

    status_code = 500
    error = "store_error"
