"""Domain errors raised by the reservation engine"""


class BookingError(Exception):
    """Base class for reservation failures surfaced to the caller"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Missing or malformed booking fields"""
    status_code = 400


class ConflictError(BookingError):
    """Requested slot overlaps an active reservation"""
    status_code = 409


class AccessDenied(BookingError):
    """Caller's role or ownership does not allow the operation"""
    status_code = 403


class NotFound(BookingError):
    status_code = 404


class InvalidTransition(BookingError):
    """Requested status change is not an edge of the state machine"""
    status_code = 400

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot change status from '{current}' to '{requested}'"
        )
        self.current = current
        self.requested = requested
