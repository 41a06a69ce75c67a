class SchedulingError(Exception):
    """Base class for errors raised by the scheduling services."""
    status_code = 400

    def __init__(self, message: str, detail: str = ""):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(SchedulingError):
    """Raised when a booking or timetable payload misses required data."""
    status_code = 400


class BookingConflictError(SchedulingError):
    """Raised when a new booking overlaps an existing one in the same room."""
    status_code = 409


class NotFoundError(SchedulingError):
    status_code = 404


class InvalidSlotError(SchedulingError):
    """Raised for a slot label outside the fixed hourly slot set."""
    status_code = 400


class StoreUnavailableError(SchedulingError):
    """Raised on writes when the booking store is not configured or unreachable."""
    status_code = 503
