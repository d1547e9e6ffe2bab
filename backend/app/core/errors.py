"""Domain errors raised by the services and mapped to HTTP responses in ``main``."""

from fastapi import status


class ServiceError(Exception):
    """Base class for every user-facing failure."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class MissingParameter(ServiceError):
    message = "Missing required params. Use: ?restaurant_id=1&date=2026-01-10&party_size=2"


class InvalidDate(ServiceError):
    message = "Date must be in YYYY-MM-DD format (e.g., 2026-01-10)"


class CapacityExceeded(ServiceError):
    def __init__(self, capacity: int, party_size: int) -> None:
        self.capacity = capacity
        self.party_size = party_size
        super().__init__(
            f"Sorry, this table seats {capacity} people but you need space for {party_size}"
        )


class OutOfHours(ServiceError):
    def __init__(self, opening_time: str, closing_time: str) -> None:
        self.opening_time = opening_time
        self.closing_time = closing_time
        super().__init__(f"We're only open {opening_time} to {closing_time}")


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    message = "This table is already booked for that time. Try another time or table."


class TableBusy(Conflict):
    message = "This table is being booked by another request. Please retry."


class ServiceUnavailable(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Service unavailable"
