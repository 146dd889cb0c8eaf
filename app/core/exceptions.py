from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class BookingAPIError(HTTPException):
    """Base for errors the API reports with a machine-readable code.

    The response body is ``{"detail": {"message": ..., "error": ..., **extra}}``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "UNEXPECTED_ERROR"

    def __init__(self, message: str, error: Optional[str] = None, **extra: Any):
        self.message = message
        self.error = error or self.error_code
        detail: Dict[str, Any] = {"message": message, "error": self.error}
        detail.update(extra)
        super().__init__(status_code=self.status_code, detail=detail)


class ValidationError(BookingAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class NotFoundError(BookingAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class ConflictError(BookingAPIError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


class CapacityError(BookingAPIError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "NO_BARBERS_AVAILABLE"


class InvalidStateError(ValidationError):
    error_code = "INVALID_STATE"


def booking_summary(booking) -> Dict[str, Any]:
    """Compact view of a booking, returned with conflict errors."""
    return {
        "id": booking.id,
        "customer_name": booking.customer_name,
        "service_type": booking.service_type,
        "preferred_datetime": booking.preferred_datetime.isoformat(),
        "barber_name": booking.barber_name,
        "status": booking.status.value if hasattr(booking.status, "value") else booking.status,
    }
