from fastapi import HTTPException, status

from ..domain.errors import (
    AlreadyCancelledError,
    BookingError,
    HotelInUseError,
    InsufficientInventoryError,
    InvalidAmountError,
    InvalidDateRangeError,
    InvalidTransitionError,
    MissingGuestFieldError,
    NotFoundError,
    OccupancyExceededError,
    PaymentVerificationError,
    PermissionDeniedError,
)

_STATUS_BY_ERROR: dict[type[BookingError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    InvalidDateRangeError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidAmountError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    OccupancyExceededError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    MissingGuestFieldError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InsufficientInventoryError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    AlreadyCancelledError: status.HTTP_409_CONFLICT,
    HotelInUseError: status.HTTP_409_CONFLICT,
    PaymentVerificationError: status.HTTP_400_BAD_REQUEST,
}


def to_http_exception(exc: BookingError) -> HTTPException:
    code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=code, detail=str(exc) or type(exc).__name__)


def audit_failure() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to write audit log")
