class BookingError(Exception):
    """Base class for booking and inventory domain failures."""


class InvalidDateRangeError(BookingError):
    pass


class InvalidAmountError(BookingError):
    pass


class OccupancyExceededError(BookingError):
    pass


class MissingGuestFieldError(BookingError):
    def __init__(self, field: str) -> None:
        super().__init__(f"guest {field} is required")
        self.field = field


class InsufficientInventoryError(BookingError):
    def __init__(self, hotel_id: int, requested: int) -> None:
        super().__init__(f"hotel {hotel_id} cannot supply {requested} room(s)")
        self.hotel_id = hotel_id
        self.requested = requested


class InvalidTransitionError(BookingError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"invalid booking transition: {current} -> {target}")
        self.current = current
        self.target = target


class AlreadyCancelledError(BookingError):
    pass


class NotFoundError(BookingError):
    pass


class PermissionDeniedError(BookingError):
    pass


class PaymentVerificationError(BookingError):
    pass


class HotelInUseError(BookingError):
    pass
