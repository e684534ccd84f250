import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..models import MAX_GUESTS_PER_ROOM, UserRole
from .errors import (
    InvalidAmountError,
    InvalidDateRangeError,
    MissingGuestFieldError,
    OccupancyExceededError,
)

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class GuestDetails:
    name: str
    email: str
    phone: str


@dataclass(frozen=True)
class BookingQuote:
    number_of_nights: int
    price_per_night: float
    total_amount: float


def compute_nights(check_in: date | datetime, check_out: date | datetime) -> int:
    """Number of nights between two dates, rounded up and never below one."""
    if check_out <= check_in:
        raise InvalidDateRangeError("check-out must be after check-in")
    nights = math.ceil((check_out - check_in) / _ONE_DAY)
    return max(nights, 1)


def compute_total(price_per_night: float, number_of_rooms: int, number_of_nights: int) -> float:
    if price_per_night < 0 or number_of_rooms < 0 or number_of_nights < 0:
        raise InvalidAmountError("price, rooms and nights must not be negative")
    return price_per_night * number_of_rooms * number_of_nights


def validate_occupancy(number_of_guests: int, number_of_rooms: int) -> None:
    if number_of_rooms < 1 or number_of_guests < 1:
        raise OccupancyExceededError("at least one room and one guest are required")
    if number_of_guests > number_of_rooms * MAX_GUESTS_PER_ROOM:
        raise OccupancyExceededError(
            f"{number_of_guests} guests exceed {MAX_GUESTS_PER_ROOM} per room for {number_of_rooms} room(s)"
        )


def validate_guest_details(details: GuestDetails) -> None:
    for field in ("name", "email", "phone"):
        value = getattr(details, field, None)
        if value is None or not str(value).strip():
            raise MissingGuestFieldError(field)


def resolve_price_per_night(hotel_price: float, room_price: Optional[float] = None) -> float:
    """Room-type price wins when a room is selected; otherwise the hotel base price."""
    return hotel_price if room_price is None else room_price


def quote_booking(
    *,
    guest: GuestDetails,
    number_of_rooms: int,
    number_of_guests: int,
    check_in: date,
    check_out: date,
    hotel_price: float,
    room_price: Optional[float] = None,
) -> BookingQuote:
    """
    Pure validation and pricing for a new booking.
    Raises domain errors in a fixed order: occupancy, guest details, dates, amount.
    """
    validate_occupancy(number_of_guests, number_of_rooms)
    validate_guest_details(guest)
    nights = compute_nights(check_in, check_out)
    price = resolve_price_per_night(hotel_price, room_price)
    total = compute_total(price, number_of_rooms, nights)
    return BookingQuote(number_of_nights=nights, price_per_night=price, total_amount=total)


@dataclass(frozen=True)
class Actor:
    id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def may_manage(self, owner_id: Optional[int]) -> bool:
        return self.is_admin or owner_id == self.id
