import asyncio
import itertools
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, List, Optional

import pytest
from app.domain.services import Actor, GuestDetails
from app.domain.state_machine import HOLDING_STATUSES
from app.models import Booking, BookingStatus, Hotel, Payment, PaymentMethod, PaymentStatus, Room, UserRole


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class FakeHotelRepo:
    """In-memory hotels. Guarded updates check and write with no await in between."""

    def __init__(self) -> None:
        self.hotels: dict[int, Hotel] = {}
        self.rooms: dict[int, Room] = {}
        self._ids = itertools.count(1)
        self._room_ids = itertools.count(1)
        self.locked: List[int] = []

    def add(self, *, total_rooms: int = 20, available_rooms: Optional[int] = None, price: float = 1000.0) -> Hotel:
        now = _utc_now_naive()
        hotel = Hotel(
            id=next(self._ids),
            name="Sea View",
            location="Goa",
            pincode="403001",
            price=price,
            description=None,
            facilities=[],
            total_rooms=total_rooms,
            available_rooms=total_rooms if available_rooms is None else available_rooms,
            author_id=1,
            created_at=now,
            updated_at=now,
        )
        self.hotels[hotel.id] = hotel
        return hotel

    async def get(self, hotel_id: int) -> Hotel | None:
        return self.hotels.get(hotel_id)

    async def get_for_update(self, hotel_id: int) -> Hotel | None:
        self.locked.append(hotel_id)
        return self.hotels.get(hotel_id)

    async def list_hotels(self, location: str | None = None) -> List[Hotel]:
        return [h for h in self.hotels.values() if location is None or location.lower() in h.location.lower()]

    async def create(self, **fields: Any) -> Hotel:
        now = _utc_now_naive()
        hotel = Hotel(id=next(self._ids), available_rooms=fields["total_rooms"], created_at=now, updated_at=now, **fields)
        self.hotels[hotel.id] = hotel
        return hotel

    async def save(self, hotel: Hotel) -> Hotel:
        self.hotels[hotel.id] = hotel
        return hotel

    async def delete(self, hotel: Hotel) -> None:
        self.hotels.pop(hotel.id, None)

    async def get_room(self, room_id: int) -> Room | None:
        return self.rooms.get(room_id)

    async def list_rooms(self, hotel_id: int) -> List[Room]:
        return [r for r in self.rooms.values() if r.hotel_id == hotel_id]

    async def add_room(self, *, hotel_id: int, room_type: str, capacity: int, price_per_night: float) -> Room:
        room = Room(
            id=next(self._room_ids),
            hotel_id=hotel_id,
            room_type=room_type,
            capacity=capacity,
            price_per_night=price_per_night,
        )
        self.rooms[room.id] = room
        return room

    async def take_rooms(self, hotel_id: int, count: int) -> bool:
        await asyncio.sleep(0)
        hotel = self.hotels.get(hotel_id)
        if hotel is None or hotel.available_rooms < count:
            return False
        hotel.available_rooms -= count
        return True

    async def return_rooms(self, hotel_id: int, count: int) -> bool:
        await asyncio.sleep(0)
        hotel = self.hotels.get(hotel_id)
        if hotel is None:
            return False
        hotel.available_rooms = min(hotel.total_rooms, hotel.available_rooms + count)
        return True


class FakeBookingRepo:
    def __init__(self) -> None:
        self.bookings: dict[int, Booking] = {}
        self._ids = itertools.count(1)
        self.fail_next_create: Optional[Exception] = None

    async def get(self, booking_id: int) -> Booking | None:
        return self.bookings.get(booking_id)

    async def create(self, **fields: Any) -> Booking:
        await asyncio.sleep(0)
        if self.fail_next_create is not None:
            exc, self.fail_next_create = self.fail_next_create, None
            raise exc
        now = _utc_now_naive()
        booking = Booking(
            id=next(self._ids),
            is_checked_out=False,
            actual_check_out_time=None,
            created_at=now,
            updated_at=now,
            **fields,
        )
        self.bookings[booking.id] = booking
        return booking

    async def set_status(
        self,
        booking_id: int,
        *,
        expected: Iterable[BookingStatus],
        target: BookingStatus,
        expected_rooms: Optional[int] = None,
        values: Optional[dict[str, Any]] = None,
    ) -> bool:
        await asyncio.sleep(0)
        booking = self.bookings.get(booking_id)
        if booking is None or booking.status not in set(expected):
            return False
        if expected_rooms is not None and booking.number_of_rooms != expected_rooms:
            return False
        booking.status = target
        for key, value in (values or {}).items():
            setattr(booking, key, value)
        return True

    async def set_room_count(
        self,
        booking_id: int,
        *,
        expected_rooms: int,
        number_of_rooms: int,
        number_of_guests: int,
        total_amount: float,
    ) -> bool:
        booking = self.bookings.get(booking_id)
        if booking is None or booking.status != BookingStatus.CONFIRMED or booking.number_of_rooms != expected_rooms:
            return False
        booking.number_of_rooms = number_of_rooms
        booking.number_of_guests = number_of_guests
        booking.total_amount = total_amount
        return True

    async def list_by_user(
        self,
        user_id: int,
        status: BookingStatus | None = None,
        check_in_from: date | None = None,
        check_in_to: date | None = None,
    ) -> List[Booking]:
        rows = [
            b
            for b in self.bookings.values()
            if b.user_id == user_id
            and (status is None or b.status == status)
            and (check_in_from is None or b.check_in_date >= check_in_from)
            and (check_in_to is None or b.check_in_date <= check_in_to)
        ]
        return sorted(rows, key=lambda b: b.id, reverse=True)

    async def list_all(self, status: BookingStatus | None = None) -> List[Booking]:
        return [b for b in self.bookings.values() if status is None or b.status == status]

    async def list_holding(self, user_id: int | None = None) -> List[Booking]:
        return [
            b
            for b in self.bookings.values()
            if b.status in HOLDING_STATUSES and (user_id is None or b.user_id == user_id)
        ]

    async def count_holding(self, hotel_id: int) -> int:
        return sum(1 for b in self.bookings.values() if b.hotel_id == hotel_id and b.status in HOLDING_STATUSES)

    async def delete_many(self, user_id: int | None = None) -> int:
        doomed = [
            b.id
            for b in self.bookings.values()
            if b.status not in HOLDING_STATUSES and (user_id is None or b.user_id == user_id)
        ]
        for booking_id in doomed:
            del self.bookings[booking_id]
        return len(doomed)


class FakePaymentRepo:
    def __init__(self) -> None:
        self.payments: List[Payment] = []

    async def create(
        self,
        *,
        user_id: int,
        booking_id: int,
        amount: float,
        payment_status: PaymentStatus,
        payment_method: PaymentMethod,
        transaction_id: str | None = None,
        order_id: str | None = None,
    ) -> Payment:
        payment = Payment(
            id=len(self.payments) + 1,
            user_id=user_id,
            booking_id=booking_id,
            amount=amount,
            payment_status=payment_status,
            payment_method=payment_method,
            transaction_id=transaction_id,
            order_id=order_id,
            created_at=_utc_now_naive(),
        )
        self.payments.append(payment)
        return payment


@pytest.fixture
def hotel_repo() -> FakeHotelRepo:
    return FakeHotelRepo()


@pytest.fixture
def booking_repo() -> FakeBookingRepo:
    return FakeBookingRepo()


@pytest.fixture
def payment_repo() -> FakePaymentRepo:
    return FakePaymentRepo()


@pytest.fixture
def guest() -> GuestDetails:
    return GuestDetails(name="Asha Rao", email="asha@example.com", phone="9876543210")


@pytest.fixture
def user() -> Actor:
    return Actor(id=7, role=UserRole.USER)


@pytest.fixture
def admin() -> Actor:
    return Actor(id=1, role=UserRole.ADMIN)


@pytest.fixture
def rooms_held(booking_repo: FakeBookingRepo) -> Callable[[int], int]:
    """Sum of rooms held by pending/confirmed bookings of a hotel."""

    def _held(hotel_id: int) -> int:
        return sum(
            b.number_of_rooms
            for b in booking_repo.bookings.values()
            if b.hotel_id == hotel_id and b.status in HOLDING_STATUSES
        )

    return _held
