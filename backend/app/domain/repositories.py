from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional, Protocol

from ..models import Booking, BookingStatus, Hotel, Payment, PaymentMethod, PaymentStatus, Room, User, UserRole


class HotelRepository(Protocol):
    async def get(self, hotel_id: int) -> Hotel | None: ...

    async def get_for_update(self, hotel_id: int) -> Hotel | None: ...

    async def list_hotels(self, location: str | None = None) -> list[Hotel]: ...

    async def create(
        self,
        *,
        name: str,
        location: str,
        pincode: str,
        price: float,
        description: str | None,
        facilities: list[str],
        total_rooms: int,
        author_id: int | None,
    ) -> Hotel: ...

    async def save(self, hotel: Hotel) -> Hotel: ...

    async def delete(self, hotel: Hotel) -> None: ...

    async def get_room(self, room_id: int) -> Room | None: ...

    async def list_rooms(self, hotel_id: int) -> list[Room]: ...

    async def add_room(
        self,
        *,
        hotel_id: int,
        room_type: str,
        capacity: int,
        price_per_night: float,
    ) -> Room: ...

    async def take_rooms(self, hotel_id: int, count: int) -> bool:
        """Atomically subtract `count` if at least that many rooms are free; False otherwise."""
        ...

    async def return_rooms(self, hotel_id: int, count: int) -> bool:
        """Atomically add `count` back, capped at total_rooms; False if the hotel is missing."""
        ...


class BookingRepository(Protocol):
    async def get(self, booking_id: int) -> Booking | None: ...

    async def create(
        self,
        *,
        user_id: int,
        hotel_id: int,
        room_id: int | None,
        check_in_date: date,
        check_out_date: date,
        check_in_time: str,
        check_out_time: str,
        number_of_nights: int,
        number_of_rooms: int,
        number_of_guests: int,
        guest_name: str,
        guest_email: str,
        guest_phone: str,
        special_requests: str | None,
        price_per_night: float,
        total_amount: float,
        status: BookingStatus,
    ) -> Booking: ...

    async def set_status(
        self,
        booking_id: int,
        *,
        expected: Iterable[BookingStatus],
        target: BookingStatus,
        expected_rooms: Optional[int] = None,
        values: Optional[dict[str, Any]] = None,
    ) -> bool:
        """Compare-and-swap on status; True only if this call moved the booking."""
        ...

    async def set_room_count(
        self,
        booking_id: int,
        *,
        expected_rooms: int,
        number_of_rooms: int,
        number_of_guests: int,
        total_amount: float,
    ) -> bool:
        """Change rooms/guests of a confirmed booking whose room count is still `expected_rooms`."""
        ...

    async def list_by_user(
        self,
        user_id: int,
        status: BookingStatus | None = None,
        check_in_from: date | None = None,
        check_in_to: date | None = None,
    ) -> list[Booking]: ...

    async def list_all(self, status: BookingStatus | None = None) -> list[Booking]: ...

    async def list_holding(self, user_id: int | None = None) -> list[Booking]: ...

    async def count_holding(self, hotel_id: int) -> int: ...

    async def delete_many(self, user_id: int | None = None) -> int: ...


class PaymentRepository(Protocol):
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
    ) -> Payment: ...


class UserRepository(Protocol):
    async def list_users(self, role: UserRole | None = None) -> list[User]: ...
