from __future__ import annotations

from datetime import date
from typing import Any, Iterable, List, Optional

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.repositories import BookingRepository, HotelRepository, PaymentRepository, UserRepository
from ..domain.state_machine import HOLDING_STATUSES
from ..models import Booking, BookingStatus, Hotel, Payment, PaymentMethod, PaymentStatus, Room, User, UserRole
from ..utils.time import utc_now_naive


class SqlAlchemyHotelRepository(HotelRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, hotel_id: int) -> Hotel | None:
        return await self.session.get(Hotel, hotel_id, populate_existing=True)

    async def get_for_update(self, hotel_id: int) -> Hotel | None:
        stmt = select(Hotel).where(Hotel.id == hotel_id).with_for_update()
        return await self.session.scalar(stmt.execution_options(populate_existing=True))

    async def list_hotels(self, location: str | None = None) -> List[Hotel]:
        stmt = select(Hotel).order_by(Hotel.name)
        if location:
            stmt = stmt.where(Hotel.location.ilike(f"%{location}%"))
        return list((await self.session.scalars(stmt)).all())

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
    ) -> Hotel:
        now = utc_now_naive()
        hotel = Hotel(
            name=name,
            location=location,
            pincode=pincode,
            price=price,
            description=description,
            facilities=list(facilities),
            total_rooms=total_rooms,
            available_rooms=total_rooms,
            author_id=author_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(hotel)
        await self.session.flush()
        return hotel

    async def save(self, hotel: Hotel) -> Hotel:
        hotel.updated_at = utc_now_naive()
        self.session.add(hotel)
        await self.session.flush()
        return hotel

    async def delete(self, hotel: Hotel) -> None:
        booking_ids = select(Booking.id).where(Booking.hotel_id == hotel.id)
        await self.session.execute(delete(Payment).where(Payment.booking_id.in_(booking_ids)))
        await self.session.execute(delete(Booking).where(Booking.hotel_id == hotel.id))
        await self.session.execute(delete(Room).where(Room.hotel_id == hotel.id))
        await self.session.execute(delete(Hotel).where(Hotel.id == hotel.id))

    async def get_room(self, room_id: int) -> Room | None:
        return await self.session.get(Room, room_id)

    async def list_rooms(self, hotel_id: int) -> List[Room]:
        stmt = select(Room).where(Room.hotel_id == hotel_id).order_by(Room.price_per_night)
        return list((await self.session.scalars(stmt)).all())

    async def add_room(
        self,
        *,
        hotel_id: int,
        room_type: str,
        capacity: int,
        price_per_night: float,
    ) -> Room:
        room = Room(
            hotel_id=hotel_id,
            room_type=room_type,
            capacity=capacity,
            price_per_night=price_per_night,
        )
        self.session.add(room)
        await self.session.flush()
        return room

    async def take_rooms(self, hotel_id: int, count: int) -> bool:
        stmt = (
            update(Hotel)
            .where(Hotel.id == hotel_id, Hotel.available_rooms >= count)
            .values(available_rooms=Hotel.available_rooms - count, updated_at=utc_now_naive())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def return_rooms(self, hotel_id: int, count: int) -> bool:
        credited = case(
            (Hotel.available_rooms + count > Hotel.total_rooms, Hotel.total_rooms),
            else_=Hotel.available_rooms + count,
        )
        stmt = (
            update(Hotel)
            .where(Hotel.id == hotel_id)
            .values(available_rooms=credited, updated_at=utc_now_naive())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1


class SqlAlchemyBookingRepository(BookingRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, booking_id: int) -> Booking | None:
        return await self.session.get(Booking, booking_id, populate_existing=True)

    async def create(self, **fields: Any) -> Booking:
        now = utc_now_naive()
        booking = Booking(
            **fields,
            is_checked_out=False,
            created_at=now,
            updated_at=now,
        )
        # Savepoint so a failed insert leaves the outer transaction usable for compensation.
        async with self.session.begin_nested():
            self.session.add(booking)
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
        conditions = [Booking.id == booking_id, Booking.status.in_(list(expected))]
        if expected_rooms is not None:
            conditions.append(Booking.number_of_rooms == expected_rooms)
        stmt = (
            update(Booking)
            .where(*conditions)
            .values(status=target, updated_at=utc_now_naive(), **(values or {}))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def set_room_count(
        self,
        booking_id: int,
        *,
        expected_rooms: int,
        number_of_rooms: int,
        number_of_guests: int,
        total_amount: float,
    ) -> bool:
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status == BookingStatus.CONFIRMED,
                Booking.number_of_rooms == expected_rooms,
            )
            .values(
                number_of_rooms=number_of_rooms,
                number_of_guests=number_of_guests,
                total_amount=total_amount,
                updated_at=utc_now_naive(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_by_user(
        self,
        user_id: int,
        status: BookingStatus | None = None,
        check_in_from: date | None = None,
        check_in_to: date | None = None,
    ) -> List[Booking]:
        stmt = select(Booking).where(Booking.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Booking.status == status)
        if check_in_from is not None:
            stmt = stmt.where(Booking.check_in_date >= check_in_from)
        if check_in_to is not None:
            stmt = stmt.where(Booking.check_in_date <= check_in_to)
        stmt = stmt.order_by(Booking.created_at.desc(), Booking.id.desc())
        return list((await self.session.scalars(stmt)).all())

    async def list_all(self, status: BookingStatus | None = None) -> List[Booking]:
        stmt = select(Booking)
        if status is not None:
            stmt = stmt.where(Booking.status == status)
        stmt = stmt.order_by(Booking.created_at.desc(), Booking.id.desc())
        return list((await self.session.scalars(stmt)).all())

    async def list_holding(self, user_id: int | None = None) -> List[Booking]:
        stmt = select(Booking).where(Booking.status.in_(list(HOLDING_STATUSES)))
        if user_id is not None:
            stmt = stmt.where(Booking.user_id == user_id)
        return list((await self.session.scalars(stmt)).all())

    async def count_holding(self, hotel_id: int) -> int:
        stmt = select(func.count(Booking.id)).where(
            Booking.hotel_id == hotel_id,
            Booking.status.in_(list(HOLDING_STATUSES)),
        )
        return int(await self.session.scalar(stmt) or 0)

    async def delete_many(self, user_id: int | None = None) -> int:
        """Delete bookings that no longer hold inventory, with their payments."""
        conditions = [Booking.status.not_in(list(HOLDING_STATUSES))]
        if user_id is not None:
            conditions.append(Booking.user_id == user_id)
        booking_ids = select(Booking.id).where(*conditions)
        await self.session.execute(
            delete(Payment).where(Payment.booking_id.in_(booking_ids)).execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            delete(Booking).where(*conditions).execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)


class SqlAlchemyPaymentRepository(PaymentRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

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
            user_id=user_id,
            booking_id=booking_id,
            amount=amount,
            payment_status=payment_status,
            payment_method=payment_method,
            transaction_id=transaction_id,
            order_id=order_id,
            created_at=utc_now_naive(),
        )
        self.session.add(payment)
        await self.session.flush()
        return payment


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_users(self, role: UserRole | None = None) -> List[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
        if role is not None:
            stmt = stmt.where(User.role == role)
        return list((await self.session.scalars(stmt)).all())
