from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Optional

from sqlalchemy import JSON, CheckConstraint, Enum, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import BigInteger, Boolean, Date, DateTime, Integer, Numeric, String, Text

DEFAULT_CHECK_IN_TIME = "14:00"
DEFAULT_CHECK_OUT_TIME = "11:00"
DEFAULT_TOTAL_ROOMS = 20
MAX_GUESTS_PER_ROOM = 2

HOTEL_FACILITIES = (
    "AC Rooms",
    "Free WiFi",
    "Parking Facility",
    "Elevator",
    "Food Services (Chargeable)",
    "Daily House Keeping",
)


class Base(DeclarativeBase):
    pass


def _enum_column(enum_cls: type[StrEnum]) -> Enum:
    return Enum(
        enum_cls,
        values_callable=lambda cls: [e.value for e in cls],
        native_enum=False,
    )


class UserRole(StrEnum):
    USER = "user"
    ADMIN = "admin"


class BookingStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"


class PaymentMethod(StrEnum):
    COD = "COD"
    ONLINE = "online"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    role: Mapped[UserRole] = mapped_column(_enum_column(UserRole), nullable=False, default=UserRole.USER)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    auth_provider: Mapped[str] = mapped_column(String(50), nullable=False, default="local")
    auth_provider_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)


class Hotel(Base):
    __tablename__ = "hotels"
    __table_args__ = (
        CheckConstraint("total_rooms >= 1", name="chk_hotels_total_rooms"),
        CheckConstraint(
            "available_rooms >= 0 AND available_rooms <= total_rooms",
            name="chk_hotels_available_rooms",
        ),
        CheckConstraint("price >= 0", name="chk_hotels_price"),
        Index("idx_hotels_location", "location"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    pincode: Mapped[str] = mapped_column(String(6), nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    facilities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    total_rooms: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_TOTAL_ROOMS)
    available_rooms: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_TOTAL_ROOMS)
    author_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    rooms: Mapped[list["Room"]] = relationship(back_populates="hotel")
    bookings: Mapped[list["Booking"]] = relationship(back_populates="hotel")


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="chk_rooms_capacity"),
        CheckConstraint("price_per_night >= 0", name="chk_rooms_price"),
        Index("idx_rooms_hotel", "hotel_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id"), nullable=False)
    room_type: Mapped[str] = mapped_column(String(100), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=MAX_GUESTS_PER_ROOM)
    price_per_night: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)

    hotel: Mapped["Hotel"] = relationship(back_populates="rooms")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("number_of_rooms >= 1", name="chk_bookings_rooms"),
        CheckConstraint("number_of_guests >= 1", name="chk_bookings_guests"),
        CheckConstraint(
            f"number_of_guests <= number_of_rooms * {MAX_GUESTS_PER_ROOM}",
            name="chk_bookings_occupancy",
        ),
        CheckConstraint("number_of_nights >= 1", name="chk_bookings_nights"),
        CheckConstraint("total_amount >= 0", name="chk_bookings_total"),
        CheckConstraint("check_in_date < check_out_date", name="chk_bookings_dates"),
        Index("idx_bookings_user", "user_id"),
        Index("idx_bookings_hotel_status", "hotel_id", "status"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    hotel_id: Mapped[int] = mapped_column(ForeignKey("hotels.id"), nullable=False)
    room_id: Mapped[Optional[int]] = mapped_column(ForeignKey("rooms.id"), nullable=True)
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_out_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_in_time: Mapped[str] = mapped_column(String(5), nullable=False, default=DEFAULT_CHECK_IN_TIME)
    check_out_time: Mapped[str] = mapped_column(String(5), nullable=False, default=DEFAULT_CHECK_OUT_TIME)
    number_of_nights: Mapped[int] = mapped_column(Integer, nullable=False)
    number_of_rooms: Mapped[int] = mapped_column(Integer, nullable=False)
    number_of_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    special_requests: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price_per_night: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    total_amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        _enum_column(BookingStatus),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    is_checked_out: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    actual_check_out_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    hotel: Mapped["Hotel"] = relationship(back_populates="bookings")


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="chk_payments_amount"),
        Index("idx_payments_booking", "booking_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    booking_id: Mapped[int] = mapped_column(ForeignKey("bookings.id"), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        _enum_column(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        _enum_column(PaymentMethod),
        nullable=False,
        default=PaymentMethod.COD,
    )
    transaction_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    order_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
