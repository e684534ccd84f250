from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_serializer, field_validator

from .domain.services import GuestDetails
from .models import (
    DEFAULT_CHECK_IN_TIME,
    DEFAULT_CHECK_OUT_TIME,
    DEFAULT_TOTAL_ROOMS,
    HOTEL_FACILITIES,
    Booking,
    BookingStatus,
    Hotel,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Room,
    User,
    UserRole,
)
from .utils.time import utc_naive_to_local

_TIME_OF_DAY = r"^([01]\d|2[0-3]):[0-5]\d$"
_PINCODE = r"^[0-9]{6}$"


def _check_facilities(values: List[str]) -> List[str]:
    unknown = [v for v in values if v not in HOTEL_FACILITIES]
    if unknown:
        raise ValueError(f"unknown facilities: {', '.join(unknown)}")
    return values


class HotelCreate(BaseModel):
    name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    pincode: str = Field(pattern=_PINCODE)
    price: float = Field(ge=0)
    description: Optional[str] = None
    facilities: List[str] = Field(default_factory=list)
    total_rooms: int = Field(default=DEFAULT_TOTAL_ROOMS, ge=1)

    @field_validator("facilities")
    @classmethod
    def _facilities(cls, values: List[str]) -> List[str]:
        return _check_facilities(values)


class HotelUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    pincode: Optional[str] = Field(default=None, pattern=_PINCODE)
    price: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    facilities: Optional[List[str]] = None

    @field_validator("facilities")
    @classmethod
    def _facilities(cls, values: Optional[List[str]]) -> Optional[List[str]]:
        return None if values is None else _check_facilities(values)


class HotelRead(BaseModel):
    hotel_id: int
    name: str
    location: str
    pincode: str
    price: float
    description: Optional[str]
    facilities: List[str]
    total_rooms: int
    available_rooms: int
    author_id: Optional[int]

    @classmethod
    def from_db(cls, *, hotel: Hotel) -> "HotelRead":
        return cls(
            hotel_id=hotel.id,
            name=hotel.name,
            location=hotel.location,
            pincode=hotel.pincode,
            price=hotel.price,
            description=hotel.description,
            facilities=list(hotel.facilities or []),
            total_rooms=hotel.total_rooms,
            available_rooms=hotel.available_rooms,
            author_id=hotel.author_id,
        )


class RoomCreate(BaseModel):
    room_type: str = Field(min_length=1)
    capacity: int = Field(default=2, ge=1)
    price_per_night: float = Field(ge=0)


class RoomRead(BaseModel):
    room_id: int
    hotel_id: int
    room_type: str
    capacity: int
    price_per_night: float

    @classmethod
    def from_db(cls, *, room: Room) -> "RoomRead":
        return cls(
            room_id=room.id,
            hotel_id=room.hotel_id,
            room_type=room.room_type,
            capacity=room.capacity,
            price_per_night=room.price_per_night,
        )


class GuestDetailsIn(BaseModel):
    name: str
    email: EmailStr
    phone: str

    def to_domain(self) -> GuestDetails:
        return GuestDetails(name=self.name, email=str(self.email), phone=self.phone)


class BookingCreate(BaseModel):
    room_id: Optional[int] = None
    number_of_rooms: int = Field(ge=1)
    number_of_guests: int = Field(ge=1)
    check_in_date: date
    check_out_date: date
    check_in_time: str = Field(default=DEFAULT_CHECK_IN_TIME, pattern=_TIME_OF_DAY)
    check_out_time: str = Field(default=DEFAULT_CHECK_OUT_TIME, pattern=_TIME_OF_DAY)
    guest_details: GuestDetailsIn
    special_requests: Optional[str] = Field(default=None, max_length=2000)


class BookingTransition(BaseModel):
    status: BookingStatus


class BookingRoomCountUpdate(BaseModel):
    number_of_rooms: int = Field(ge=1)
    number_of_guests: int = Field(ge=1)


class BookingRead(BaseModel):
    booking_id: int
    user_id: int
    hotel_id: int
    room_id: Optional[int]
    check_in_date: date
    check_out_date: date
    check_in_time: str
    check_out_time: str
    number_of_nights: int
    number_of_rooms: int
    number_of_guests: int
    guest_name: str
    guest_email: str
    guest_phone: str
    special_requests: Optional[str]
    price_per_night: float
    total_amount: float
    status: BookingStatus
    is_checked_out: bool
    actual_check_out_time: Optional[datetime]
    created_at: datetime

    @field_serializer("actual_check_out_time", "created_at")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return None if dt is None else utc_naive_to_local(dt).isoformat()

    @classmethod
    def from_db(cls, *, booking: Booking) -> "BookingRead":
        return cls(
            booking_id=booking.id,
            user_id=booking.user_id,
            hotel_id=booking.hotel_id,
            room_id=booking.room_id,
            check_in_date=booking.check_in_date,
            check_out_date=booking.check_out_date,
            check_in_time=booking.check_in_time,
            check_out_time=booking.check_out_time,
            number_of_nights=booking.number_of_nights,
            number_of_rooms=booking.number_of_rooms,
            number_of_guests=booking.number_of_guests,
            guest_name=booking.guest_name,
            guest_email=booking.guest_email,
            guest_phone=booking.guest_phone,
            special_requests=booking.special_requests,
            price_per_night=booking.price_per_night,
            total_amount=booking.total_amount,
            status=booking.status,
            is_checked_out=booking.is_checked_out,
            actual_check_out_time=booking.actual_check_out_time,
            created_at=booking.created_at,
        )


class BookingsCleared(BaseModel):
    deleted: int


class GatewayPaymentVerify(BaseModel):
    order_id: str = Field(min_length=1)
    payment_id: str = Field(min_length=1)
    signature: str = Field(min_length=1)


class PaymentRead(BaseModel):
    payment_id: int
    booking_id: int
    amount: float
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    transaction_id: Optional[str]
    order_id: Optional[str]
    booking: BookingRead

    @classmethod
    def from_db(cls, *, payment: Payment, booking: Booking) -> "PaymentRead":
        return cls(
            payment_id=payment.id,
            booking_id=payment.booking_id,
            amount=payment.amount,
            payment_status=payment.payment_status,
            payment_method=payment.payment_method,
            transaction_id=payment.transaction_id,
            order_id=payment.order_id,
            booking=BookingRead.from_db(booking=booking),
        )


class UserRead(BaseModel):
    user_id: int
    name: str
    email: str
    phone: Optional[str]
    role: UserRole
    created_at: datetime

    @field_serializer("created_at")
    def _ser_created_at(self, dt: datetime) -> str:
        return utc_naive_to_local(dt).isoformat()

    @classmethod
    def from_db(cls, *, user: User) -> "UserRead":
        return cls(
            user_id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            role=user.role,
            created_at=user.created_at,
        )
