import logging
from datetime import date
from typing import Any, Iterable, Optional

from ..domain.errors import InvalidTransitionError, NotFoundError, PermissionDeniedError
from ..domain.repositories import BookingRepository, HotelRepository
from ..domain.services import Actor, GuestDetails, compute_total, quote_booking, validate_occupancy
from ..domain.state_machine import InventoryEffect, inventory_effect, validate_transition
from ..models import DEFAULT_CHECK_IN_TIME, DEFAULT_CHECK_OUT_TIME, Booking, BookingStatus
from ..utils.time import utc_now_naive
from . import inventory

logger = logging.getLogger(__name__)

# A status compare-and-swap only misses when another request changed the booking
# between our read and write; re-reading a few times settles it.
_CAS_ATTEMPTS = 3


async def create_booking(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    hotel_id: int,
    user_id: int,
    number_of_rooms: int,
    number_of_guests: int,
    check_in_date: date,
    check_out_date: date,
    guest: GuestDetails,
    room_id: Optional[int] = None,
    check_in_time: str = DEFAULT_CHECK_IN_TIME,
    check_out_time: str = DEFAULT_CHECK_OUT_TIME,
    special_requests: Optional[str] = None,
) -> Booking:
    hotel = await hotel_repo.get(hotel_id)
    if hotel is None:
        raise NotFoundError("hotel not found")

    room_price: Optional[float] = None
    if room_id is not None:
        room = await hotel_repo.get_room(room_id)
        if room is None or room.hotel_id != hotel_id:
            raise NotFoundError("room not found")
        room_price = room.price_per_night

    quote = quote_booking(
        guest=guest,
        number_of_rooms=number_of_rooms,
        number_of_guests=number_of_guests,
        check_in=check_in_date,
        check_out=check_out_date,
        hotel_price=hotel.price,
        room_price=room_price,
    )

    await inventory.reserve(hotel_repo, hotel_id=hotel_id, count=number_of_rooms)
    try:
        booking = await booking_repo.create(
            user_id=user_id,
            hotel_id=hotel_id,
            room_id=room_id,
            check_in_date=check_in_date,
            check_out_date=check_out_date,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            number_of_nights=quote.number_of_nights,
            number_of_rooms=number_of_rooms,
            number_of_guests=number_of_guests,
            guest_name=guest.name.strip(),
            guest_email=guest.email.strip(),
            guest_phone=guest.phone.strip(),
            special_requests=special_requests,
            price_per_night=quote.price_per_night,
            total_amount=quote.total_amount,
            status=BookingStatus.PENDING,
        )
    except Exception:
        logger.exception("booking insert failed; releasing %s room(s) at hotel %s", number_of_rooms, hotel_id)
        await inventory.release(hotel_repo, hotel_id=hotel_id, count=number_of_rooms)
        raise
    return booking


async def get_booking(booking_repo: BookingRepository, *, booking_id: int, actor: Actor) -> Booking:
    booking = await _load(booking_repo, booking_id)
    if not actor.may_manage(booking.user_id):
        raise PermissionDeniedError("booking belongs to another user")
    return booking


async def list_user_bookings(
    booking_repo: BookingRepository,
    *,
    user_id: int,
    status: Optional[BookingStatus] = None,
    check_in_from: Optional[date] = None,
    check_in_to: Optional[date] = None,
) -> list[Booking]:
    return await booking_repo.list_by_user(
        user_id,
        status=status,
        check_in_from=check_in_from,
        check_in_to=check_in_to,
    )


async def list_all_bookings(
    booking_repo: BookingRepository,
    *,
    status: Optional[BookingStatus] = None,
) -> list[Booking]:
    return await booking_repo.list_all(status=status)


async def confirm_booking(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    booking_id: int,
) -> Booking:
    """Payment hook: pending -> confirmed. Inventory was already taken at creation."""
    return await _move(
        hotel_repo,
        booking_repo,
        booking_id=booking_id,
        target=BookingStatus.CONFIRMED,
        allowed_from={BookingStatus.PENDING},
    )


async def cancel_booking(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    booking_id: int,
) -> Booking:
    return await _move(
        hotel_repo,
        booking_repo,
        booking_id=booking_id,
        target=BookingStatus.CANCELLED,
        allowed_from={BookingStatus.PENDING, BookingStatus.CONFIRMED},
    )


async def complete_booking(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    booking_id: int,
) -> Booking:
    """Checkout: confirmed -> completed, rooms go back to the hotel."""
    return await _move(
        hotel_repo,
        booking_repo,
        booking_id=booking_id,
        target=BookingStatus.COMPLETED,
        allowed_from={BookingStatus.CONFIRMED},
        values={"is_checked_out": True, "actual_check_out_time": utc_now_naive()},
    )


async def reactivate_booking(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    booking_id: int,
) -> Booking:
    return await _move(
        hotel_repo,
        booking_repo,
        booking_id=booking_id,
        target=BookingStatus.CONFIRMED,
        allowed_from={BookingStatus.CANCELLED, BookingStatus.COMPLETED},
        values={"is_checked_out": False, "actual_check_out_time": None},
    )


async def transition_booking(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    booking_id: int,
    target_status: BookingStatus,
    actor: Actor,
) -> Booking:
    """
    Single entry point for status changes requested by users and admins.
    Owners and admins may cancel or check out; only admins confirm or reactivate here
    (customers confirm through the payment flow).
    """
    booking = await _load(booking_repo, booking_id)
    if not actor.may_manage(booking.user_id):
        raise PermissionDeniedError("booking belongs to another user")

    if target_status == BookingStatus.CANCELLED:
        return await cancel_booking(hotel_repo, booking_repo, booking_id=booking_id)
    if target_status == BookingStatus.COMPLETED:
        return await complete_booking(hotel_repo, booking_repo, booking_id=booking_id)
    if target_status == BookingStatus.CONFIRMED:
        if not actor.is_admin:
            raise PermissionDeniedError("only admins can confirm bookings directly")
        if booking.status == BookingStatus.PENDING:
            return await confirm_booking(hotel_repo, booking_repo, booking_id=booking_id)
        return await reactivate_booking(hotel_repo, booking_repo, booking_id=booking_id)
    raise InvalidTransitionError(current=str(booking.status), target=str(target_status))


async def update_booking_room_count(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    booking_id: int,
    number_of_rooms: int,
    number_of_guests: int,
) -> Booking:
    booking = await _load(booking_repo, booking_id)
    if booking.status != BookingStatus.CONFIRMED:
        raise InvalidTransitionError(current=str(booking.status), target="room count update")
    validate_occupancy(number_of_guests, number_of_rooms)

    old_rooms = booking.number_of_rooms
    if old_rooms == number_of_rooms and booking.number_of_guests == number_of_guests:
        return booking

    total = compute_total(booking.price_per_night, number_of_rooms, booking.number_of_nights)
    await inventory.adjust(hotel_repo, hotel_id=booking.hotel_id, old_count=old_rooms, new_count=number_of_rooms)
    updated = await booking_repo.set_room_count(
        booking.id,
        expected_rooms=old_rooms,
        number_of_rooms=number_of_rooms,
        number_of_guests=number_of_guests,
        total_amount=total,
    )
    if not updated:
        await inventory.adjust(hotel_repo, hotel_id=booking.hotel_id, old_count=number_of_rooms, new_count=old_rooms)
        current = await _load(booking_repo, booking_id)
        raise InvalidTransitionError(current=str(current.status), target="room count update")
    return await _load(booking_repo, booking_id)


async def clear_bookings(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    user_id: Optional[int] = None,
) -> int:
    """
    Bulk delete (all bookings, or one user's). Bookings still holding rooms are
    cancelled first so their inventory returns to the hotels.
    """
    for booking in await booking_repo.list_holding(user_id):
        moved = await booking_repo.set_status(
            booking.id,
            expected={booking.status},
            target=BookingStatus.CANCELLED,
            expected_rooms=booking.number_of_rooms,
        )
        if moved:
            await inventory.release(hotel_repo, hotel_id=booking.hotel_id, count=booking.number_of_rooms)
    deleted = await booking_repo.delete_many(user_id)
    logger.info("cleared %s booking(s) for %s", deleted, "all users" if user_id is None else f"user {user_id}")
    return deleted


async def _load(booking_repo: BookingRepository, booking_id: int) -> Booking:
    booking = await booking_repo.get(booking_id)
    if booking is None:
        raise NotFoundError("booking not found")
    return booking


async def _move(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    booking_id: int,
    target: BookingStatus,
    allowed_from: Iterable[BookingStatus],
    values: Optional[dict[str, Any]] = None,
) -> Booking:
    allowed = frozenset(allowed_from)
    for _ in range(_CAS_ATTEMPTS):
        booking = await _load(booking_repo, booking_id)
        current = booking.status
        if current not in allowed:
            validate_transition(current, target)
            raise InvalidTransitionError(current=str(current), target=str(target))
        effect = inventory_effect(current, target)
        rooms = booking.number_of_rooms

        if effect == InventoryEffect.RESERVE:
            await inventory.reserve(hotel_repo, hotel_id=booking.hotel_id, count=rooms)
        moved = await booking_repo.set_status(
            booking.id,
            expected={current},
            target=target,
            expected_rooms=rooms,
            values=values,
        )
        if moved:
            if effect == InventoryEffect.RELEASE:
                await inventory.release(hotel_repo, hotel_id=booking.hotel_id, count=rooms)
            logger.info("booking %s: %s -> %s", booking.id, current, target)
            return await _load(booking_repo, booking_id)
        if effect == InventoryEffect.RESERVE:
            await inventory.release(hotel_repo, hotel_id=booking.hotel_id, count=rooms)

    booking = await _load(booking_repo, booking_id)
    raise InvalidTransitionError(current=str(booking.status), target=str(target))
