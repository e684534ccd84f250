from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_actor, get_session
from ..domain.errors import BookingError
from ..domain.services import Actor
from ..infrastructure.repositories import SqlAlchemyBookingRepository, SqlAlchemyHotelRepository
from ..models import BookingStatus
from ..schemas import BookingCreate, BookingRead, BookingRoomCountUpdate, BookingsCleared, BookingTransition
from ..usecases import bookings as booking_usecase
from ..utils.audit_log import action_for_status, emit_audit_log
from .errors import audit_failure, to_http_exception

router = APIRouter(prefix="", tags=["bookings"])


def _initiator(actor: Actor, owner_id: int) -> str:
    return "user" if actor.id == owner_id else "admin"


@router.post("/hotels/{hotel_id}/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    hotel_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> BookingRead:
    hotel_repo = SqlAlchemyHotelRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    async with session.begin():
        try:
            booking = await booking_usecase.create_booking(
                hotel_repo,
                booking_repo,
                hotel_id=hotel_id,
                user_id=actor.id,
                room_id=payload.room_id,
                number_of_rooms=payload.number_of_rooms,
                number_of_guests=payload.number_of_guests,
                check_in_date=payload.check_in_date,
                check_out_date=payload.check_out_date,
                check_in_time=payload.check_in_time,
                check_out_time=payload.check_out_time,
                guest=payload.guest_details.to_domain(),
                special_requests=payload.special_requests,
            )
        except BookingError as exc:
            raise to_http_exception(exc)

        try:
            emit_audit_log(
                action="booking.created",
                initiator="user",
                booking_id=booking.id,
                hotel_id=booking.hotel_id,
                user_id=booking.user_id,
                number_of_rooms=booking.number_of_rooms,
                status_from=None,
                status_to=booking.status,
            )
        except RuntimeError:
            raise audit_failure()

    return BookingRead.from_db(booking=booking)


@router.get("/me/bookings", response_model=List[BookingRead])
async def list_my_bookings(
    status_filter: Optional[BookingStatus] = Query(default=None, alias="status"),
    check_in_from: Optional[date] = Query(default=None),
    check_in_to: Optional[date] = Query(default=None),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> list[BookingRead]:
    booking_repo = SqlAlchemyBookingRepository(session)
    rows = await booking_usecase.list_user_bookings(
        booking_repo,
        user_id=actor.id,
        status=status_filter,
        check_in_from=check_in_from,
        check_in_to=check_in_to,
    )
    return [BookingRead.from_db(booking=b) for b in rows]


@router.delete("/me/bookings", response_model=BookingsCleared)
async def clear_my_bookings(
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> BookingsCleared:
    hotel_repo = SqlAlchemyHotelRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    async with session.begin():
        try:
            deleted = await booking_usecase.clear_bookings(hotel_repo, booking_repo, user_id=actor.id)
        except BookingError as exc:
            raise to_http_exception(exc)
        try:
            emit_audit_log(
                action="bookings.cleared",
                initiator="user",
                booking_id=None,
                hotel_id=None,
                user_id=actor.id,
                number_of_rooms=None,
                status_from=None,
                status_to=None,
                extra={"deleted": deleted},
            )
        except RuntimeError:
            raise audit_failure()
    return BookingsCleared(deleted=deleted)


@router.get("/bookings/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> BookingRead:
    booking_repo = SqlAlchemyBookingRepository(session)
    try:
        booking = await booking_usecase.get_booking(booking_repo, booking_id=booking_id, actor=actor)
    except BookingError as exc:
        raise to_http_exception(exc)
    return BookingRead.from_db(booking=booking)


@router.post("/bookings/{booking_id}/transition", response_model=BookingRead)
async def transition_booking(
    payload: BookingTransition,
    booking_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> BookingRead:
    hotel_repo = SqlAlchemyHotelRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    async with session.begin():
        try:
            before = await booking_usecase.get_booking(booking_repo, booking_id=booking_id, actor=actor)
            status_from = before.status
            booking = await booking_usecase.transition_booking(
                hotel_repo,
                booking_repo,
                booking_id=booking_id,
                target_status=payload.status,
                actor=actor,
            )
        except BookingError as exc:
            raise to_http_exception(exc)

        try:
            emit_audit_log(
                action=action_for_status(status_from, booking.status),
                initiator=_initiator(actor, booking.user_id),  # type: ignore[arg-type]
                booking_id=booking.id,
                hotel_id=booking.hotel_id,
                user_id=booking.user_id,
                number_of_rooms=booking.number_of_rooms,
                status_from=status_from,
                status_to=booking.status,
            )
        except RuntimeError:
            raise audit_failure()

    return BookingRead.from_db(booking=booking)


@router.patch("/bookings/{booking_id}/rooms", response_model=BookingRead)
async def update_booking_rooms(
    payload: BookingRoomCountUpdate,
    booking_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> BookingRead:
    hotel_repo = SqlAlchemyHotelRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    async with session.begin():
        try:
            before = await booking_usecase.get_booking(booking_repo, booking_id=booking_id, actor=actor)
            rooms_from = before.number_of_rooms
            booking = await booking_usecase.update_booking_room_count(
                hotel_repo,
                booking_repo,
                booking_id=booking_id,
                number_of_rooms=payload.number_of_rooms,
                number_of_guests=payload.number_of_guests,
            )
        except BookingError as exc:
            raise to_http_exception(exc)

        try:
            emit_audit_log(
                action="booking.rooms_updated",
                initiator=_initiator(actor, booking.user_id),  # type: ignore[arg-type]
                booking_id=booking.id,
                hotel_id=booking.hotel_id,
                user_id=booking.user_id,
                number_of_rooms=booking.number_of_rooms,
                status_from=booking.status,
                status_to=booking.status,
                extra={"rooms_from": rooms_from},
            )
        except RuntimeError:
            raise audit_failure()

    return BookingRead.from_db(booking=booking)
