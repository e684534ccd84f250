from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_session, require_admin
from ..domain.errors import BookingError
from ..domain.services import Actor
from ..infrastructure.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyHotelRepository,
    SqlAlchemyUserRepository,
)
from ..models import BookingStatus, UserRole
from ..schemas import BookingRead, BookingsCleared, HotelRead, UserRead
from ..usecases import bookings as booking_usecase
from ..usecases import hotels as hotel_usecase
from ..usecases import users as user_usecase
from ..utils.audit_log import emit_audit_log
from .errors import audit_failure, to_http_exception

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/hotels", response_model=List[HotelRead])
async def dashboard_hotels(session: AsyncSession = Depends(get_session)) -> list[HotelRead]:
    hotel_repo = SqlAlchemyHotelRepository(session)
    hotels = await hotel_usecase.list_hotels(hotel_repo)
    return [HotelRead.from_db(hotel=h) for h in hotels]


@router.get("/users", response_model=List[UserRead])
async def list_users(
    role: Optional[UserRole] = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> list[UserRead]:
    user_repo = SqlAlchemyUserRepository(session)
    users = await user_usecase.list_users(user_repo, role=role)
    return [UserRead.from_db(user=u) for u in users]


@router.get("/bookings", response_model=List[BookingRead])
async def list_bookings(
    status_filter: Optional[BookingStatus] = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_session),
) -> list[BookingRead]:
    booking_repo = SqlAlchemyBookingRepository(session)
    rows = await booking_usecase.list_all_bookings(booking_repo, status=status_filter)
    return [BookingRead.from_db(booking=b) for b in rows]


@router.delete("/bookings", response_model=BookingsCleared)
async def clear_all_bookings(
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(require_admin),
) -> BookingsCleared:
    hotel_repo = SqlAlchemyHotelRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    async with session.begin():
        try:
            deleted = await booking_usecase.clear_bookings(hotel_repo, booking_repo)
        except BookingError as exc:
            raise to_http_exception(exc)
        try:
            emit_audit_log(
                action="bookings.cleared",
                initiator="admin",
                booking_id=None,
                hotel_id=None,
                user_id=actor.id,
                number_of_rooms=None,
                status_from=None,
                status_to=None,
                extra={"deleted": deleted, "scope": "all"},
            )
        except RuntimeError:
            raise audit_failure()
    return BookingsCleared(deleted=deleted)
