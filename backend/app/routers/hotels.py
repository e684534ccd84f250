from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_actor, get_session, require_admin
from ..domain.errors import BookingError
from ..domain.services import Actor
from ..infrastructure.repositories import SqlAlchemyBookingRepository, SqlAlchemyHotelRepository
from ..schemas import HotelCreate, HotelRead, HotelUpdate, RoomCreate, RoomRead
from ..usecases import hotels as hotel_usecase
from .errors import to_http_exception

router = APIRouter(prefix="/hotels", tags=["hotels"])


@router.get("", response_model=List[HotelRead])
async def list_hotels(
    location: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> list[HotelRead]:
    hotel_repo = SqlAlchemyHotelRepository(session)
    hotels = await hotel_usecase.list_hotels(hotel_repo, location=location)
    return [HotelRead.from_db(hotel=h) for h in hotels]


@router.post("", response_model=HotelRead, status_code=status.HTTP_201_CREATED)
async def create_hotel(
    payload: HotelCreate,
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(require_admin),
) -> HotelRead:
    hotel_repo = SqlAlchemyHotelRepository(session)
    async with session.begin():
        try:
            hotel = await hotel_usecase.create_hotel(hotel_repo, author_id=actor.id, **payload.model_dump())
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return HotelRead.from_db(hotel=hotel)


@router.get("/{hotel_id}", response_model=HotelRead)
async def get_hotel(
    hotel_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
) -> HotelRead:
    hotel_repo = SqlAlchemyHotelRepository(session)
    try:
        hotel = await hotel_usecase.get_hotel(hotel_repo, hotel_id=hotel_id)
    except BookingError as exc:
        raise to_http_exception(exc)
    return HotelRead.from_db(hotel=hotel)


@router.patch("/{hotel_id}", response_model=HotelRead)
async def update_hotel(
    payload: HotelUpdate,
    hotel_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> HotelRead:
    hotel_repo = SqlAlchemyHotelRepository(session)
    async with session.begin():
        try:
            hotel = await hotel_usecase.update_hotel(
                hotel_repo,
                hotel_id=hotel_id,
                actor=actor,
                changes=payload.model_dump(exclude_unset=True),
            )
        except BookingError as exc:
            raise to_http_exception(exc)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return HotelRead.from_db(hotel=hotel)


@router.delete("/{hotel_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_hotel(
    hotel_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> Response:
    hotel_repo = SqlAlchemyHotelRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    async with session.begin():
        try:
            await hotel_usecase.delete_hotel(hotel_repo, booking_repo, hotel_id=hotel_id, actor=actor)
        except BookingError as exc:
            raise to_http_exception(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{hotel_id}/rooms", response_model=List[RoomRead])
async def list_rooms(
    hotel_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
) -> list[RoomRead]:
    hotel_repo = SqlAlchemyHotelRepository(session)
    try:
        rooms = await hotel_usecase.list_rooms(hotel_repo, hotel_id=hotel_id)
    except BookingError as exc:
        raise to_http_exception(exc)
    return [RoomRead.from_db(room=r) for r in rooms]


@router.post(
    "/{hotel_id}/rooms",
    response_model=RoomRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def add_room(
    payload: RoomCreate,
    hotel_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
) -> RoomRead:
    hotel_repo = SqlAlchemyHotelRepository(session)
    async with session.begin():
        try:
            room = await hotel_usecase.add_room(hotel_repo, hotel_id=hotel_id, **payload.model_dump())
        except BookingError as exc:
            raise to_http_exception(exc)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return RoomRead.from_db(room=room)
