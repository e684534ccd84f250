from typing import Any, Dict, List, Optional

from ..domain.errors import HotelInUseError, NotFoundError, PermissionDeniedError
from ..domain.repositories import BookingRepository, HotelRepository
from ..domain.services import Actor
from ..models import DEFAULT_TOTAL_ROOMS, HOTEL_FACILITIES, Hotel, Room

# Room counters are owned by the inventory ledger and never edited here.
EDITABLE_FIELDS = frozenset({"name", "location", "pincode", "price", "description", "facilities"})
REQUIRED_FIELDS = frozenset({"name", "location", "pincode", "price", "facilities"})


def _check_facilities(facilities: List[str]) -> None:
    unknown = [f for f in facilities if f not in HOTEL_FACILITIES]
    if unknown:
        raise ValueError(f"unknown facilities: {', '.join(unknown)}")


async def create_hotel(
    hotel_repo: HotelRepository,
    *,
    name: str,
    location: str,
    pincode: str,
    price: float,
    description: Optional[str] = None,
    facilities: Optional[List[str]] = None,
    total_rooms: int = DEFAULT_TOTAL_ROOMS,
    author_id: Optional[int] = None,
) -> Hotel:
    if total_rooms < 1:
        raise ValueError("total_rooms must be >= 1")
    if price < 0:
        raise ValueError("price must be >= 0")
    facilities = list(facilities or [])
    _check_facilities(facilities)
    return await hotel_repo.create(
        name=name,
        location=location,
        pincode=pincode,
        price=price,
        description=description,
        facilities=facilities,
        total_rooms=total_rooms,
        author_id=author_id,
    )


async def list_hotels(hotel_repo: HotelRepository, *, location: Optional[str] = None) -> List[Hotel]:
    return await hotel_repo.list_hotels(location)


async def get_hotel(hotel_repo: HotelRepository, *, hotel_id: int) -> Hotel:
    hotel = await hotel_repo.get(hotel_id)
    if hotel is None:
        raise NotFoundError("hotel not found")
    return hotel


async def update_hotel(
    hotel_repo: HotelRepository,
    *,
    hotel_id: int,
    actor: Actor,
    changes: Dict[str, Any],
) -> Hotel:
    hotel = await get_hotel(hotel_repo, hotel_id=hotel_id)
    if not actor.may_manage(hotel.author_id):
        raise PermissionDeniedError("only the author or an admin can edit this hotel")
    rejected = set(changes) - EDITABLE_FIELDS
    if rejected:
        raise ValueError(f"fields are not editable: {', '.join(sorted(rejected))}")
    if changes.get("price") is not None and changes["price"] < 0:
        raise ValueError("price must be >= 0")
    if changes.get("facilities") is not None:
        _check_facilities(changes["facilities"])
    for field, value in changes.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(hotel, field, value)
    return await hotel_repo.save(hotel)


async def delete_hotel(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    *,
    hotel_id: int,
    actor: Actor,
) -> None:
    hotel = await hotel_repo.get_for_update(hotel_id)
    if hotel is None:
        raise NotFoundError("hotel not found")
    if not actor.may_manage(hotel.author_id):
        raise PermissionDeniedError("only the author or an admin can delete this hotel")
    if await booking_repo.count_holding(hotel_id) > 0:
        raise HotelInUseError("hotel has pending or confirmed bookings")
    await hotel_repo.delete(hotel)


async def add_room(
    hotel_repo: HotelRepository,
    *,
    hotel_id: int,
    room_type: str,
    capacity: int,
    price_per_night: float,
) -> Room:
    await get_hotel(hotel_repo, hotel_id=hotel_id)
    if capacity < 1:
        raise ValueError("capacity must be >= 1")
    if price_per_night < 0:
        raise ValueError("price_per_night must be >= 0")
    return await hotel_repo.add_room(
        hotel_id=hotel_id,
        room_type=room_type,
        capacity=capacity,
        price_per_night=price_per_night,
    )


async def list_rooms(hotel_repo: HotelRepository, *, hotel_id: int) -> List[Room]:
    await get_hotel(hotel_repo, hotel_id=hotel_id)
    return await hotel_repo.list_rooms(hotel_id)
