"""Room inventory ledger.

The only code allowed to change ``Hotel.available_rooms``. Every operation is a
single guarded update executed by the repository, so concurrent requests for the
same hotel are serialized by the database rather than by this process.
"""

import logging

from ..domain.errors import InsufficientInventoryError, NotFoundError
from ..domain.repositories import HotelRepository

logger = logging.getLogger(__name__)


async def reserve(hotel_repo: HotelRepository, *, hotel_id: int, count: int) -> None:
    if count < 1:
        raise ValueError("count must be >= 1")
    if await hotel_repo.take_rooms(hotel_id, count):
        logger.debug("reserved %s room(s) at hotel %s", count, hotel_id)
        return
    if await hotel_repo.get(hotel_id) is None:
        raise NotFoundError("hotel not found")
    raise InsufficientInventoryError(hotel_id=hotel_id, requested=count)


async def release(hotel_repo: HotelRepository, *, hotel_id: int, count: int) -> None:
    """Credit rooms back, capped at total_rooms. Callers guarantee one release per hold."""
    if count < 1:
        raise ValueError("count must be >= 1")
    if not await hotel_repo.return_rooms(hotel_id, count):
        raise NotFoundError("hotel not found")
    logger.debug("released %s room(s) at hotel %s", count, hotel_id)


async def adjust(hotel_repo: HotelRepository, *, hotel_id: int, old_count: int, new_count: int) -> None:
    delta = old_count - new_count
    if delta < 0:
        await reserve(hotel_repo, hotel_id=hotel_id, count=-delta)
    elif delta > 0:
        await release(hotel_repo, hotel_id=hotel_id, count=delta)
