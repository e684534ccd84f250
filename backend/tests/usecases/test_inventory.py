import pytest
from app.domain.errors import InsufficientInventoryError, NotFoundError
from app.usecases import inventory


@pytest.mark.asyncio
async def test_reserve_debits_available_rooms(hotel_repo) -> None:
    hotel = hotel_repo.add(total_rooms=20)
    await inventory.reserve(hotel_repo, hotel_id=hotel.id, count=5)
    assert hotel.available_rooms == 15


@pytest.mark.asyncio
async def test_reserve_can_take_the_last_room(hotel_repo) -> None:
    hotel = hotel_repo.add(total_rooms=20, available_rooms=3)
    await inventory.reserve(hotel_repo, hotel_id=hotel.id, count=3)
    assert hotel.available_rooms == 0


@pytest.mark.asyncio
async def test_reserve_rejects_more_than_available(hotel_repo) -> None:
    hotel = hotel_repo.add(total_rooms=20, available_rooms=15)
    with pytest.raises(InsufficientInventoryError) as excinfo:
        await inventory.reserve(hotel_repo, hotel_id=hotel.id, count=16)
    assert excinfo.value.requested == 16
    assert hotel.available_rooms == 15


@pytest.mark.asyncio
async def test_reserve_unknown_hotel_is_not_found(hotel_repo) -> None:
    with pytest.raises(NotFoundError):
        await inventory.reserve(hotel_repo, hotel_id=404, count=1)


@pytest.mark.asyncio
async def test_reserve_rejects_non_positive_count(hotel_repo) -> None:
    hotel = hotel_repo.add()
    with pytest.raises(ValueError):
        await inventory.reserve(hotel_repo, hotel_id=hotel.id, count=0)


@pytest.mark.asyncio
async def test_release_is_capped_at_total_rooms(hotel_repo) -> None:
    hotel = hotel_repo.add(total_rooms=20, available_rooms=18)
    await inventory.release(hotel_repo, hotel_id=hotel.id, count=5)
    assert hotel.available_rooms == 20


@pytest.mark.asyncio
async def test_release_unknown_hotel_is_not_found(hotel_repo) -> None:
    with pytest.raises(NotFoundError):
        await inventory.release(hotel_repo, hotel_id=404, count=1)


@pytest.mark.asyncio
async def test_adjust_down_credits_the_difference(hotel_repo) -> None:
    hotel = hotel_repo.add(total_rooms=20, available_rooms=15)
    await inventory.adjust(hotel_repo, hotel_id=hotel.id, old_count=5, new_count=2)
    assert hotel.available_rooms == 18


@pytest.mark.asyncio
async def test_adjust_up_debits_the_difference(hotel_repo) -> None:
    hotel = hotel_repo.add(total_rooms=20, available_rooms=15)
    await inventory.adjust(hotel_repo, hotel_id=hotel.id, old_count=5, new_count=8)
    assert hotel.available_rooms == 12


@pytest.mark.asyncio
async def test_adjust_up_never_goes_below_zero(hotel_repo) -> None:
    hotel = hotel_repo.add(total_rooms=20, available_rooms=1)
    with pytest.raises(InsufficientInventoryError):
        await inventory.adjust(hotel_repo, hotel_id=hotel.id, old_count=5, new_count=8)
    assert hotel.available_rooms == 1


@pytest.mark.asyncio
async def test_adjust_with_same_count_is_a_no_op(hotel_repo) -> None:
    hotel = hotel_repo.add(total_rooms=20, available_rooms=7)
    await inventory.adjust(hotel_repo, hotel_id=hotel.id, old_count=4, new_count=4)
    assert hotel.available_rooms == 7
