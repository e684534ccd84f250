from datetime import date, datetime, timezone
from typing import Any, cast

import pytest
from app.domain.errors import InsufficientInventoryError
from app.domain.services import Actor
from app.models import Booking, BookingStatus, UserRole
from app.routers import bookings as router
from app.schemas import BookingCreate, BookingRead, BookingTransition, GuestDetailsIn
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession


class DummySession:
    async def __aenter__(self) -> "DummySession":
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> bool:
        return False

    def begin(self) -> "DummySession":
        return self


def _booking(status: BookingStatus = BookingStatus.PENDING, user_id: int = 200) -> Booking:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return Booking(
        id=100,
        user_id=user_id,
        hotel_id=10,
        room_id=None,
        check_in_date=date(2026, 12, 10),
        check_out_date=date(2026, 12, 12),
        check_in_time="14:00",
        check_out_time="11:00",
        number_of_nights=2,
        number_of_rooms=5,
        number_of_guests=10,
        guest_name="Asha Rao",
        guest_email="asha@example.com",
        guest_phone="9876543210",
        special_requests=None,
        price_per_night=1000.0,
        total_amount=10000.0,
        status=status,
        is_checked_out=False,
        actual_check_out_time=None,
        created_at=now,
        updated_at=now,
    )


def _payload() -> BookingCreate:
    return BookingCreate(
        number_of_rooms=5,
        number_of_guests=10,
        check_in_date=date(2026, 12, 10),
        check_out_date=date(2026, 12, 12),
        guest_details=GuestDetailsIn(name="Asha Rao", email="asha@example.com", phone="9876543210"),
    )


@pytest.fixture
def _no_repos(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(router, "SqlAlchemyHotelRepository", lambda s: s)  # type: ignore[assignment]
    monkeypatch.setattr(router, "SqlAlchemyBookingRepository", lambda s: s)  # type: ignore[assignment]


@pytest.mark.asyncio
async def test_create_booking_emits_audit(monkeypatch: pytest.MonkeyPatch, _no_repos: None) -> None:
    booking = _booking()

    async def fake_create_booking(*args: object, **kwargs: Any) -> Booking:
        assert kwargs["user_id"] == booking.user_id
        assert kwargs["check_in_time"] == "14:00"
        return booking

    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(router.booking_usecase, "create_booking", fake_create_booking)  # type: ignore[attr-defined]
    monkeypatch.setattr(router, "emit_audit_log", lambda **kwargs: calls.append(kwargs))

    result: BookingRead = await router.create_booking(
        payload=_payload(),
        hotel_id=booking.hotel_id,
        session=cast(AsyncSession, DummySession()),
        actor=Actor(id=booking.user_id, role=UserRole.USER),
    )

    assert result.booking_id == booking.id
    assert result.total_amount == 10000
    assert len(calls) == 1
    assert calls[0]["action"] == "booking.created"
    assert calls[0]["number_of_rooms"] == 5


@pytest.mark.asyncio
async def test_create_booking_without_rooms_returns_409(monkeypatch: pytest.MonkeyPatch, _no_repos: None) -> None:
    async def fake_create_booking(*args: object, **kwargs: object) -> Booking:
        raise InsufficientInventoryError(hotel_id=10, requested=5)

    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(router.booking_usecase, "create_booking", fake_create_booking)  # type: ignore[attr-defined]
    monkeypatch.setattr(router, "emit_audit_log", lambda **kwargs: calls.append(kwargs))

    with pytest.raises(HTTPException) as excinfo:
        await router.create_booking(
            payload=_payload(),
            hotel_id=10,
            session=cast(AsyncSession, DummySession()),
            actor=Actor(id=200, role=UserRole.USER),
        )
    assert excinfo.value.status_code == 409
    assert calls == []


@pytest.mark.asyncio
async def test_cancel_log_failure_returns_500(monkeypatch: pytest.MonkeyPatch, _no_repos: None) -> None:
    before = _booking(status=BookingStatus.CONFIRMED)
    after = _booking(status=BookingStatus.CANCELLED)

    async def fake_get(*args: object, **kwargs: object) -> Booking:
        return before

    async def fake_transition(*args: object, **kwargs: object) -> Booking:
        return after

    def fake_emit(**kwargs: Any) -> None:
        raise RuntimeError("fail log")

    monkeypatch.setattr(router.booking_usecase, "get_booking", fake_get)  # type: ignore[attr-defined]
    monkeypatch.setattr(router.booking_usecase, "transition_booking", fake_transition)  # type: ignore[attr-defined]
    monkeypatch.setattr(router, "emit_audit_log", fake_emit)

    with pytest.raises(HTTPException) as excinfo:
        await router.transition_booking(
            payload=BookingTransition(status=BookingStatus.CANCELLED),
            booking_id=before.id,
            session=cast(AsyncSession, DummySession()),
            actor=Actor(id=before.user_id, role=UserRole.USER),
        )
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_admin_reactivation_is_audited_as_reactivated(
    monkeypatch: pytest.MonkeyPatch, _no_repos: None
) -> None:
    before = _booking(status=BookingStatus.COMPLETED)
    after = _booking(status=BookingStatus.CONFIRMED)

    async def fake_get(*args: object, **kwargs: object) -> Booking:
        return before

    async def fake_transition(*args: object, **kwargs: Any) -> Booking:
        assert kwargs["target_status"] == BookingStatus.CONFIRMED
        return after

    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(router.booking_usecase, "get_booking", fake_get)  # type: ignore[attr-defined]
    monkeypatch.setattr(router.booking_usecase, "transition_booking", fake_transition)  # type: ignore[attr-defined]
    monkeypatch.setattr(router, "emit_audit_log", lambda **kwargs: calls.append(kwargs))

    result = await router.transition_booking(
        payload=BookingTransition(status=BookingStatus.CONFIRMED),
        booking_id=before.id,
        session=cast(AsyncSession, DummySession()),
        actor=Actor(id=1, role=UserRole.ADMIN),
    )

    assert result.status == BookingStatus.CONFIRMED
    assert calls[0]["action"] == "booking.reactivated"
    assert calls[0]["initiator"] == "admin"
    assert calls[0]["status_from"] == BookingStatus.COMPLETED


@pytest.mark.asyncio
async def test_clear_my_bookings_reports_count(monkeypatch: pytest.MonkeyPatch, _no_repos: None) -> None:
    async def fake_clear(*args: object, **kwargs: Any) -> int:
        assert kwargs["user_id"] == 200
        return 3

    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(router.booking_usecase, "clear_bookings", fake_clear)  # type: ignore[attr-defined]
    monkeypatch.setattr(router, "emit_audit_log", lambda **kwargs: calls.append(kwargs))

    result = await router.clear_my_bookings(
        session=cast(AsyncSession, DummySession()),
        actor=Actor(id=200, role=UserRole.USER),
    )

    assert result.deleted == 3
    assert calls[0]["action"] == "bookings.cleared"
    assert calls[0]["extra"] == {"deleted": 3}
