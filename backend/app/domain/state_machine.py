from __future__ import annotations

from enum import StrEnum

from ..models import BookingStatus
from .errors import AlreadyCancelledError, InvalidTransitionError


class InventoryEffect(StrEnum):
    NONE = "none"
    RESERVE = "reserve"
    RELEASE = "release"


_ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset({BookingStatus.CONFIRMED}),
    BookingStatus.COMPLETED: frozenset({BookingStatus.CONFIRMED}),
}

HOLDING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


def holds_inventory(status: BookingStatus) -> bool:
    return status in HOLDING_STATUSES


def sources_for(target: BookingStatus) -> frozenset[BookingStatus]:
    """Statuses from which `target` may be reached."""
    return frozenset(src for src, targets in _ALLOWED_TRANSITIONS.items() if target in targets)


def validate_transition(current: BookingStatus, target: BookingStatus) -> None:
    if current == BookingStatus.CANCELLED and target == BookingStatus.CANCELLED:
        raise AlreadyCancelledError("booking is already cancelled")
    if target not in _ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(current=str(current), target=str(target))


def inventory_effect(current: BookingStatus, target: BookingStatus) -> InventoryEffect:
    validate_transition(current, target)
    was_holding = holds_inventory(current)
    will_hold = holds_inventory(target)
    if will_hold and not was_holding:
        return InventoryEffect.RESERVE
    if was_holding and not will_hold:
        return InventoryEffect.RELEASE
    return InventoryEffect.NONE
