from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from .request_id import get_request_id

AuditAction = Literal[
    "booking.created",
    "booking.confirmed",
    "booking.cancelled",
    "booking.completed",
    "booking.reactivated",
    "booking.rooms_updated",
    "bookings.cleared",
    "payment.recorded",
]
AuditInitiator = Literal["user", "admin", "payment"]

_audit_logger = logging.getLogger("audit")
_audit_logger.setLevel(logging.INFO)
if not _audit_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    _audit_logger.addHandler(handler)
_audit_logger.propagate = False

_STATUS_ACTIONS: dict[str, AuditAction] = {
    "confirmed": "booking.confirmed",
    "cancelled": "booking.cancelled",
    "completed": "booking.completed",
}


def _enum_to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def action_for_status(status_from: Any, status_to: Any) -> AuditAction:
    """Name the audit action for a status change (confirming a closed booking is a reactivation)."""
    from_val = _enum_to_str(status_from)
    to_val = _enum_to_str(status_to) or ""
    if to_val == "confirmed" and from_val in ("cancelled", "completed"):
        return "booking.reactivated"
    return _STATUS_ACTIONS[to_val]


def emit_audit_log(
    *,
    action: AuditAction,
    initiator: AuditInitiator,
    booking_id: Optional[int],
    hotel_id: Optional[int],
    user_id: Optional[int],
    number_of_rooms: Optional[int],
    status_from: Optional[Any],
    status_to: Optional[Any],
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Emit structured JSON audit log. Raises RuntimeError if logging fails."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "info",
        "action": action,
        "initiator": initiator,
        "request_id": get_request_id(),
        "booking_id": booking_id,
        "hotel_id": hotel_id,
        "user_id": user_id,
        "number_of_rooms": number_of_rooms,
        "status_from": _enum_to_str(status_from),
        "status_to": _enum_to_str(status_to),
    }
    if message is not None:
        payload["message"] = message
    if extra:
        payload.update(extra)

    compact_payload = {k: v for k, v in payload.items() if v is not None}
    try:
        _audit_logger.info(json.dumps(compact_payload, ensure_ascii=True, default=str))
    except Exception as exc:
        raise RuntimeError("failed to emit audit log") from exc
