import hashlib
import hmac

from ..domain.errors import PaymentVerificationError
from ..domain.repositories import BookingRepository, HotelRepository, PaymentRepository
from ..domain.services import Actor
from ..models import Booking, Payment, PaymentMethod, PaymentStatus
from . import bookings as booking_usecase


async def confirm_cod_payment(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    payment_repo: PaymentRepository,
    *,
    booking_id: int,
    actor: Actor,
) -> tuple[Booking, Payment]:
    """Cash on delivery: the guest pays at check-in, so the payment stays pending."""
    booking = await booking_usecase.get_booking(booking_repo, booking_id=booking_id, actor=actor)
    confirmed = await booking_usecase.confirm_booking(hotel_repo, booking_repo, booking_id=booking.id)
    payment = await payment_repo.create(
        user_id=actor.id,
        booking_id=confirmed.id,
        amount=confirmed.total_amount,
        payment_status=PaymentStatus.PENDING,
        payment_method=PaymentMethod.COD,
    )
    return confirmed, payment


def gateway_signature(*, order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


async def verify_gateway_payment(
    hotel_repo: HotelRepository,
    booking_repo: BookingRepository,
    payment_repo: PaymentRepository,
    *,
    booking_id: int,
    actor: Actor,
    order_id: str,
    payment_id: str,
    signature: str,
    secret: str,
) -> tuple[Booking, Payment]:
    if not secret:
        raise PaymentVerificationError("payment gateway is not configured")
    expected = gateway_signature(order_id=order_id, payment_id=payment_id, secret=secret)
    if not hmac.compare_digest(expected, signature):
        raise PaymentVerificationError("payment signature mismatch")

    booking = await booking_usecase.get_booking(booking_repo, booking_id=booking_id, actor=actor)
    confirmed = await booking_usecase.confirm_booking(hotel_repo, booking_repo, booking_id=booking.id)
    payment = await payment_repo.create(
        user_id=actor.id,
        booking_id=confirmed.id,
        amount=confirmed.total_amount,
        payment_status=PaymentStatus.COMPLETED,
        payment_method=PaymentMethod.ONLINE,
        transaction_id=payment_id,
        order_id=order_id,
    )
    return confirmed, payment
