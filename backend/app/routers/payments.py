from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..deps import get_current_actor, get_session
from ..domain.errors import BookingError
from ..domain.services import Actor
from ..infrastructure.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyHotelRepository,
    SqlAlchemyPaymentRepository,
)
from ..models import Booking, BookingStatus, Payment
from ..schemas import GatewayPaymentVerify, PaymentRead
from ..usecases import payments as payment_usecase
from ..utils.audit_log import emit_audit_log
from .errors import audit_failure, to_http_exception

router = APIRouter(prefix="/payments", tags=["payments"])


def _audit_confirmation(booking: Booking, payment: Payment) -> None:
    emit_audit_log(
        action="booking.confirmed",
        initiator="payment",
        booking_id=booking.id,
        hotel_id=booking.hotel_id,
        user_id=booking.user_id,
        number_of_rooms=booking.number_of_rooms,
        status_from=BookingStatus.PENDING,
        status_to=booking.status,
    )
    emit_audit_log(
        action="payment.recorded",
        initiator="payment",
        booking_id=booking.id,
        hotel_id=booking.hotel_id,
        user_id=payment.user_id,
        number_of_rooms=None,
        status_from=None,
        status_to=payment.payment_status,
        extra={"payment_id": payment.id, "payment_method": str(payment.payment_method), "amount": payment.amount},
    )


@router.post("/{booking_id}/cod", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
async def confirm_cod_booking(
    booking_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> PaymentRead:
    hotel_repo = SqlAlchemyHotelRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    payment_repo = SqlAlchemyPaymentRepository(session)
    async with session.begin():
        try:
            booking, payment = await payment_usecase.confirm_cod_payment(
                hotel_repo,
                booking_repo,
                payment_repo,
                booking_id=booking_id,
                actor=actor,
            )
        except BookingError as exc:
            raise to_http_exception(exc)
        try:
            _audit_confirmation(booking, payment)
        except RuntimeError:
            raise audit_failure()
    return PaymentRead.from_db(payment=payment, booking=booking)


@router.post("/{booking_id}/verify", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
async def verify_gateway_payment(
    payload: GatewayPaymentVerify,
    booking_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> PaymentRead:
    hotel_repo = SqlAlchemyHotelRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    payment_repo = SqlAlchemyPaymentRepository(session)
    async with session.begin():
        try:
            booking, payment = await payment_usecase.verify_gateway_payment(
                hotel_repo,
                booking_repo,
                payment_repo,
                booking_id=booking_id,
                actor=actor,
                order_id=payload.order_id,
                payment_id=payload.payment_id,
                signature=payload.signature,
                secret=get_settings().payment_gateway_secret,
            )
        except BookingError as exc:
            raise to_http_exception(exc)
        try:
            _audit_confirmation(booking, payment)
        except RuntimeError:
            raise audit_failure()
    return PaymentRead.from_db(payment=payment, booking=booking)
