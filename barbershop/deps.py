# barbershop/deps.py

import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends, HTTPException

from .config import SHOP_TIMEZONE
from .core.booking import BookingService
from .core.transitions import StatusTransitionService
from .data import shop_settings
from .repository import InMemoryRepository
from .schemas import Customer, Rejected, RejectReason, UserRole
from .store import get_repository

logger = logging.getLogger(__name__)


def require_role(user: Customer, role: UserRole):
    if user.role != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def require_barber_id(user: Customer) -> str:
    require_role(user, UserRole.barber)
    if not user.barber_id:
        raise HTTPException(status_code=403, detail="Account is not linked to a barber profile")
    return user.barber_id


def _shop_zone() -> tzinfo:
    try:
        return ZoneInfo(SHOP_TIMEZONE)
    except ZoneInfoNotFoundError:
        logger.warning(f"Unknown SHOP_TIMEZONE {SHOP_TIMEZONE!r}, falling back to UTC")
        return timezone.utc


def shop_now() -> datetime:
    """Naive wall-clock time at the shop; appointment dates/times use the same frame."""
    return datetime.now(_shop_zone()).replace(tzinfo=None)


def get_clock() -> Callable[[], datetime]:
    return shop_now


def get_booking_service(
    repo: InMemoryRepository = Depends(get_repository),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> BookingService:
    return BookingService(repo, clock=clock, time_slots=shop_settings["time_slots"])


def get_transition_service(repo: InMemoryRepository = Depends(get_repository)) -> StatusTransitionService:
    return StatusTransitionService(repo)


REJECTION_STATUS_CODES = {
    RejectReason.slot_unavailable: 409,
    RejectReason.replace_declined: 409,
    RejectReason.invalid_transition: 409,
    RejectReason.past_date: 422,
    RejectReason.invalid_time: 422,
    RejectReason.record_not_found: 404,
}


def raise_rejected(outcome: Rejected):
    raise HTTPException(
        status_code=REJECTION_STATUS_CODES[outcome.reason],
        detail={"reason": outcome.reason.value, "message": outcome.detail},
    )
