# barbershop/routers/appointments_routes.py

import logging
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Response

from barbershop.auth import get_current_user
from barbershop.core.booking import BookingService
from barbershop.core.transitions import StatusTransitionService
from barbershop.deps import (
    get_booking_service,
    get_clock,
    get_transition_service,
    raise_rejected,
    require_barber_id,
    require_role,
)
from barbershop.repository import InMemoryRepository
from barbershop.schemas import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    Booked,
    BookingOutcome,
    BookRequest,
    ClientAppointmentCreate,
    Customer,
    NeedsReplaceConfirmation,
    Rejected,
    RejectReason,
    ReplaceDecision,
    TransitionRequest,
    UserRole,
)
from barbershop.store import get_repository

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["appointments"],
)


def _respond(outcome, response: Response):
    """Booked -> 201, confirmation needed or replace declined -> 200, anything else raises."""
    if isinstance(outcome, Booked):
        response.status_code = 201
        return outcome
    if isinstance(outcome, NeedsReplaceConfirmation):
        response.status_code = 200
        return outcome
    if outcome.reason == RejectReason.replace_declined:
        response.status_code = 200
        return outcome
    raise_rejected(outcome)


@router.post("/appointments", response_model=BookingOutcome, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    response: Response,
    service: BookingService = Depends(get_booking_service),
    current_user: Customer = Depends(get_current_user),
):
    barber_id = require_barber_id(current_user)  # only barbers book on behalf of a client
    outcome = service.book(
        BookRequest(barber_id=barber_id, date=appt.date, time=appt.time, customer_id=appt.customer_id)
    )
    return _respond(outcome, response)


@router.post("/barbers/{barber_id}/appointments", response_model=BookingOutcome, status_code=201)
def client_create_appointment(
    barber_id: str,
    appt: ClientAppointmentCreate,
    response: Response,
    service: BookingService = Depends(get_booking_service),
    current_user: Customer = Depends(get_current_user),
):
    require_role(current_user, UserRole.client)
    outcome = service.book(
        BookRequest(barber_id=barber_id, date=appt.date, time=appt.time, customer_id=current_user.id)
    )
    return _respond(outcome, response)


@router.post("/appointments/replace", response_model=BookingOutcome, status_code=201)
def replace_appointment(
    decision: ReplaceDecision,
    response: Response,
    service: BookingService = Depends(get_booking_service),
    current_user: Customer = Depends(get_current_user),
):
    require_role(current_user, UserRole.client)
    if current_user.id != decision.candidate.customer_id or current_user.id != decision.existing.customer_id:
        raise HTTPException(status_code=403, detail="Forbidden")

    return _respond(service.decide(decision), response)


@router.patch("/appointments/{appt_id}/status", response_model=Appointment)
def update_appointment_status(
    appt_id: str,
    change: TransitionRequest,
    repo: InMemoryRepository = Depends(get_repository),
    service: StatusTransitionService = Depends(get_transition_service),
    current_user: Customer = Depends(get_current_user),
):
    barber_id = require_barber_id(current_user)

    target = repo.find_appointment(appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    if target.barber_id != barber_id:
        raise HTTPException(status_code=403, detail="Forbidden")

    outcome = service.transition(appt_id, change.next_status)
    if isinstance(outcome, Rejected):
        raise_rejected(outcome)
    return outcome.appointment


@router.patch("/appointments/{appt_id}/cancel", response_model=Appointment)
def cancel_appointment(
    appt_id: str,
    repo: InMemoryRepository = Depends(get_repository),
    service: StatusTransitionService = Depends(get_transition_service),
    current_user: Customer = Depends(get_current_user),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    # 1) Find the appointment
    target = repo.find_appointment(appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    # 2) Authorization: client who booked OR the barber holding the slot
    is_owner_client = current_user.role == UserRole.client and current_user.id == target.customer_id
    is_owner_barber = current_user.role == UserRole.barber and current_user.barber_id == target.barber_id
    if not (is_owner_client or is_owner_barber):
        raise HTTPException(status_code=403, detail="Forbidden")

    # 3) Clients can only cancel what is still ahead of them
    if is_owner_client and target.when < clock():
        raise HTTPException(status_code=422, detail="Cannot cancel a past appointment")

    outcome = service.transition(appt_id, AppointmentStatus.canceled)
    if isinstance(outcome, Rejected):
        raise_rejected(outcome)
    return outcome.appointment
