# barbershop/core/booking.py

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence, Union
from uuid import uuid4

from ..repository import InMemoryRepository
from ..schemas import (
    DATE_FORMAT,
    Appointment,
    AppointmentStatus,
    Booked,
    BookRequest,
    NeedsReplaceConfirmation,
    Rejected,
    RejectReason,
    ReplaceDecision,
)
from .agenda import active_appointment
from .slots import is_free
from .transitions import apply_transition

logger = logging.getLogger(__name__)

Outcome = Union[Booked, NeedsReplaceConfirmation, Rejected]


def new_appointment_id() -> str:
    return uuid4().hex


def _same_slot(a: Appointment, barber_id: str, date: str, time: str) -> bool:
    return (a.barber_id, a.date, a.time) == (barber_id, date, time)


class BookingService:
    """Creates appointments; a booking with another barber waits for commit_replace()."""

    def __init__(
        self,
        repo: InMemoryRepository,
        clock: Callable[[], datetime] = datetime.now,
        time_slots: Optional[Sequence[str]] = None,
    ):
        self.repo = repo
        self.clock = clock
        self.time_slots = time_slots

    def book(self, request: BookRequest) -> Outcome:
        provider = self.repo.get_provider(request.barber_id)
        customer = self.repo.get_customer(request.customer_id)

        rejected = self._validate(request.date, request.time)
        if rejected is not None:
            return rejected

        with self.repo.transaction(barber_ids=[provider.id], customer_ids=[customer.id]):
            existing = active_appointment(customer.appointments, self.clock())

            if existing is not None and _same_slot(existing, provider.id, request.date, request.time):
                return Booked(appointment=existing.model_copy())

            if not is_free(provider.appointments, request.date, request.time):
                logger.warning(
                    f"Slot {request.date} {request.time} with barber {provider.id} already taken "
                    f"(requested by {customer.id})"
                )
                return Rejected(
                    reason=RejectReason.slot_unavailable,
                    detail=f"{request.date} {request.time} is already booked",
                )

            candidate = Appointment(
                id=new_appointment_id(),
                barber_id=provider.id,
                customer_id=customer.id,
                date=request.date,
                time=request.time,
            )

            if existing is None:
                stored = self.repo.upsert_appointment(candidate)
                logger.info(f"Booked {stored.id}: barber {stored.barber_id}, {stored.date} {stored.time}, {customer.id}")
                return Booked(appointment=stored)

            if existing.barber_id == provider.id:
                return self._replace(candidate, existing)

        logger.info(f"Customer {customer.id} must confirm replacing {existing.id} with barber {existing.barber_id}")
        return NeedsReplaceConfirmation(candidate=candidate, existing=existing.model_copy())

    def commit_replace(self, candidate: Appointment, existing: Appointment) -> Outcome:
        if candidate.customer_id != existing.customer_id:
            raise ValueError("candidate and existing appointments belong to different customers")

        provider = self.repo.get_provider(candidate.barber_id)
        customer = self.repo.get_customer(candidate.customer_id)

        rejected = self._validate(candidate.date, candidate.time)
        if rejected is not None:
            return rejected

        with self.repo.transaction(
            barber_ids={provider.id, existing.barber_id}, customer_ids=[customer.id]
        ):
            active = active_appointment(customer.appointments, self.clock())
            if active is not None and _same_slot(active, provider.id, candidate.date, candidate.time):
                return Booked(appointment=active.model_copy())
            if active is not None and (active.id, active.barber_id) != (existing.id, existing.barber_id):
                # Something else became the active booking since the draft was made
                return NeedsReplaceConfirmation(candidate=candidate, existing=active.model_copy())

            if not is_free(provider.appointments, candidate.date, candidate.time):
                return Rejected(
                    reason=RejectReason.slot_unavailable,
                    detail=f"{candidate.date} {candidate.time} is already booked",
                )

            draft = candidate.model_copy(update={"status": AppointmentStatus.scheduled})
            if self.repo.find_appointment(draft.id) is not None:
                draft.id = new_appointment_id()
            return self._replace(draft, active)

    def decide(self, decision: ReplaceDecision) -> Outcome:
        if decision.confirmed:
            return self.commit_replace(decision.candidate, decision.existing)
        logger.info(f"Customer {decision.existing.customer_id} kept appointment {decision.existing.id}")
        return Rejected(reason=RejectReason.replace_declined, detail="Existing appointment kept")

    def _replace(self, candidate: Appointment, existing: Optional[Appointment]) -> Outcome:
        # Caller holds the transaction
        if existing is not None:
            old_provider = self.repo.get_provider(existing.barber_id)
            customer = self.repo.get_customer(existing.customer_id)
            outcome = apply_transition(
                existing.id, old_provider.appointments, customer.appointments, AppointmentStatus.canceled
            )
            if isinstance(outcome, Rejected):
                return outcome

        stored = self.repo.upsert_appointment(candidate)
        logger.info(
            f"Booked {stored.id} for {stored.customer_id}"
            + (f", replacing {existing.id}" if existing is not None else "")
        )
        return Booked(appointment=stored)

    def _validate(self, date: str, time: str) -> Optional[Rejected]:
        today = self.clock().date()
        if datetime.strptime(date, DATE_FORMAT).date() < today:
            return Rejected(reason=RejectReason.past_date, detail=f"{date} is in the past")
        if self.time_slots is not None and time not in self.time_slots:
            return Rejected(reason=RejectReason.invalid_time, detail=f"{time} is not a bookable time")
        return None
