# barbershop/core/transitions.py

import logging
from typing import List, Optional, Union

from ..repository import InMemoryRepository
from ..schemas import (
    TERMINAL_STATUSES,
    Applied,
    Appointment,
    AppointmentStatus,
    Rejected,
    RejectReason,
)

logger = logging.getLogger(__name__)


def _find(collection: List[Appointment], appointment_id: str) -> Optional[Appointment]:
    for appt in collection:
        if appt.id == appointment_id:
            return appt
    return None


def apply_transition(
    appointment_id: str,
    schedule: List[Appointment],
    history: List[Appointment],
    next_status: Union[AppointmentStatus, str],
) -> Union[Applied, Rejected]:
    # Both copies are checked before either is touched
    try:
        next_status = AppointmentStatus(next_status)
    except ValueError:
        return Rejected(reason=RejectReason.invalid_transition, detail=f"Unknown status {next_status!r}")

    if next_status not in TERMINAL_STATUSES:
        return Rejected(
            reason=RejectReason.invalid_transition,
            detail=f"Cannot move an appointment to {next_status.value}",
        )

    barber_side = _find(schedule, appointment_id)
    customer_side = _find(history, appointment_id)
    if barber_side is None or customer_side is None:
        if barber_side is not None or customer_side is not None:
            # Present on one side only: the two copies have drifted apart
            logger.error(
                f"Appointment {appointment_id} is missing from the "
                f"{'customer history' if barber_side is not None else 'barber schedule'}"
            )
        return Rejected(reason=RejectReason.record_not_found, detail=f"Appointment {appointment_id} not found")

    if barber_side.is_terminal or customer_side.is_terminal:
        return Rejected(
            reason=RejectReason.invalid_transition,
            detail=f"Appointment {appointment_id} is already {barber_side.status.value}",
        )

    barber_side.status = next_status
    customer_side.status = next_status
    return Applied(appointment=barber_side.model_copy())


class StatusTransitionService:
    """The only path by which an appointment's status changes after booking."""

    def __init__(self, repo: InMemoryRepository):
        self.repo = repo

    def transition(self, appointment_id: str, next_status: Union[AppointmentStatus, str]) -> Union[Applied, Rejected]:
        record = self.repo.find_appointment(appointment_id)
        if record is None:
            logger.warning(f"Transition requested for unknown appointment {appointment_id}")
            return Rejected(reason=RejectReason.record_not_found, detail=f"Appointment {appointment_id} not found")

        with self.repo.transaction(barber_ids=[record.barber_id], customer_ids=[record.customer_id]):
            provider = self.repo.get_provider(record.barber_id)
            customer = self.repo.get_customer(record.customer_id)
            outcome = apply_transition(appointment_id, provider.appointments, customer.appointments, next_status)

        if isinstance(outcome, Applied):
            logger.info(f"Appointment {appointment_id} -> {outcome.appointment.status.value}")
        else:
            logger.warning(f"Transition of {appointment_id} rejected: {outcome.reason.value} ({outcome.detail})")
        return outcome

    def complete(self, appointment_id: str) -> Union[Applied, Rejected]:
        return self.transition(appointment_id, AppointmentStatus.completed)

    def cancel(self, appointment_id: str) -> Union[Applied, Rejected]:
        return self.transition(appointment_id, AppointmentStatus.canceled)

    def mark_no_show(self, appointment_id: str) -> Union[Applied, Rejected]:
        return self.transition(appointment_id, AppointmentStatus.no_show)
