# barbershop/core/seeder.py

import logging
from typing import Iterable, List, Optional

from ..repository import InMemoryRepository
from ..schemas import Appointment, AppointmentStatus, UserRole
from .slots import build_times, taken_times

logger = logging.getLogger(__name__)


def seed_appointment_id(barber_id: str, date: str, time: str) -> str:
    # Deterministic per slot, e.g. b5-2025-10-16-09:00
    return f"b{barber_id}-{date}-{time}"


class DevSeeder:
    """Fills a barber's day with demo bookings. Safe to run repeatedly."""

    def __init__(self, repo: InMemoryRepository):
        self.repo = repo

    def ensure_day(
        self,
        barber_id: str,
        date: str,
        start: str = "09:00",
        interval_minutes: int = 60,
        slot_count: int = 8,
        customer_pool: Optional[Iterable[str]] = None,
    ) -> List[Appointment]:
        provider = self.repo.get_provider(barber_id)

        if customer_pool is None:
            pool = [c.id for c in self.repo.list_customers(role=UserRole.client)]
        else:
            pool = [str(c) for c in customer_pool]
        if not pool:
            return []

        created = []
        with self.repo.transaction(barber_ids=[provider.id], customer_ids=pool):
            taken = taken_times(provider.appointments, date)
            known_ids = {a.id for a in provider.appointments}

            # Round-robin over the pool, skipping customers already booked at that exact slot
            cursor = 0
            for time in build_times(start, interval_minutes, slot_count):
                appt_id = seed_appointment_id(provider.id, date, time)
                if time in taken or appt_id in known_ids:
                    continue

                pick = None
                for offset in range(len(pool)):
                    candidate = pool[(cursor + offset) % len(pool)]
                    if not self._is_busy(candidate, date, time):
                        pick = candidate
                        cursor = (cursor + offset + 1) % len(pool)
                        break
                if pick is None:
                    # Everyone is busy: take the next one
                    pick = pool[cursor % len(pool)]
                    cursor += 1

                appt = Appointment(
                    id=appt_id,
                    barber_id=provider.id,
                    customer_id=pick,
                    date=date,
                    time=time,
                )
                created.append(self.repo.upsert_appointment(appt))
                taken.add(time)
                known_ids.add(appt_id)

        logger.info(f"Seeded {len(created)} appointments for barber {provider.id} on {date}")
        return created

    def _is_busy(self, customer_id: str, date: str, time: str) -> bool:
        customer = self.repo.get_customer(customer_id)
        return any(
            a.date == date and a.time == time and a.status == AppointmentStatus.scheduled
            for a in customer.appointments
        )
