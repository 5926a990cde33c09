# barbershop/core/slots.py

from datetime import datetime, timedelta
from typing import Iterable, List, Set

from ..schemas import TIME_FORMAT, Appointment, AppointmentStatus


def taken_times(schedule: Iterable[Appointment], date: str) -> Set[str]:
    # Only scheduled appointments hold a slot; terminal ones free it for rebooking
    return {
        a.time
        for a in schedule
        if a.date == date and a.status == AppointmentStatus.scheduled
    }


def is_free(schedule: Iterable[Appointment], date: str, time: str) -> bool:
    return time not in taken_times(schedule, date)


def available_slots(schedule: Iterable[Appointment], date: str, candidate_times: Iterable[str]) -> List[str]:
    taken = taken_times(schedule, date)
    return [t for t in candidate_times if t not in taken]


def build_times(start: str, interval_minutes: int, count: int) -> List[str]:
    """Return up to `count` HH:MM times from `start`, `interval_minutes` apart, within one day."""
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")

    current = datetime.strptime(start, TIME_FORMAT)
    day_end = current.replace(hour=0, minute=0) + timedelta(days=1)
    step = timedelta(minutes=interval_minutes)

    times = []
    while len(times) < count and current < day_end:
        times.append(current.strftime(TIME_FORMAT))
        current += step
    return times
