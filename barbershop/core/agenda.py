# barbershop/core/agenda.py

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from ..schemas import (
    DATE_FORMAT,
    Appointment,
    AppointmentStatus,
    CustomerSections,
    DayGroup,
    DaySummary,
)


def active_appointment(history: Iterable[Appointment], now: datetime) -> Optional[Appointment]:
    # Earliest scheduled appointment at or after now; past and terminal ones never count
    upcoming = [
        a for a in history
        if a.status == AppointmentStatus.scheduled and a.when >= now
    ]
    if not upcoming:
        return None
    return min(upcoming, key=lambda a: a.when)


def day_appointments(schedule: Iterable[Appointment], date: str) -> List[Appointment]:
    return sorted((a for a in schedule if a.date == date), key=lambda a: a.time)


def day_summary(schedule: Iterable[Appointment], date: str) -> DaySummary:
    summary = DaySummary()
    for a in schedule:
        if a.date != date:
            continue
        summary.total += 1
        if a.status == AppointmentStatus.completed:
            summary.completed += 1
        elif a.status == AppointmentStatus.canceled:
            summary.canceled += 1
        elif a.status == AppointmentStatus.no_show:
            summary.no_show += 1
        else:
            summary.upcoming += 1
    return summary


def day_groups(schedule: Iterable[Appointment]) -> List[DayGroup]:
    """Every day with appointments, newest first, latest time first within a day."""
    by_date: Dict[str, List[Appointment]] = {}
    for a in schedule:
        by_date.setdefault(a.date, []).append(a)

    groups = []
    for date in sorted(by_date, reverse=True):
        appts = sorted(by_date[date], key=lambda a: a.time, reverse=True)
        groups.append(DayGroup(date=date, summary=day_summary(appts, date), appointments=appts))
    return groups


def next_up(schedule: Iterable[Appointment], now: datetime, grace_minutes: int = 10) -> Optional[Appointment]:
    """Today's next appointment (allowing `grace_minutes` of lateness), else the first on a later day."""
    today = now.strftime(DATE_FORMAT)
    cutoff = now - timedelta(minutes=grace_minutes)
    scheduled = [a for a in schedule if a.status == AppointmentStatus.scheduled]

    todays = [a for a in scheduled if a.date == today and a.when >= cutoff]
    if todays:
        return min(todays, key=lambda a: a.when)

    later = [a for a in scheduled if a.date > today]
    if later:
        return min(later, key=lambda a: a.when)
    return None


def customer_sections(history: Iterable[Appointment], now: datetime) -> CustomerSections:
    upcoming, past = [], []
    for a in history:
        if a.status == AppointmentStatus.scheduled and a.when >= now:
            upcoming.append(a)
        else:
            past.append(a)
    upcoming.sort(key=lambda a: a.when)
    past.sort(key=lambda a: a.when, reverse=True)
    return CustomerSections(upcoming=upcoming, past=past)
