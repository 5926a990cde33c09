# barbershop/routers/barbers_routes.py

from datetime import date, datetime
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from barbershop import config
from barbershop.auth import get_current_user
from barbershop.core.agenda import day_appointments, day_groups, day_summary, next_up
from barbershop.core.seeder import DevSeeder
from barbershop.core.slots import available_slots
from barbershop.data import shop_settings
from barbershop.deps import get_clock, require_barber_id
from barbershop.repository import InMemoryRepository
from barbershop.schemas import (
    DATE_FORMAT,
    AgendaDay,
    Appointment,
    AppointmentStatus,
    AppointmentWithCustomer,
    AvailabilityResponse,
    BarberPublic,
    Customer,
    CustomerContact,
    DashboardResponse,
)
from barbershop.store import get_repository

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)


def _with_customer(repo: InMemoryRepository, appt: Appointment) -> AppointmentWithCustomer:
    customer = repo.get_customer(appt.customer_id)
    return AppointmentWithCustomer(**appt.model_dump(), customer_name=customer.name, customer_phone=customer.phone)


@router.get("", response_model=List[BarberPublic])
def list_barbers(repo: InMemoryRepository = Depends(get_repository)):
    return repo.list_providers()


@router.get("/me/appointments", response_model=List[AppointmentWithCustomer])
def list_barber_appointments(
    status: Optional[str] = "scheduled",
    on_date: Optional[date] = None,
    repo: InMemoryRepository = Depends(get_repository),
    current_user: Customer = Depends(get_current_user),
):
    barber_id = require_barber_id(current_user)

    allowed = [s.value for s in AppointmentStatus] + ["all"]
    if status not in allowed:
        raise HTTPException(status_code=422, detail=f"status must be one of {', '.join(allowed)}")

    appts = repo.get_provider(barber_id).appointments
    if on_date is not None:
        key = on_date.isoformat()
        appts = [a for a in appts if a.date == key]
    if status != "all":
        appts = [a for a in appts if a.status == status]

    return [_with_customer(repo, a) for a in sorted(appts, key=lambda a: (a.date, a.time))]


@router.get("/me/appointments/by-day", response_model=List[AgendaDay])
def barber_appointments_by_day(
    repo: InMemoryRepository = Depends(get_repository),
    current_user: Customer = Depends(get_current_user),
):
    barber_id = require_barber_id(current_user)
    groups = day_groups(repo.get_provider(barber_id).appointments)
    return [
        {
            "date": g.date,
            "summary": g.summary,
            "appointments": [_with_customer(repo, a) for a in g.appointments],
        }
        for g in groups
    ]


@router.get("/me/customers/{customer_id}", response_model=CustomerContact)
def barber_customer_contact(
    customer_id: str,
    repo: InMemoryRepository = Depends(get_repository),
    current_user: Customer = Depends(get_current_user),
):
    barber_id = require_barber_id(current_user)

    # Only customers who booked with this barber
    if not any(a.customer_id == customer_id for a in repo.get_provider(barber_id).appointments):
        raise HTTPException(status_code=404, detail="User Not Found")
    return repo.get_customer(customer_id)


@router.get("/me/dashboard", response_model=DashboardResponse)
def barber_dashboard(
    on_date: Optional[date] = None,
    repo: InMemoryRepository = Depends(get_repository),
    current_user: Customer = Depends(get_current_user),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    barber_id = require_barber_id(current_user)
    now = clock()
    key = on_date.isoformat() if on_date is not None else now.strftime(DATE_FORMAT)
    schedule = repo.get_provider(barber_id).appointments
    upcoming = next_up(schedule, now, grace_minutes=shop_settings["next_up_grace_minutes"])

    return {
        "barber_id": barber_id,
        "date": key,
        "summary": day_summary(schedule, key),
        "next_up": _with_customer(repo, upcoming) if upcoming is not None else None,
        "appointments": [_with_customer(repo, a) for a in day_appointments(schedule, key)],
    }


@router.post("/me/seed", response_model=List[Appointment], status_code=201)
def seed_my_day(
    on_date: Optional[date] = None,
    repo: InMemoryRepository = Depends(get_repository),
    current_user: Customer = Depends(get_current_user),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    if not config.DEV_SEED_ENABLED:
        raise HTTPException(status_code=404, detail="Not Found")
    barber_id = require_barber_id(current_user)
    key = on_date.isoformat() if on_date is not None else clock().strftime(DATE_FORMAT)

    return DevSeeder(repo).ensure_day(
        barber_id,
        key,
        start=shop_settings["seed_start"],
        interval_minutes=shop_settings["seed_interval_minutes"],
        slot_count=shop_settings["seed_slot_count"],
    )


@router.get("/{barber_id}", response_model=BarberPublic)
def get_barber(barber_id: str, repo: InMemoryRepository = Depends(get_repository)):
    return repo.get_provider(barber_id)


@router.get("/{barber_id}/availability", response_model=AvailabilityResponse)
def barber_availability(
    barber_id: str,
    date: date,
    repo: InMemoryRepository = Depends(get_repository),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    provider = repo.get_provider(barber_id)
    key = date.isoformat()

    # Past days have nothing left to book
    if date < clock().date():
        return {"barber_id": provider.id, "date": key, "available_starts": []}

    free = available_slots(provider.appointments, key, shop_settings["time_slots"])
    return {"barber_id": provider.id, "date": key, "available_starts": free}
