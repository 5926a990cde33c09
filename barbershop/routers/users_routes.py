# barbershop/routers/users_routes.py

import logging
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException

from barbershop.auth import get_current_user
from barbershop.core.agenda import customer_sections
from barbershop.deps import get_clock
from barbershop.repository import InMemoryRepository, PhoneTakenError
from barbershop.schemas import (
    Appointment,
    AppointmentWithBarber,
    Customer,
    ProfileAppointments,
    UserCreate,
    UserPublic,
)
from barbershop.security import hash_password
from barbershop.store import get_repository

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: Customer = Depends(get_current_user)):
    return current_user


def _with_barber(repo: InMemoryRepository, appt: Appointment) -> AppointmentWithBarber:
    barber = repo.get_provider(appt.barber_id)
    return AppointmentWithBarber(**appt.model_dump(), barber_name=barber.name, barber_specialty=barber.specialty)


@router.get("/me/appointments", response_model=ProfileAppointments)
def my_appointments(
    repo: InMemoryRepository = Depends(get_repository),
    current_user: Customer = Depends(get_current_user),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    sections = customer_sections(current_user.appointments, clock())
    return {
        "upcoming": [_with_barber(repo, a) for a in sections.upcoming],
        "past": [_with_barber(repo, a) for a in sections.past],
    }


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    repo: InMemoryRepository = Depends(get_repository),
):
    # Phone numbers identify accounts at login, so they must be unique
    try:
        db_user = repo.register_customer(
            name=user.name.strip(),
            phone=user.phone.strip(),
            password_hash=hash_password(user.password),
        )
    except PhoneTakenError:
        raise HTTPException(status_code=409, detail="Phone already registered")
    logger.info(f"Registered user {db_user.id}")
    return db_user
