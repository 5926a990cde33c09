import os
import threading

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")

from collections import Counter
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from barbershop.core.booking import BookingService
from barbershop.core.transitions import StatusTransitionService
from barbershop.data import APPOINTMENTS, BARBERS, USERS, shop_settings
from barbershop.deps import get_clock
from barbershop.main import app
from barbershop.repository import InMemoryRepository
from barbershop.schemas import AppointmentStatus
from barbershop.security import hash_password
from barbershop.store import get_repository

NOW = datetime(2025, 8, 1, 8, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def repo():
    return InMemoryRepository.from_seed(BARBERS, USERS, APPOINTMENTS, password_hasher=hash_password)


@pytest.fixture
def booking(repo, clock):
    return BookingService(repo, clock=clock, time_slots=shop_settings["time_slots"])


@pytest.fixture
def transitions(repo):
    return StatusTransitionService(repo)


@pytest.fixture
def client(repo, clock):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    def _login(phone, password="demo123"):
        res = client.post("/auth/login", data={"username": phone, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['access_token']}"}

    return _login


@pytest.fixture
def check_invariants(repo):
    """Assert slot uniqueness, one active booking per customer and mirrored copies."""

    def _check(now=NOW):
        for provider in repo.list_providers():
            held = Counter(
                (a.date, a.time) for a in provider.appointments if a.status == AppointmentStatus.scheduled
            )
            doubled = [slot for slot, n in held.items() if n > 1]
            assert not doubled, f"barber {provider.id} double-booked at {doubled}"

        for customer in repo.list_customers():
            active = [
                a for a in customer.appointments
                if a.status == AppointmentStatus.scheduled and a.when >= now
            ]
            assert len(active) <= 1, f"{customer.id} holds {len(active)} active bookings"

        barber_side = {a.id: a for p in repo.list_providers() for a in p.appointments}
        customer_side = {a.id: a for c in repo.list_customers() for a in c.appointments}
        assert barber_side.keys() == customer_side.keys()
        for appt_id, appt in barber_side.items():
            assert customer_side[appt_id] == appt
            assert customer_side[appt_id] is not appt

    return _check


@pytest.fixture
def run_together():
    """Run fn(i) on `count` threads released at the same moment; exceptions are returned, not raised."""

    def _run(count, fn):
        barrier = threading.Barrier(count)
        results = [None] * count

        def worker(i):
            barrier.wait()
            try:
                results[i] = fn(i)
            except Exception as exc:
                results[i] = exc

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return results

    return _run
