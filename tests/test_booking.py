import random

import pytest
from pydantic import ValidationError

from barbershop.core.slots import taken_times
from barbershop.repository import UnknownCustomerError, UnknownProviderError
from barbershop.schemas import (
    AppointmentStatus,
    Booked,
    BookRequest,
    NeedsReplaceConfirmation,
    Rejected,
    RejectReason,
    ReplaceDecision,
)


def _req(barber_id, date, time, customer_id):
    return BookRequest(barber_id=barber_id, date=date, time=time, customer_id=customer_id)


def _scheduled(appointments):
    return [a for a in appointments if a.status == AppointmentStatus.scheduled]


def test_book_writes_both_sides(booking, repo, check_invariants):
    outcome = booking.book(_req("1", "2025-10-16", "09:00", "user1"))

    assert isinstance(outcome, Booked)
    appt = outcome.appointment
    assert appt.status == AppointmentStatus.scheduled
    assert appt in repo.get_provider("1").appointments
    assert appt in repo.get_customer("user1").appointments
    check_invariants()


def test_same_slot_cannot_be_booked_twice(booking, repo):
    assert isinstance(booking.book(_req("1", "2025-10-16", "09:00", "user1")), Booked)

    outcome = booking.book(_req("1", "2025-10-16", "09:00", "user2"))

    assert isinstance(outcome, Rejected)
    assert outcome.reason == RejectReason.slot_unavailable
    assert _scheduled(repo.get_customer("user2").appointments) == []


def test_past_date_rejected(booking, repo):
    before = len(repo.get_provider("1").appointments)
    outcome = booking.book(_req("1", "2025-07-31", "09:00", "user1"))
    assert outcome.reason == RejectReason.past_date
    assert len(repo.get_provider("1").appointments) == before


def test_today_is_bookable(booking):
    assert isinstance(booking.book(_req("1", "2025-08-01", "16:00", "user1")), Booked)


def test_time_outside_menu_rejected(booking):
    outcome = booking.book(_req("1", "2025-10-16", "12:00", "user1"))
    assert outcome.reason == RejectReason.invalid_time


def test_malformed_date_is_a_validation_error():
    with pytest.raises(ValidationError):
        _req("1", "16/10/2025", "09:00", "user1")
    with pytest.raises(ValidationError):
        _req("1", "2025-10-16", "9am", "user1")


def test_unknown_ids_raise(booking):
    with pytest.raises(UnknownProviderError):
        booking.book(_req("99", "2025-10-16", "09:00", "user1"))
    with pytest.raises(UnknownCustomerError):
        booking.book(_req("1", "2025-10-16", "09:00", "nobody"))


def test_rebooking_same_barber_replaces_directly(booking, repo, check_invariants):
    first = booking.book(_req("1", "2025-08-20", "10:00", "user1")).appointment

    outcome = booking.book(_req("1", "2025-08-21", "11:00", "user1"))

    assert isinstance(outcome, Booked)
    history = {a.id: a for a in repo.get_customer("user1").appointments}
    assert history[first.id].status == AppointmentStatus.canceled
    assert history[outcome.appointment.id].status == AppointmentStatus.scheduled
    assert "10:00" not in taken_times(repo.get_provider("1").appointments, "2025-08-20")
    check_invariants()


def test_rebooking_identical_slot_is_a_no_op(booking, repo):
    first = booking.book(_req("1", "2025-08-20", "10:00", "user1")).appointment
    count = len(repo.get_provider("1").appointments)

    outcome = booking.book(_req("1", "2025-08-20", "10:00", "user1"))

    assert isinstance(outcome, Booked)
    assert outcome.appointment.id == first.id
    assert len(repo.get_provider("1").appointments) == count


def test_other_barber_needs_confirmation(booking, repo):
    existing = booking.book(_req("1", "2025-08-20", "10:00", "user1")).appointment
    before_1 = [a.model_copy() for a in repo.get_provider("1").appointments]
    before_2 = [a.model_copy() for a in repo.get_provider("2").appointments]

    outcome = booking.book(_req("2", "2025-08-21", "11:00", "user1"))

    assert isinstance(outcome, NeedsReplaceConfirmation)
    assert outcome.existing.id == existing.id
    assert (outcome.candidate.barber_id, outcome.candidate.date, outcome.candidate.time) == ("2", "2025-08-21", "11:00")
    assert repo.get_provider("1").appointments == before_1
    assert repo.get_provider("2").appointments == before_2
    assert repo.find_appointment(outcome.candidate.id) is None


def test_confirmed_replace_moves_the_booking(booking, repo, check_invariants):
    booking.book(_req("1", "2025-08-20", "10:00", "user1"))
    pending = booking.book(_req("2", "2025-08-21", "11:00", "user1"))

    outcome = booking.decide(ReplaceDecision(candidate=pending.candidate, existing=pending.existing, confirmed=True))

    assert isinstance(outcome, Booked)
    assert "10:00" not in taken_times(repo.get_provider("1").appointments, "2025-08-20")
    barber2 = [a for a in _scheduled(repo.get_provider("2").appointments) if a.date == "2025-08-21"]
    assert [(a.time, a.customer_id) for a in barber2] == [("11:00", "user1")]
    active = _scheduled(repo.get_customer("user1").appointments)
    assert [a.id for a in active] == [outcome.appointment.id]
    check_invariants()


def test_declined_replace_keeps_existing(booking, repo):
    existing = booking.book(_req("1", "2025-08-20", "10:00", "user1")).appointment
    pending = booking.book(_req("2", "2025-08-21", "11:00", "user1"))

    outcome = booking.decide(ReplaceDecision(candidate=pending.candidate, existing=pending.existing, confirmed=False))

    assert outcome.reason == RejectReason.replace_declined
    assert [a.id for a in _scheduled(repo.get_customer("user1").appointments)] == [existing.id]
    assert taken_times(repo.get_provider("2").appointments, "2025-08-21") == set()


def test_commit_replace_after_slot_was_taken(booking, repo):
    booking.book(_req("1", "2025-08-20", "10:00", "user1"))
    pending = booking.book(_req("2", "2025-08-21", "11:00", "user1"))
    booking.book(_req("2", "2025-08-21", "11:00", "user2"))

    outcome = booking.commit_replace(pending.candidate, pending.existing)

    assert outcome.reason == RejectReason.slot_unavailable
    assert len(_scheduled(repo.get_customer("user1").appointments)) == 1


def test_commit_replace_after_existing_was_canceled(booking, transitions, repo, check_invariants):
    booking.book(_req("1", "2025-08-20", "10:00", "user1"))
    pending = booking.book(_req("2", "2025-08-21", "11:00", "user1"))
    transitions.cancel(pending.existing.id)

    outcome = booking.commit_replace(pending.candidate, pending.existing)

    assert isinstance(outcome, Booked)
    assert [a.barber_id for a in _scheduled(repo.get_customer("user1").appointments)] == ["2"]
    check_invariants()


def test_commit_replace_with_stale_existing_asks_again(booking, repo):
    booking.book(_req("1", "2025-08-20", "10:00", "user1"))
    pending = booking.book(_req("2", "2025-08-21", "11:00", "user1"))
    # customer moved within barber 1 in the meantime
    moved = booking.book(_req("1", "2025-08-22", "13:00", "user1")).appointment

    outcome = booking.commit_replace(pending.candidate, pending.existing)

    assert isinstance(outcome, NeedsReplaceConfirmation)
    assert outcome.existing.id == moved.id


def test_commit_replace_rejects_mixed_customers(booking):
    booking.book(_req("1", "2025-08-20", "10:00", "user1"))
    pending = booking.book(_req("2", "2025-08-21", "11:00", "user1"))
    other = pending.candidate.model_copy(update={"customer_id": "user2"})

    with pytest.raises(ValueError):
        booking.commit_replace(other, pending.existing)


def test_canceled_slot_can_be_rebooked(booking, transitions):
    first = booking.book(_req("1", "2025-10-16", "09:00", "user1")).appointment
    transitions.cancel(first.id)

    outcome = booking.book(_req("1", "2025-10-16", "09:00", "user2"))

    assert isinstance(outcome, Booked)
    assert outcome.appointment.customer_id == "user2"


def test_random_operations_keep_store_consistent(booking, transitions, repo, check_invariants):
    rng = random.Random(20250801)
    customers = ["user1", "user2", "user3", "user4", "user5"]
    barbers = ["1", "2", "3", "4"]
    dates = ["2025-08-01", "2025-08-02", "2025-08-03"]
    times = ["09:00", "10:00", "11:00", "13:00"]
    statuses = [s.value for s in AppointmentStatus]
    pending = []

    for _ in range(400):
        roll = rng.random()
        if roll < 0.55:
            outcome = booking.book(_req(rng.choice(barbers), rng.choice(dates), rng.choice(times), rng.choice(customers)))
            if isinstance(outcome, NeedsReplaceConfirmation):
                pending.append(outcome)
        elif roll < 0.75 and pending:
            draft = pending.pop(rng.randrange(len(pending)))
            outcome = booking.decide(
                ReplaceDecision(candidate=draft.candidate, existing=draft.existing, confirmed=rng.random() < 0.8)
            )
        else:
            ids = [a.id for p in repo.list_providers() for a in p.appointments]
            outcome = transitions.transition(rng.choice(ids), rng.choice(statuses))

        assert isinstance(outcome, (Booked, NeedsReplaceConfirmation, Rejected)) or outcome.outcome == "applied"
        check_invariants()


def test_simultaneous_bookings_for_one_slot(booking, check_invariants, run_together):
    customers = ["user1", "user2", "user3", "user4", "user5"]

    results = run_together(len(customers), lambda i: booking.book(_req("1", "2025-10-16", "09:00", customers[i])))

    booked = [r for r in results if isinstance(r, Booked)]
    assert len(booked) == 1
    assert all(r.reason == RejectReason.slot_unavailable for r in results if not isinstance(r, Booked))
    check_invariants()


def test_simultaneous_bookings_by_one_customer(booking, repo, check_invariants, run_together):
    times = ["09:00", "10:00", "11:00", "13:00"]

    run_together(len(times), lambda i: booking.book(_req("1", "2025-10-16", times[i], "user1")))

    assert len(_scheduled(repo.get_customer("user1").appointments)) == 1
    check_invariants()
