# barbershop/repository.py

import logging
import re
import threading
from contextlib import ExitStack, contextmanager
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .schemas import Appointment, Customer, Provider, UserRole

logger = logging.getLogger(__name__)


class UnknownProviderError(LookupError):
    pass


class UnknownCustomerError(LookupError):
    pass


class PhoneTakenError(ValueError):
    pass


def normalize_phone(phone: str) -> str:
    return re.sub(r"[\s\-()]", "", str(phone))


class InMemoryRepository:
    """Barbers and accounts in process memory; each appointment is stored on both sides."""

    def __init__(self, providers: Iterable[Provider] = (), customers: Iterable[Customer] = ()):
        self._providers: Dict[str, Provider] = {p.id: p for p in providers}
        self._customers: Dict[str, Customer] = {c.id: c for c in customers}
        self._locks: Dict[Tuple[str, str], threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._customers_guard = threading.Lock()

    @classmethod
    def from_seed(
        cls,
        barbers: List[dict],
        users: List[dict],
        appointments: List[dict],
        password_hasher: Callable[[str], str],
    ) -> "InMemoryRepository":
        providers = [Provider(**b) for b in barbers]
        customers = []
        for u in users:
            fields = {k: v for k, v in u.items() if k != "password"}
            customers.append(Customer(**fields, password_hash=password_hasher(u["password"])))

        repo = cls(providers, customers)
        for a in appointments:
            repo.upsert_appointment(Appointment(**a))
        logger.info(
            f"Seeded repository: {len(providers)} barbers, {len(customers)} users, "
            f"{len(appointments)} appointments"
        )
        return repo

    # -- lookups ------------------------------------------------------------

    def get_provider(self, barber_id: str) -> Provider:
        provider = self._providers.get(str(barber_id))
        if provider is None:
            raise UnknownProviderError(f"Barber {barber_id} does not exist")
        return provider

    def get_customer(self, customer_id: str) -> Customer:
        customer = self._customers.get(str(customer_id))
        if customer is None:
            raise UnknownCustomerError(f"User {customer_id} does not exist")
        return customer

    def list_providers(self) -> List[Provider]:
        return list(self._providers.values())

    def list_customers(self, role: Optional[UserRole] = None) -> List[Customer]:
        if role is None:
            return list(self._customers.values())
        return [c for c in list(self._customers.values()) if c.role == role]

    def find_customer_by_phone(self, phone: str) -> Optional[Customer]:
        norm = normalize_phone(phone)
        for customer in list(self._customers.values()):
            if normalize_phone(customer.phone) == norm:
                return customer
        return None

    def _next_customer_id(self) -> str:
        highest = 0
        for customer_id in list(self._customers):
            m = re.fullmatch(r"user(\d+)", customer_id)
            if m:
                highest = max(highest, int(m.group(1)))
        return f"user{highest + 1}"

    def register_customer(self, name: str, phone: str, password_hash: str) -> Customer:
        # Phone check, id assignment and insert happen under one lock
        with self._customers_guard:
            if self.find_customer_by_phone(phone) is not None:
                raise PhoneTakenError(f"Phone {phone} already registered")
            customer = Customer(
                id=self._next_customer_id(),
                name=name,
                phone=phone,
                role=UserRole.client,
                password_hash=password_hash,
            )
            self._customers[customer.id] = customer
            return customer

    def find_appointment(self, appointment_id: str) -> Optional[Appointment]:
        """Return the barber-side record for an id, falling back to customer histories."""
        for provider in self._providers.values():
            for appt in provider.appointments:
                if appt.id == appointment_id:
                    return appt
        for customer in list(self._customers.values()):
            for appt in customer.appointments:
                if appt.id == appointment_id:
                    return appt
        return None

    # -- writes -------------------------------------------------------------

    def upsert_appointment(self, appointment: Appointment) -> Appointment:
        provider = self.get_provider(appointment.barber_id)
        customer = self.get_customer(appointment.customer_id)
        stored = appointment.model_copy()
        _put(provider.appointments, stored)
        _put(customer.appointments, appointment.model_copy())
        return stored

    @contextmanager
    def transaction(self, barber_ids: Iterable[str] = (), customer_ids: Iterable[str] = ()) -> Iterator[None]:
        # Locks in sorted key order; collections are restored if the block raises
        keys = sorted(
            {("barber", str(b)) for b in barber_ids} | {("customer", str(c)) for c in customer_ids}
        )
        with ExitStack() as stack:
            for key in keys:
                stack.enter_context(self._lock_for(key))

            owners = [self._owner(kind, ident) for kind, ident in keys]
            snapshots = [[a.model_copy() for a in owner.appointments] for owner in owners]
            try:
                yield
            except BaseException:
                for owner, saved in zip(owners, snapshots):
                    owner.appointments[:] = saved
                logger.error(f"Transaction over {keys} rolled back")
                raise

    def _owner(self, kind: str, ident: str):
        if kind == "barber":
            return self.get_provider(ident)
        return self.get_customer(ident)

    def _lock_for(self, key: Tuple[str, str]) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock


def _put(collection: List[Appointment], appointment: Appointment) -> None:
    for i, existing in enumerate(collection):
        if existing.id == appointment.id:
            collection[i] = appointment
            return
    collection.append(appointment)
