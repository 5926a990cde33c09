# barbershop/store.py

from .data import APPOINTMENTS, BARBERS, USERS
from .repository import InMemoryRepository
from .security import hash_password

# Process memory only: everything resets on restart
repository = InMemoryRepository.from_seed(BARBERS, USERS, APPOINTMENTS, password_hasher=hash_password)


# Dependency: one shared repository for every request
def get_repository() -> InMemoryRepository:
    return repository
