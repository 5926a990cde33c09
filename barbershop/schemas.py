# barbershop/schemas.py

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, Field

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


class UserRole(str, Enum):
    barber = "barber"
    client = "client"


class AppointmentStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    canceled = "canceled"
    no_show = "no_show"


TERMINAL_STATUSES = frozenset(
    {AppointmentStatus.completed, AppointmentStatus.canceled, AppointmentStatus.no_show}
)


def _check_date(value: str) -> str:
    datetime.strptime(value, DATE_FORMAT)
    if len(value) != 10:
        raise ValueError("date must be YYYY-MM-DD")
    return value


def _check_time(value: str) -> str:
    datetime.strptime(value, TIME_FORMAT)
    if len(value) != 5:
        raise ValueError("time must be HH:MM")
    return value


DateStr = Annotated[str, AfterValidator(_check_date)]
TimeStr = Annotated[str, AfterValidator(_check_time)]


class Appointment(BaseModel):
    id: str
    barber_id: str
    customer_id: str
    date: DateStr
    time: TimeStr
    status: AppointmentStatus = AppointmentStatus.scheduled

    @property
    def when(self) -> datetime:
        return datetime.strptime(f"{self.date} {self.time}", f"{DATE_FORMAT} {TIME_FORMAT}")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class AppointmentWithCustomer(Appointment):
    customer_name: str
    customer_phone: str


class AppointmentWithBarber(Appointment):
    barber_name: str
    barber_specialty: str = ""


class Provider(BaseModel):
    id: str
    name: str
    specialty: str = ""
    description: str = ""
    prices: Dict[str, str] = Field(default_factory=dict)
    appointments: List[Appointment] = Field(default_factory=list)


class Customer(BaseModel):
    id: str
    name: str
    phone: str
    role: UserRole = UserRole.client
    barber_id: Optional[str] = None
    password_hash: str = ""
    appointments: List[Appointment] = Field(default_factory=list)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserPublic(BaseModel):
    id: str
    name: str
    phone: str
    role: UserRole
    barber_id: Optional[str] = None


class UserCreate(BaseModel):
    name: str = Field(min_length=2)
    phone: str = Field(min_length=6)
    password: str = Field(min_length=6, max_length=72)


class CustomerContact(BaseModel):
    id: str
    name: str
    phone: str


class BarberPublic(BaseModel):
    id: str
    name: str
    specialty: str
    description: str
    prices: Dict[str, str]


class BookRequest(BaseModel):
    barber_id: str
    date: DateStr
    time: TimeStr
    customer_id: str


class AppointmentCreate(BaseModel):
    """Barber booking a slot on behalf of a customer."""

    date: DateStr
    time: TimeStr
    customer_id: str


class ClientAppointmentCreate(BaseModel):
    date: DateStr
    time: TimeStr


class TransitionRequest(BaseModel):
    next_status: AppointmentStatus


class ReplaceDecision(BaseModel):
    candidate: Appointment
    existing: Appointment
    confirmed: bool


class RejectReason(str, Enum):
    slot_unavailable = "slot_unavailable"
    past_date = "past_date"
    invalid_time = "invalid_time"
    replace_declined = "replace_declined"
    invalid_transition = "invalid_transition"
    record_not_found = "record_not_found"


class Booked(BaseModel):
    outcome: Literal["booked"] = "booked"
    appointment: Appointment


class NeedsReplaceConfirmation(BaseModel):
    outcome: Literal["needs_replace_confirmation"] = "needs_replace_confirmation"
    candidate: Appointment
    existing: Appointment


class Rejected(BaseModel):
    outcome: Literal["rejected"] = "rejected"
    reason: RejectReason
    detail: str = ""


class Applied(BaseModel):
    outcome: Literal["applied"] = "applied"
    appointment: Appointment


BookingOutcome = Annotated[
    Union[Booked, NeedsReplaceConfirmation, Rejected], Field(discriminator="outcome")
]
TransitionOutcome = Annotated[Union[Applied, Rejected], Field(discriminator="outcome")]


class AvailabilityResponse(BaseModel):
    barber_id: str
    date: str
    available_starts: List[str]


class DaySummary(BaseModel):
    total: int = 0
    completed: int = 0
    canceled: int = 0
    no_show: int = 0
    upcoming: int = 0


class DashboardResponse(BaseModel):
    barber_id: str
    date: str
    summary: DaySummary
    next_up: Optional[AppointmentWithCustomer] = None
    appointments: List[AppointmentWithCustomer]


class DayGroup(BaseModel):
    date: str
    summary: DaySummary
    appointments: List[Appointment]


class AgendaDay(BaseModel):
    date: str
    summary: DaySummary
    appointments: List[AppointmentWithCustomer]


class CustomerSections(BaseModel):
    upcoming: List[Appointment]
    past: List[Appointment]


class ProfileAppointments(BaseModel):
    upcoming: List[AppointmentWithBarber]
    past: List[AppointmentWithBarber]
