"""
Entity models for the collections cached by the console.
"""

from enum import Enum

from pydantic import Field

from .base import APIModel, Identified


class Principal(Identified):
    """Authenticated admin identity returned by the login and session-probe endpoints."""

    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    role: str = "Admin"

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email


class Avatar(APIModel):
    public_id: str | None = None
    url: str | None = None


class Doctor(Identified):
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    phone: str = ""
    nic: str = ""
    dob: str | None = None
    gender: str = ""
    doctor_department: str = Field("", alias="doctorDepartment")
    avatar: Avatar | None = Field(None, alias="docAvatar")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def avatar_url(self) -> str | None:
        return self.avatar.url if self.avatar else None

    @property
    def birth_date(self) -> str:
        """Date part of ``dob`` or ``N/A``."""
        return self.dob[:10] if self.dob else "N/A"


class Message(Identified):
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    phone: str = ""
    message: str = ""
    read: bool = False

    @property
    def sender(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def preview(self, limit: int = 150) -> str:
        if len(self.message) > limit:
            return f"{self.message[:limit]}..."
        return self.message


class AppointmentStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class AppointmentDoctor(APIModel):
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Appointment(Identified):
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    appointment_date: str | None = None
    department: str = ""
    doctor: AppointmentDoctor = Field(default_factory=AppointmentDoctor)
    # Statuses the console does not know yet are kept as plain strings
    status: AppointmentStatus | str = Field(AppointmentStatus.PENDING, union_mode="left_to_right")
    has_visited: bool = Field(False, alias="hasVisited")

    @property
    def patient_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def status_label(self) -> str:
        return self.status.value if isinstance(self.status, AppointmentStatus) else self.status
