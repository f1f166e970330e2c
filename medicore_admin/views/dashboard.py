"""Dashboard summary built from the session and the cached collections."""

from dataclasses import dataclass

from medicore_admin.core.cache import CacheSnapshot
from medicore_admin.core.session import Session
from medicore_admin.models import Appointment, Doctor


@dataclass(frozen=True)
class AppointmentRow:
    appointment_id: str
    patient: str
    date: str | None
    doctor: str
    department: str
    status: str
    visited: bool


@dataclass(frozen=True)
class DashboardSummary:
    greeting_name: str
    appointment_count: int
    doctor_count: int
    rows: tuple[AppointmentRow, ...]
    appointments_loading: bool
    doctors_loading: bool

    @classmethod
    def build(
        cls,
        session: Session,
        appointments: CacheSnapshot[Appointment],
        doctors: CacheSnapshot[Doctor],
    ) -> "DashboardSummary":
        principal = session.principal
        rows = tuple(
            AppointmentRow(
                appointment_id=appt.id,
                patient=appt.patient_name,
                date=appt.appointment_date,
                doctor=appt.doctor.full_name,
                department=appt.department,
                status=appt.status_label,
                visited=appt.has_visited,
            )
            for appt in appointments.items
        )
        return cls(
            greeting_name=principal.display_name if principal else "",
            appointment_count=len(appointments.items),
            doctor_count=len(doctors.items),
            rows=rows,
            # Seeded data is shown straight away; only an empty, unfetched cache counts as loading
            appointments_loading=not appointments.populated and not appointments.items,
            doctors_loading=not doctors.populated and not doctors.items,
        )
