"""
Write flows: each performs one remote write and, on success only, tells the
cache layer (invalidation or local patch).
"""

from .appointment_service import AppointmentService
from .auth_service import AuthService
from .base import WriteResult, failure_message
from .doctor_service import DEPARTMENTS, AdminService, DoctorService
from .message_service import DEMO_DELETE_DISABLED, MessageService

__all__ = [
    "WriteResult",
    "failure_message",
    "AuthService",
    "DoctorService",
    "AdminService",
    "AppointmentService",
    "MessageService",
    "DEPARTMENTS",
    "DEMO_DELETE_DISABLED",
]
