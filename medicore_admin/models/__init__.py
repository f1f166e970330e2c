"""
MediCore payload models.
"""

from .base import APIModel, Identified
from .entities import (
    Appointment,
    AppointmentDoctor,
    AppointmentStatus,
    Avatar,
    Doctor,
    Message,
    Principal,
)

__all__ = [
    "APIModel",
    "Identified",
    "Principal",
    "Doctor",
    "Avatar",
    "Message",
    "Appointment",
    "AppointmentDoctor",
    "AppointmentStatus",
]
