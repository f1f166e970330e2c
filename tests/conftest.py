"""
Shared pytest fixtures for all tests.

This module provides the notice board, invalidation bus, snapshot stores,
API doubles and sample payloads shared by the console-core tests.
"""

import os
from unittest.mock import AsyncMock, Mock

import pytest
from redis.asyncio import Redis

from medicore_admin.clients import MediCoreAPIClient
from medicore_admin.config import reset_settings
from medicore_admin.core.cache import MemorySnapshotStore
from medicore_admin.core.events import InvalidationBus
from medicore_admin.core.notifications import NoticeBoard
from medicore_admin.models import Appointment, Doctor, Message, Principal

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["SNAPSHOT_BACKEND"] = "memory"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Re-read settings for every test so environment patches take effect."""
    reset_settings()
    yield
    reset_settings()


# ============================================================================
# CORE FIXTURES
# ============================================================================


@pytest.fixture
def notices() -> NoticeBoard:
    return NoticeBoard(auto_close_seconds=3.0)


@pytest.fixture
def bus() -> InvalidationBus:
    return InvalidationBus()


@pytest.fixture
def snapshot_store() -> MemorySnapshotStore:
    return MemorySnapshotStore()


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis_mock = Mock(spec=Redis)
    redis_mock.get = AsyncMock(return_value=None)
    redis_mock.set = AsyncMock(return_value=True)
    redis_mock.delete = AsyncMock(return_value=1)
    redis_mock.aclose = AsyncMock(return_value=None)
    return redis_mock


@pytest.fixture
def mock_api():
    """API client double; every endpoint is an AsyncMock."""
    api = AsyncMock(spec=MediCoreAPIClient)
    api.get_current_admin.return_value = None
    api.logout.return_value = "Logged out"
    api.list_doctors.return_value = []
    api.list_messages.return_value = []
    api.list_appointments.return_value = []
    return api


# ============================================================================
# SAMPLE DATA
# ============================================================================


@pytest.fixture
def admin() -> Principal:
    return Principal.model_validate(
        {"_id": "adm-1", "firstName": "Ada", "lastName": "Lovelace", "email": "ada@medicore.test", "role": "Admin"}
    )


def make_doctor(doctor_id: str, first_name: str = "Greg", department: str = "Cardiology") -> Doctor:
    return Doctor.model_validate(
        {
            "_id": doctor_id,
            "firstName": first_name,
            "lastName": "House",
            "email": f"{doctor_id}@medicore.test",
            "phone": "03001234567",
            "nic": "1234567890123",
            "dob": "1970-06-11T00:00:00.000Z",
            "gender": "Male",
            "doctorDepartment": department,
            "docAvatar": {"public_id": f"avatar-{doctor_id}", "url": f"https://cdn.test/{doctor_id}.png"},
        }
    )


def make_appointment(appointment_id: str, status: str = "Pending") -> Appointment:
    return Appointment.model_validate(
        {
            "_id": appointment_id,
            "firstName": "John",
            "lastName": "Doe",
            "appointment_date": "2024-05-01",
            "department": "Cardiology",
            "doctor": {"firstName": "Greg", "lastName": "House"},
            "status": status,
            "hasVisited": False,
        }
    )


def make_message(message_id: str, text: str = "Hello there") -> Message:
    return Message.model_validate(
        {
            "_id": message_id,
            "firstName": "Jane",
            "lastName": "Roe",
            "email": "jane@medicore.test",
            "phone": "03007654321",
            "message": text,
        }
    )


@pytest.fixture
def sample_doctors() -> list[Doctor]:
    return [make_doctor("d1", "Greg"), make_doctor("d2", "Lisa", "Neurology")]


@pytest.fixture
def sample_appointments() -> list[Appointment]:
    return [make_appointment("a1"), make_appointment("a2", "Accepted")]


@pytest.fixture
def sample_messages() -> list[Message]:
    return [make_message("m1"), make_message("m2", "x" * 200)]


@pytest.fixture
def doctor_factory():
    return make_doctor


@pytest.fixture
def appointment_factory():
    return make_appointment
