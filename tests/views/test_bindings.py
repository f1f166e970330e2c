"""
Tests for view collection bindings and the dashboard summary.
"""

from unittest.mock import AsyncMock

import pytest

from medicore_admin.core.cache import EntityCacheStore
from medicore_admin.core.domain.events import EntityKind
from medicore_admin.core.session import Session
from medicore_admin.models import Appointment, Doctor
from medicore_admin.views import CollectionBinding, DashboardSummary


@pytest.fixture
def doctors_fetcher(doctor_factory):
    return AsyncMock(
        side_effect=[
            [doctor_factory("d1")],
            [doctor_factory("d1"), doctor_factory("d2")],
            [doctor_factory("d1"), doctor_factory("d2"), doctor_factory("d3")],
        ]
    )


@pytest.fixture
def doctors_store(doctors_fetcher, snapshot_store, notices):
    return EntityCacheStore(EntityKind.DOCTORS, doctors_fetcher, snapshot_store, notices, Doctor)


class TestCollectionBinding:
    @pytest.mark.asyncio
    async def test_mount_subscribes_and_populates(self, doctors_store, bus):
        binding = CollectionBinding(doctors_store, bus)

        snapshot = await binding.mount()

        assert binding.mounted
        assert snapshot.populated
        assert bus.listener_count(EntityKind.DOCTORS) == 1

    @pytest.mark.asyncio
    async def test_second_binding_reuses_populated_store(self, doctors_store, doctors_fetcher, bus):
        await CollectionBinding(doctors_store, bus).mount()
        await CollectionBinding(doctors_store, bus).mount()

        assert doctors_fetcher.await_count == 1

    @pytest.mark.asyncio
    async def test_invalidation_refreshes_mounted_binding(self, doctors_store, doctors_fetcher, bus):
        binding = CollectionBinding(doctors_store, bus)
        await binding.mount()

        bus.publish(EntityKind.DOCTORS)
        snapshot = await binding.settle()

        assert doctors_fetcher.await_count == 2
        assert [d.id for d in snapshot.items] == ["d1", "d2"]

    @pytest.mark.asyncio
    async def test_other_kinds_do_not_refresh(self, doctors_store, doctors_fetcher, bus):
        binding = CollectionBinding(doctors_store, bus)
        await binding.mount()

        bus.publish(EntityKind.MESSAGES)
        await binding.settle()

        assert doctors_fetcher.await_count == 1

    @pytest.mark.asyncio
    async def test_unmounted_binding_stops_listening(self, doctors_store, doctors_fetcher, bus):
        binding = CollectionBinding(doctors_store, bus)
        await binding.mount()
        binding.unmount()

        bus.publish(EntityKind.DOCTORS)
        await binding.settle()

        assert not binding.mounted
        assert bus.listener_count(EntityKind.DOCTORS) == 0
        assert doctors_fetcher.await_count == 1

    @pytest.mark.asyncio
    async def test_repeated_mount_cycles_do_not_leak_listeners(self, doctors_store, bus):
        for _ in range(5):
            async with CollectionBinding(doctors_store, bus):
                assert bus.listener_count(EntityKind.DOCTORS) == 1

        assert bus.listener_count() == 0

    @pytest.mark.asyncio
    async def test_mount_twice_keeps_one_subscription(self, doctors_store, bus):
        binding = CollectionBinding(doctors_store, bus)

        await binding.mount()
        await binding.mount()

        assert bus.listener_count(EntityKind.DOCTORS) == 1


class TestDashboardSummary:
    @pytest.mark.asyncio
    async def test_summary_from_populated_stores(self, admin, sample_appointments, sample_doctors, snapshot_store, notices):
        appointments = EntityCacheStore(
            EntityKind.APPOINTMENTS, AsyncMock(return_value=sample_appointments), snapshot_store, notices, Appointment
        )
        doctors = EntityCacheStore(EntityKind.DOCTORS, AsyncMock(return_value=sample_doctors), snapshot_store, notices)
        await appointments.ensure_fresh()
        await doctors.ensure_fresh()

        summary = DashboardSummary.build(Session.signed_in(admin), appointments.get(), doctors.get())

        assert summary.greeting_name == "Ada Lovelace"
        assert summary.appointment_count == 2
        assert summary.doctor_count == 2
        assert summary.rows[0].patient == "John Doe"
        assert summary.rows[0].doctor == "Greg House"
        assert [row.status for row in summary.rows] == ["Pending", "Accepted"]
        assert not summary.appointments_loading

    def test_summary_of_empty_unfetched_stores_is_loading(self, snapshot_store, notices):
        appointments = EntityCacheStore(EntityKind.APPOINTMENTS, AsyncMock(), snapshot_store, notices)
        doctors = EntityCacheStore(EntityKind.DOCTORS, AsyncMock(), snapshot_store, notices)

        summary = DashboardSummary.build(Session.anonymous(), appointments.get(), doctors.get())

        assert summary.greeting_name == ""
        assert summary.appointments_loading
        assert summary.doctors_loading
        assert summary.rows == ()
