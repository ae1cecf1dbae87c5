"""Fabrication and installation scheduling against a real database."""

import asyncio
from datetime import date

import pytest

from fulfillment.core.entities import (
    InstallationItemRef,
    InstallationStatus,
    JobItemStatus,
    JobOrderItem,
    JobOrderStatus,
)
from fulfillment.core.exceptions import InvalidStateError, InvalidTransitionError

STEPS = (JobItemStatus.IN_PROGRESS, JobItemStatus.COMPLETED, JobItemStatus.QC_PASSED)


@pytest.fixture
async def finished_job(engine, client_record):
    """A job order whose two items both passed QC."""
    job = await engine.fabrication.create_job_order(
        client_record.id,
        [JobOrderItem(description="Steel gate"), JobOrderItem(description="Handrail")],
        description="Site 4",
    )
    for item in job.items:
        for step in STEPS:
            job = await engine.fabrication.advance(job.id, item.id, step)
    return job


class TestFabricationFlow:
    async def test_items_advance_one_step_at_a_time(self, engine, client_record):
        job = await engine.fabrication.create_job_order(
            client_record.id, [JobOrderItem(description="Steel gate")]
        )
        item_id = job.items[0].id

        with pytest.raises(InvalidTransitionError):
            await engine.fabrication.advance(job.id, item_id, JobItemStatus.QC_PASSED)

        job = await engine.fabrication.advance(job.id, item_id, JobItemStatus.IN_PROGRESS)
        assert job.status == JobOrderStatus.IN_PROGRESS

    async def test_qc_passed_listing(self, engine, finished_job):
        assert finished_job.status == JobOrderStatus.COMPLETED

        ready = await engine.fabrication.list_qc_passed()

        assert {entry.item.id for entry in ready} == {item.id for item in finished_job.items}


class TestInstallationFlow:
    async def test_schedule_dispatches_and_advances(self, engine, finished_job, sink):
        refs = [InstallationItemRef(job_id=finished_job.id, item_id=i.id) for i in finished_job.items]

        installation = await engine.installations.schedule_installation(
            "crew-a", date(2024, 6, 3), date(2024, 6, 4), refs
        )

        job = await engine.fabrication.get_job_order(finished_job.id)
        assert {item.status for item in job.items} == {JobItemStatus.DISPATCHED}
        assert await engine.fabrication.list_qc_passed() == []

        installation = await engine.installations.advance_installation(
            installation.id, InstallationStatus.IN_PROGRESS
        )
        installation = await engine.installations.advance_installation(
            installation.id, InstallationStatus.COMPLETED
        )
        assert installation.status == InstallationStatus.COMPLETED
        assert "installation.scheduled" in sink.names()

    async def test_item_cannot_be_booked_twice(self, engine, finished_job):
        ref = InstallationItemRef(job_id=finished_job.id, item_id=finished_job.items[0].id)

        async def book(crew: str):
            return await engine.installations.schedule_installation(
                crew, date(2024, 6, 3), date(2024, 6, 3), [ref]
            )

        results = await asyncio.gather(book("crew-a"), book("crew-b"), return_exceptions=True)

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InvalidStateError)
        assert len(await engine.installations.list_installations()) == 1
