"""
Installation scheduler.

Scheduling claims QC-passed items by moving them to Dispatched in the same
transaction that creates the installation. An item another request already
dispatched fails the status check, so it cannot be booked twice.
"""

from collections.abc import Sequence
from datetime import date

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    Installation,
    InstallationItemRef,
    InstallationStatus,
    JobItemStatus,
    JobOrder,
    utc_now,
)
from fulfillment.core.exceptions import (
    InstallationNotFoundError,
    InvalidStateError,
    InvalidTransitionError,
    JobOrderItemNotFoundError,
    JobOrderNotFoundError,
    ValidationError,
)
from fulfillment.core.interfaces import IUnitOfWork
from fulfillment.core.services.transactions import TransactionRunner, TransactionScope

logger = get_logger(__name__)


class InstallationScheduler:
    def __init__(self, runner: TransactionRunner):
        self._runner = runner

    async def _load(self, uow: IUnitOfWork, installation_id: str) -> Installation:
        installation = await uow.installations.get(installation_id)
        if installation is None:
            raise InstallationNotFoundError(installation_id)
        return installation

    async def schedule_installation(
        self,
        crew_id: str,
        start_date: date,
        end_date: date,
        items: Sequence[InstallationItemRef],
        notes: str = "",
    ) -> Installation:
        """
        Book QC-passed items against a crew and date range.

        Raises:
            ValidationError: Bad date range, no crew, empty or repeated items
            JobOrderNotFoundError / JobOrderItemNotFoundError: Unknown reference
            InvalidStateError: An item is not QC Passed
        """
        if not crew_id:
            raise ValidationError("crew_id", "Crew is required")
        if start_date > end_date:
            raise ValidationError(
                "end_date", f"End date is before start date {start_date}", end_date
            )
        if not items:
            raise ValidationError("items", "At least one item is required")
        seen: set[tuple[str, str]] = set()
        for index, ref in enumerate(items):
            if ref.key() in seen:
                raise ValidationError("items", "Item listed more than once", ref.item_id, line=index)
            seen.add(ref.key())

        async def work(tx: TransactionScope) -> Installation:
            jobs: dict[str, JobOrder] = {}
            for index, ref in enumerate(items):
                job = jobs.get(ref.job_id) or await tx.uow.job_orders.get(ref.job_id)
                if job is None:
                    raise JobOrderNotFoundError(ref.job_id, line=index)
                item = job.get_item(ref.item_id)
                if item is None:
                    raise JobOrderItemNotFoundError(ref.item_id, line=index)
                if item.status != JobItemStatus.QC_PASSED:
                    error = InvalidStateError(
                        "job_order_item",
                        ref.item_id,
                        item.status.value,
                        expected=[JobItemStatus.QC_PASSED.value],
                    )
                    error.details["line"] = index
                    raise error
                jobs[job.id] = job.model_copy(
                    update={
                        "items": [
                            i.model_copy(update={"status": JobItemStatus.DISPATCHED})
                            if i.id == ref.item_id
                            else i
                            for i in job.items
                        ]
                    }
                )

            now = utc_now()
            for job in jobs.values():
                job = job.model_copy(update={"updated_at": now})
                await tx.uow.job_orders.update(
                    job.model_copy(update={"status": job.rolled_up_status()})
                )

            number = await tx.uow.sequences.next_value("installation")
            installation = await tx.uow.installations.add(
                Installation(
                    installation_number=f"INST-{number:06d}",
                    crew_id=crew_id,
                    start_date=start_date,
                    end_date=end_date,
                    items=list(items),
                    notes=notes,
                )
            )
            tx.emit(
                "installation.scheduled",
                installation.id,
                installation_number=installation.installation_number,
                crew_id=crew_id,
                items=len(items),
            )
            return installation

        installation = await self._runner.run("schedule_installation", work)
        logger.info(
            "installation_scheduled",
            installation_id=installation.id,
            crew_id=crew_id,
            items=len(installation.items),
        )
        return installation

    async def advance_installation(
        self, installation_id: str, to_status: InstallationStatus
    ) -> Installation:
        """Scheduled -> In Progress -> Completed, one step at a time."""

        async def work(tx: TransactionScope) -> Installation:
            installation = await self._load(tx.uow, installation_id)
            if not installation.status.can_transition_to(to_status):
                raise InvalidTransitionError(
                    "installation", installation_id, installation.status.value, to_status.value
                )
            updated = await tx.uow.installations.update(
                installation.model_copy(update={"status": to_status})
            )
            tx.emit(
                "installation.advanced",
                installation_id,
                status=to_status.value,
            )
            return updated

        installation = await self._runner.run("advance_installation", work)
        logger.info(
            "installation_advanced",
            installation_id=installation_id,
            status=installation.status.value,
        )
        return installation

    async def get_installation(self, installation_id: str) -> Installation:
        return await self._runner.read(lambda uow: self._load(uow, installation_id))

    async def list_installations(self, limit: int = 100, offset: int = 0) -> list[Installation]:
        return await self._runner.read(lambda uow: uow.installations.list_all(limit, offset))
