"""
Fabrication status engine.

Job order items move one step at a time through
Pending -> In Progress -> Completed -> QC Passed. The last step to
Dispatched belongs to the installation scheduler.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    JobItemStatus,
    JobOrder,
    JobOrderItem,
    utc_now,
)
from fulfillment.core.exceptions import (
    ClientNotFoundError,
    InvalidTransitionError,
    JobOrderItemNotFoundError,
    JobOrderNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from fulfillment.core.interfaces import IUnitOfWork
from fulfillment.core.services.transactions import TransactionRunner, TransactionScope

logger = get_logger(__name__)


@dataclass(frozen=True)
class QCPassedItem:
    """An item available for installation scheduling."""

    job_id: str
    job_order_number: str
    client_id: str
    item: JobOrderItem


class FabricationEngine:
    def __init__(self, runner: TransactionRunner):
        self._runner = runner

    async def create_job_order(
        self,
        client_id: str,
        items: Sequence[JobOrderItem],
        description: str = "",
    ) -> JobOrder:
        """Open a job order; every item starts Pending."""
        if not items:
            raise ValidationError("items", "At least one item is required")
        for index, item in enumerate(items):
            if not item.product_id and not item.description:
                raise ValidationError(
                    "product_id", "Item needs a product or a description", line=index
                )

        async def work(tx: TransactionScope) -> JobOrder:
            if await tx.uow.clients.get(client_id) is None:
                raise ClientNotFoundError(client_id)
            for index, item in enumerate(items):
                if item.product_id and await tx.uow.products.get(item.product_id) is None:
                    raise ProductNotFoundError(item.product_id, line=index)

            number = await tx.uow.sequences.next_value("job_order")
            job = await tx.uow.job_orders.add(
                JobOrder(
                    job_order_number=f"JO-{number:06d}",
                    client_id=client_id,
                    description=description,
                    items=[
                        item.model_copy(update={"status": JobItemStatus.PENDING})
                        for item in items
                    ],
                )
            )
            tx.emit("job_order.created", job.id, job_order_number=job.job_order_number)
            return job

        job = await self._runner.run("create_job_order", work)
        logger.info("job_order_created", job_id=job.id, items=len(job.items))
        return job

    async def advance(
        self,
        job_id: str,
        item_id: str,
        to_status: JobItemStatus,
        qc_notes: str | None = None,
    ) -> JobOrder:
        """
        Move one item to its immediate next status.

        Raises:
            InvalidTransitionError: Skipping, going backwards, or Dispatched
        """

        async def work(tx: TransactionScope) -> JobOrder:
            job = await tx.uow.job_orders.get(job_id)
            if job is None:
                raise JobOrderNotFoundError(job_id)
            item = job.get_item(item_id)
            if item is None:
                raise JobOrderItemNotFoundError(item_id)

            if to_status == JobItemStatus.DISPATCHED or not item.status.can_transition_to(
                to_status
            ):
                raise InvalidTransitionError(
                    "job_order_item", item_id, item.status.value, to_status.value
                )

            changes: dict = {"status": to_status}
            if qc_notes is not None:
                changes["qc_notes"] = qc_notes
            items = [
                i.model_copy(update=changes) if i.id == item_id else i for i in job.items
            ]
            job = job.model_copy(update={"items": items, "updated_at": utc_now()})
            job = job.model_copy(update={"status": job.rolled_up_status()})
            updated = await tx.uow.job_orders.update(job)

            tx.emit(
                "job_item.advanced",
                item_id,
                job_id=job_id,
                from_status=item.status.value,
                to_status=to_status.value,
            )
            return updated

        job = await self._runner.run("advance_job_item", work)
        logger.info(
            "job_item_advanced",
            job_id=job_id,
            item_id=item_id,
            status=to_status.value,
            job_status=job.status.value,
        )
        return job

    async def list_qc_passed(self) -> list[QCPassedItem]:
        """Items ready to be scheduled for installation."""

        async def query(uow: IUnitOfWork) -> list[QCPassedItem]:
            jobs = await uow.job_orders.list_with_item_status(JobItemStatus.QC_PASSED)
            return [
                QCPassedItem(
                    job_id=job.id,
                    job_order_number=job.job_order_number,
                    client_id=job.client_id,
                    item=item,
                )
                for job in jobs
                for item in job.items
                if item.status == JobItemStatus.QC_PASSED
            ]

        return await self._runner.read(query)

    async def get_job_order(self, job_id: str) -> JobOrder:
        async def query(uow: IUnitOfWork) -> JobOrder:
            job = await uow.job_orders.get(job_id)
            if job is None:
                raise JobOrderNotFoundError(job_id)
            return job

        return await self._runner.read(query)

    async def list_job_orders(self, limit: int = 100, offset: int = 0) -> list[JobOrder]:
        return await self._runner.read(lambda uow: uow.job_orders.list_all(limit, offset))
