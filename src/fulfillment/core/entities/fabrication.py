"""Job order (fabrication) entities."""

from datetime import datetime

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import LifecycleStatus, new_id, utc_now


class JobItemStatus(LifecycleStatus):
    """
    Fabrication item lifecycle.

    Pending -> In Progress -> Completed -> QC Passed -> Dispatched. Dispatched
    is only entered by scheduling an installation.
    """

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    QC_PASSED = "QC Passed"
    DISPATCHED = "Dispatched"

    @classmethod
    def transitions(cls) -> dict[str, frozenset[str]]:
        return {
            "Pending": frozenset({"In Progress"}),
            "In Progress": frozenset({"Completed"}),
            "Completed": frozenset({"QC Passed"}),
            "QC Passed": frozenset({"Dispatched"}),
        }


class JobOrderStatus(LifecycleStatus):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class JobOrderItem(BaseModel):
    id: str = Field(default_factory=new_id)
    product_id: str | None = None
    description: str = ""
    quantity: int = Field(default=1, gt=0)
    status: JobItemStatus = JobItemStatus.PENDING
    qc_notes: str | None = None


class JobOrder(BaseModel):
    """Container of fabrication items for one client."""

    id: str = Field(default_factory=new_id)
    job_order_number: str = ""
    client_id: str
    description: str = ""
    status: JobOrderStatus = JobOrderStatus.PENDING
    items: list[JobOrderItem]
    version: int = 1
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def get_item(self, item_id: str) -> JobOrderItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def rolled_up_status(self) -> JobOrderStatus:
        """Derive the container status from its items."""
        finished = {JobItemStatus.QC_PASSED, JobItemStatus.DISPATCHED}
        if self.items and all(item.status in finished for item in self.items):
            return JobOrderStatus.COMPLETED
        if any(item.status != JobItemStatus.PENDING for item in self.items):
            return JobOrderStatus.IN_PROGRESS
        return JobOrderStatus.PENDING
