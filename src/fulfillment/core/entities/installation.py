"""Installation entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import LifecycleStatus, new_id, utc_now


class InstallationStatus(LifecycleStatus):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def transitions(cls) -> dict[str, frozenset[str]]:
        return {
            "Scheduled": frozenset({"In Progress"}),
            "In Progress": frozenset({"Completed"}),
        }


class InstallationItemRef(BaseModel):
    """A fabricated item, addressed by its job order and item id."""

    job_id: str
    item_id: str

    def key(self) -> tuple[str, str]:
        return (self.job_id, self.item_id)


class Installation(BaseModel):
    """A crew assignment that dispatches QC-passed items."""

    id: str = Field(default_factory=new_id)
    installation_number: str = ""
    crew_id: str
    start_date: date
    end_date: date
    items: list[InstallationItemRef]
    status: InstallationStatus = InstallationStatus.SCHEDULED
    notes: str = ""
    version: int = 1
    created_at: datetime = Field(default_factory=utc_now)
