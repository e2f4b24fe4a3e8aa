"""Task Schemas — create/update bodies and the task representation.

Invariants:
    - due_date is normalized to an aware UTC datetime at the boundary
    - tag_ids omitted on update → links untouched; sent (even empty/null) → replaced
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from taskvault.core.task_facts import as_utc
from taskvault.schemas.category import CategorySummary
from taskvault.schemas.tag import TagSummary


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    description: str | None = None
    status: str | None = None
    priority: int | None = None
    due_date: datetime | None = None
    category_id: UUID | None = None
    tag_ids: list[UUID] | None = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None


class TaskUpdate(TaskCreate):
    """Same fields as create; only the fields sent are applied."""


class TaskResponse(BaseModel):
    id: UUID
    title: str
    description: str | None
    status: str
    status_label: str
    priority: int
    priority_label: str
    due_date: datetime | None
    days_until_due: int | None
    overdue: bool
    due_soon: bool
    high_priority: bool
    user_id: UUID
    category: CategorySummary | None
    tags: list[TagSummary]
    created_at: datetime
    updated_at: datetime
