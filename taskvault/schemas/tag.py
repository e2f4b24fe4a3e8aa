"""Tag Schemas — create/update bodies and the tag representation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TagCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    color: str | None = None


class TagUpdate(TagCreate):
    """Same fields as create; only the fields sent are applied."""


class TagSummary(BaseModel):
    """Compact form embedded in task responses."""
    id: UUID
    name: str
    color: str


class TagResponse(BaseModel):
    id: UUID
    name: str
    color: str
    tasks_count: int
    active_tasks_count: int
    completed_tasks_count: int
    overdue_tasks_count: int
    has_tasks: bool
    can_delete: bool
    usage_percentage: float
    user_id: UUID
    created_at: datetime
    updated_at: datetime
