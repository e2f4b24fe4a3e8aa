"""Category Schemas — create/update bodies and the category representation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CategoryCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    description: str | None = None
    color: str | None = None


class CategoryUpdate(CategoryCreate):
    """Same fields as create; only the fields sent are applied."""


class CategorySummary(BaseModel):
    """Compact form embedded in task responses."""
    id: UUID
    name: str
    color: str


class CategoryResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    color: str
    tasks_count: int
    active_tasks_count: int
    completed_tasks_count: int
    overdue_tasks_count: int
    has_tasks: bool
    can_delete: bool
    user_id: UUID
    created_at: datetime
    updated_at: datetime
