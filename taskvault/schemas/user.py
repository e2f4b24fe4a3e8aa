"""User Schemas — registration, profile update, and profile representation.

Invariants:
    - admin can never be set through these request bodies
    - password fields are write-only; responses never include them
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserRegister(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    name: str | None = None
    password: str | None = None
    password_confirmation: str | None = None


class UserUpdate(BaseModel):
    """Partial update. Blank password means "keep the current one"."""
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    name: str | None = None
    password: str | None = None
    password_confirmation: str | None = None


class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str
    admin: bool
    tasks_count: int = 0
    completed_tasks_count: int = 0
    pending_tasks_count: int = 0
    overdue_tasks_count: int = 0
    created_at: datetime
    updated_at: datetime
