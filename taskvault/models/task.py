"""Task ORM — the unit of work a user tracks.

Invariants:
    - status is one of pending | in_progress | completed | cancelled (checked in core)
    - priority 0..5, default 0
    - due_date nullable at the column; required for active statuses by core rules
    - Deleting a task deletes its task_tags rows (Task + links form one aggregate)

Design Decisions:
    - status as String(20), not a DB enum: the state machine lives in core/task_lifecycle
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from taskvault.db.base import Base


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True,
    )
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship("User", back_populates="tasks")
    category: Mapped["Category"] = relationship(
        "Category", back_populates="tasks",
    )
    task_tags: Mapped[list["TaskTag"]] = relationship(
        "TaskTag", back_populates="task",
        cascade="all, delete-orphan", passive_deletes=True,
    )
