"""User ORM — identity root that owns categories, tags and tasks.

Invariants:
    - email is unique and stored lowercased
    - password_digest is a bcrypt hash, never the plain password
    - Deleting a user cascades to its categories, tags and tasks

Design Decisions:
    - admin flag lives on the row; it can only be set outside registration (seed, SQL)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from taskvault.db.base import Base


class User(Base):
    """Account that owns a private graph of tasks, categories and tags."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    password_digest: Mapped[str] = mapped_column(String(255), nullable=False)
    admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
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

    categories: Mapped[list["Category"]] = relationship(
        "Category", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    tags: Mapped[list["Tag"]] = relationship(
        "Tag", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    tasks: Mapped[list["Task"]] = relationship(
        "Task", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )
