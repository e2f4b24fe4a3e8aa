"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the ownership root; categories, tags and tasks all carry user_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from taskvault.models.user import User  # noqa: F401
from taskvault.models.category import Category  # noqa: F401
from taskvault.models.tag import Tag  # noqa: F401
from taskvault.models.task import Task  # noqa: F401
from taskvault.models.task_tag import TaskTag  # noqa: F401
