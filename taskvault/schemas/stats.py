"""Stats Schemas — response model for the global statistics snapshot."""

from pydantic import BaseModel


class UserStats(BaseModel):
    total: int
    admins: int
    regular: int


class TaskStats(BaseModel):
    total: int
    by_status: dict[str, int]
    by_priority: dict[str, int]
    overdue: int
    due_soon: int


class CategoryStats(BaseModel):
    total: int
    with_tasks: int


class TagStats(BaseModel):
    total: int
    used: int


class StatsResponse(BaseModel):
    users: UserStats
    tasks: TaskStats
    categories: CategoryStats
    tags: TagStats
