from enum import Enum

from sqlalchemy import Table, Column, String, Text, DateTime, ForeignKey, Index

from task_service.database import metadata


# -------------------------
# Enums
# -------------------------
class Role(str, Enum):
    admin = "admin"
    standard_user = "standard_user"


class TaskStatus(str, Enum):
    pending = "Pending"
    in_progress = "In Progress"
    completed = "Completed"
    canceled = "Canceled"


TASK_STATUSES = [s.value for s in TaskStatus]

# Sentinel accepted by the list filter meaning "no status restriction"
ALL_STATUSES = "All"

# -------------------------
# Users table
# -------------------------
users = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),
    Column("email", String, unique=True, index=True, nullable=False),
    Column("password_hash", String, nullable=False),
    Column("role", String, nullable=False, default=Role.standard_user.value),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

# -------------------------
# Tasks table
# -------------------------
tasks = Table(
    "tasks",
    metadata,
    Column("id", String, primary_key=True),
    Column("owner_id", String, ForeignKey("users.id"), nullable=False),
    Column("title", String, nullable=False),
    Column("description", Text, nullable=True),
    Column("status", String, nullable=False, default=TaskStatus.pending.value),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_tasks_owner_created", "owner_id", "created_at"),
)
