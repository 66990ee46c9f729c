"""
Task query and mutation services.

Every operation takes the authenticated user's id as ``owner_id``; it is
the only source of ownership and is never read from the request body.
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import and_, or_, select, func

from task_service.database import database
from task_service.errors import Forbidden, InvalidInput, NotFound
from task_service.models import tasks, TaskStatus, TASK_STATUSES, ALL_STATUSES
from task_service.pagination import DEFAULT_PAGE_SIZE, page_count, page_offset

logger = logging.getLogger("task-service")


# ------------------------- HELPERS -------------------------
def owns(user_id: str, task: Dict[str, Any]) -> bool:
    return task["owner_id"] == user_id


def _as_utc(value):
    # SQLite hands timestamps back without tzinfo
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_task(row) -> Dict[str, Any]:
    task = {col.name: row[col.name] for col in tasks.columns}
    task["created_at"] = _as_utc(task["created_at"])
    task["updated_at"] = _as_utc(task["updated_at"])
    return task


def _clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise InvalidInput("Task requires a title")
    return title


def _check_status(status: str) -> str:
    if status not in TASK_STATUSES:
        raise InvalidInput(f"`{status}` is not a valid status. Expected one of: {', '.join(TASK_STATUSES)}")
    return status


def _like_pattern(keyword: str) -> str:
    # wildcards stay in the bound value; the SQL text carries no literal "%"
    escaped = keyword.replace("/", "//").replace("%", "/%").replace("_", "/_")
    return f"%{escaped}%"


def build_task_filter(owner_id: str, status: Optional[str] = None, keyword: Optional[str] = None):
    """Owner-scoped WHERE clause for the task list."""
    clauses = [tasks.c.owner_id == owner_id]

    if status and status != ALL_STATUSES:
        clauses.append(tasks.c.status == status)

    if keyword:
        pattern = _like_pattern(keyword)
        clauses.append(
            or_(
                tasks.c.title.ilike(pattern, escape="/"),
                tasks.c.description.ilike(pattern, escape="/"),
            )
        )
    return and_(*clauses)


async def _load_owned(owner_id: str, task_id: str, action: str) -> Dict[str, Any]:
    row = await database.fetch_one(tasks.select().where(tasks.c.id == task_id))
    if not row:
        raise NotFound("Task not found")

    task = format_task(row)
    if not owns(owner_id, task):
        logger.warning(f"[Tasks] User {owner_id} denied {action} on task {task_id}")
        raise Forbidden(f"Not authorized to {action} this task")
    return task


# ------------------------- QUERIES -------------------------
async def list_tasks(
    owner_id: str,
    status: Optional[str] = None,
    keyword: Optional[str] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Dict[str, Any]:
    skip = page_offset(page, page_size)
    where = build_task_filter(owner_id, status, keyword)

    # count and page fetch are separate reads; the total may lag concurrent writes
    total = await database.fetch_val(select(func.count()).select_from(tasks).where(where))
    rows = []
    # past the last page: nothing to fetch, and the offset may not fit the driver's integer
    if skip < total:
        rows = await database.fetch_all(
            tasks.select()
            .where(where)
            .order_by(tasks.c.created_at.desc(), tasks.c.id.desc())
            .limit(page_size)
            .offset(skip)
        )

    return {
        "items": [format_task(row) for row in rows],
        "page": page,
        "page_count": page_count(total, page_size),
        "total_count": total,
        "page_size": page_size,
    }


async def get_task(owner_id: str, task_id: str) -> Dict[str, Any]:
    return await _load_owned(owner_id, task_id, "view")


# ------------------------- MUTATIONS -------------------------
async def create_task(
    owner_id: str,
    title: Optional[str],
    description: Optional[str] = None,
    status: Optional[str] = None,
) -> Dict[str, Any]:
    if not title:
        raise InvalidInput("Task requires a title")

    now = datetime.now(timezone.utc)
    task = {
        "id": str(uuid.uuid4()),
        "owner_id": owner_id,
        "title": _clean_title(title),
        "description": description,
        "status": _check_status(status) if status else TaskStatus.pending.value,
        "created_at": now,
        "updated_at": now,
    }
    await database.execute(tasks.insert().values(**task))
    logger.info(f"[Tasks] Task {task['id']} created by {owner_id}")
    return task


async def update_task(
    owner_id: str,
    task_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    status: Optional[str] = None,
) -> Dict[str, Any]:
    existing = await _load_owned(owner_id, task_id, "update")

    # only truthy values replace what is stored; "" cannot clear a field
    update_vals: Dict[str, Any] = {}
    if title:
        update_vals["title"] = _clean_title(title)
    if description:
        update_vals["description"] = description
    if status:
        update_vals["status"] = _check_status(status)
    update_vals["updated_at"] = datetime.now(timezone.utc)

    await database.execute(tasks.update().where(tasks.c.id == task_id).values(**update_vals))
    logger.info(f"[Tasks] Task {task_id} updated by {owner_id}: {sorted(update_vals)}")
    return {**existing, **update_vals}


async def delete_task(owner_id: str, task_id: str) -> None:
    await _load_owned(owner_id, task_id, "delete")
    await database.execute(tasks.delete().where(tasks.c.id == task_id))
    logger.info(f"[Tasks] Task {task_id} deleted by {owner_id}")
