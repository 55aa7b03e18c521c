"""
Task service — per-user CRUD over tasks.

Every operation takes the authenticated ``user_id`` first.  A task owned by
another user is indistinguishable from one that does not exist: both raise
``NotFound``.
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Task
from utils.errors import NotFound
from utils.schemas import (
    Pagination,
    TaskCreate,
    TaskListQuery,
    TaskOut,
    TaskPage,
    TaskStatus,
    TaskUpdate,
)

logger = logging.getLogger(__name__)


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value


class TaskNotFound(NotFound):
    message = "Task not found"


class TaskService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _get_owned(self, user_id: str, task_id: str) -> Task:
        """Fetch a task owned by ``user_id`` or raise ``TaskNotFound``."""
        try:
            tid = _to_uuid(task_id)
            uid = _to_uuid(user_id)
        except ValueError as exc:
            raise TaskNotFound() from exc

        result = await self.session.execute(
            select(Task).where(Task.id == tid, Task.user_id == uid)
        )
        task = result.scalar_one_or_none()
        if task is None:
            raise TaskNotFound()
        return task

    async def list_tasks(self, user_id: str, query: TaskListQuery) -> TaskPage:
        """Return one page of the user's tasks, newest first."""
        conditions = [Task.user_id == _to_uuid(user_id)]
        if query.status is not None:
            conditions.append(Task.status == query.status.value)
        if query.search:
            conditions.append(Task.title.icontains(query.search, autoescape=True))

        total = await self.session.scalar(
            select(func.count()).select_from(Task).where(*conditions)
        )
        result = await self.session.execute(
            select(Task)
            .where(*conditions)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        tasks = result.scalars().all()

        return TaskPage(
            tasks=[TaskOut.model_validate(t) for t in tasks],
            pagination=Pagination(
                page=query.page,
                limit=query.limit,
                total=total or 0,
                total_pages=math.ceil((total or 0) / query.limit),
            ),
        )

    async def create(self, user_id: str, data: TaskCreate) -> TaskOut:
        task = Task(
            title=data.title,
            description=data.description,
            status=data.status.value,
            user_id=_to_uuid(user_id),
        )
        self.session.add(task)
        await self.session.flush()
        await self.session.refresh(task)
        logger.info("Created task %s for user %s", task.id, user_id)
        return TaskOut.model_validate(task)

    async def get_by_id(self, user_id: str, task_id: str) -> TaskOut:
        return TaskOut.model_validate(await self._get_owned(user_id, task_id))

    async def update(self, user_id: str, task_id: str, patch: TaskUpdate) -> TaskOut:
        """Apply only the fields present in ``patch``."""
        task = await self._get_owned(user_id, task_id)

        changes = patch.model_dump(exclude_unset=True)
        if "status" in changes:
            changes["status"] = TaskStatus(changes["status"]).value
        for field, value in changes.items():
            setattr(task, field, value)
        task.updated_at = datetime.now(timezone.utc)

        await self.session.flush()
        await self.session.refresh(task)
        logger.info("Updated task %s (%s)", task.id, ", ".join(changes) or "no fields")
        return TaskOut.model_validate(task)

    async def delete(self, user_id: str, task_id: str) -> Dict[str, str]:
        task = await self._get_owned(user_id, task_id)
        await self.session.delete(task)
        await self.session.flush()
        logger.info("Deleted task %s for user %s", task_id, user_id)
        return {"message": "Task deleted successfully"}

    async def toggle_status(self, user_id: str, task_id: str) -> TaskOut:
        """Flip PENDING -> COMPLETED; any other status goes back to PENDING."""
        task = await self._get_owned(user_id, task_id)
        if task.status == TaskStatus.PENDING.value:
            task.status = TaskStatus.COMPLETED.value
        else:
            task.status = TaskStatus.PENDING.value
        task.updated_at = datetime.now(timezone.utc)

        await self.session.flush()
        await self.session.refresh(task)
        return TaskOut.model_validate(task)
