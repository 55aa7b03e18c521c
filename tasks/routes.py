"""
Task API routes. Every route runs behind the bearer-token gate.

Route prefix: /tasks
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from api.responses import api_response
from auth.dependencies import get_current_user, get_task_service
from auth.jwt import TokenPayload
from tasks.service import TaskService
from utils.schemas import TaskCreate, TaskListQuery, TaskUpdate

router = APIRouter(tags=["tasks"], dependencies=[Depends(get_current_user)])


@router.get("")
async def list_tasks(
    query: Annotated[TaskListQuery, Query()],
    user: TokenPayload = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Paginated task list with optional ``status`` filter and title ``search``."""
    page = await service.list_tasks(user.user_id, query)
    return api_response(True, "Tasks retrieved successfully", data=page)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    req: TaskCreate,
    user: TokenPayload = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    task = await service.create(user.user_id, req)
    return api_response(True, "Task created successfully", data=task, status_code=status.HTTP_201_CREATED)


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    user: TokenPayload = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    task = await service.get_by_id(user.user_id, task_id)
    return api_response(True, "Task retrieved successfully", data=task)


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    req: TaskUpdate,
    user: TokenPayload = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    task = await service.update(user.user_id, task_id, req)
    return api_response(True, "Task updated successfully", data=task)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user: TokenPayload = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    result = await service.delete(user.user_id, task_id)
    return api_response(True, result["message"])


@router.patch("/{task_id}/toggle")
async def toggle_task(
    task_id: str,
    user: TokenPayload = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    task = await service.toggle_status(user.user_id, task_id)
    return api_response(True, "Task status toggled successfully", data=task)
