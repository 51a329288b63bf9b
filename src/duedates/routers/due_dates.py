from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ..plugin import DueDatePlugin
from ..schemas import DueDateIn, DueDateOut

router = APIRouter(
    prefix="/api/v1",
    tags=["due-dates"],
)


def _get_plugin(request: Request) -> DueDatePlugin:
    """
    Dependency returning the plugin instance created by the app factory.
    """
    return request.app.state.plugin


def _enabled_plugin(plugin: DueDatePlugin = Depends(_get_plugin)) -> DueDatePlugin:
    """
    Dependency for the due date surface; answers 404 while the plugin is switched off.
    """
    if not plugin.is_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Due dates are disabled")
    return plugin


# PUBLIC_INTERFACE
@router.get(
    "/tasks/{task_uid}/due-date",
    response_model=DueDateOut,
    summary="Get Due Date",
    description="Get the due date attached to a task.",
    responses={
        200: {"description": "Due date found"},
        404: {"description": "Task has no due date, or due dates are disabled"},
    },
)
async def get_due_date(task_uid: UUID, plugin: DueDatePlugin = Depends(_enabled_plugin)) -> DueDateOut:
    """
    Retrieve the due date of a single task.
    """
    record = await plugin.get_due_date(task_uid)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Due date not found")
    return DueDateOut(task_uid=record.task_uid, due_date=record.due_date)


# PUBLIC_INTERFACE
@router.put(
    "/tasks/{task_uid}/due-date",
    response_model=DueDateOut,
    summary="Set Due Date",
    description=(
        "Set or replace the due date of a task. A null due_date clears it and the "
        "response is 204 with no body."
    ),
    responses={
        200: {"description": "Due date stored"},
        204: {"description": "Due date cleared"},
        404: {"description": "Due dates are disabled"},
    },
)
async def put_due_date(
    task_uid: UUID,
    payload: DueDateIn,
    plugin: DueDatePlugin = Depends(_enabled_plugin),
):
    """
    Upsert semantics: a task never holds more than one due date.
    """
    record = await plugin.set_due_date(task_uid, payload.due_date)
    if record is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return DueDateOut(task_uid=record.task_uid, due_date=record.due_date)


# PUBLIC_INTERFACE
@router.delete(
    "/tasks/{task_uid}/due-date",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear Due Date",
    description="Remove the due date of a task. Clearing a task without one is not an error.",
    responses={
        204: {"description": "Due date cleared"},
        404: {"description": "Due dates are disabled"},
    },
)
async def delete_due_date(task_uid: UUID, plugin: DueDatePlugin = Depends(_enabled_plugin)) -> Response:
    await plugin.clear_due_date(task_uid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.post(
    "/hooks/tasks/{task_uid}/will-delete",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Task About To Be Deleted",
    description=(
        "Called by the host before it deletes a task. Removes the task's due date; "
        "storage failures are logged and never fail the call."
    ),
)
async def will_delete_task(task_uid: UUID, plugin: DueDatePlugin = Depends(_get_plugin)) -> Response:
    await plugin.will_delete_task(task_uid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.post(
    "/hooks/tasks/{task_uid}/did-delete",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Task Deleted",
    description="Called by the host after a task was deleted. Observational only.",
)
async def did_delete_task(task_uid: UUID, plugin: DueDatePlugin = Depends(_get_plugin)) -> Response:
    await plugin.did_delete_task(task_uid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
