"""Tasks with per-intern progress."""
from fastapi import APIRouter

from internhub.api.deps import CurrentUser, InternOnly, StaffOnly
from internhub.models.task import InternTaskStatusUpdate, Task, TaskCreate, TaskUpdate
from internhub.services import tasks
from internhub.services.lookups import serialize

router = APIRouter()


def _with_progress(task: Task) -> dict:
    return {**serialize(task), "progress_summary": tasks.progress_summary(task)}


@router.get("/")
async def list_tasks(user: CurrentUser):
    return [_with_progress(t) for t in await tasks.list_tasks(user)]


@router.get("/dashboard")
async def intern_dashboard(user: InternOnly):
    result = await tasks.intern_dashboard(user)
    return {**result, "tasks": [serialize(t) for t in result["tasks"]]}


@router.post("/", status_code=201)
async def create_task(data: TaskCreate, user: StaffOnly):
    task = await tasks.create_task(user, data)
    return {"message": "Task created successfully", "task": _with_progress(task)}


@router.get("/{task_id}")
async def show_task(task_id: str, user: CurrentUser):
    return _with_progress(await tasks.get_task(user, task_id))


@router.put("/{task_id}")
async def update_task(task_id: str, data: TaskUpdate, user: StaffOnly):
    task, changes = await tasks.update_task(user, task_id, data)
    return {"message": "Task updated successfully", "task": _with_progress(task), "changes": sorted(changes)}


@router.delete("/{task_id}")
async def delete_task(task_id: str, user: StaffOnly):
    await tasks.delete_task(user, task_id)
    return {"message": "Task deleted"}


@router.patch("/{task_id}/status")
async def update_my_status(task_id: str, data: InternTaskStatusUpdate, user: InternOnly):
    task = await tasks.update_intern_status(user, task_id, data)
    return {"message": "Task status updated successfully", "task": _with_progress(task)}
