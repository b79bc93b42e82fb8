"""Supervisor views of their specialty."""
from fastapi import APIRouter

from internhub.api.deps import SupervisorOnly
from internhub.services import supervisor
from internhub.services.lookups import serialize

router = APIRouter()


@router.get("/dashboard")
async def dashboard(user: SupervisorOnly):
    return await supervisor.dashboard_stats(user)


@router.get("/interns")
async def interns(user: SupervisorOnly):
    return await supervisor.specialty_interns(user)


@router.get("/tasks")
async def tasks(user: SupervisorOnly):
    return await supervisor.specialty_tasks(user)


@router.get("/tasks/{task_id}")
async def task_detail(task_id: str, user: SupervisorOnly):
    return await supervisor.specialty_task(user, task_id)


@router.get("/submissions")
async def submissions(user: SupervisorOnly):
    return [serialize(a) for a in await supervisor.submissions(user)]


@router.get("/tasks/{task_id}/submissions")
async def task_submissions(task_id: str, user: SupervisorOnly):
    return [serialize(a) for a in await supervisor.submissions(user, task_id)]
