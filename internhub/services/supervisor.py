"""Supervisor dashboards scoped to the supervisor's specialty."""
from internhub import rbac
from internhub.errors import AuthorizationError
from internhub.models.attachment import Attachment
from internhub.models.profile import Intern
from internhub.models.task import Task, TaskStatus
from internhub.models.user import User
from internhub.services.lookups import get_or_404, serialize, supervisor_for_user, user_name_map
from internhub.services.tasks import progress_summary


async def _specialty_id(principal: User) -> str | None:
    rbac.authorize(principal, "supervisor.dashboard")
    supervisor = await supervisor_for_user(principal)
    return supervisor.specialty_id


async def specialty_interns(principal: User) -> list[dict]:
    specialty_id = await _specialty_id(principal)
    interns = await Intern.find(Intern.specialty_id == specialty_id).to_list()
    names = await user_name_map([i.user_id for i in interns])
    return [{**serialize(i), "full_name": names.get(i.user_id, "Unknown")} for i in interns]


async def specialty_tasks(principal: User) -> list[dict]:
    specialty_id = await _specialty_id(principal)
    tasks = await Task.find(Task.specialty_id == specialty_id).sort(-Task.created_at).to_list()
    return [{**serialize(t), "progress_summary": progress_summary(t)} for t in tasks]


async def specialty_task(principal: User, task_id: str) -> dict:
    specialty_id = await _specialty_id(principal)
    task = await get_or_404(Task, task_id, "Task")
    if task.specialty_id != specialty_id:
        raise AuthorizationError("Task is not in your specialty.")
    attachments = await Attachment.find(Attachment.task_id == str(task.id)).to_list()
    return {
        **serialize(task),
        "progress_summary": progress_summary(task),
        "attachments": [serialize(a) for a in attachments],
    }


async def submissions(principal: User, task_id: str | None = None) -> list[Attachment]:
    """Attachments on the specialty's tasks, newest first."""
    specialty_id = await _specialty_id(principal)
    tasks = await Task.find(Task.specialty_id == specialty_id).to_list()
    task_ids = [str(t.id) for t in tasks]
    if task_id:
        if task_id not in task_ids:
            raise AuthorizationError("Task is not in your specialty.")
        task_ids = [task_id]
    return await Attachment.find({"task_id": {"$in": task_ids}}).sort(-Attachment.created_at).to_list()


async def dashboard_stats(principal: User) -> dict:
    specialty_id = await _specialty_id(principal)
    intern_count = await Intern.find(Intern.specialty_id == specialty_id).count()
    tasks = await Task.find(Task.specialty_id == specialty_id).to_list()
    by_status = {status.value: 0 for status in TaskStatus}
    for task in tasks:
        by_status[task.status.value] += 1
    uploads = await submissions(principal)
    return {
        "intern_count": intern_count,
        "task_count": len(tasks),
        "tasks_by_status": by_status,
        "submissions_count": len(uploads),
        "recent_submissions": [serialize(a) for a in uploads[:5]],
    }
