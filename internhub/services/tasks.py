"""Task assignment, per-intern progress and change notifications."""
import datetime
import logging
from typing import Optional

from internhub import rbac
from internhub.errors import AuthorizationError, ValidationFailed
from internhub.models.profile import Intern
from internhub.models.specialty import Specialty
from internhub.models.task import InternTaskStatusUpdate, Task, TaskAssignment, TaskCreate, TaskStatus, TaskUpdate
from internhub.models.user import User, UserRole
from internhub.services import fcm
from internhub.services.activity import record_activity
from internhub.services.lookups import (
    get_or_404,
    intern_for_user,
    safe_object_id,
    supervisor_for_user,
    users_in_specialty,
)

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    TaskStatus.PENDING: "Pending",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.DONE: "Completed",
}
PROGRESS_VERBS = {
    TaskStatus.PENDING: "marked as pending",
    TaskStatus.IN_PROGRESS: "started working on",
    TaskStatus.DONE: "completed",
}


def progress_summary(task: Task) -> dict:
    total = len(task.assignments)
    counts = {status: 0 for status in TaskStatus}
    for assignment in task.assignments:
        counts[assignment.status] += 1
    done = counts[TaskStatus.DONE]
    return {
        "total": total,
        "pending": counts[TaskStatus.PENDING],
        "in_progress": counts[TaskStatus.IN_PROGRESS],
        "done": done,
        "completion_percentage": round(done / total * 100, 2) if total else 0,
    }


def _due(task: Task) -> str:
    return task.due_date.strftime("%b %d, %Y") if task.due_date else ""


def detect_changes(
    before: dict, task: Task, original_ids: list[str], current_ids: list[str]
) -> dict[str, dict]:
    """Fields that changed between `before` (status/title/due_date) and `task`."""
    changes: dict[str, dict] = {}
    for field in ("status", "title", "due_date"):
        if before[field] != getattr(task, field):
            changes[field] = {"from": before[field], "to": getattr(task, field)}
    if set(original_ids) != set(current_ids):
        changes["assignments"] = {"from": original_ids, "to": current_ids}
    return changes


def personalized_notification(
    task: Task, changes: dict, is_assigned: bool, was_assigned: bool
) -> Optional[tuple[str, str]]:
    """(title, body) for one affected intern, or None if they need no message."""
    if "assignments" in changes:
        if is_assigned and not was_assigned:
            body = f"You've been assigned to: {task.title}"
            if task.due_date:
                body += f" | Due: {_due(task)}"
            return "New Task Assigned", body
        if was_assigned and not is_assigned:
            return "Task Assignment Removed", f"You've been removed from task: {task.title}"

    if not is_assigned:
        return None
    if "status" in changes:
        return "Task Status Updated", f"'{task.title}' is now {STATUS_LABELS[task.status]}"
    if "title" in changes:
        return "Task Title Updated", f"Task renamed to: {task.title}"
    if "due_date" in changes:
        if task.due_date:
            return "Task Due Date Updated", f"'{task.title}' due date changed to: {_due(task)}"
        return "Task Due Date Updated", f"'{task.title}' due date has been removed"
    return "Task Updated", f"'{task.title}' has been updated"


async def _intern_users(intern_ids: list[str]) -> dict[str, User]:
    """intern_id -> User for the given intern profiles."""
    oids = [oid for oid in (safe_object_id(i) for i in intern_ids) if oid]
    if not oids:
        return {}
    interns = await Intern.find({"_id": {"$in": oids}}).to_list()
    user_oids = [oid for oid in (safe_object_id(i.user_id) for i in interns) if oid]
    users = {str(u.id): u for u in await User.find({"_id": {"$in": user_oids}}).to_list()}
    return {str(i.id): users[i.user_id] for i in interns if i.user_id in users}


async def resolve_assignees(intern_ids: Optional[list[str]], specialty_id: Optional[str]) -> list[str]:
    """Explicit ids, else the specialty's interns, else every intern."""
    if intern_ids:
        oids = [safe_object_id(i) for i in intern_ids]
        if not all(oids):
            raise ValidationFailed("Invalid intern id", {"intern_ids": ["Invalid intern id."]})
        found = await Intern.find({"_id": {"$in": oids}}).to_list()
        found_ids = {str(i.id) for i in found}
        missing = [i for i in intern_ids if i not in found_ids]
        if missing:
            raise ValidationFailed("Unknown intern", {"intern_ids": [f"Unknown intern(s): {', '.join(missing)}"]})
        return list(dict.fromkeys(intern_ids))
    if specialty_id:
        interns = await Intern.find(Intern.specialty_id == specialty_id).to_list()
    else:
        interns = await Intern.find_all().to_list()
    return [str(i.id) for i in interns]


async def _ensure_can_manage(principal: User, task: Task) -> None:
    rbac.authorize(principal, "tasks.manage")
    if principal.role == UserRole.SUPERVISOR and task.assigned_by != str(principal.id):
        supervisor = await supervisor_for_user(principal)
        if task.specialty_id != supervisor.specialty_id:
            raise AuthorizationError("You can only manage tasks of your specialty.")


async def _notify_assigned(task: Task, intern_ids: list[str]) -> None:
    body = f"You have been assigned a new task: {task.title}"
    if task.due_date:
        body += f" | Due: {_due(task)}"
    try:
        users = await _intern_users(intern_ids)
        await fcm.notify_users(users.values(), f"New Task Assigned: {task.title}", body, {"type": "task", "task_id": str(task.id)})
    except Exception as e:
        logger.error(f"Failed to send task notifications for {task.id}: {e}")


async def create_task(principal: User, payload: TaskCreate) -> Task:
    rbac.authorize(principal, "tasks.manage")
    if payload.due_date and payload.due_date <= datetime.date.today():
        raise ValidationFailed("Due date must be after today", {"due_date": ["The due date must be a date after today."]})
    if payload.specialty_id:
        await get_or_404(Specialty, payload.specialty_id, "Specialty")

    intern_ids = await resolve_assignees(payload.intern_ids, payload.specialty_id)
    task = Task(
        title=payload.title,
        description=payload.description,
        due_date=payload.due_date,
        status=payload.status,
        assigned_by=str(principal.id),
        specialty_id=payload.specialty_id,
        assignments=[TaskAssignment(intern_id=i) for i in intern_ids],
    )
    await task.insert()
    await record_activity(str(principal.id), f"Created task: {task.title}")
    await _notify_assigned(task, intern_ids)
    return task


async def update_task(principal: User, task_id: str, payload: TaskUpdate) -> tuple[Task, dict]:
    """Apply the update and send each affected intern a message matching what changed."""
    task = await get_or_404(Task, task_id, "Task")
    await _ensure_can_manage(principal, task)

    before = {"status": task.status, "title": task.title, "due_date": task.due_date}
    original_ids = task.intern_ids

    task.title = payload.title
    task.description = payload.description
    task.due_date = payload.due_date
    task.status = payload.status or task.status
    if payload.specialty_id:
        await get_or_404(Specialty, payload.specialty_id, "Specialty")
    task.specialty_id = payload.specialty_id

    if payload.intern_ids is not None:
        current_ids = await resolve_assignees(payload.intern_ids, task.specialty_id)
        kept = {a.intern_id: a for a in task.assignments}
        task.assignments = [kept.get(i) or TaskAssignment(intern_id=i) for i in current_ids]
    else:
        current_ids = original_ids

    task.updated_at = datetime.datetime.utcnow()
    await task.save()

    changes = detect_changes(before, task, original_ids, current_ids)
    if changes:
        await _notify_changes(task, changes, original_ids, current_ids)
    return task, changes


async def _notify_changes(task: Task, changes: dict, original_ids: list[str], current_ids: list[str]) -> None:
    try:
        affected = list(dict.fromkeys(current_ids + original_ids))
        users = await _intern_users(affected)
        for intern_id, user in users.items():
            message = personalized_notification(task, changes, intern_id in current_ids, intern_id in original_ids)
            if message:
                await fcm.send_to_user(user, message[0], message[1], {"type": "task", "task_id": str(task.id)})
    except Exception as e:
        logger.error(f"Failed to send task update notifications for {task.id}: {e}")


async def delete_task(principal: User, task_id: str) -> None:
    task = await get_or_404(Task, task_id, "Task")
    await _ensure_can_manage(principal, task)
    await task.delete()
    await record_activity(str(principal.id), f"Deleted task: {task.title}")


async def list_tasks(principal: User) -> list[Task]:
    rbac.authorize(principal, "tasks.view")
    if principal.role == UserRole.INTERN:
        intern = await intern_for_user(principal)
        return await Task.find({"assignments.intern_id": str(intern.id)}).sort(-Task.created_at).to_list()
    if principal.role == UserRole.SUPERVISOR:
        supervisor = await supervisor_for_user(principal)
        return await Task.find(Task.specialty_id == supervisor.specialty_id).sort(-Task.created_at).to_list()
    return await Task.find_all().sort(-Task.created_at).to_list()


async def get_task(principal: User, task_id: str) -> Task:
    rbac.authorize(principal, "tasks.view")
    task = await get_or_404(Task, task_id, "Task")
    if principal.role == UserRole.INTERN:
        intern = await intern_for_user(principal)
        if str(intern.id) not in task.intern_ids:
            raise AuthorizationError("You are not assigned to this task.")
    return task


async def update_intern_status(principal: User, task_id: str, payload: InternTaskStatusUpdate) -> Task:
    """Intern moves their own assignment; transitions stamp started_at / completed_at."""
    rbac.authorize(principal, "tasks.progress")
    intern = await intern_for_user(principal)
    task = await get_or_404(Task, task_id, "Task")
    assignment = task.assignment_for(str(intern.id))
    if not assignment:
        raise ValidationFailed("Intern is not assigned to this task")

    old_status = assignment.status
    now = datetime.datetime.utcnow()
    if payload.status == TaskStatus.IN_PROGRESS and old_status != TaskStatus.IN_PROGRESS:
        assignment.started_at = now
    elif payload.status == TaskStatus.DONE and old_status != TaskStatus.DONE:
        assignment.completed_at = now
    assignment.status = payload.status
    if payload.notes is not None:
        assignment.intern_notes = payload.notes
    task.updated_at = now
    await task.save()

    if old_status != payload.status:
        await _notify_progress(task, principal, payload.status)
    return task


async def _notify_progress(task: Task, intern_user: User, status: TaskStatus) -> None:
    """Tell the assigner and the supervisors of the task's specialty."""
    try:
        progress = progress_summary(task)
        progress_text = ""
        if progress["total"] > 1:
            progress_text = (
                f" | Progress: {progress['done']}/{progress['total']} ({progress['completion_percentage']}%)"
            )
        recipients = {str(u.id): u for u in await users_in_specialty(task.specialty_id, UserRole.SUPERVISOR)}
        assigner_oid = safe_object_id(task.assigned_by)
        assigner = await User.get(assigner_oid) if assigner_oid else None
        if assigner:
            recipients[str(assigner.id)] = assigner
        await fcm.notify_users(
            recipients.values(),
            "Task Progress Update",
            f"{intern_user.full_name} has {PROGRESS_VERBS[status]} '{task.title}'{progress_text}",
            {"type": "task_progress", "task_id": str(task.id)},
        )
    except Exception as e:
        logger.error(f"Failed to send task progress notifications for {task.id}: {e}")


def intern_statistics(tasks: list[Task], intern_id: str) -> dict:
    today = datetime.date.today()
    stats = {"total": 0, "pending": 0, "in_progress": 0, "done": 0, "overdue": 0}
    for task in tasks:
        assignment = task.assignment_for(intern_id)
        if not assignment:
            continue
        stats["total"] += 1
        stats[assignment.status.value] += 1
        if task.due_date and task.due_date < today and assignment.status != TaskStatus.DONE:
            stats["overdue"] += 1
    stats["completion_percentage"] = round(stats["done"] / stats["total"] * 100, 2) if stats["total"] else 0
    return stats


async def intern_dashboard(principal: User) -> dict:
    rbac.authorize(principal, "tasks.progress")
    intern = await intern_for_user(principal)
    tasks = await Task.find({"assignments.intern_id": str(intern.id)}).sort(-Task.created_at).to_list()
    return {"intern_id": str(intern.id), "statistics": intern_statistics(tasks, str(intern.id)), "tasks": tasks}
