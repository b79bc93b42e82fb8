import datetime
from unittest.mock import AsyncMock, patch

import pytest

from internhub.errors import ValidationFailed
from internhub.models import Intern, InternTaskStatusUpdate, Task, TaskAssignment, TaskCreate, TaskStatus, TaskUpdate
from internhub.services import tasks

from internhub.models import UserRole

from conftest import auth_headers, make_user


def task_with(*statuses: TaskStatus) -> Task:
    return Task(title="T", assignments=[TaskAssignment(intern_id=str(i), status=s) for i, s in enumerate(statuses)])


@pytest.mark.usefixtures("db")
class TestProgressSummary:
    async def test_empty(self):
        assert tasks.progress_summary(Task(title="T")) == {
            "total": 0,
            "pending": 0,
            "in_progress": 0,
            "done": 0,
            "completion_percentage": 0,
        }

    async def test_counts_and_percentage(self):
        summary = tasks.progress_summary(task_with(TaskStatus.DONE, TaskStatus.PENDING, TaskStatus.IN_PROGRESS))
        assert summary["total"] == 3
        assert summary["done"] == 1
        assert summary["completion_percentage"] == 33.33


@pytest.mark.usefixtures("db")
class TestChangeDetection:
    def before(self, **overrides):
        base = {"status": TaskStatus.PENDING, "title": "Build API", "due_date": None}
        base.update(overrides)
        return base

    async def test_no_changes(self):
        task = Task(title="Build API")
        assert tasks.detect_changes(self.before(), task, ["a"], ["a"]) == {}

    async def test_assignment_order_is_not_a_change(self):
        task = Task(title="Build API")
        assert tasks.detect_changes(self.before(), task, ["a", "b"], ["b", "a"]) == {}

    async def test_detects_each_field(self):
        task = Task(title="Build REST API", status=TaskStatus.DONE, due_date=datetime.date(2026, 2, 1))
        changes = tasks.detect_changes(self.before(), task, ["a"], ["a", "b"])
        assert set(changes) == {"status", "title", "due_date", "assignments"}


@pytest.mark.usefixtures("db")
class TestPersonalizedNotification:
    @pytest.fixture
    def task(self):
        return Task(title="Build API", status=TaskStatus.IN_PROGRESS, due_date=datetime.date(2026, 2, 1))

    async def test_newly_assigned(self, task):
        title, body = tasks.personalized_notification(task, {"assignments": {}}, True, False)
        assert title == "New Task Assigned"
        assert body == "You've been assigned to: Build API | Due: Feb 01, 2026"

    async def test_removed(self, task):
        title, _ = tasks.personalized_notification(task, {"assignments": {}}, False, True)
        assert title == "Task Assignment Removed"

    async def test_unassigned_bystander_gets_nothing(self, task):
        assert tasks.personalized_notification(task, {"title": {}}, False, False) is None

    async def test_status_beats_title(self, task):
        title, body = tasks.personalized_notification(task, {"status": {}, "title": {}}, True, True)
        assert title == "Task Status Updated"
        assert body == "'Build API' is now In Progress"

    async def test_due_date_removed(self):
        task = Task(title="Build API")
        _, body = tasks.personalized_notification(task, {"due_date": {}}, True, True)
        assert body == "'Build API' due date has been removed"


@pytest.fixture
def pushes():
    with patch("internhub.services.tasks.fcm.send_to_user", new=AsyncMock(return_value=True)) as one, patch(
        "internhub.services.tasks.fcm.notify_users", new=AsyncMock(return_value={})
    ) as many:
        yield one, many


class TestWorkflows:
    async def test_create_assigns_specialty_interns(self, admin, intern, specialty, pushes):
        await Intern(user_id="elsewhere", specialty_id="other").insert()
        task = await tasks.create_task(admin, TaskCreate(title="Write docs", specialty_id=str(specialty.id)))
        assert task.intern_ids == [str(intern.id)]
        _, many = pushes
        assert many.await_args.args[1] == "New Task Assigned: Write docs"

    async def test_create_without_specialty_assigns_everyone(self, admin, intern, pushes):
        await Intern(user_id="elsewhere", specialty_id="other").insert()
        task = await tasks.create_task(admin, TaskCreate(title="Orientation"))
        assert len(task.intern_ids) == 2

    async def test_create_rejects_unknown_intern(self, admin, intern, pushes):
        with pytest.raises(ValidationFailed):
            await tasks.create_task(admin, TaskCreate(title="x", intern_ids=["65a000000000000000000000"]))

    async def test_due_date_must_be_future(self, admin, intern, pushes):
        with pytest.raises(ValidationFailed):
            await tasks.create_task(admin, TaskCreate(title="x", due_date=datetime.date.today()))

    async def test_update_keeps_existing_progress(self, admin, intern, intern_user, pushes):
        task = await tasks.create_task(admin, TaskCreate(title="x", intern_ids=[str(intern.id)]))
        await tasks.update_intern_status(intern_user, str(task.id), InternTaskStatusUpdate(status=TaskStatus.DONE))

        updated, changes = await tasks.update_task(
            admin, str(task.id), TaskUpdate(title="y", intern_ids=[str(intern.id)])
        )
        assert set(changes) == {"title"}
        assert updated.assignment_for(str(intern.id)).status == TaskStatus.DONE

    async def test_intern_status_transitions_stamp_times(self, admin, intern, intern_user, pushes):
        task = await tasks.create_task(admin, TaskCreate(title="x", intern_ids=[str(intern.id)]))

        task = await tasks.update_intern_status(
            intern_user, str(task.id), InternTaskStatusUpdate(status=TaskStatus.IN_PROGRESS, notes="started")
        )
        assignment = task.assignment_for(str(intern.id))
        assert assignment.started_at is not None
        assert assignment.completed_at is None
        assert assignment.intern_notes == "started"

        task = await tasks.update_intern_status(intern_user, str(task.id), InternTaskStatusUpdate(status=TaskStatus.DONE))
        assert task.assignment_for(str(intern.id)).completed_at is not None

    async def test_status_change_notifies_assigner(self, admin, intern, intern_user, supervisor, pushes):
        task = await tasks.create_task(admin, TaskCreate(title="x", intern_ids=[str(intern.id)]))
        _, many = pushes
        many.reset_mock()

        await tasks.update_intern_status(intern_user, str(task.id), InternTaskStatusUpdate(status=TaskStatus.DONE))

        recipients, title, body = many.await_args.args[:3]
        assert title == "Task Progress Update"
        assert body == "Ivy Intern has completed 'x'"
        assert {u.email for u in recipients} == {"admin@example.com"}

    async def test_unassigned_intern_cannot_update(self, admin, specialty, intern, pushes):
        task = await tasks.create_task(admin, TaskCreate(title="x", intern_ids=[str(intern.id)]))
        other = await make_user("other@example.com", UserRole.INTERN)
        await Intern(user_id=str(other.id), specialty_id=str(specialty.id)).insert()
        with pytest.raises(ValidationFailed):
            await tasks.update_intern_status(other, str(task.id), InternTaskStatusUpdate(status=TaskStatus.DONE))


async def test_intern_dashboard_api(client, admin, intern, intern_user):
    with patch("internhub.services.tasks.fcm.notify_users", new=AsyncMock(return_value={})):
        await tasks.create_task(admin, TaskCreate(title="one", intern_ids=[str(intern.id)]))
        await tasks.create_task(admin, TaskCreate(title="two", intern_ids=[str(intern.id)]))

    resp = await client.get("/api/tasks/dashboard", headers=auth_headers(intern_user))
    assert resp.status_code == 200
    data = resp.json()
    assert data["statistics"]["total"] == 2
    assert data["statistics"]["pending"] == 2
    assert {t["title"] for t in data["tasks"]} == {"one", "two"}
