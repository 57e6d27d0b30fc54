from datetime import date

import pytest

pytestmark = pytest.mark.integration

from webdiary.core.errors import NotFoundError, ValidationError
from webdiary.domains.diary.services import entry_service
from webdiary.domains.tasks.models import Task
from webdiary.domains.tasks.services import task_service


def test_create_defaults(app, user):
    task = task_service.create_task(user.id, title="  water plants ")
    assert task.title == "water plants"
    assert task.priority == "medium"
    assert task.completed is False
    assert task.diary_entry_id is None


def test_invalid_priority_and_title(app, user):
    with pytest.raises(ValidationError) as exc:
        task_service.create_task(user.id, title="x", priority="urgent")
    assert exc.value.field == "priority"
    with pytest.raises(ValidationError):
        task_service.create_task(user.id, title="  ")


def test_link_requires_owned_entry(app, user, other_user, make_entry):
    theirs = make_entry(other_user)
    with pytest.raises(NotFoundError):
        task_service.create_task(user.id, title="peek", diary_entry_id=theirs.id)

    mine = make_entry(user)
    task = task_service.create_task(user.id, title="follow up", diary_entry_id=mine.id)
    assert task.diary_entry_id == mine.id


def test_list_filters(app, user, make_entry):
    entry = make_entry(user)
    a = task_service.create_task(user.id, title="a", diary_entry_id=entry.id, due_date=date(2024, 2, 1))
    task_service.create_task(user.id, title="b")
    task_service.toggle_task(user.id, a.id)

    assert [t.title for t in task_service.list_tasks(user.id, diary_entry_id=entry.id)] == ["a"]
    assert [t.title for t in task_service.list_tasks(user.id, completed=False)] == ["b"]
    assert [t.title for t in task_service.list_tasks(user.id, due_date=date(2024, 2, 1))] == ["a"]
    assert len(task_service.list_tasks(user.id)) == 2


def test_update_and_toggle(app, user):
    task = task_service.create_task(user.id, title="draft")
    task_service.update_task(user.id, task.id, title="final", priority="HIGH", completed=True)
    assert (task.title, task.priority, task.completed) == ("final", "high", True)
    assert task_service.toggle_task(user.id, task.id).completed is False


def test_tasks_are_owner_scoped(app, user, other_user):
    task = task_service.create_task(user.id, title="mine")
    with pytest.raises(NotFoundError):
        task_service.get_task(other_user.id, task.id)
    with pytest.raises(NotFoundError):
        task_service.delete_task(other_user.id, task.id)
    task_service.delete_task(user.id, task.id)
    assert Task.query.count() == 0


def test_deleting_entry_unlinks_task(app, user, storage, make_entry):
    entry = make_entry(user)
    task = task_service.create_task(user.id, title="linked", diary_entry_id=entry.id)
    entry_service.delete_entry(user.id, entry.id, storage=storage)
    assert task_service.get_task(user.id, task.id).diary_entry_id is None
