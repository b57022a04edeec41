"""Tests for the todo store and its HTTP endpoints."""

import pytest

from app.models import Todo
from app.services.todo_service import TodoService
from app.utils.exceptions import AssigneeNotFound, EmptyText, Forbidden, NotFound


def test_create_sets_creator_and_timestamps(db_session, org):
    todo = TodoService.create_todo(db_session, org["boss"], "  write report  ", "alice")
    assert todo.text == "write report"
    assert todo.created_by == org["boss"].id
    assert todo.assigned_to == org["alice"].id
    assert todo.completed is False
    assert todo.completed_at is None
    assert todo.created_at is not None


def test_create_rejects_blank_text(db_session, org):
    with pytest.raises(EmptyText):
        TodoService.create_todo(db_session, org["alice"], "   ")
    assert db_session.query(Todo).count() == 0


def test_create_rejects_unknown_assignee(db_session, org):
    with pytest.raises(AssigneeNotFound):
        TodoService.create_todo(db_session, org["boss"], "task", "nobody")
    assert db_session.query(Todo).count() == 0


def test_user_cannot_create_for_someone_else(db_session, org):
    with pytest.raises(Forbidden):
        TodoService.create_todo(db_session, org["alice"], "task", "bob")
    assert db_session.query(Todo).count() == 0


def test_list_is_scoped_and_newest_first(db_session, org):
    first = TodoService.create_todo(db_session, org["alice"], "first")
    second = TodoService.create_todo(db_session, org["boss"], "second", "bob")
    carols = TodoService.create_todo(db_session, org["carol"], "carol's")

    boss_view = [t.id for t in TodoService.list_todos(db_session, org["boss"])]
    assert boss_view == [second.id, first.id]

    assert [t.id for t in TodoService.list_todos(db_session, org["alice"])] == [first.id]
    assert [t.id for t in TodoService.list_todos(db_session, org["bob"])] == [second.id]
    assert [t.id for t in TodoService.list_todos(db_session, org["root"])] == [
        carols.id, second.id, first.id
    ]


def test_visibility_matches_rule_for_every_user(db_session, org):
    """A todo is listed iff its creator or assignee is visible to the actor."""
    from app.utils.permissions import AccessControl

    TodoService.create_todo(db_session, org["boss"], "t1", "alice")
    TodoService.create_todo(db_session, org["other"], "t2", "carol")
    TodoService.create_todo(db_session, org["root"], "t3", "bob")
    TodoService.create_todo(db_session, org["root"], "t4")
    TodoService.create_todo(db_session, org["carol"], "t5")
    all_todos = db_session.query(Todo).all()

    for actor in org.values():
        visible = AccessControl(db_session, actor).visible_user_ids()
        expected = {
            t.id for t in all_todos
            if t.created_by in visible or t.assigned_to in visible
        }
        listed = {t.id for t in TodoService.list_todos(db_session, actor)}
        assert listed == expected, actor.username


def test_completion_toggles_timestamp(db_session, org):
    todo = TodoService.create_todo(db_session, org["alice"], "task")

    done = TodoService.set_completed(db_session, org["alice"], todo.id, True)
    assert done.completed is True
    first_stamp = done.completed_at
    assert first_stamp is not None

    undone = TodoService.set_completed(db_session, org["alice"], todo.id, False)
    assert undone.completed is False
    assert undone.completed_at is None

    again = TodoService.set_completed(db_session, org["alice"], todo.id, True)
    assert again.completed is True
    assert again.completed_at is not None
    assert again.completed_at != first_stamp


def test_repeated_completion_keeps_timestamp(db_session, org):
    todo = TodoService.create_todo(db_session, org["alice"], "task")
    first_stamp = TodoService.set_completed(db_session, org["alice"], todo.id, True).completed_at

    same = TodoService.set_completed(db_session, org["alice"], todo.id, True)
    assert same.completed is True
    assert same.completed_at == first_stamp

    TodoService.set_completed(db_session, org["alice"], todo.id, False)
    cleared = TodoService.set_completed(db_session, org["alice"], todo.id, False)
    assert cleared.completed is False
    assert cleared.completed_at is None


def test_set_completed_unknown_todo(db_session, org):
    with pytest.raises(NotFound):
        TodoService.set_completed(db_session, org["root"], 999, True)


def test_set_completed_outside_scope_leaves_todo_untouched(db_session, org):
    todo = TodoService.create_todo(db_session, org["carol"], "task")
    with pytest.raises(Forbidden):
        TodoService.set_completed(db_session, org["boss"], todo.id, True)
    db_session.refresh(todo)
    assert todo.completed is False


def test_reassign_changes_only_assignee(db_session, org):
    todo = TodoService.create_todo(db_session, org["boss"], "task", "alice")
    TodoService.set_completed(db_session, org["alice"], todo.id, True)
    created_at = todo.created_at
    completed_at = todo.completed_at

    moved = TodoService.reassign(db_session, org["boss"], todo.id, "bob")
    assert moved.assigned_to == org["bob"].id
    assert moved.created_by == org["boss"].id
    assert moved.created_at == created_at
    assert moved.completed is True
    assert moved.completed_at == completed_at


def test_reassign_unknown_assignee(db_session, org):
    todo = TodoService.create_todo(db_session, org["boss"], "task")
    with pytest.raises(AssigneeNotFound):
        TodoService.reassign(db_session, org["boss"], todo.id, "ghost")


def test_user_reassign_is_refused_before_name_lookup(db_session, org):
    todo = TodoService.create_todo(db_session, org["alice"], "task")
    with pytest.raises(Forbidden):
        TodoService.reassign(db_session, org["alice"], todo.id, "ghost")
    with pytest.raises(Forbidden):
        TodoService.reassign(db_session, org["alice"], todo.id, "bob")


def test_delete(db_session, org):
    todo = TodoService.create_todo(db_session, org["alice"], "task")
    TodoService.delete_todo(db_session, org["alice"], todo.id)
    assert db_session.query(Todo).count() == 0
    with pytest.raises(NotFound):
        TodoService.delete_todo(db_session, org["alice"], todo.id)


# HTTP surface

def test_todo_endpoints_round_trip(client, org, auth_headers):
    boss_headers = auth_headers(org["boss"])
    resp = client.post("/todos/", json={"text": "plan sprint", "assigned_to": "alice"}, headers=boss_headers)
    assert resp.status_code == 201
    todo = resp.json()
    assert todo["created_by_name"] == "boss"
    assert todo["assigned_to_name"] == "alice"

    resp = client.put(f"/todos/{todo['id']}", json={"completed": True}, headers=auth_headers(org["alice"]))
    assert resp.status_code == 200
    assert resp.json()["completed"] is True
    assert resp.json()["completed_at"] is not None

    resp = client.put(f"/todos/{todo['id']}/reassign", json={"assigned_to": "bob"}, headers=boss_headers)
    assert resp.status_code == 200
    assert resp.json()["assigned_to_name"] == "bob"

    resp = client.get(f"/todos/{todo['id']}", headers=auth_headers(org["bob"]))
    assert resp.status_code == 200

    resp = client.delete(f"/todos/{todo['id']}", headers=boss_headers)
    assert resp.status_code == 200
    assert client.get("/todos/", headers=boss_headers).json() == []


def test_todo_errors_are_typed(client, org, auth_headers):
    headers = auth_headers(org["alice"])
    resp = client.post("/todos/", json={"text": "  "}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "empty_text"

    resp = client.post("/todos/", json={"text": "x", "assigned_to": "ghost"}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["code"] == "assignee_not_found"

    resp = client.delete("/todos/12345", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["code"] == "not_found"


def test_todo_text_is_bounded(client, org, auth_headers):
    resp = client.post("/todos/", json={"text": "x" * 501}, headers=auth_headers(org["alice"]))
    assert resp.status_code == 422


def test_todos_require_authentication(client):
    assert client.get("/todos/").status_code == 401
