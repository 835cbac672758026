"""Store-level tests for the CRUD helpers."""

import pytest

from backoffice.app.db import crud
from backoffice.app.db.models import ModuleAssignment, User, Video


async def _user(session, email, approved=False):
    user = User(firebase_uid=f"uid-{email}", email=email, is_approved_for_kuppies=approved)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.mark.asyncio
async def test_delete_module_removes_assignments(session):
    faculty = await crud.create_faculty(session, "Engineering")
    department = await crud.create_department(session, "Computer Science", faculty.id)
    semester = await crud.create_semester(session, "Semester 1")
    module = await crud.create_module(session, "CS1012", "Programming")
    other = await crud.create_module(session, "CS1033", "Data Structures")

    for m in (module, other):
        await crud.create_assignment(session, m.id, faculty.id, department.id, semester.id)

    assert await crud.delete_module(session, module.id) is True
    assert await crud.delete_module(session, module.id) is False

    remaining = await crud.list_assignments(session)
    assert [a.module_id for a in remaining] == [other.id]


@pytest.mark.asyncio
async def test_find_assignment_matches_all_four_ids(session):
    faculty = await crud.create_faculty(session, "Science")
    department = await crud.create_department(session, "Physics", faculty.id)
    semester = await crud.create_semester(session, "Semester 2")
    module = await crud.create_module(session, "PH1011", "Mechanics")
    created = await crud.create_assignment(session, module.id, faculty.id, department.id, semester.id)

    found = await crud.find_assignment(session, module.id, faculty.id, department.id, semester.id)
    assert isinstance(found, ModuleAssignment)
    assert found.id == created.id
    assert await crud.find_assignment(session, module.id, faculty.id, department.id, module.id) is None


@pytest.mark.asyncio
async def test_update_module_missing_returns_none(session):
    assert await crud.update_module(session, "missing", {"name": "X"}) is None


@pytest.mark.asyncio
async def test_update_user_refreshes_updated_at(session):
    user = await _user(session, "student@kuppi.lk")
    original = user.updated_at

    updated = await crud.update_user(session, user.id, {"display_name": "Kasun"})

    assert updated.display_name == "Kasun"
    assert updated.updated_at > original


@pytest.mark.asyncio
async def test_set_kuppi_approval(session):
    user = await _user(session, "tutor@kuppi.lk")

    approved = await crud.set_kuppi_approval(session, user.id, True)
    assert approved.is_approved_for_kuppies is True
    assert await crud.set_kuppi_approval(session, "missing", True) is None


@pytest.mark.asyncio
async def test_hierarchy_is_saved_in_place(session):
    assert await crud.get_current_hierarchy(session) is None

    first = await crud.save_hierarchy(session, {"arts": {"name": "Arts"}})
    second = await crud.save_hierarchy(session, {"science": {"name": "Science"}})

    assert second.id == first.id
    current = await crud.get_current_hierarchy(session)
    assert current.data == {"science": {"name": "Science"}}


@pytest.mark.asyncio
async def test_kuppi_defaults_and_relations(session):
    module = await crud.create_module(session, "MA1014", "Mathematics")
    kuppi = await crud.create_kuppi(
        session,
        module_id=module.id,
        title="Limits",
        youtube_links=["https://youtu.be/limits"],
    )

    loaded = await crud.get_kuppi_by_id(session, kuppi.id, with_relations=True)
    data = crud.kuppi_to_dict(loaded)

    assert data["language_code"] == "si"
    assert data["is_approved"] is False
    assert data["modules"] == {"id": module.id, "code": "MA1014", "name": "Mathematics"}
    assert data["students"] is None


@pytest.mark.asyncio
async def test_pending_queues(session):
    module = await crud.create_module(session, "CS2023", "Algorithms")
    waiting = await _user(session, "waiting@kuppi.lk")
    approved = await _user(session, "approved@kuppi.lk", approved=True)
    await _user(session, "idle@kuppi.lk")

    session.add_all([
        Video(module_id=module.id, added_by_user_id=waiting.id, title="One", youtube_links=[]),
        Video(module_id=module.id, added_by_user_id=waiting.id, title="Two", youtube_links=[]),
        Video(module_id=module.id, added_by_user_id=approved.id, title="Three", youtube_links=[]),
        Video(module_id=module.id, title="Orphan", youtube_links=[], is_approved=True),
    ])
    await session.commit()

    pending_users = await crud.get_pending_users(session)
    assert [(u["email"], u["kuppi_count"]) for u in pending_users] == [("waiting@kuppi.lk", 2)]

    pending_kuppis = await crud.get_pending_kuppis(session, limit=2)
    assert len(pending_kuppis) == 2
    assert all(k["modules"] == {"code": "CS2023", "name": "Algorithms"} for k in pending_kuppis)

    stats = await crud.get_dashboard_stats(session)
    assert stats["users"] == 3
    assert stats["kuppis"] == 4
    assert stats["pendingKuppisCount"] == 3
