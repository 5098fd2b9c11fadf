"""
Assignment ledger tests.
"""
import pytest

from lecture_reporting.errors import ConflictError, NotFoundError, ReferentialError
from lecture_reporting.schemas.catalog import AssignmentCreate, AssignmentUpdate, ModuleCreate, ProgramCreate
from lecture_reporting.services import assignment_service, catalog_service

pytestmark = pytest.mark.asyncio


def _assignment(catalog, users, **overrides):
    data = {
        "module_id": catalog["db_systems"].id,
        "program_id": catalog["se101"].id,
        "lecturer_id": users["lecturer"].id,
    }
    data.update(overrides)
    return AssignmentCreate(**data)


async def test_program_module_assignment_scenario(db_session, users):
    """Create program and module, assign a lecturer, then repeat the assignment."""
    leader = users["program_leader"]
    faculty_id = users["lecturer"].faculty_id

    program = await catalog_service.create_program(
        db_session, ProgramCreate(code="SE201", name="Software Engineering", faculty_id=faculty_id), leader.id
    )
    module = await catalog_service.create_module(
        db_session,
        ModuleCreate(name="DB Systems", program_id=program.id, total_registered_students=40),
        leader.id,
    )
    request = AssignmentCreate(module_id=module.id, program_id=program.id, lecturer_id=users["lecturer"].id)

    first = await assignment_service.assign(db_session, request, assigned_by=leader.id)
    assert first.assigned_by == leader.id

    with pytest.raises(ConflictError) as exc:
        await assignment_service.assign(db_session, request, assigned_by=leader.id)
    assert exc.value.status_code == 409


async def test_assigning_non_lecturer_is_referential_error(db_session, catalog, users):
    with pytest.raises(ReferentialError) as exc:
        await assignment_service.assign(
            db_session, _assignment(catalog, users, lecturer_id=users["student"].id), users["principal"].id
        )
    assert exc.value.details["field"] == "lecturer_id"


async def test_unknown_module_is_referential_error(db_session, catalog, users):
    with pytest.raises(ReferentialError):
        await assignment_service.assign(db_session, _assignment(catalog, users, module_id=999), users["principal"].id)


async def test_list_assignments_includes_names(db_session, catalog, users):
    await assignment_service.assign(db_session, _assignment(catalog, users), users["program_leader"].id)

    rows = await assignment_service.list_assignments(db_session)
    assert len(rows) == 1
    assert rows[0]["module_name"] == "Database Systems"
    assert rows[0]["program_code"] == "SE101"
    assert rows[0]["lecturer_name"] == users["lecturer"].name
    assert rows[0]["assigned_by_name"] == users["program_leader"].name


async def test_update_into_existing_triple_conflicts(db_session, catalog, users):
    leader_id = users["program_leader"].id
    await assignment_service.assign(db_session, _assignment(catalog, users), leader_id)
    second = await assignment_service.assign(
        db_session, _assignment(catalog, users, lecturer_id=users["other_lecturer"].id), leader_id
    )

    with pytest.raises(ConflictError):
        await assignment_service.update_assignment(
            db_session, second.id, AssignmentUpdate(lecturer_id=users["lecturer"].id)
        )


async def test_update_and_delete_assignment(db_session, catalog, users):
    assignment = await assignment_service.assign(db_session, _assignment(catalog, users), users["program_leader"].id)

    updated = await assignment_service.update_assignment(
        db_session, assignment.id, AssignmentUpdate(lecturer_id=users["other_lecturer"].id)
    )
    assert updated.lecturer_id == users["other_lecturer"].id

    await assignment_service.delete_assignment(db_session, assignment.id)
    with pytest.raises(NotFoundError):
        await assignment_service.delete_assignment(db_session, assignment.id)
