"""
Student challenge tests: program-scoped access, ordering and ownership.
"""
from datetime import datetime

import pytest

from lecture_reporting.errors import AccessDeniedError, ErrorCode, ForbiddenError, NotFoundError, ValidationError
from lecture_reporting.schemas.challenges import StudentChallengeCreate, StudentChallengeStatusUpdate
from lecture_reporting.services import student_challenge_service
from lecture_reporting.tests.conftest import identity_of

pytestmark = pytest.mark.asyncio


async def _raise(db_session, catalog, student, title, priority=None):
    payload = StudentChallengeCreate(
        module_id=catalog["db_systems"].id,
        title=title,
        description=f"{title} details",
        priority=priority,
    )
    return await student_challenge_service.create(db_session, identity_of(student), payload)


async def test_default_priority_is_medium(db_session, catalog, users):
    challenge = await _raise(db_session, catalog, users["student"], "Lab access")
    assert challenge["priority"] == "medium"
    assert challenge["status"] == "pending"
    assert challenge["program_code"] == "SE101"


async def test_module_outside_program_is_access_denied(db_session, catalog, users):
    with pytest.raises(AccessDeniedError) as exc:
        await _raise(db_session, catalog, users["other_student"], "Not my module")
    assert exc.value.code == ErrorCode.ACCESS_DENIED


async def test_non_student_is_forbidden(db_session, catalog, users):
    with pytest.raises(ForbiddenError):
        await _raise(db_session, catalog, users["lecturer"], "Lecturer sneaking in")


async def test_invalid_priority_rejected(db_session, catalog, users):
    with pytest.raises(ValidationError) as exc:
        await _raise(db_session, catalog, users["student"], "Urgent", priority="urgent")
    assert exc.value.field == "priority"


async def test_list_own_orders_by_priority_rank_then_newest(db_session, catalog, users):
    student = users["student"]
    await _raise(db_session, catalog, student, "low one", "low")
    await _raise(db_session, catalog, student, "high one", "high")
    await _raise(db_session, catalog, student, "medium one", "medium")
    await _raise(db_session, catalog, student, "second high", "high")
    await _raise(db_session, catalog, student, "another low", "low")

    titles = [c["title"] for c in await student_challenge_service.list_own(db_session, identity_of(student))]
    assert titles == ["second high", "high one", "medium one", "another low", "low one"]


async def test_list_own_excludes_other_students(db_session, catalog, users):
    await _raise(db_session, catalog, users["student"], "Mine")
    assert await student_challenge_service.list_own(db_session, identity_of(users["other_student"])) == []


async def test_owner_can_move_status_freely(db_session, catalog, users):
    challenge = await _raise(db_session, catalog, users["student"], "Timetable clash")
    identity = identity_of(users["student"])

    resolved = await student_challenge_service.update_status(
        db_session, identity, challenge["id"], StudentChallengeStatusUpdate(status="resolved")
    )
    assert resolved["status"] == "resolved"

    reopened = await student_challenge_service.update_status(
        db_session, identity, challenge["id"], StudentChallengeStatusUpdate(status="pending")
    )
    assert reopened["status"] == "pending"
    assert datetime.fromisoformat(reopened["updated_at"]) >= datetime.fromisoformat(resolved["updated_at"])


async def test_other_student_cannot_update(db_session, catalog, users):
    challenge = await _raise(db_session, catalog, users["student"], "Timetable clash")
    with pytest.raises(ForbiddenError) as exc:
        await student_challenge_service.update_status(
            db_session, identity_of(users["other_student"]), challenge["id"],
            StudentChallengeStatusUpdate(status="resolved"),
        )
    assert exc.value.code == ErrorCode.OWNERSHIP_VIOLATION


async def test_update_missing_challenge(db_session, catalog, users):
    with pytest.raises(NotFoundError):
        await student_challenge_service.update_status(
            db_session, identity_of(users["student"]), 999, StudentChallengeStatusUpdate(status="resolved")
        )


async def test_unknown_status_rejected(db_session, catalog, users):
    challenge = await _raise(db_session, catalog, users["student"], "Timetable clash")
    with pytest.raises(ValidationError) as exc:
        await student_challenge_service.update_status(
            db_session, identity_of(users["student"]), challenge["id"], StudentChallengeStatusUpdate(status="closed")
        )
    assert exc.value.code == ErrorCode.INVALID_CHOICE
