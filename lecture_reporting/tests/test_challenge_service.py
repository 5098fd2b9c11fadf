"""
Lecturer challenge workflow tests.
"""
from datetime import date

import pytest

from lecture_reporting.errors import ErrorCode, ForbiddenError, NotFoundError, ReferentialError, ValidationError
from lecture_reporting.schemas.challenges import ChallengeCreate, ChallengeUpdate
from lecture_reporting.services import challenge_service
from lecture_reporting.tests.conftest import identity_of

pytestmark = pytest.mark.asyncio


def _payload(catalog, **overrides):
    data = {
        "module_id": catalog["db_systems"].id,
        "program_id": catalog["se101"].id,
        "faculty_id": catalog["computer"].id,
        "challenge_type": "resources",
        "description": "Projector in Hall 3 is broken",
        "impact": "Slides cannot be shown",
    }
    data.update(overrides)
    return ChallengeCreate(**data)


async def _raise(db_session, catalog, lecturer, **overrides):
    return await challenge_service.create(db_session, lecturer.id, _payload(catalog, **overrides))


class TestCreate:

    async def test_created_pending_and_stamped_today(self, db_session, catalog, users):
        challenge = await _raise(db_session, catalog, users["lecturer"], proposed_solution="Replace the bulb")
        assert challenge["status"] == "pending"
        assert challenge["submitted_date"] == date.today().isoformat()
        assert challenge["resolved_date"] is None
        assert challenge["proposed_solution"] == "Replace the bulb"
        assert challenge["module_name"] == "Database Systems"

    async def test_unknown_type_rejected(self, db_session, catalog, users):
        with pytest.raises(ValidationError) as exc:
            await _raise(db_session, catalog, users["lecturer"], challenge_type="weather")
        assert exc.value.code == ErrorCode.INVALID_CHOICE

    async def test_missing_impact_rejected(self, db_session, catalog, users):
        with pytest.raises(ValidationError) as exc:
            await _raise(db_session, catalog, users["lecturer"], impact="")
        assert exc.value.field == "impact"

    async def test_module_checked_before_program(self, db_session, catalog, users):
        with pytest.raises(ReferentialError) as exc:
            await _raise(db_session, catalog, users["lecturer"], module_id=998, program_id=999)
        assert exc.value.details["field"] == "module_id"

    async def test_unknown_faculty_rejected(self, db_session, catalog, users):
        with pytest.raises(ReferentialError) as exc:
            await _raise(db_session, catalog, users["lecturer"], faculty_id=999)
        assert exc.value.details["field"] == "faculty_id"


class TestVisibility:

    async def test_lecturer_sees_exactly_own(self, db_session, catalog, users):
        mine = await _raise(db_session, catalog, users["lecturer"])
        await _raise(db_session, catalog, users["other_lecturer"])

        visible = await challenge_service.list_visible(db_session, identity_of(users["lecturer"]))
        assert [c["id"] for c in visible] == [mine["id"]]

    async def test_admin_sees_all(self, db_session, catalog, users):
        await _raise(db_session, catalog, users["lecturer"])
        await _raise(db_session, catalog, users["other_lecturer"])

        visible = await challenge_service.list_visible(db_session, identity_of(users["program_leader"]))
        assert len(visible) == 2

    async def test_lecturer_cannot_read_foreign_challenge(self, db_session, catalog, users):
        theirs = await _raise(db_session, catalog, users["other_lecturer"])
        with pytest.raises(ForbiddenError):
            await challenge_service.get(db_session, identity_of(users["lecturer"]), theirs["id"])


class TestUpdate:

    async def test_lecturer_cannot_update(self, db_session, catalog, users):
        challenge = await _raise(db_session, catalog, users["lecturer"])
        with pytest.raises(ForbiddenError):
            await challenge_service.update(
                db_session, identity_of(users["lecturer"]), challenge["id"], ChallengeUpdate(status="resolved")
            )

    async def test_resolved_date_follows_status(self, db_session, catalog, users):
        challenge = await _raise(db_session, catalog, users["lecturer"])
        principal = identity_of(users["principal"])

        resolved = await challenge_service.update(
            db_session, principal, challenge["id"], ChallengeUpdate(status="resolved", admin_feedback="Bulb replaced")
        )
        assert resolved["status"] == "resolved"
        assert resolved["resolved_date"] == date.today().isoformat()
        assert resolved["admin_feedback"] == "Bulb replaced"

        reopened = await challenge_service.update(
            db_session, principal, challenge["id"], ChallengeUpdate(status="in_progress")
        )
        assert reopened["status"] == "in_progress"
        assert reopened["resolved_date"] is None
        assert reopened["admin_feedback"] == "Bulb replaced"

    async def test_empty_update_rejected(self, db_session, catalog, users):
        challenge = await _raise(db_session, catalog, users["lecturer"])
        with pytest.raises(ValidationError):
            await challenge_service.update(
                db_session, identity_of(users["program_leader"]), challenge["id"], ChallengeUpdate()
            )

    async def test_explicit_null_feedback_clears_it(self, db_session, catalog, users):
        challenge = await _raise(db_session, catalog, users["lecturer"])
        leader = identity_of(users["program_leader"])
        await challenge_service.update(db_session, leader, challenge["id"], ChallengeUpdate(admin_feedback="x"))

        cleared = await challenge_service.update(
            db_session, leader, challenge["id"], ChallengeUpdate(admin_feedback=None)
        )
        assert cleared["admin_feedback"] is None
        assert cleared["status"] == "pending"

    async def test_explicit_null_status_rejected(self, db_session, catalog, users):
        challenge = await _raise(db_session, catalog, users["lecturer"])
        with pytest.raises(ValidationError) as exc:
            await challenge_service.update(
                db_session, identity_of(users["principal"]), challenge["id"], ChallengeUpdate(status=None)
            )
        assert exc.value.code == ErrorCode.MISSING_FIELD

    async def test_update_missing_challenge(self, db_session, catalog, users):
        with pytest.raises(NotFoundError):
            await challenge_service.update(
                db_session, identity_of(users["program_leader"]), 999, ChallengeUpdate(admin_feedback="?")
            )


class TestDelete:

    async def test_owner_may_delete(self, db_session, catalog, users):
        challenge = await _raise(db_session, catalog, users["lecturer"])
        await challenge_service.delete(db_session, identity_of(users["lecturer"]), challenge["id"])
        with pytest.raises(NotFoundError):
            await challenge_service.get(db_session, identity_of(users["principal"]), challenge["id"])

    async def test_other_lecturer_may_not_delete(self, db_session, catalog, users):
        challenge = await _raise(db_session, catalog, users["lecturer"])
        with pytest.raises(ForbiddenError) as exc:
            await challenge_service.delete(db_session, identity_of(users["other_lecturer"]), challenge["id"])
        assert exc.value.code == ErrorCode.OWNERSHIP_VIOLATION

    async def test_admin_may_delete_any(self, db_session, catalog, users):
        challenge = await _raise(db_session, catalog, users["lecturer"])
        await challenge_service.delete(db_session, identity_of(users["program_leader"]), challenge["id"])


class TestStats:

    async def test_zero_filled_and_scoped(self, db_session, catalog, users):
        assert await challenge_service.stats(db_session, identity_of(users["lecturer"])) == {
            "pending": 0, "in_progress": 0, "resolved": 0,
        }

        mine = await _raise(db_session, catalog, users["lecturer"])
        await _raise(db_session, catalog, users["lecturer"])
        await _raise(db_session, catalog, users["other_lecturer"])
        await challenge_service.update(
            db_session, identity_of(users["principal"]), mine["id"], ChallengeUpdate(status="resolved")
        )

        assert await challenge_service.stats(db_session, identity_of(users["lecturer"])) == {
            "pending": 1, "in_progress": 0, "resolved": 1,
        }
        assert await challenge_service.stats(db_session, identity_of(users["principal"])) == {
            "pending": 2, "in_progress": 0, "resolved": 1,
        }
