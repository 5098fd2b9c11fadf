"""
Rating ledger tests: module rating upsert and legacy report ratings.
"""
import pytest
from sqlalchemy import func, select

from lecture_reporting.errors import AccessDeniedError, ErrorCode, ForbiddenError, ReferentialError, ValidationError
from lecture_reporting.orm import ModuleRating, Rating
from lecture_reporting.schemas.ratings import ModuleRatingRequest, ReportRatingRequest
from lecture_reporting.schemas.reports import ReportSubmission
from lecture_reporting.services import rating_service, report_service
from lecture_reporting.tests.conftest import identity_of, report_payload

pytestmark = pytest.mark.asyncio


class TestModuleRatings:

    async def test_repeated_ratings_converge_to_one_row(self, db_session, catalog, users):
        student = identity_of(users["student"])
        module_id = catalog["db_systems"].id

        await rating_service.rate_module(db_session, student, ModuleRatingRequest(module_id=module_id, rating=2))
        await rating_service.rate_module(
            db_session, student, ModuleRatingRequest(module_id=module_id, rating=3, comments="Better")
        )
        latest = await rating_service.rate_module(
            db_session, student, ModuleRatingRequest(module_id=module_id, rating=5, comments="Great labs")
        )

        count = await db_session.execute(
            select(func.count()).select_from(ModuleRating).where(
                ModuleRating.student_id == student.user_id, ModuleRating.module_id == module_id
            )
        )
        assert count.scalar() == 1
        assert latest.rating == 5
        assert latest.comments == "Great labs"

    async def test_student_outside_program_is_denied(self, db_session, catalog, users):
        with pytest.raises(AccessDeniedError):
            await rating_service.rate_module(
                db_session,
                identity_of(users["other_student"]),
                ModuleRatingRequest(module_id=catalog["db_systems"].id, rating=4),
            )

    @pytest.mark.parametrize("value", [0, 6])
    async def test_rating_out_of_range(self, db_session, catalog, users, value):
        with pytest.raises(ValidationError) as exc:
            await rating_service.rate_module(
                db_session,
                identity_of(users["student"]),
                ModuleRatingRequest(module_id=catalog["db_systems"].id, rating=value),
            )
        assert exc.value.code == ErrorCode.OUT_OF_RANGE

    async def test_lecturer_cannot_rate_modules(self, db_session, catalog, users):
        with pytest.raises(ForbiddenError):
            await rating_service.rate_module(
                db_session,
                identity_of(users["lecturer"]),
                ModuleRatingRequest(module_id=catalog["db_systems"].id, rating=4),
            )

    async def test_listings(self, db_session, catalog, users):
        await rating_service.rate_module(
            db_session, identity_of(users["student"]),
            ModuleRatingRequest(module_id=catalog["db_systems"].id, rating=4),
        )

        mine = await rating_service.list_for_student(db_session, identity_of(users["student"]))
        assert [(r["module_name"], r["rating"]) for r in mine] == [("Database Systems", 4)]

        everything = await rating_service.list_all(db_session, identity_of(users["principal"]))
        assert everything[0]["student_name"] == users["student"].name

        with pytest.raises(ForbiddenError):
            await rating_service.list_all(db_session, identity_of(users["student"]))


class TestReportRatings:

    async def test_same_rater_may_rate_repeatedly(self, db_session, catalog, users):
        report = await report_service.submit(
            db_session, users["lecturer"].id, ReportSubmission(**report_payload(catalog))
        )
        rater = users["principal"].id

        await rating_service.rate_report(db_session, rater, ReportRatingRequest(report_id=report["id"], rating=3))
        await rating_service.rate_report(db_session, rater, ReportRatingRequest(report_id=report["id"], rating=4))

        count = await db_session.execute(select(func.count()).select_from(Rating))
        assert count.scalar() == 2

        rows = await rating_service.list_for_report(db_session, report["id"])
        assert sorted(r["rating"] for r in rows) == [3, 4]
        assert rows[0]["rated_by_name"] == users["principal"].name

    async def test_unknown_report_is_referential_error(self, db_session, catalog, users):
        with pytest.raises(ReferentialError):
            await rating_service.rate_report(
                db_session, users["principal"].id, ReportRatingRequest(report_id=999, rating=3)
            )
