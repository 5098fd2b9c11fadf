"""
Signup and login.
"""
import pytest

from lecture_reporting.errors import ConflictError, ErrorCode, ReferentialError, UnauthorizedError, ValidationError
from lecture_reporting.rbac import auth_provider
from lecture_reporting.schemas.auth import LoginRequest, SignupRequest
from lecture_reporting.services import account_service
from lecture_reporting.tests.conftest import TEST_PASSWORD

pytestmark = pytest.mark.asyncio


async def test_signup_student_requires_program(db_session, catalog):
    with pytest.raises(ValidationError) as exc:
        await account_service.signup(db_session, SignupRequest(
            name="New Student", email="new@luct.com", password="pw123456", role="Student",
            faculty_id=catalog["computer"].id,
        ))
    assert exc.value.field == "program_id"


async def test_signup_first_missing_field(db_session, catalog):
    with pytest.raises(ValidationError) as exc:
        await account_service.signup(db_session, SignupRequest(name="Nobody", role="Lecturer"))
    assert exc.value.field == "email"


async def test_signup_unknown_role(db_session, catalog):
    with pytest.raises(ValidationError) as exc:
        await account_service.signup(db_session, SignupRequest(
            name="Root", email="root@luct.com", password="pw123456", role="Dean",
        ))
    assert exc.value.code == ErrorCode.INVALID_CHOICE


async def test_signup_unknown_program(db_session, catalog):
    with pytest.raises(ReferentialError):
        await account_service.signup(db_session, SignupRequest(
            name="New Student", email="new@luct.com", password="pw123456", role="Student",
            faculty_id=catalog["computer"].id, program_id=999,
        ))


async def test_signup_duplicate_email(db_session, catalog, users):
    with pytest.raises(ConflictError):
        await account_service.signup(db_session, SignupRequest(
            name="Copy", email="LECTURER@luct.com", password="pw123456", role="Lecturer",
        ))


async def test_signup_then_login_issues_role_token(db_session, catalog):
    user = await account_service.signup(db_session, SignupRequest(
        name="Naledi", email="naledi@luct.com", password="pw123456", role="Program Leader",
    ))
    assert user.password_hash != "pw123456"

    session = await account_service.login(db_session, LoginRequest(email="naledi@luct.com", password="pw123456"))
    assert session["token_type"] == "bearer"
    assert session["user"]["role"] == "Program Leader"

    identity = auth_provider.resolve(session["access_token"])
    assert identity.user_id == user.id
    assert identity.is_admin


async def test_login_wrong_password(db_session, catalog, users):
    with pytest.raises(UnauthorizedError) as exc:
        await account_service.login(db_session, LoginRequest(email="lecturer@luct.com", password="nope"))
    assert exc.value.code == ErrorCode.AUTH_INVALID


async def test_login_known_password(db_session, catalog, users):
    session = await account_service.login(db_session, LoginRequest(email="lecturer@luct.com", password=TEST_PASSWORD))
    assert session["user"]["email"] == "lecturer@luct.com"


async def test_list_lecturers_and_students(db_session, catalog, users):
    lecturers = await account_service.list_lecturers(db_session)
    assert {u["email"] for u in lecturers} == {"lecturer@luct.com", "lecturer2@luct.com"}

    students = await account_service.list_students(db_session)
    by_email = {u["email"]: u for u in students}
    assert by_email["student@luct.com"]["program_code"] == "SE101"
    assert "password_hash" not in by_email["student@luct.com"]
