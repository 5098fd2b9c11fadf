"""
lecture_reporting/routes/auth.py
Signup, login and the current-user endpoint, rate limited per client address.
"""

from fastapi import APIRouter, Depends, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting.config.settings import settings
from lecture_reporting.database import get_db
from lecture_reporting.rbac import Identity, get_current_identity
from lecture_reporting.schemas.auth import LoginRequest, SignupRequest, TokenResponse, UserOut
from lecture_reporting.services import account_service

router = APIRouter(prefix="/auth", tags=["Authentication"])
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


@router.post("/signup", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def signup(
    request: Request,  # Required by slowapi
    payload: SignupRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a user. Students must supply faculty_id and program_id."""
    user = await account_service.signup(db, payload)
    return user.to_dict()


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,  # Required by slowapi
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    return await account_service.login(db, payload)


@router.get("/me", response_model=UserOut)
async def me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    user = await account_service.get_user(db, identity.user_id)
    return user.to_dict()
