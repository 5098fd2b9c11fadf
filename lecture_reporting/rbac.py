"""
lecture_reporting/rbac.py
Identity resolution, credentials and role-based permissions.

The role travels inside the signed access token and is trusted for the
lifetime of the request; no per-call lookup against the users table.
All guarded operations go through `require_permission` - no inline role
string comparisons in services or routes.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from lecture_reporting.config.settings import settings
from lecture_reporting.errors import ErrorCode, ForbiddenError, UnauthorizedError
from lecture_reporting.orm.user import UserRole

logger = logging.getLogger(__name__)

# ================= CONFIG =================

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

# ================= ROLES & PERMISSIONS =================

ADMIN_ROLES = [UserRole.program_leader, UserRole.principal_lecturer]
STAFF_ROLES = [UserRole.lecturer, UserRole.program_leader, UserRole.principal_lecturer]

PERMISSIONS: Dict[str, List[UserRole]] = {
    "manage_catalog": STAFF_ROLES,
    "manage_assignments": STAFF_ROLES,
    "list_users": STAFF_ROLES,
    "view_all_module_ratings": STAFF_ROLES,
    "review_challenges": ADMIN_ROLES,
    "delete_any_challenge": ADMIN_ROLES,
    "review_reports": ADMIN_ROLES,
    "student_self_service": [UserRole.student],
}


@dataclass(frozen=True)
class Identity:
    """Resolved caller: who they are and the role their credential was issued with."""
    user_id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_lecturer(self) -> bool:
        return self.role == UserRole.lecturer


def has_permission(identity: Identity, action: str) -> bool:
    """Check if the caller's role is granted an action (for UI/visibility decisions)."""
    return identity.role in PERMISSIONS.get(action, [])


def require_permission(identity: Identity, action: str, message: Optional[str] = None) -> None:
    """
    Raise Forbidden unless the caller's role is granted `action`.

    An action missing from PERMISSIONS denies everyone.
    """
    if action not in PERMISSIONS:
        logger.error(f"Permission '{action}' not defined in PERMISSIONS")
    if has_permission(identity, action):
        return

    allowed = [r.value for r in PERMISSIONS.get(action, [])]
    logger.warning(
        f"Permission denied: user {identity.user_id} with role {identity.role.value} "
        f"attempted '{action}' requiring {allowed}"
    )
    raise ForbiddenError(
        message or f"You do not have permission to {action.replace('_', ' ')}",
        details={"required_roles": allowed, "current_role": identity.role.value},
    )


# ================= PASSWORDS =================

def normalize_password(password: str) -> str:
    """
    bcrypt only supports 72 bytes.
    Truncate AFTER UTF-8 encoding so multi-byte characters are not split.
    """
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        encoded = encoded[:72]
    return encoded.decode("utf-8", errors="ignore")


def hash_password(password: str) -> str:
    return pwd_context.hash(normalize_password(password))


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(normalize_password(plain), hashed)


# ================= CREDENTIALS =================

class TokenAuthProvider:
    """
    Issues and resolves signed access tokens.

    The token embeds the role at issuance; a role change would only take
    effect after the user authenticates again.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, user_id: int, role: UserRole, expires_delta: Optional[timedelta] = None) -> str:
        expire = datetime.utcnow() + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode = {
            "sub": str(user_id),
            "role": role.value,
            "exp": expire,
            "type": "access",
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def resolve(self, credential: Optional[str]) -> Identity:
        """
        Resolve a bearer credential into an Identity.

        Raises UnauthorizedError with AUTH_REQUIRED when the credential is
        missing or not token-shaped, AUTH_INVALID when verification fails.
        """
        if not credential or credential.count(".") != 2:
            raise UnauthorizedError("Authentication required", code=ErrorCode.AUTH_REQUIRED)

        try:
            payload = jwt.decode(credential, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise UnauthorizedError("Invalid or expired token", code=ErrorCode.AUTH_INVALID)

        if payload.get("type") != "access":
            raise UnauthorizedError("Invalid token type", code=ErrorCode.AUTH_INVALID)

        try:
            user_id = int(payload.get("sub"))
            role = UserRole(payload.get("role"))
        except (TypeError, ValueError):
            raise UnauthorizedError("Invalid token payload", code=ErrorCode.AUTH_INVALID)

        return Identity(user_id=user_id, role=role)


auth_provider = TokenAuthProvider(
    secret_key=settings.JWT_SECRET_KEY,
    algorithm=settings.JWT_ALGORITHM,
    expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
)


def create_access_token(user_id: int, role: UserRole, expires_delta: Optional[timedelta] = None) -> str:
    return auth_provider.issue(user_id, role, expires_delta)


# ================= AUTH DEPENDENCIES =================

async def get_current_identity(token: Optional[str] = Depends(oauth2_scheme)) -> Identity:
    """FastAPI dependency: resolve the bearer token of the current request."""
    return auth_provider.resolve(token)
