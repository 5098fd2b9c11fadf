"""
lecture_reporting/errors.py
Centralized error handling for the reporting API.

CORE PRINCIPLES:
- Every failure surfaces with a stable machine-readable code
- Errors are user-safe (no stack traces, no SQL)
- Validation reports the first failing field only

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "ErrorType",
    "message": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional)
}

HTTP STATUS CODE DISCIPLINE:
- 400: Missing/out-of-range input, or an input reference that does not exist
- 401: Credential missing, malformed or failing verification
- 403: Role or ownership check failed
- 404: The subject of the operation does not exist
- 409: Duplicate entry or dependency blocking a delete
- 422: Request body does not parse (Pydantic)
- 500: Internal only, never caused by user input
"""

import uuid
from typing import Optional, Dict, Any

from fastapi import status
from fastapi.responses import JSONResponse


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    INVALID_CHOICE = "INVALID_CHOICE"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"

    FORBIDDEN = "FORBIDDEN"
    OWNERSHIP_VIOLATION = "OWNERSHIP_VIOLATION"
    ACCESS_DENIED = "ACCESS_DENIED"

    NOT_FOUND = "NOT_FOUND"
    REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"

    CONFLICT = "CONFLICT"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    DEPENDENCY_EXISTS = "DEPENDENCY_EXISTS"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class APIError(Exception):
    """Base API exception with consistent structure"""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = {
            "success": False,
            "error": self.error,
            "message": self.message,
            "code": self.code
        }
        if self.details:
            result["details"] = self.details
        return result

    def to_response(self) -> JSONResponse:
        """Convert to FastAPI JSONResponse"""
        headers = None
        if self.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(status_code=self.status_code, content=self.to_dict(), headers=headers)


class ValidationError(APIError):
    """400 - Missing or out-of-range input on a single field"""
    def __init__(self, field: str, message: Optional[str] = None, code: str = ErrorCode.VALIDATION_ERROR):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Validation Error",
            message=message or f"{field.replace('_', ' ')} is required",
            code=code,
            details={"field": field}
        )
        self.field = field


class ReferentialError(APIError):
    """400 - An input reference points at a row that does not exist"""
    def __init__(self, resource: str, identifier: Any, field: Optional[str] = None):
        details = {"resource": resource, "id": identifier}
        if field:
            details["field"] = field
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Invalid Reference",
            message=f"{resource} with ID {identifier} does not exist",
            code=ErrorCode.REFERENCE_NOT_FOUND,
            details=details
        )


class UnauthorizedError(APIError):
    """401 Unauthorized - credential missing or invalid"""
    def __init__(self, message: str = "Authentication required", code: str = ErrorCode.AUTH_REQUIRED):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="Unauthorized",
            message=message,
            code=code
        )


class ForbiddenError(APIError):
    """403 Forbidden - role or ownership check failed"""
    def __init__(self, message: str, code: str = ErrorCode.FORBIDDEN, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="Forbidden",
            message=message,
            code=code,
            details=details
        )


class AccessDeniedError(APIError):
    """403 - the caller's program does not grant access to the module"""
    def __init__(self, message: str = "Module not found or access denied", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="Access Denied",
            message=message,
            code=ErrorCode.ACCESS_DENIED,
            details=details
        )


class NotFoundError(APIError):
    """404 Not Found - Resource does not exist"""
    def __init__(self, resource: str, identifier: Any = None, code: str = ErrorCode.NOT_FOUND):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="Not Found",
            message=message,
            code=code
        )


class ConflictError(APIError):
    """409 Conflict - duplicate entry or blocking dependency"""
    def __init__(self, message: str, code: str = ErrorCode.CONFLICT, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="Conflict",
            message=message,
            code=code,
            details=details
        )


class InternalError(APIError):
    """500 Internal Server Error - only for true internal failures"""
    def __init__(self, message: str = "An internal error occurred", log_id: Optional[str] = None):
        details = {"log_id": log_id} if log_id else None
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="Internal Error",
            message=message,
            code=ErrorCode.INTERNAL_ERROR,
            details=details
        )


# ================= VALIDATION HELPERS =================

def is_missing(value: Any) -> bool:
    """None and blank strings count as missing; 0 and False do not."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def require_fields(payload: Dict[str, Any], fields) -> None:
    """Raise ValidationError naming the first missing field, in declared order."""
    for field in fields:
        if is_missing(payload.get(field)):
            raise ValidationError(field, code=ErrorCode.MISSING_FIELD)


def validate_choice(value: str, allowed, field_name: str) -> None:
    """Validate that a value is in an allowed list"""
    allowed = [getattr(a, "value", a) for a in allowed]
    if getattr(value, "value", value) not in allowed:
        raise ValidationError(
            field_name,
            message=f"Invalid {field_name.replace('_', ' ')}. Must be one of: {', '.join(allowed)}",
            code=ErrorCode.INVALID_CHOICE,
        )


def validate_range(value: int, low: int, high: int, field_name: str) -> None:
    """Validate that an integer falls within [low, high]"""
    if value is None or value < low or value > high:
        raise ValidationError(
            field_name,
            message=f"{field_name.replace('_', ' ').capitalize()} must be between {low} and {high}",
            code=ErrorCode.OUT_OF_RANGE,
        )


def new_log_id() -> str:
    return str(uuid.uuid4())[:8]


def get_error_summary() -> Dict[str, Any]:
    """Return summary of error handling system for documentation"""
    return {
        "service": "api-error-handler",
        "response_structure": {
            "success": "boolean (always false for errors)",
            "error": "string (error type)",
            "message": "string (human-readable)",
            "code": "string (machine-readable)",
            "details": "object (optional)"
        },
        "status_codes": {
            "400": "Missing/out-of-range input or unknown input reference",
            "401": "Credential missing or invalid",
            "403": "Role or ownership check failed",
            "404": "Resource does not exist",
            "409": "Duplicate entry or blocking dependency",
            "422": "Request body failed schema parsing",
            "500": "Internal error (never caused by user input)"
        },
        "error_codes": [
            attr for attr in dir(ErrorCode)
            if not attr.startswith('_')
        ]
    }
