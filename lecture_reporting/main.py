"""
lecture_reporting/main.py
FastAPI application: wiring, exception handlers and health endpoints.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reporting import __version__
from lecture_reporting.config.settings import settings
from lecture_reporting.database import (
    AsyncSessionLocal,
    check_db_health,
    close_db,
    get_db,
    init_db,
    seed_demo_data,
)
from lecture_reporting.errors import APIError, ErrorCode, InternalError, get_error_summary, new_log_id
from lecture_reporting.routes import (
    assignments,
    auth,
    catalog,
    challenges,
    ratings,
    reports,
    student,
    users,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

if settings.uses_default_secret and not settings.is_development:
    logger.warning("JWT_SECRET_KEY is the development default - set a real secret in production")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    try:
        await init_db()
        if settings.SEED_DEMO_DATA:
            async with AsyncSessionLocal() as session:
                await seed_demo_data(session)
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    yield

    logger.info("Shutting down application...")
    try:
        await close_db()
    except Exception as e:
        logger.error(f"Error closing database connection: {str(e)}")


app = FastAPI(
    title="Lecture Reporting API",
    description="Lecture reports, challenges and ratings for faculties and programs",
    version=__version__,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan
)

# Attach rate limiter to the app
app.state.limiter = auth.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
logger.info(f"✓ Rate limiter configured (enabled={settings.RATE_LIMIT_ENABLED})")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    error_details = []
    for error in exc.errors():
        error_details.append({
            "loc": list(error.get("loc", [])),
            "msg": error.get("msg"),
            "type": error.get("type")
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "Validation Error",
            "message": "Request body could not be parsed",
            "code": ErrorCode.VALIDATION_ERROR,
            "details": {"errors": error_details}
        }
    )


HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: ErrorCode.AUTH_REQUIRED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP exception on {request.url.path}: {exc.detail}")

    if exc.status_code >= 500:
        code = ErrorCode.INTERNAL_ERROR
    else:
        code = HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.VALIDATION_ERROR)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": "Error",
            "message": str(exc.detail),
            "code": code
        },
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    logger.warning(f"API error on {request.url.path}: {exc.code} - {exc.message}")
    return exc.to_response()


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log_id = new_log_id()
    logger.error(f"[{log_id}] Unhandled exception on {request.url.path}: {type(exc).__name__}: {str(exc)}")

    return InternalError("An unexpected error occurred. Please try again later.", log_id=log_id).to_response()


for module in (auth, users, catalog, assignments, reports, challenges, student, ratings):
    app.include_router(module.router, prefix="/api")


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    database_ok = await check_db_health(db)
    return {
        "status": "healthy",
        "database": "healthy" if database_ok else "unhealthy",
        "version": __version__
    }


@app.get("/api/errors/health", tags=["Health"])
async def error_handling_health():
    return get_error_summary()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Lecture Reporting API",
        "version": __version__,
        "docs": "/docs" if settings.is_development else None
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("lecture_reporting.main:app", host="0.0.0.0", port=8000, reload=settings.is_development)
