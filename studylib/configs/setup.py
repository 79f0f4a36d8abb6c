from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from scalar_fastapi import get_scalar_api_reference
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from studylib.api import file_router, folder_router
from studylib.configs.settings import settings
from studylib.core.exceptions import AppError
from studylib.databases import mongodb
from studylib.middlewares import init_sentry
from studylib.models import DOCUMENT_MODELS
from studylib.schemas.response import ApiError, ErrorDetail, HealthCheck
from studylib.services.redis_service import redis_service
from studylib.utils import get_logger, ok, setup_logging

logger = get_logger(__name__)

API_VERSION = "1.0.0"
API_PREFIX = "/api/v1"

ROUTERS = [
    (folder_router, "folders"),
    (file_router, "files"),
]


def _uses_redis_locks() -> bool:
    return settings.NAMESPACE_LOCK_BACKEND == "redis"


def _configure_logging() -> None:
    is_prod = settings.APP_ENV == "prod"
    setup_logging(
        level="DEBUG" if settings.APP_DEBUG else "INFO",
        app_name=settings.APP_NAME,
        enable_json=is_prod,
        log_file="logs/studylib.log" if is_prod else None,
    )


def _start_sentry() -> None:
    """Sentry only runs in prod with a DSN; a failing init never blocks startup"""
    if settings.APP_ENV != "prod" or not settings.SENTRY_DSN:
        logger.info(f"Sentry disabled (env={settings.APP_ENV}, dsn={'set' if settings.SENTRY_DSN else 'unset'})")
        return
    try:
        init_sentry(
            dsn=settings.SENTRY_DSN,
            environment=settings.APP_ENV,
            release=settings.RELEASE,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            send_default_pii=settings.SENTRY_SEND_DEFAULT_PII,
        )
        logger.info("Sentry initialized")
    except Exception as e:
        logger.error(f"Sentry init failed: {e}")


async def _connect_stores() -> None:
    await mongodb.connect(document_models=DOCUMENT_MODELS)
    logger.info("Folder and file collections ready")

    if _uses_redis_locks():
        # Without Redis no structural change could take its owner lock
        await redis_service.get_client()
        logger.info("Owner locks backed by Redis")
    else:
        logger.info("Owner locks are process-local")


async def _close_stores() -> None:
    await mongodb.disconnect()
    if _uses_redis_locks():
        try:
            await redis_service.close()
        except Exception as e:
            logger.error(f"Error closing Redis: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging()
    _start_sentry()
    logger.info(f"Starting {settings.APP_NAME}")
    try:
        await _connect_stores()
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        await _close_stores()
        raise

    try:
        yield
    finally:
        logger.info(f"Shutting down {settings.APP_NAME}")
        await _close_stores()


def _error_response(
    status_code: int,
    message: str,
    code: Optional[str] = None,
    errors: Optional[List[dict]] = None,
    details: Optional[dict] = None,
) -> JSONResponse:
    body = ApiError(
        success=False,
        message=message,
        code=code,
        errors=[ErrorDetail(**e) for e in errors] if errors else None,
        details=details,
    )
    return JSONResponse(content=body.model_dump(mode="json", exclude_none=True), status_code=status_code)


async def _on_app_error(request: Request, exc: AppError) -> JSONResponse:
    errors = list(exc.errors or [])
    if exc.field:
        errors.append({"code": exc.code, "message": exc.message, "field": exc.field})

    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"[{exc.code.upper()}] {request.method} {request.url.path}: {exc.message}")

    return _error_response(exc.status_code, exc.message, exc.code, errors, exc.details)


async def _on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


async def _on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        # Drop the "body"/"query" location marker, keep the field path
        field = ".".join(str(part) for part in error.get("loc", ())[1:])
        errors.append({
            "code": error.get("type", "validation_error"),
            "message": error.get("msg", ""),
            "field": field or None,
        })
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error", "validation_error", errors
    )


def _mount_routes(app: FastAPI) -> None:
    for router, name in ROUTERS:
        app.include_router(router, prefix=f"{API_PREFIX}/{name}", tags=[name])

    @app.get("/health", include_in_schema=False)
    async def health():
        return ok(data=HealthCheck(status="ok", version=API_VERSION))

    if settings.APP_ENV == "dev":
        @app.get("/scalar", include_in_schema=False)
        async def scalar_html():
            return get_scalar_api_reference(openapi_url=app.openapi_url, title=settings.APP_NAME)


def create_app(with_lifespan: bool = True) -> FastAPI:
    """Build the FastAPI app

    ``with_lifespan=False`` skips database and Sentry startup; the app then
    expects its service dependencies to be overridden.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Folder tree and file placement API for the study library",
        version=API_VERSION,
        debug=settings.APP_DEBUG,
        lifespan=lifespan if with_lifespan else None,
        docs_url="/docs" if settings.APP_DEBUG else None,
        redoc_url="/redoc" if settings.APP_DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
        expose_headers=settings.CORS_EXPOSE_HEADERS,
    )
    app.add_exception_handler(AppError, _on_app_error)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(RequestValidationError, _on_validation_error)
    _mount_routes(app)

    return app
