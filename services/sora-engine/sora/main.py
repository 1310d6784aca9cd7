import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from sora.config import get_settings
from sora.exceptions import ConfigurationError, ValidationError
from sora.routers import assessment, health, reports, studies
from sora.services.file_storage import StorageError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    settings = get_settings()
    logger.info(
        "Starting %s (port=%d, db=%s, reassessment=%s)",
        settings.service_name,
        settings.server_port,
        settings.db_type,
        "enabled" if settings.reassessment_enabled else "disabled",
    )

    from sora.database import init_db

    init_db()

    if settings.reassessment_enabled:
        try:
            from sora.tasks.scheduler import start_scheduler

            start_scheduler()
        except Exception as e:
            logger.warning("Failed to start scheduler: %s", e)

    yield

    logger.info("Shutting down %s", settings.service_name)
    from sora.tasks.scheduler import stop_scheduler

    stop_scheduler()


app = FastAPI(
    title="SORA Risk Classification Engine",
    description="Ground risk, air risk, SAIL and OSO determination for drone operations",
    version=get_settings().service_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": {"code": exc.code, "field": exc.field, "message": exc.message}},
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Risk table configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": exc.code,
                "message": "The risk tables could not resolve this combination. Contact the administrator.",
            }
        },
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(
        status_code=400,
        content={"error": {"code": "STORAGE_ERROR", "message": str(exc)}},
    )


app.include_router(health.router, prefix="/api/sora", tags=["health"])
app.include_router(assessment.router, prefix="/api/sora", tags=["assessment"])
app.include_router(studies.router, prefix="/api/sora", tags=["studies"])
app.include_router(reports.router, prefix="/api/sora", tags=["reports"])

# Uploaded files, served read-only
_storage_root = Path(get_settings().storage_dir)
_storage_root.mkdir(parents=True, exist_ok=True)
app.mount("/storage", StaticFiles(directory=_storage_root), name="storage")
