"""InternHub - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.errors import ServerSelectionTimeoutError

from internhub.config import settings
from internhub.db import db_shutdown, db_startup
from internhub.errors import InternHubError
from internhub.seed import seed_admin
from internhub.api import (
    announcements,
    attachments,
    auth,
    comments,
    logbooks,
    notifications,
    specialties,
    supervisor,
    tasks,
    users,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await db_startup()
        await seed_admin()
    except ServerSelectionTimeoutError as e:
        logger.error("MongoDB is not running. Start it with: docker compose up -d (from project root)")
        raise RuntimeError("MongoDB connection failed. Start MongoDB (e.g. docker compose up -d).") from e
    yield
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description="Internship management: users, tasks, daily logbooks and weekly log sheets",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(errors)},
    )


@app.exception_handler(InternHubError)
async def domain_exception_handler(request: Request, exc: InternHubError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    content = {"message": "Internal server error"}
    if settings.debug:
        content["detail"] = str(exc)
    return JSONResponse(status_code=500, content=content)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(auth.admin_router, prefix="/api/admin", tags=["Admin Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(specialties.router, prefix="/api/specialties", tags=["Specialties"])
app.include_router(tasks.router, prefix="/api/tasks", tags=["Tasks"])
app.include_router(comments.router, prefix="/api/comments", tags=["Comments"])
app.include_router(attachments.router, prefix="/api/attachments", tags=["Attachments"])
app.include_router(announcements.router, prefix="/api/announcements", tags=["Announcements"])
app.include_router(logbooks.router, prefix="/api/logbooks", tags=["Logbooks"])
app.include_router(supervisor.router, prefix="/api/supervisor", tags=["Supervisor"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])


# Weekly sheets and attachments when stored on local disk
if settings.storage_backend == "local":
    app.mount(
        settings.storage_url_prefix,
        StaticFiles(directory=settings.storage_root, check_dir=False),
        name="storage",
    )


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
