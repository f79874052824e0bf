"""Asistencia Universitaria - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from app.config import settings
from app.db import db_shutdown, db_startup
from app.seed import seed_admin
from app.api import (
    attendance,
    auth,
    campuses,
    dashboard,
    groups,
    justifications,
    programs,
    reports,
    schools,
    students,
    users,
)
from app.api.deps import require_module_permission

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await db_startup()
        await seed_admin()
    except ServerSelectionTimeoutError as e:
        logger.error("MongoDB is not reachable at %s", settings.mongodb_url)
        raise RuntimeError(
            "MongoDB connection failed. Start MongoDB at MONGODB_URL."
        ) from e
    yield
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description="University attendance tracking: hierarchy administration, attendance taking, justifications and reports",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )


@app.exception_handler(PyMongoError)
async def storage_exception_handler(request: Request, exc: PyMongoError):
    logger.exception("Storage error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "The database is unavailable, please try again"},
    )


@app.exception_handler(ClientError)
@app.exception_handler(BotoCoreError)
async def object_store_exception_handler(request: Request, exc: Exception):
    logger.error("Object store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "The document store is unavailable, please try again"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(campuses.router, prefix="/api/campuses", tags=["Campuses"], dependencies=[Depends(require_module_permission("campuses"))])
app.include_router(schools.router, prefix="/api/schools", tags=["Schools"], dependencies=[Depends(require_module_permission("schools"))])
app.include_router(programs.router, prefix="/api/programs", tags=["Programs"], dependencies=[Depends(require_module_permission("programs"))])
app.include_router(groups.router, prefix="/api/groups", tags=["Groups"], dependencies=[Depends(require_module_permission("groups"))])
app.include_router(students.router, prefix="/api/students", tags=["Students"], dependencies=[Depends(require_module_permission("students"))])
app.include_router(users.router, prefix="/api/users", tags=["Users"], dependencies=[Depends(require_module_permission("users"))])
app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"], dependencies=[Depends(require_module_permission("attendance"))])
app.include_router(justifications.router, prefix="/api/justifications", tags=["Justifications"], dependencies=[Depends(require_module_permission("justifications"))])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"], dependencies=[Depends(require_module_permission("reports"))])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"], dependencies=[Depends(require_module_permission("dashboard"))])


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
