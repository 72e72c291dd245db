import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from planner.api.v1.routes.auth import router as auth_router
from planner.api.v1.routes.group import router as group_router
from planner.api.v1.routes.invitation import router as invitation_router
from planner.api.v1.routes.notification import router as notification_router
from planner.api.v1.routes.subgroup import router as subgroup_router
from planner.api.v1.routes.system import router as system_router
from planner.api.v1.routes.task import router as task_router
from planner.api.v1.routes.user import router as user_router
from planner.core.config import settings
from planner.core.db_check import wait_for_db
from planner.core.email import Mailer
from planner.db.session import Database
from planner.schemas.common import fail

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.db
    await wait_for_db(database, retries=settings.DB_CONNECT_RETRIES)
    await database.ensure_schema()
    logger.info("Planner backend started")
    yield
    await database.dispose()
    logger.info("Planner backend stopped")


def create_app(database: Database | None = None, mailer: Mailer | None = None) -> FastAPI:
    app = FastAPI(title="Planner Backend", lifespan=lifespan)

    app.state.db = database or Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    app.state.mailer = mailer or Mailer(settings)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content=fail(str(exc.detail)), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
        return JSONResponse(status_code=400, content=fail(message))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(status_code=500, content=fail("Internal server error"))

    @app.get("/")
    async def root():
        return {"message": "Planner Backend is live"}

    app.include_router(auth_router, prefix="/api/v1/auth")
    app.include_router(user_router, prefix="/api/v1/users")
    app.include_router(group_router, prefix="/api/v1/groups")
    app.include_router(subgroup_router, prefix="/api/v1/subgroups")
    app.include_router(task_router, prefix="/api/v1/tasks")
    app.include_router(notification_router, prefix="/api/v1/notifications")
    app.include_router(invitation_router, prefix="/api/v1/invitations")
    app.include_router(system_router, prefix="/api/v1/system")

    return app


app = create_app()
