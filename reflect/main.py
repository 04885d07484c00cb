import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from reflect.config import settings
from reflect.core.database import close_db, init_db
from reflect.core.errors import ReflectError
from reflect.core.errors.middleware import (
    reflect_error_handler,
    request_validation_handler,
    store_error_handler,
    unhandled_error_handler,
)
from reflect.core.errors.registry import error_registry
from reflect.core.log_middleware import CorrelationMiddleware
from reflect.core.structured_logging import APP_VERSION, setup_logging
from reflect.routers import health, sprint_goals, sprint_highlights, sprint_notes, sprint_tasks
from reflect.routers.responses import SPRINT_PREFIX

# Initialize structured logging before any logger calls
setup_logging(
    log_dir=settings.log_directory,
    log_file=settings.log_file,
    log_level=logging.getLevelName(settings.log_level),
)

logger = logging.getLogger(__name__)

API_TITLE = f"{settings.app_name} API"

API_DESCRIPTION = """
## Reflect - Sprint Retrospectives

Collect highlights, notes and goals for each sprint of a retrospective, and
assess the tasks worked in it.

### Authentication

Requests are authenticated upstream; the caller's user id arrives in the
`X-User-ID` header.
"""

TAGS_METADATA = [
    {"name": "health", "description": "Liveness and store checks. No authentication required."},
    {"name": "highlights", "description": "Sprint highlights (resolved on creation)."},
    {"name": "notes", "description": "Sprint notes (resolved on creation)."},
    {"name": "goals", "description": "Retrospective goals with a resolve/reopen lifecycle."},
    {"name": "tasks", "description": "Tasks worked in a sprint: assessment and completion."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the error registry and migrate the store before serving."""
    logger.info("Starting %s v%s...", API_TITLE, APP_VERSION)

    error_registry.load()
    init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down %s...", API_TITLE)
    close_db()


app = FastAPI(
    title=API_TITLE,
    version=APP_VERSION,
    description=API_DESCRIPTION,
    openapi_tags=TAGS_METADATA,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationMiddleware)

app.add_exception_handler(ReflectError, reflect_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(SQLAlchemyError, store_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(sprint_highlights.router, prefix=SPRINT_PREFIX, tags=["highlights"])
app.include_router(sprint_notes.router, prefix=SPRINT_PREFIX, tags=["notes"])
app.include_router(sprint_goals.router, prefix=SPRINT_PREFIX, tags=["goals"])
app.include_router(sprint_tasks.router, prefix=SPRINT_PREFIX, tags=["tasks"])
