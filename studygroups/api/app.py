"""
FastAPI app
"""

from importlib.metadata import version

from fastapi import FastAPI
from structlog import get_logger

from .dependencies import DATABASE_MANAGER, SETTINGS
from .errors import add_exception_handlers
from .study_groups import study_group_app

settings = SETTINGS()


async def lifespan(app: FastAPI):
    app.settings = settings
    log = get_logger().bind(repository_type=settings.repository_type)

    if settings.repository_type == "database" and settings.create_tables:
        await DATABASE_MANAGER.create_all()
        await log.ainfo("app.tables_created", database_type=settings.database_type)

    await log.ainfo("app.started")

    yield

    await DATABASE_MANAGER.dispose()


app = FastAPI(
    lifespan=lifespan,
    title="Study Groups API",
    summary="Create, search, join and leave subject-based study groups.",
    version=version("studygroups"),
)

app = add_exception_handlers(app)

app.include_router(study_group_app, prefix="/api/studygroups")
