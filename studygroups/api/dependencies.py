"""
Dependencies used by the API.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from studygroups.config.settings import Settings
from studygroups.service.database import DatabaseStudyGroupRepository
from studygroups.service.memory import InMemoryStore, InMemoryStudyGroupRepository
from studygroups.service.repository import StudyGroupRepository


@lru_cache
def SETTINGS():
    return Settings()


DATABASE_MANAGER = SETTINGS().async_manager()
MEMORY_STORE = InMemoryStore()


def logger():
    return get_logger()


SettingsDependency = Annotated[Settings, Depends(SETTINGS)]
LoggerDependency = Annotated[FilteringBoundLogger, Depends(logger)]


async def get_repository(settings: SettingsDependency, log: LoggerDependency):
    """
    Yield the configured repository. Database repositories wrap a single
    transaction that is committed once the request succeeds.
    """
    if settings.repository_type == "memory":
        repository = InMemoryStudyGroupRepository(store=MEMORY_STORE)
        await log.adebug("repository.opened", repository_type=repository.name)
        yield repository
        return

    async with DATABASE_MANAGER.session() as session:
        async with session.begin():
            repository = DatabaseStudyGroupRepository(conn=session)
            await log.adebug("repository.opened", repository_type=repository.name)
            yield repository


RepositoryDependency = Annotated[StudyGroupRepository, Depends(get_repository)]
