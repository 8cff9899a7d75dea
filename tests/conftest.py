"""
Core configuration
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
import structlog

from studygroups.config.settings import Settings
from studygroups.core.group import Subject
from studygroups.database.group import StudyGroup


@pytest.fixture
def server_settings(tmp_path):
    yield Settings(
        database_type="sqlite",
        database_db=str(tmp_path / "studygroups.db"),
        database_echo=False,
    )


@pytest_asyncio.fixture
async def session_manager(server_settings: Settings):
    manager = server_settings.async_manager()
    await manager.create_all()

    yield manager

    await manager.drop_all()
    await manager.dispose()


@pytest.fixture
def logger():
    yield structlog.get_logger()


@pytest.fixture
def build_study_group():
    """
    Build a valid study group, created now unless told otherwise.
    """

    def build(
        study_group_id: int,
        name: str,
        subject: Subject = Subject.MATH,
        users=None,
        created_at: datetime | None = None,
    ) -> StudyGroup:
        return StudyGroup.new(
            study_group_id=study_group_id,
            name=name,
            subject=subject,
            created_at=created_at or datetime.now(tz=timezone.utc),
            users=users,
        )

    return build
