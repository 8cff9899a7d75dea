"""
Configuration variables and fixtures for the service layer tests.
"""

import pytest_asyncio

from studygroups.service.database import DatabaseStudyGroupRepository
from studygroups.service.memory import InMemoryStudyGroupRepository


@pytest_asyncio.fixture(params=["database", "memory"])
async def repository(request, session_manager):
    """
    Every repository test runs against both adapters. The database adapter
    shares one transaction for the whole test.
    """
    if request.param == "memory":
        yield InMemoryStudyGroupRepository()
        return

    async with session_manager.session() as conn:
        async with conn.begin():
            yield DatabaseStudyGroupRepository(conn=conn)
