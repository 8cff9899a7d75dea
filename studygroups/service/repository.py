"""
Base for study group repositories.
"""

import abc
from typing import Iterable, Literal

from structlog.typing import FilteringBoundLogger

from studygroups.core.group import as_utc
from studygroups.database.group import StudyGroup


class StudyGroupNotFound(Exception):
    pass


class UserNotFound(Exception):
    pass


class StudyGroupExistsError(Exception):
    pass


def sort_study_groups(study_groups: Iterable[StudyGroup]) -> list[StudyGroup]:
    """
    Order study groups oldest first, breaking ties on the study group ID.
    """
    return sorted(
        study_groups, key=lambda group: (as_utc(group.created_at), group.study_group_id)
    )


class StudyGroupRepository(abc.ABC):
    """
    The base class for study group storage. Downstream must implement:

    - create_study_group: store a new group, along with any of its members
                          that are not yet known.
    - get_study_groups: list every group, oldest first.
    - search_study_groups: list the groups for one subject, oldest first.
    - join_study_group: add an existing user to an existing group.
    - leave_study_group: remove a member from an existing group.

    All implementations share the same error contract: `StudyGroupNotFound`
    and `UserNotFound` for missing records, `StudyGroupExistsError` for a
    duplicate ID, and the membership errors raised by `StudyGroup` itself.
    """

    name: Literal["database", "memory"]

    @abc.abstractmethod
    async def create_study_group(
        self, study_group: StudyGroup, log: FilteringBoundLogger
    ) -> StudyGroup:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_study_groups(self, log: FilteringBoundLogger) -> list[StudyGroup]:
        raise NotImplementedError

    @abc.abstractmethod
    async def search_study_groups(
        self, subject: str, log: FilteringBoundLogger
    ) -> list[StudyGroup]:
        raise NotImplementedError

    @abc.abstractmethod
    async def join_study_group(
        self, study_group_id: int, user_id: int, log: FilteringBoundLogger
    ) -> StudyGroup:
        raise NotImplementedError

    @abc.abstractmethod
    async def leave_study_group(
        self, study_group_id: int, user_id: int, log: FilteringBoundLogger
    ) -> StudyGroup:
        raise NotImplementedError
