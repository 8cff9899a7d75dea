"""
The in-memory study group repository, used for testing and for running the
API without a database.
"""

import asyncio

from structlog.typing import FilteringBoundLogger

from studygroups.core.group import AlreadyMemberError, NotAMemberError, parse_subject
from studygroups.database.group import StudyGroup
from studygroups.database.user import User

from .repository import (
    StudyGroupExistsError,
    StudyGroupNotFound,
    StudyGroupRepository,
    UserNotFound,
    sort_study_groups,
)


class InMemoryStore:
    """
    Process-local storage shared by every `InMemoryStudyGroupRepository`
    built on it. All access must hold `lock`.
    """

    study_groups: dict[int, StudyGroup]
    users: dict[int, User]
    lock: asyncio.Lock

    def __init__(self):
        self.study_groups = {}
        self.users = {}
        self.lock = asyncio.Lock()


class InMemoryStudyGroupRepository(StudyGroupRepository):
    name = "memory"

    store: InMemoryStore

    def __init__(self, store: InMemoryStore | None = None):
        self.store = store if store is not None else InMemoryStore()

    def _read_study_group(self, study_group_id: int) -> StudyGroup:
        try:
            return self.store.study_groups[study_group_id]
        except KeyError:
            raise StudyGroupNotFound(f"Study group with id {study_group_id} not found")

    def _read_user(self, user_id: int) -> User:
        try:
            return self.store.users[user_id]
        except KeyError:
            raise UserNotFound(f"User with id {user_id} not found in the store")

    async def create_study_group(
        self, study_group: StudyGroup, log: FilteringBoundLogger
    ) -> StudyGroup:
        log = log.bind(
            study_group_id=study_group.study_group_id,
            name=study_group.name,
            subject=study_group.subject,
            number_of_users=len(study_group.users),
        )

        async with self.store.lock:
            if study_group.study_group_id in self.store.study_groups:
                await log.ainfo("study_group.exists")
                raise StudyGroupExistsError(
                    f"Study group with id {study_group.study_group_id} already exists"
                )

            members = [
                self.store.users.setdefault(user.user_id, user)
                for user in study_group.users
            ]
            study_group.users = members
            self.store.study_groups[study_group.study_group_id] = study_group

        await log.ainfo("study_group.created")

        return study_group

    async def get_study_groups(self, log: FilteringBoundLogger) -> list[StudyGroup]:
        async with self.store.lock:
            study_groups = sort_study_groups(self.store.study_groups.values())

        await log.adebug("study_group.listed", number_of_groups=len(study_groups))
        return study_groups

    async def search_study_groups(
        self, subject: str, log: FilteringBoundLogger
    ) -> list[StudyGroup]:
        log = log.bind(subject=subject)

        parsed = parse_subject(subject)
        if parsed is None:
            await log.adebug("study_group.search.unknown_subject")
            return []

        async with self.store.lock:
            study_groups = sort_study_groups(
                group
                for group in self.store.study_groups.values()
                if group.subject == parsed
            )

        await log.adebug("study_group.searched", number_of_groups=len(study_groups))
        return study_groups

    async def join_study_group(
        self, study_group_id: int, user_id: int, log: FilteringBoundLogger
    ) -> StudyGroup:
        log = log.bind(study_group_id=study_group_id, user_id=user_id)

        async with self.store.lock:
            try:
                study_group = self._read_study_group(study_group_id)
                study_group.add_user(self._read_user(user_id))
            except StudyGroupNotFound:
                await log.ainfo("study_group.not_found")
                raise
            except UserNotFound:
                await log.ainfo("study_group.user_not_found")
                raise
            except AlreadyMemberError:
                await log.ainfo("study_group.user_already_member")
                raise

        await log.ainfo("study_group.user_added")
        return study_group

    async def leave_study_group(
        self, study_group_id: int, user_id: int, log: FilteringBoundLogger
    ) -> StudyGroup:
        log = log.bind(study_group_id=study_group_id, user_id=user_id)

        async with self.store.lock:
            try:
                study_group = self._read_study_group(study_group_id)
                study_group.remove_user(self._read_user(user_id))
            except StudyGroupNotFound:
                await log.ainfo("study_group.not_found")
                raise
            except UserNotFound:
                await log.ainfo("study_group.user_not_found")
                raise
            except NotAMemberError:
                await log.ainfo("study_group.user_not_member")
                raise

        await log.ainfo("study_group.user_removed")
        return study_group
