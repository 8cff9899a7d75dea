"""
Database-backed study group repository.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from studygroups.core.group import AlreadyMemberError, NotAMemberError, parse_subject
from studygroups.database.group import StudyGroup
from studygroups.database.user import User

from .repository import (
    StudyGroupExistsError,
    StudyGroupNotFound,
    StudyGroupRepository,
    UserNotFound,
)


class DatabaseStudyGroupRepository(StudyGroupRepository):
    """
    Stores study groups through an `AsyncSession`. Changes are flushed but
    not committed; the caller owns the transaction.
    """

    name = "database"

    conn: AsyncSession

    def __init__(self, conn: AsyncSession):
        self.conn = conn

    async def read_study_group(
        self, study_group_id: int, log: FilteringBoundLogger
    ) -> StudyGroup:
        """
        Read a study group, with its members, by its ID.

        Raises
        ------
        StudyGroupNotFound
            If the study group does not exist.
        """
        log = log.bind(study_group_id=study_group_id)
        result = await self.conn.execute(
            select(StudyGroup).where(StudyGroup.study_group_id == study_group_id)
        )
        study_group = result.unique().scalar_one_or_none()
        if study_group is None:
            await log.ainfo("study_group.not_found")
            raise StudyGroupNotFound(f"Study group with id {study_group_id} not found")
        return study_group

    async def read_user(self, user_id: int, log: FilteringBoundLogger) -> User:
        """
        Read a user by ID.

        Raises
        ------
        UserNotFound
            If the user does not exist.
        """
        user = await self.conn.get(User, user_id)
        if user is None:
            await log.ainfo("study_group.user_not_found", user_id=user_id)
            raise UserNotFound(f"User with id {user_id} not found in the database")
        return user

    async def create_study_group(
        self, study_group: StudyGroup, log: FilteringBoundLogger
    ) -> StudyGroup:
        """
        Persist a new study group. Members that already exist in the database
        are linked rather than inserted again.

        Raises
        ------
        StudyGroupExistsError
            If a study group with this ID already exists.
        """
        log = log.bind(
            study_group_id=study_group.study_group_id,
            name=study_group.name,
            subject=study_group.subject,
            number_of_users=len(study_group.users),
        )

        if await self.conn.get(StudyGroup, study_group.study_group_id) is not None:
            await log.ainfo("study_group.exists")
            raise StudyGroupExistsError(
                f"Study group with id {study_group.study_group_id} already exists"
            )

        members = []
        for user in study_group.users:
            existing = await self.conn.get(User, user.user_id)
            members.append(existing if existing is not None else user)
        study_group.users = members

        try:
            self.conn.add(study_group)
            await self.conn.flush()
        except IntegrityError as e:
            log = log.bind(error=e)
            await log.ainfo("study_group.exists")
            raise StudyGroupExistsError(
                f"Study group with id {study_group.study_group_id} already exists"
            )

        await log.ainfo("study_group.created")

        return study_group

    async def get_study_groups(self, log: FilteringBoundLogger) -> list[StudyGroup]:
        result = await self.conn.execute(
            select(StudyGroup).order_by(
                StudyGroup.created_at, StudyGroup.study_group_id
            )
        )
        study_groups = list(result.unique().scalars().all())
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

        result = await self.conn.execute(
            select(StudyGroup)
            .where(StudyGroup.subject == parsed)
            .order_by(StudyGroup.created_at, StudyGroup.study_group_id)
        )
        study_groups = list(result.unique().scalars().all())
        await log.adebug("study_group.searched", number_of_groups=len(study_groups))
        return study_groups

    async def join_study_group(
        self, study_group_id: int, user_id: int, log: FilteringBoundLogger
    ) -> StudyGroup:
        """
        Add an existing user to an existing study group.

        Raises
        ------
        StudyGroupNotFound
            If the study group does not exist.
        UserNotFound
            If the user does not exist.
        AlreadyMemberError
            If the user is already a member.
        """
        log = log.bind(study_group_id=study_group_id, user_id=user_id)
        study_group = await self.read_study_group(study_group_id, log)
        user = await self.read_user(user_id, log)

        try:
            study_group.add_user(user)
        except AlreadyMemberError:
            await log.ainfo("study_group.user_already_member")
            raise

        await self.conn.flush()
        await log.ainfo("study_group.user_added")
        return study_group

    async def leave_study_group(
        self, study_group_id: int, user_id: int, log: FilteringBoundLogger
    ) -> StudyGroup:
        """
        Remove a member from a study group.

        Raises
        ------
        StudyGroupNotFound
            If the study group does not exist.
        UserNotFound
            If the user does not exist.
        NotAMemberError
            If the user is not a member of the study group.
        """
        log = log.bind(study_group_id=study_group_id, user_id=user_id)
        study_group = await self.read_study_group(study_group_id, log)
        user = await self.read_user(user_id, log)

        try:
            study_group.remove_user(user)
        except NotAMemberError:
            await log.ainfo("study_group.user_not_member")
            raise

        await self.conn.flush()
        await log.ainfo("study_group.user_removed")
        return study_group
