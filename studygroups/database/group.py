"""
Study group ORM
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from studygroups.core.group import (
    AlreadyMemberError,
    MissingUserError,
    NotAMemberError,
    StudyGroupData,
    StudyGroupValidationError,
    Subject,
    as_utc,
    check_study_group,
    parse_subject,
)

from .user import User


class StudyGroupMembership(SQLModel, table=True):
    """
    A record of a user's membership of a study group. `membership_id` grows
    with every join, so it gives the order members were added in.
    """

    __table_args__ = (UniqueConstraint("study_group_id", "user_id"),)

    membership_id: int | None = Field(default=None, primary_key=True)
    study_group_id: int = Field(
        foreign_key="studygroup.study_group_id", ondelete="CASCADE"
    )
    user_id: int = Field(foreign_key="user.user_id", ondelete="CASCADE")


class StudyGroup(SQLModel, table=True):
    study_group_id: int = Field(primary_key=True)

    name: str
    subject: Subject
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True)))

    users: list[User] = Relationship(
        link_model=StudyGroupMembership,
        sa_relationship_kwargs=dict(
            lazy="joined",
            order_by=StudyGroupMembership.__table__.c.membership_id,
        ),
    )

    @classmethod
    def new(
        cls,
        study_group_id: int,
        name: str | None,
        subject: Subject | str,
        created_at: datetime,
        users: list[User] | None = None,
        now: datetime | None = None,
    ) -> "StudyGroup":
        """
        Build a validated study group. A `None` member list results in a
        group with no members.

        Raises
        ------
        StudyGroupValidationError
            If any field breaks the rules in `check_study_group`; the error
            carries the `Violation` and the name of the offending field.
        """
        violation = check_study_group(
            study_group_id=study_group_id,
            name=name,
            subject=subject,
            created_at=created_at,
            users=users,
            now=now,
        )

        if violation is not None:
            raise StudyGroupValidationError(violation)

        return cls(
            study_group_id=study_group_id,
            name=name,
            subject=parse_subject(subject),
            created_at=as_utc(created_at),
            users=list(users or []),
        )

    def has_member(self, user_id: int) -> bool:
        """
        Check whether a user with `user_id` is in this group.
        """
        return any(member.user_id == user_id for member in self.users)

    def add_user(self, user: User | None):
        """
        Append `user` to the member list.

        Note that all changes to the local copy of this data (as performed by
        this function) must be committed to the database separately.
        """
        if user is None:
            raise MissingUserError("User cannot be None")

        if self.has_member(user.user_id):
            raise AlreadyMemberError("User already exists in the group.")

        self.users.append(user)

    def remove_user(self, user: User | None):
        """
        Remove the member sharing `user`'s ID.
        """
        if user is None:
            raise MissingUserError("User cannot be None")

        for member in self.users:
            if member.user_id == user.user_id:
                self.users.remove(member)
                return

        raise NotAMemberError("User not found in the group.")

    def to_core(self) -> StudyGroupData:
        """
        Convert this StudyGroup ORM object to a StudyGroupData core object.
        """
        return StudyGroupData(
            study_group_id=self.study_group_id,
            name=self.name,
            subject=self.subject,
            created_at=as_utc(self.created_at),
            users=[user.to_core() for user in self.users],
        )
