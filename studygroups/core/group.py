"""
Core study group data models and validation rules.
"""

import enum
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from pydantic import BaseModel

from .user import UserData

NAME_MIN_LENGTH = 5
NAME_MAX_LENGTH = 30

# Slack for the time between a caller reading the clock and building the group.
CREATION_TOLERANCE = timedelta(minutes=1)
CREATION_HORIZON = timedelta(days=365)


class Subject(enum.StrEnum):
    MATH = "Math"
    CHEMISTRY = "Chemistry"
    PHYSICS = "Physics"


class Violation(enum.Enum):
    """
    The closed set of reasons a study group can fail validation. Each
    member carries the name of the offending field and a message.
    """

    NEGATIVE_ID = ("study_group_id", "ID cannot be negative")
    MISSING_NAME = ("name", "Name cannot be null or empty")
    NAME_TOO_SHORT = (
        "name",
        f"Name must be at least {NAME_MIN_LENGTH} characters long",
    )
    NAME_TOO_LONG = (
        "name",
        f"Name must be at most {NAME_MAX_LENGTH} characters long",
    )
    INVALID_SUBJECT = ("subject", "Invalid subject type")
    DATE_IN_PAST = ("created_at", "Creation date cannot be in the past")
    DATE_TOO_FAR_IN_FUTURE = ("created_at", "Creation date is too far in the future")
    DUPLICATE_MEMBERS = ("users", "Member list contains the same user more than once")

    @property
    def field(self) -> str:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]


class StudyGroupError(Exception):
    pass


class StudyGroupValidationError(StudyGroupError, ValueError):
    """
    Raised when a study group is constructed with an invalid field.
    """

    def __init__(self, violation: Violation):
        self.violation = violation
        self.field = violation.field
        super().__init__(f"{violation.field}: {violation.message}")


class MissingUserError(StudyGroupError, ValueError):
    pass


class AlreadyMemberError(StudyGroupError):
    pass


class NotAMemberError(StudyGroupError):
    pass


def as_utc(moment: datetime) -> datetime:
    """
    Naive datetimes are taken to already be in UTC.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def check_study_group(
    study_group_id: int,
    name: str | None,
    subject: Any,
    created_at: datetime,
    users: Iterable[Any] | None = None,
    now: datetime | None = None,
) -> Violation | None:
    """
    Validate the fields of a prospective study group.

    Parameters
    ----------
    study_group_id: int
        The identifier, which must be non-negative.
    name: str | None
        Display name, between `NAME_MIN_LENGTH` and `NAME_MAX_LENGTH`
        characters inclusive.
    subject: Any
        A `Subject` member, or its textual value.
    created_at: datetime
        Creation timestamp. Must lie within `CREATION_TOLERANCE` before and
        `CREATION_HORIZON` after `now`.
    users: Iterable | None
        Initial members; anything with a `user_id` attribute.
    now: datetime | None
        The reference time. Defaults to the current UTC time.

    Returns
    -------
    Violation | None
        The first violation found, checked in the order the fields are
        listed above, or `None` if the group is valid.
    """
    if study_group_id < 0:
        return Violation.NEGATIVE_ID

    if not name:
        return Violation.MISSING_NAME

    if len(name) < NAME_MIN_LENGTH:
        return Violation.NAME_TOO_SHORT

    if len(name) > NAME_MAX_LENGTH:
        return Violation.NAME_TOO_LONG

    if parse_subject(subject) is None:
        return Violation.INVALID_SUBJECT

    now = as_utc(now or datetime.now(tz=timezone.utc))
    created_at = as_utc(created_at)

    if created_at < now - CREATION_TOLERANCE:
        return Violation.DATE_IN_PAST

    if created_at > now + CREATION_HORIZON:
        return Violation.DATE_TOO_FAR_IN_FUTURE

    user_ids = [user.user_id for user in users or []]
    if len(user_ids) != len(set(user_ids)):
        return Violation.DUPLICATE_MEMBERS

    return None


def parse_subject(subject: Any) -> Subject | None:
    """
    Resolve `subject` to a `Subject` by exact (case-sensitive) value, or
    return `None` if it names no subject.
    """
    if isinstance(subject, Subject):
        return subject

    if not isinstance(subject, str):
        return None

    try:
        return Subject(subject)
    except ValueError:
        return None


class StudyGroupData(BaseModel):
    study_group_id: int
    name: str
    subject: Subject
    created_at: datetime
    users: list[UserData]
