"""
Meta functionality for the database.
"""

from .group import StudyGroup, StudyGroupMembership
from .user import User

ALL_TABLES = (
    StudyGroup,
    StudyGroupMembership,
    User,
)
