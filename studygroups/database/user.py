"""
ORM for user information.
"""

from sqlmodel import Field, SQLModel

from studygroups.core.user import UserData


class User(SQLModel, table=True):
    user_id: int = Field(primary_key=True)
    name: str

    def to_core(self) -> UserData:
        return UserData(user_id=self.user_id, name=self.name)
