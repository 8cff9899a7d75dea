"""
A shared user object that is serialized.
"""

from pydantic import BaseModel


class UserData(BaseModel):
    user_id: int
    name: str
