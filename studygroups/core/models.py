"""
Pydantic models for requests to the API.

Field types are deliberately loose; the domain rules are enforced when the
`StudyGroup` entity is built, so that violations surface as
`StudyGroupValidationError`.
"""

from datetime import datetime

from pydantic import BaseModel


class UserPayload(BaseModel):
    user_id: int
    name: str


class StudyGroupCreateRequest(BaseModel):
    study_group_id: int
    name: str | None = None
    subject: str
    created_at: datetime
    users: list[UserPayload] | None = None
