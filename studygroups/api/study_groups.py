"""
Study group management.
"""

from typing import Annotated

from fastapi import APIRouter, Body, HTTPException, Query

from studygroups.api.dependencies import LoggerDependency, RepositoryDependency
from studygroups.core.group import StudyGroupData
from studygroups.core.models import StudyGroupCreateRequest
from studygroups.database.group import StudyGroup
from studygroups.database.user import User

study_group_app = APIRouter(tags=["Study Groups"])

StudyGroupIdQuery = Annotated[int, Query(alias="studyGroupId")]
UserIdQuery = Annotated[int, Query(alias="userId")]


@study_group_app.post(
    "/create",
    summary="Create a new study group",
    description=(
        "Create a study group with an initial list of members. Members that "
        "do not exist yet are created alongside the group."
    ),
    responses={
        200: {"description": "Study group created."},
        400: {"description": "Missing payload, invalid field, or duplicate ID."},
    },
)
async def create_study_group(
    repository: RepositoryDependency,
    log: LoggerDependency,
    content: Annotated[StudyGroupCreateRequest | None, Body()] = None,
) -> None:
    """
    Create a new study group.
    """
    if content is None:
        await log.awarning("study_group.create.no_content")
        raise HTTPException(status_code=400, detail="A study group is required")

    log = log.bind(study_group_id=content.study_group_id, name=content.name)

    users = None
    if content.users is not None:
        users = [User(user_id=user.user_id, name=user.name) for user in content.users]

    study_group = StudyGroup.new(
        study_group_id=content.study_group_id,
        name=content.name,
        subject=content.subject,
        created_at=content.created_at,
        users=users,
    )

    await repository.create_study_group(study_group=study_group, log=log)
    await log.ainfo("study_group.create.success")


@study_group_app.get(
    "",
    summary="List all study groups",
    description="Retrieve every study group and its members, oldest first.",
    responses={
        200: {"description": "List of study groups."},
    },
)
async def get_study_groups(
    repository: RepositoryDependency,
    log: LoggerDependency,
) -> list[StudyGroupData]:
    """
    List all study groups.
    """
    study_groups = await repository.get_study_groups(log=log)
    return [group.to_core() for group in study_groups]


@study_group_app.get(
    "/search",
    summary="Search study groups by subject",
    description=(
        "Retrieve the study groups whose subject matches exactly. Unknown "
        "subjects give an empty list."
    ),
    responses={
        200: {"description": "List of matching study groups."},
    },
)
async def search_study_groups(
    subject: str,
    repository: RepositoryDependency,
    log: LoggerDependency,
) -> list[StudyGroupData]:
    """
    Search study groups by subject.
    """
    study_groups = await repository.search_study_groups(subject=subject, log=log)
    return [group.to_core() for group in study_groups]


@study_group_app.post(
    "/join",
    summary="Join a study group",
    responses={
        200: {"description": "User joined the study group."},
        400: {"description": "Unknown user, or the user is already a member."},
        404: {"description": "Study group not found."},
    },
)
async def join_study_group(
    study_group_id: StudyGroupIdQuery,
    user_id: UserIdQuery,
    repository: RepositoryDependency,
    log: LoggerDependency,
) -> None:
    """
    Add a user to a study group.
    """
    log = log.bind(study_group_id=study_group_id, user_id=user_id)
    await repository.join_study_group(
        study_group_id=study_group_id, user_id=user_id, log=log
    )
    await log.ainfo("study_group.join.success")


@study_group_app.post(
    "/leave",
    summary="Leave a study group",
    responses={
        200: {"description": "User left the study group."},
        400: {"description": "Unknown user, or the user is not a member."},
        404: {"description": "Study group not found."},
    },
)
async def leave_study_group(
    study_group_id: StudyGroupIdQuery,
    user_id: UserIdQuery,
    repository: RepositoryDependency,
    log: LoggerDependency,
) -> None:
    """
    Remove a user from a study group.
    """
    log = log.bind(study_group_id=study_group_id, user_id=user_id)
    await repository.leave_study_group(
        study_group_id=study_group_id, user_id=user_id, log=log
    )
    await log.ainfo("study_group.leave.success")
