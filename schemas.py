from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from models.entities import PullRequest, User


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


class TeamMember(BaseModel):
    user_id: str
    username: str
    is_active: bool


class TeamRequest(BaseModel):
    team_name: str
    members: List[TeamMember]


class TeamResponse(BaseModel):
    team_name: str
    members: List[TeamMember]


class TeamCreateResponse(BaseModel):
    team: TeamResponse


class UserResponse(BaseModel):
    user_id: str
    username: str
    team_name: str
    is_active: bool

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            user_id=user.user_id,
            username=user.username,
            team_name=user.team_name,
            is_active=user.is_active,
        )


class UserUpdateResponse(BaseModel):
    user: UserResponse


class UserCreateRequest(BaseModel):
    user_id: str
    username: str
    team_name: str
    is_active: bool = True


class SetIsActiveRequest(BaseModel):
    user_id: str
    is_active: bool


class PullRequestShort(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: str

    @classmethod
    def from_entity(cls, pr: PullRequest) -> "PullRequestShort":
        return cls(
            pull_request_id=pr.pull_request_id,
            pull_request_name=pr.name,
            author_id=pr.author_id,
            status=pr.status.value,
        )


class PullRequestResponse(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: str
    assigned_reviewers: List[str]
    createdAt: Optional[datetime] = None
    mergedAt: Optional[datetime] = None

    @classmethod
    def from_entity(cls, pr: PullRequest) -> "PullRequestResponse":
        return cls(
            pull_request_id=pr.pull_request_id,
            pull_request_name=pr.name,
            author_id=pr.author_id,
            status=pr.status.value,
            assigned_reviewers=pr.reviewer_ids,
            createdAt=pr.created_at,
            mergedAt=pr.merged_at,
        )


class PullRequestCreateRequest(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str


class PullRequestCreateResponse(BaseModel):
    pr: PullRequestResponse


class PullRequestMergeRequest(BaseModel):
    pull_request_id: str


class PullRequestMergeResponse(BaseModel):
    pr: PullRequestResponse


class PullRequestReassignRequest(BaseModel):
    pull_request_id: str
    old_user_id: str


class PullRequestReassignResponse(BaseModel):
    pr: PullRequestResponse
    replaced_by: str


class GetReviewResponse(BaseModel):
    user_id: str
    pull_requests: List[PullRequestShort]
