from fastapi import HTTPException, Request, status

from services.errors import DomainError
from services.pull_request import PullRequestService
from services.teams import TeamService
from services.users import UserService


ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "TEAM_EXISTS": status.HTTP_400_BAD_REQUEST,
    "PR_EXISTS": status.HTTP_409_CONFLICT,
    "PR_MERGED": status.HTTP_409_CONFLICT,
    "NOT_ASSIGNED": status.HTTP_409_CONFLICT,
    "NO_CANDIDATE": status.HTTP_409_CONFLICT,
}


def get_team_service(request: Request) -> TeamService:
    return request.app.state.services.teams


def get_user_service(request: Request) -> UserService:
    return request.app.state.services.users


def get_pr_service(request: Request) -> PullRequestService:
    return request.app.state.services.pull_requests


def domain_error(e: DomainError) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS.get(e.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"error": {"code": e.code, "message": str(e)}}
    )


def internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}}
    )
