import logging

from fastapi import APIRouter, Depends, status, Query
from schemas import (
    SetIsActiveRequest, UserCreateRequest, UserUpdateResponse, UserResponse,
    GetReviewResponse, PullRequestShort, ErrorResponse
)
from models.entities import User
from routes.deps import domain_error, get_user_service, internal_error
from services.errors import DomainError
from services.users import UserService


logger = logging.getLogger("routes.users")

router = APIRouter(prefix="/users")


@router.post("/add", status_code=status.HTTP_201_CREATED,
                   summary="Add a user to an existing team",
                   response_model=UserUpdateResponse,
                   responses={404: {"model": ErrorResponse}})
async def add(request: UserCreateRequest, service: UserService = Depends(get_user_service)):
    user = User(
        user_id=request.user_id,
        username=request.username,
        team_name=request.team_name,
        is_active=request.is_active
    )
    try:
        created = await service.create_user(user)
    except DomainError as e:
        logger.warning("Failed to add user %s: %s", request.user_id, e)
        raise domain_error(e)
    except Exception:
        logger.exception("Failed to add user %s", request.user_id)
        raise internal_error()
    return UserUpdateResponse(user=UserResponse.from_entity(created))


@router.post("/setIsActive", status_code=status.HTTP_200_OK,
                   summary="Set the user's active flag",
                   response_model=UserUpdateResponse,
                   responses={404: {"model": ErrorResponse}})
async def setIsActive(request: SetIsActiveRequest, service: UserService = Depends(get_user_service)):
    try:
        user = await service.set_is_active(request.user_id, request.is_active)
    except DomainError as e:
        logger.warning("Failed to set is_active for %s: %s", request.user_id, e)
        raise domain_error(e)
    except Exception:
        logger.exception("Failed to set is_active for %s", request.user_id)
        raise internal_error()
    return UserUpdateResponse(user=UserResponse.from_entity(user))


@router.get("/getReview", status_code=status.HTTP_200_OK,
                  summary="Get PRs where the user is assigned as a reviewer",
                  response_model=GetReviewResponse,
                  responses={404: {"model": ErrorResponse}})
async def getReview(user_id: str = Query(..., description="User identifier"),
                    service: UserService = Depends(get_user_service)):
    try:
        pull_requests = await service.get_reviews(user_id)
    except DomainError as e:
        logger.warning("Failed to get reviews for %s: %s", user_id, e)
        raise domain_error(e)
    except Exception:
        logger.exception("Failed to get reviews for %s", user_id)
        raise internal_error()
    return GetReviewResponse(
        user_id=user_id,
        pull_requests=[PullRequestShort.from_entity(pr) for pr in pull_requests]
    )
