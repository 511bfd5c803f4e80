import logging

from fastapi import APIRouter, Depends, status
from schemas import (
    PullRequestCreateRequest, PullRequestCreateResponse,
    PullRequestMergeRequest, PullRequestMergeResponse,
    PullRequestReassignRequest, PullRequestReassignResponse,
    PullRequestResponse, ErrorResponse
)
from routes.deps import domain_error, get_pr_service, internal_error
from services.errors import DomainError
from services.pull_request import PullRequestService


logger = logging.getLogger("routes.pull_request")

router = APIRouter(prefix="/pullRequest")


@router.post("/create", status_code=status.HTTP_201_CREATED,
                summary="Create a PR and assign up to 2 reviewers from the author's team",
                response_model=PullRequestCreateResponse,
                responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def create(request: PullRequestCreateRequest,
                 service: PullRequestService = Depends(get_pr_service)):
    try:
        pr = await service.create(
            request.pull_request_id,
            request.pull_request_name,
            request.author_id
        )
    except DomainError as e:
        logger.warning("Failed to create PR %s: %s", request.pull_request_id, e)
        raise domain_error(e)
    except Exception:
        logger.exception("Failed to create PR %s", request.pull_request_id)
        raise internal_error()
    return PullRequestCreateResponse(pr=PullRequestResponse.from_entity(pr))


@router.post("/merge", status_code=status.HTTP_200_OK,
                summary="Mark a PR as MERGED (idempotent)",
                response_model=PullRequestMergeResponse,
                responses={404: {"model": ErrorResponse}})
async def merge(request: PullRequestMergeRequest,
                service: PullRequestService = Depends(get_pr_service)):
    try:
        pr = await service.merge(request.pull_request_id)
    except DomainError as e:
        logger.warning("Failed to merge PR %s: %s", request.pull_request_id, e)
        raise domain_error(e)
    except Exception:
        logger.exception("Failed to merge PR %s", request.pull_request_id)
        raise internal_error()
    return PullRequestMergeResponse(pr=PullRequestResponse.from_entity(pr))


@router.post("/reassign", status_code=status.HTTP_200_OK,
                summary="Replace a reviewer with another active member of their team",
                response_model=PullRequestReassignResponse,
                responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def reassign(request: PullRequestReassignRequest,
                   service: PullRequestService = Depends(get_pr_service)):
    try:
        pr, replaced_by = await service.reassign(
            request.pull_request_id,
            request.old_user_id
        )
    except DomainError as e:
        logger.warning("Failed to reassign %s on PR %s: %s", request.old_user_id, request.pull_request_id, e)
        raise domain_error(e)
    except Exception:
        logger.exception("Failed to reassign %s on PR %s", request.old_user_id, request.pull_request_id)
        raise internal_error()
    return PullRequestReassignResponse(
        pr=PullRequestResponse.from_entity(pr),
        replaced_by=replaced_by
    )
