import logging

from fastapi import APIRouter, Depends, status, Query
from schemas import (
    TeamRequest, TeamCreateResponse, TeamResponse, TeamMember,
    ErrorResponse
)
from models.entities import Team, User
from routes.deps import domain_error, get_team_service, internal_error
from services.errors import DomainError
from services.teams import TeamService


logger = logging.getLogger("routes.teams")

router = APIRouter(prefix="/team")


def _team_response(team: Team, members) -> TeamResponse:
    return TeamResponse(
        team_name=team.name,
        members=[
            TeamMember(user_id=m.user_id, username=m.username, is_active=m.is_active)
            for m in members
        ]
    )


@router.post("/add", status_code=status.HTTP_201_CREATED,
                  summary="Create a team together with its members",
                  response_model=TeamCreateResponse,
                  responses={400: {"model": ErrorResponse}})
async def add(request: TeamRequest, service: TeamService = Depends(get_team_service)):
    team = Team(name=request.team_name)
    users = [
        User(
            user_id=member.user_id,
            username=member.username,
            team_name=request.team_name,
            is_active=member.is_active
        )
        for member in request.members
    ]
    try:
        await service.create_team_with_users(team, users)
    except DomainError as e:
        logger.warning("Failed to create team %s: %s", request.team_name, e)
        raise domain_error(e)
    except Exception:
        logger.exception("Failed to create team %s", request.team_name)
        raise internal_error()
    return TeamCreateResponse(team=_team_response(team, users))


@router.get("/get", status_code=status.HTTP_200_OK,
                 summary="Get a team with its members",
                 response_model=TeamResponse,
                 responses={404: {"model": ErrorResponse}})
async def get(team_name: str = Query(..., description="Unique team name"),
              service: TeamService = Depends(get_team_service)):
    try:
        team, members = await service.get_team(team_name)
    except DomainError as e:
        logger.warning("Failed to get team %s: %s", team_name, e)
        raise domain_error(e)
    except Exception:
        logger.exception("Failed to get team %s", team_name)
        raise internal_error()
    return _team_response(team, members)
