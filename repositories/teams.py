from typing import Optional, Sequence

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError

from models import models
from models.entities import Team, User
from models.transaction import TransactionManager, TxScope
from repositories.base import TeamRepository
from services.errors import NotFoundError, TeamExistsError


class SQLTeamRepository(TeamRepository):
    def __init__(self, tm: TransactionManager):
        self._tm = tm

    async def create(self, team: Team, users: Sequence[User], *, scope: Optional[TxScope] = None) -> None:
        async with self._tm.session(scope) as session:
            try:
                await session.execute(insert(models.Team).values(team_name=team.name))
            except IntegrityError as e:
                raise TeamExistsError(f"team {team.name} already exists") from e

            if users:
                # members always land in the team being created
                await session.execute(
                    insert(models.User),
                    [
                        {
                            "user_id": user.user_id,
                            "username": user.username,
                            "team_name": team.name,
                            "is_active": user.is_active,
                        }
                        for user in users
                    ],
                )

    async def get_by_name(self, name: str, *, scope: Optional[TxScope] = None) -> Team:
        async with self._tm.session(scope) as session:
            result = await session.execute(
                select(models.Team).where(models.Team.team_name == name)
            )
            row = result.scalar_one_or_none()

        if row is None:
            raise NotFoundError(f"team {name} not found")
        return Team(name=row.team_name)
