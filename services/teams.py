import logging
from typing import List, Sequence, Tuple

from models.entities import Team, User
from models.transaction import TxScope
from repositories.base import TeamRepository, TransactionScope, UserRepository


logger = logging.getLogger("services.teams")


class TeamService:
    def __init__(self, teams: TeamRepository, users: UserRepository, tx: TransactionScope):
        self._teams = teams
        self._users = users
        self._tx = tx

    async def create_team_with_users(self, team: Team, users: Sequence[User]) -> None:
        """
        POST /team/add
        Create the team and all its members in one transaction.
        A taken team name raises TeamExistsError and nothing is written
        """
        async def operation(scope: TxScope) -> None:
            await self._teams.create(team, users, scope=scope)

        await self._tx.do(operation)
        logger.info("Team %s created with %d members", team.name, len(users))

    async def get_team(self, team_name: str) -> Tuple[Team, List[User]]:
        """
        GET /team/get
        Team with its members; NotFoundError if there is no such team
        """
        async def operation(scope: TxScope) -> Tuple[Team, List[User]]:
            team = await self._teams.get_by_name(team_name, scope=scope)
            members = await self._users.list_by_team(team_name, scope=scope)
            return team, members

        return await self._tx.do(operation)
