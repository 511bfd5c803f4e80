import logging
from typing import List

from models.entities import PullRequest, User
from models.transaction import TxScope
from repositories.base import PullRequestRepository, TeamRepository, TransactionScope, UserRepository


logger = logging.getLogger("services.users")


class UserService:
    def __init__(
        self,
        users: UserRepository,
        teams: TeamRepository,
        pull_requests: PullRequestRepository,
        tx: TransactionScope,
    ):
        self._users = users
        self._teams = teams
        self._pull_requests = pull_requests
        self._tx = tx

    async def create_user(self, user: User) -> User:
        """
        POST /users/add
        Add a single user to an existing team
        """
        async def operation(scope: TxScope) -> User:
            await self._teams.get_by_name(user.team_name, scope=scope)
            await self._users.create(user, scope=scope)
            return await self._users.get_by_id(user.user_id, scope=scope)

        created = await self._tx.do(operation)
        logger.info("User %s added to team %s", created.user_id, created.team_name)
        return created

    async def set_is_active(self, user_id: str, is_active: bool) -> User:
        """
        POST /users/setIsActive
        Overwrite the user's active flag, single statement
        """
        user = await self._users.set_is_active(user_id, is_active)
        logger.info("User %s is_active=%s", user_id, is_active)
        return user

    async def get_reviews(self, user_id: str) -> List[PullRequest]:
        """
        GET /users/getReview
        PRs where the user is a current reviewer, whatever their status
        """
        await self._users.get_by_id(user_id)
        return await self._pull_requests.get_reviews_by_user_id(user_id)
