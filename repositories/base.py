"""
Storage contracts the services depend on.

Every method accepts an optional `scope`; inside `TransactionScope.do` the
services pass the scope they were given so that all calls share one
transaction. Missing rows are reported with `NotFoundError`.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from models.entities import PRStatus, PullRequest, Team, User
from models.transaction import TransactionScope, TxScope


__all__ = [
    "TransactionScope", "TeamRepository", "UserRepository", "PullRequestRepository",
]


class TeamRepository(ABC):
    @abstractmethod
    async def create(self, team: Team, users: Sequence[User], *, scope: Optional[TxScope] = None) -> None:
        """Insert the team and its members. Raises TeamExistsError on a name collision"""

    @abstractmethod
    async def get_by_name(self, name: str, *, scope: Optional[TxScope] = None) -> Team:
        ...


class UserRepository(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: str, *, scope: Optional[TxScope] = None) -> User:
        ...

    @abstractmethod
    async def create(self, user: User, *, scope: Optional[TxScope] = None) -> None:
        ...

    @abstractmethod
    async def get_active_candidates_by_team(
        self, team_name: str, exclude_user_id: str, *, scope: Optional[TxScope] = None
    ) -> List[User]:
        """Active members of `team_name` other than `exclude_user_id`"""

    @abstractmethod
    async def set_is_active(self, user_id: str, is_active: bool, *, scope: Optional[TxScope] = None) -> User:
        ...

    @abstractmethod
    async def list_by_team(self, team_name: str, *, scope: Optional[TxScope] = None) -> List[User]:
        ...


class PullRequestRepository(ABC):
    @abstractmethod
    async def create(self, pr: PullRequest, *, scope: Optional[TxScope] = None) -> None:
        """Insert the PR with its reviewers. Raises PRExistsError on an id collision"""

    @abstractmethod
    async def get_by_id(self, pr_id: str, *, scope: Optional[TxScope] = None) -> PullRequest:
        ...

    @abstractmethod
    async def update_status(self, pr_id: str, status: PRStatus, *, scope: Optional[TxScope] = None) -> PullRequest:
        """Set the status; moving to MERGED stamps merged_at with the database clock"""

    @abstractmethod
    async def set_reviewers(self, pr_id: str, reviewer_ids: Sequence[str], *, scope: Optional[TxScope] = None) -> None:
        """Replace the whole reviewer set"""

    @abstractmethod
    async def get_reviews_by_user_id(self, user_id: str, *, scope: Optional[TxScope] = None) -> List[PullRequest]:
        ...

    @abstractmethod
    async def get_reviewers_by_pr_id(self, pr_id: str, *, scope: Optional[TxScope] = None) -> List[User]:
        ...
