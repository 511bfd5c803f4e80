import copy
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from models.entities import PRStatus, PullRequest, Team, User
from models.transaction import TxScope, is_active
from repositories.base import PullRequestRepository, TeamRepository, TransactionScope, UserRepository
from services.errors import NotFoundError, PRExistsError, TeamExistsError


class StorageError(RuntimeError):
    pass


class InMemoryStore:
    def __init__(self):
        self.teams: set = set()
        self.users: Dict[str, User] = {}
        self.pull_requests: Dict[str, PullRequest] = {}
        self.reviewers: Dict[str, List[str]] = {}
        self.calls: List[tuple] = []

    def record(self, name: str, scope: Optional[TxScope]):
        self.calls.append((name, is_active(scope)))

    def snapshot(self):
        return copy.deepcopy((self.teams, self.users, self.pull_requests, self.reviewers))

    def restore(self, snapshot):
        self.teams, self.users, self.pull_requests, self.reviewers = snapshot

    def pull_request(self, pr_id: str) -> PullRequest:
        pr = copy.deepcopy(self.pull_requests[pr_id])
        pr.reviewers = [self.users[uid] for uid in self.reviewers.get(pr_id, [])]
        return pr


class FakeTransactionManager(TransactionScope):
    def __init__(self, store: InMemoryStore):
        self.store = store
        self.begun = 0
        self.commits = 0
        self.rollbacks = 0

    async def do(self, operation, scope=None):
        if is_active(scope):
            return await operation(scope)

        self.begun += 1
        snapshot = self.store.snapshot()
        tx = TxScope(session=None)
        try:
            result = await operation(tx)
        except BaseException:
            self.store.restore(snapshot)
            self.rollbacks += 1
            raise
        finally:
            tx.active = False
        self.commits += 1
        return result


class FakeTeamRepository(TeamRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, team: Team, users: Sequence[User], *, scope=None) -> None:
        self.store.record("teams.create", scope)
        if team.name in self.store.teams:
            raise TeamExistsError()
        self.store.teams.add(team.name)
        for user in users:
            if user.user_id in self.store.users:
                raise StorageError(f"duplicate user {user.user_id}")
            self.store.users[user.user_id] = replace(user, team_name=team.name)

    async def get_by_name(self, name: str, *, scope=None) -> Team:
        self.store.record("teams.get_by_name", scope)
        if name not in self.store.teams:
            raise NotFoundError()
        return Team(name=name)


class FakeUserRepository(UserRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get_by_id(self, user_id: str, *, scope=None) -> User:
        self.store.record("users.get_by_id", scope)
        if user_id not in self.store.users:
            raise NotFoundError()
        return self.store.users[user_id]

    async def create(self, user: User, *, scope=None) -> None:
        self.store.record("users.create", scope)
        if user.user_id in self.store.users:
            raise StorageError(f"duplicate user {user.user_id}")
        self.store.users[user.user_id] = user

    async def get_active_candidates_by_team(self, team_name: str, exclude_user_id: str, *, scope=None) -> List[User]:
        self.store.record("users.get_active_candidates_by_team", scope)
        return [
            u for u in sorted(self.store.users.values(), key=lambda u: u.user_id)
            if u.team_name == team_name and u.is_active and u.user_id != exclude_user_id
        ]

    async def set_is_active(self, user_id: str, is_active: bool, *, scope=None) -> User:
        self.store.record("users.set_is_active", scope)
        if user_id not in self.store.users:
            raise NotFoundError()
        self.store.users[user_id] = replace(self.store.users[user_id], is_active=is_active)
        return self.store.users[user_id]

    async def list_by_team(self, team_name: str, *, scope=None) -> List[User]:
        self.store.record("users.list_by_team", scope)
        return [u for u in self.store.users.values() if u.team_name == team_name]


class FakePullRequestRepository(PullRequestRepository):
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, pr: PullRequest, *, scope=None) -> None:
        self.store.record("prs.create", scope)
        if pr.pull_request_id in self.store.pull_requests:
            raise PRExistsError()
        self.store.pull_requests[pr.pull_request_id] = replace(pr, reviewers=[])
        self.store.reviewers[pr.pull_request_id] = list(pr.reviewer_ids)

    async def get_by_id(self, pr_id: str, *, scope=None) -> PullRequest:
        self.store.record("prs.get_by_id", scope)
        if pr_id not in self.store.pull_requests:
            raise NotFoundError()
        return self.store.pull_request(pr_id)

    async def update_status(self, pr_id: str, status: PRStatus, *, scope=None) -> PullRequest:
        self.store.record("prs.update_status", scope)
        if pr_id not in self.store.pull_requests:
            raise NotFoundError()
        pr = self.store.pull_requests[pr_id]
        pr.status = status
        if status == PRStatus.MERGED:
            pr.merged_at = datetime.now(timezone.utc)
        # mimics a storage layer that returns the row without reviewers
        return replace(pr, reviewers=[])

    async def set_reviewers(self, pr_id: str, reviewer_ids: Sequence[str], *, scope=None) -> None:
        self.store.record("prs.set_reviewers", scope)
        self.store.reviewers[pr_id] = list(reviewer_ids)

    async def get_reviews_by_user_id(self, user_id: str, *, scope=None) -> List[PullRequest]:
        self.store.record("prs.get_reviews_by_user_id", scope)
        return [
            self.store.pull_request(pr_id)
            for pr_id, reviewer_ids in self.store.reviewers.items()
            if user_id in reviewer_ids
        ]

    async def get_reviewers_by_pr_id(self, pr_id: str, *, scope=None) -> List[User]:
        self.store.record("prs.get_reviewers_by_pr_id", scope)
        return [self.store.users[uid] for uid in self.store.reviewers.get(pr_id, [])]
