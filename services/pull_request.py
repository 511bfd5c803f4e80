import logging
from datetime import datetime, timezone
from typing import Tuple

from models.entities import PRStatus, PullRequest
from models.transaction import TxScope
from repositories.base import PullRequestRepository, TransactionScope, UserRepository
from services.errors import NoCandidateError, NotAssignedError, NotFoundError, PRMergedError
from services.selector import ReviewerSelector


logger = logging.getLogger("services.pull_request")

REVIEWERS_PER_PR = 2


class PullRequestService:
    def __init__(
        self,
        pull_requests: PullRequestRepository,
        users: UserRepository,
        tx: TransactionScope,
        selector: ReviewerSelector,
    ):
        self._pull_requests = pull_requests
        self._users = users
        self._tx = tx
        self._selector = selector

    async def create(self, pull_request_id: str, pull_request_name: str, author_id: str) -> PullRequest:
        """
        POST /pullRequest/create
        Create a PR and assign up to 2 random active reviewers from the author's team
        """
        async def operation(scope: TxScope) -> PullRequest:
            try:
                author = await self._users.get_by_id(author_id, scope=scope)
            except NotFoundError as e:
                raise NotFoundError("author not found") from e

            candidates = await self._users.get_active_candidates_by_team(
                author.team_name, author.user_id, scope=scope
            )
            pr = PullRequest(
                pull_request_id=pull_request_id,
                name=pull_request_name,
                author_id=author.user_id,
                status=PRStatus.OPEN,
                reviewers=self._selector.select(candidates, REVIEWERS_PER_PR),
                created_at=datetime.now(timezone.utc),
            )
            await self._pull_requests.create(pr, scope=scope)
            return pr

        pr = await self._tx.do(operation)
        logger.info("PR %s created by %s, reviewers: %s", pr.pull_request_id, pr.author_id, pr.reviewer_ids)
        return pr

    async def merge(self, pull_request_id: str) -> PullRequest:
        """
        POST /pullRequest/merge
        Mark the PR as MERGED. Merging a merged PR returns it unchanged
        """
        pr = await self._pull_requests.get_by_id(pull_request_id)
        if pr.is_merged:
            return pr

        merged = await self._pull_requests.update_status(pull_request_id, PRStatus.MERGED)
        # the status update does not have to carry reviewers, reload them
        merged.reviewers = await self._pull_requests.get_reviewers_by_pr_id(pull_request_id)
        logger.info("PR %s merged", pull_request_id)
        return merged

    async def reassign(self, pull_request_id: str, old_reviewer_id: str) -> Tuple[PullRequest, str]:
        """
        POST /pullRequest/reassign
        Replace one reviewer with a random active member of that reviewer's team.
        Returns the updated PR and the id of the new reviewer
        """
        async def operation(scope: TxScope) -> Tuple[PullRequest, str]:
            pr = await self._pull_requests.get_by_id(pull_request_id, scope=scope)
            if pr.is_merged:
                raise PRMergedError()

            old_reviewer = next((r for r in pr.reviewers if r.user_id == old_reviewer_id), None)
            if old_reviewer is None:
                raise NotAssignedError()

            excluded = set(pr.reviewer_ids) | {pr.author_id}
            excluded.discard(old_reviewer_id)

            candidates = await self._users.get_active_candidates_by_team(
                old_reviewer.team_name, old_reviewer_id, scope=scope
            )
            candidates = [
                c for c in candidates
                if c.user_id not in excluded and c.user_id != pr.author_id
            ]
            if not candidates:
                raise NoCandidateError()

            new_reviewer = self._selector.select(candidates, 1)[0]

            reviewer_ids = [rid for rid in pr.reviewer_ids if rid != old_reviewer_id]
            reviewer_ids.append(new_reviewer.user_id)
            await self._pull_requests.set_reviewers(pull_request_id, reviewer_ids, scope=scope)

            updated = await self._pull_requests.get_by_id(pull_request_id, scope=scope)
            return updated, new_reviewer.user_id

        pr, new_reviewer_id = await self._tx.do(operation)
        logger.info("PR %s: reviewer %s replaced by %s", pull_request_id, old_reviewer_id, new_reviewer_id)
        return pr, new_reviewer_id
