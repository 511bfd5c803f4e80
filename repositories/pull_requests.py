from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import models
from models.entities import PRStatus, PullRequest, User
from models.transaction import TransactionManager, TxScope
from repositories.base import PullRequestRepository
from repositories.users import to_user
from services.errors import NotFoundError, PRExistsError


def to_pull_request(row: models.PullRequest, reviewers: List[User]) -> PullRequest:
    return PullRequest(
        pull_request_id=row.pull_request_id,
        name=row.name,
        author_id=row.author_id,
        status=PRStatus(row.status),
        reviewers=reviewers,
        created_at=row.created_at,
        merged_at=row.merged_at,
    )


async def _load_reviewers(session: AsyncSession, pr_ids: Sequence[str]) -> Dict[str, List[User]]:
    result = await session.execute(
        select(models.Reviewers.pr_id, models.User)
        .join(models.User, models.User.user_id == models.Reviewers.reviewer_id)
        .where(models.Reviewers.pr_id.in_(pr_ids))
        .order_by(models.User.user_id)
    )
    reviewers = defaultdict(list)
    for pr_id, user in result.all():
        reviewers[pr_id].append(to_user(user))
    return reviewers


async def _replace_reviewers(session: AsyncSession, pr_id: str, reviewer_ids: Sequence[str]) -> None:
    await session.execute(
        delete(models.Reviewers)
        .where(models.Reviewers.pr_id == pr_id)
        .execution_options(synchronize_session=False)
    )
    if reviewer_ids:
        await session.execute(
            insert(models.Reviewers),
            [{"pr_id": pr_id, "reviewer_id": reviewer_id} for reviewer_id in reviewer_ids],
        )


async def _get_pull_request(session: AsyncSession, pr_id: str) -> PullRequest:
    result = await session.execute(
        select(models.PullRequest)
        .where(models.PullRequest.pull_request_id == pr_id)
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError(f"PR {pr_id} not found")

    reviewers = await _load_reviewers(session, [pr_id])
    return to_pull_request(row, reviewers[pr_id])


class SQLPullRequestRepository(PullRequestRepository):
    def __init__(self, tm: TransactionManager):
        self._tm = tm

    async def create(self, pr: PullRequest, *, scope: Optional[TxScope] = None) -> None:
        async with self._tm.session(scope) as session:
            try:
                await session.execute(
                    insert(models.PullRequest).values(
                        pull_request_id=pr.pull_request_id,
                        name=pr.name,
                        author_id=pr.author_id,
                        status=pr.status.value,
                        created_at=pr.created_at or func.now(),
                    )
                )
            except IntegrityError as e:
                raise PRExistsError(f"PR {pr.pull_request_id} already exists") from e

            await _replace_reviewers(session, pr.pull_request_id, pr.reviewer_ids)

    async def get_by_id(self, pr_id: str, *, scope: Optional[TxScope] = None) -> PullRequest:
        async with self._tm.session(scope) as session:
            return await _get_pull_request(session, pr_id)

    async def update_status(self, pr_id: str, status: PRStatus, *, scope: Optional[TxScope] = None) -> PullRequest:
        values = {"status": status.value}
        if status == PRStatus.MERGED:
            values["merged_at"] = func.now()

        async with self._tm.session(scope) as session:
            result = await session.execute(
                update(models.PullRequest)
                .where(models.PullRequest.pull_request_id == pr_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(f"PR {pr_id} not found")

            return await _get_pull_request(session, pr_id)

    async def set_reviewers(self, pr_id: str, reviewer_ids: Sequence[str], *, scope: Optional[TxScope] = None) -> None:
        async with self._tm.session(scope) as session:
            await _replace_reviewers(session, pr_id, reviewer_ids)

    async def get_reviews_by_user_id(self, user_id: str, *, scope: Optional[TxScope] = None) -> List[PullRequest]:
        async with self._tm.session(scope) as session:
            result = await session.execute(
                select(models.PullRequest)
                .join(models.Reviewers, models.PullRequest.pull_request_id == models.Reviewers.pr_id)
                .where(models.Reviewers.reviewer_id == user_id)
                .order_by(models.PullRequest.created_at, models.PullRequest.pull_request_id)
            )
            rows = result.scalars().all()
            if not rows:
                return []

            reviewers = await _load_reviewers(session, [row.pull_request_id for row in rows])
            return [to_pull_request(row, reviewers[row.pull_request_id]) for row in rows]

    async def get_reviewers_by_pr_id(self, pr_id: str, *, scope: Optional[TxScope] = None) -> List[User]:
        async with self._tm.session(scope) as session:
            reviewers = await _load_reviewers(session, [pr_id])
            return reviewers[pr_id]
