from typing import List, Optional

from sqlalchemy import insert, select, update

from models import models
from models.entities import User
from models.transaction import TransactionManager, TxScope
from repositories.base import UserRepository
from services.errors import NotFoundError


def to_user(row: models.User) -> User:
    return User(
        user_id=row.user_id,
        username=row.username,
        team_name=row.team_name,
        is_active=row.is_active,
    )


class SQLUserRepository(UserRepository):
    def __init__(self, tm: TransactionManager):
        self._tm = tm

    async def get_by_id(self, user_id: str, *, scope: Optional[TxScope] = None) -> User:
        async with self._tm.session(scope) as session:
            result = await session.execute(
                select(models.User).where(models.User.user_id == user_id)
            )
            row = result.scalar_one_or_none()

        if row is None:
            raise NotFoundError(f"user {user_id} not found")
        return to_user(row)

    async def create(self, user: User, *, scope: Optional[TxScope] = None) -> None:
        async with self._tm.session(scope) as session:
            await session.execute(
                insert(models.User).values(
                    user_id=user.user_id,
                    username=user.username,
                    team_name=user.team_name,
                    is_active=user.is_active,
                )
            )

    async def get_active_candidates_by_team(
        self, team_name: str, exclude_user_id: str, *, scope: Optional[TxScope] = None
    ) -> List[User]:
        async with self._tm.session(scope) as session:
            result = await session.execute(
                select(models.User)
                .where(
                    models.User.team_name == team_name,
                    models.User.is_active == True,
                    models.User.user_id != exclude_user_id,
                )
                .order_by(models.User.user_id)
            )
            return [to_user(row) for row in result.scalars().all()]

    async def set_is_active(self, user_id: str, is_active: bool, *, scope: Optional[TxScope] = None) -> User:
        async with self._tm.session(scope) as session:
            result = await session.execute(
                update(models.User)
                .where(models.User.user_id == user_id)
                .values(is_active=is_active)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(f"user {user_id} not found")

            result = await session.execute(
                select(models.User)
                .where(models.User.user_id == user_id)
                .execution_options(populate_existing=True)
            )
            return to_user(result.scalar_one())

    async def list_by_team(self, team_name: str, *, scope: Optional[TxScope] = None) -> List[User]:
        async with self._tm.session(scope) as session:
            result = await session.execute(
                select(models.User)
                .where(models.User.team_name == team_name)
                .order_by(models.User.user_id)
            )
            return [to_user(row) for row in result.scalars().all()]
