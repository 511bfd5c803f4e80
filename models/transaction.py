"""
Unit-of-work handling shared by the storage gateways and the services.

A `TxScope` is an explicit handle on an open transaction. Services receive it
from `TransactionManager.do` and pass it to every gateway call made inside the
operation; gateways resolve it through `TransactionManager.session`, falling
back to a short-lived session of their own when no scope is given.
"""
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


logger = logging.getLogger("models.transaction")

T = TypeVar("T")


class TxScope:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.active = True


def is_active(scope: Optional[TxScope]) -> bool:
    return scope is not None and scope.active


class ScopeClosedError(RuntimeError):
    """A gateway was handed a scope whose transaction has already ended"""


class TransactionScope(ABC):
    @abstractmethod
    async def do(
        self,
        operation: Callable[[TxScope], Awaitable[T]],
        scope: Optional[TxScope] = None,
    ) -> T:
        ...


class TransactionManager(TransactionScope):
    def __init__(self, session_maker: async_sessionmaker):
        self._session_maker = session_maker

    async def do(
        self,
        operation: Callable[[TxScope], Awaitable[T]],
        scope: Optional[TxScope] = None,
    ) -> T:
        """
        Run `operation` atomically.
        An active `scope` is reused as is, otherwise a new transaction is opened,
        committed when the operation returns and rolled back when it raises
        """
        if is_active(scope):
            return await operation(scope)

        async with self._session_maker() as session:
            async with session.begin():
                tx = TxScope(session)
                try:
                    return await operation(tx)
                except BaseException:
                    logger.debug("Rolling back transaction")
                    raise
                finally:
                    tx.active = False

    @asynccontextmanager
    async def session(self, scope: Optional[TxScope] = None) -> AsyncIterator[AsyncSession]:
        """Yield the scope's session, or a fresh one committed on exit"""
        if scope is not None and not scope.active:
            raise ScopeClosedError("transaction scope is no longer active")

        if is_active(scope):
            yield scope.session
            return

        async with self._session_maker() as session:
            async with session.begin():
                yield session
