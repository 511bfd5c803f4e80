import asyncio

import pytest
from sqlalchemy import func, insert, select

from models import models
from models.transaction import ScopeClosedError, TransactionManager, TransactionScope, TxScope


async def _team_count(tm):
    async with tm.session() as session:
        result = await session.execute(select(func.count()).select_from(models.Team))
        return result.scalar_one()


@pytest.mark.asyncio
async def test_do_commits_on_success(tm):
    async def operation(scope):
        await scope.session.execute(insert(models.Team).values(team_name="backend"))
        return "done"

    assert await tm.do(operation) == "done"
    assert await _team_count(tm) == 1


@pytest.mark.asyncio
async def test_do_rolls_back_and_reraises(tm):
    class Boom(Exception):
        pass

    async def operation(scope):
        await scope.session.execute(insert(models.Team).values(team_name="backend"))
        raise Boom()

    with pytest.raises(Boom):
        await tm.do(operation)

    assert await _team_count(tm) == 0


@pytest.mark.asyncio
async def test_do_rolls_back_on_cancellation(tm):
    started = asyncio.Event()

    async def operation(scope):
        await scope.session.execute(insert(models.Team).values(team_name="backend"))
        started.set()
        await asyncio.sleep(10)

    task = asyncio.ensure_future(tm.do(operation))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert await _team_count(tm) == 0


@pytest.mark.asyncio
async def test_nested_do_reuses_the_active_scope(tm):
    seen = []

    async def inner(scope):
        seen.append(scope)
        await scope.session.execute(insert(models.Team).values(team_name="inner"))

    async def outer(scope):
        seen.append(scope)
        await tm.do(inner, scope=scope)
        raise RuntimeError("abort outer")

    with pytest.raises(RuntimeError):
        await tm.do(outer)

    assert seen[0] is seen[1]
    # the inner write belonged to the outer transaction
    assert await _team_count(tm) == 0


@pytest.mark.asyncio
async def test_scope_is_inactive_after_do(tm):
    captured = []

    async def operation(scope):
        captured.append(scope)

    await tm.do(operation)

    assert isinstance(captured[0], TxScope)
    assert captured[0].active is False


@pytest.mark.asyncio
async def test_session_without_scope_commits(tm):
    async with tm.session() as session:
        await session.execute(insert(models.Team).values(team_name="backend"))

    assert await _team_count(tm) == 1


@pytest.mark.asyncio
async def test_session_with_scope_yields_its_session(tm):
    async def operation(scope):
        async with tm.session(scope) as session:
            assert session is scope.session

    await tm.do(operation)


@pytest.mark.asyncio
async def test_session_rejects_a_finished_scope(tm):
    captured = []

    async def operation(scope):
        captured.append(scope)

    await tm.do(operation)

    with pytest.raises(ScopeClosedError):
        async with tm.session(captured[0]):
            pass

    assert await _team_count(tm) == 0


@pytest.mark.asyncio
async def test_manager_implements_transaction_scope(tm):
    assert isinstance(tm, TransactionScope)
    assert issubclass(TransactionManager, TransactionScope)
