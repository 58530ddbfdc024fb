import anyio
import pytest

from promisesflow import ResultHandle
from promisesflow.exceptions import HandleAlreadySettledError, HandlePendingError
from promisesflow.handle import join


def test_handle_settles_once():
    handle = ResultHandle("one")

    assert not handle.settled

    with pytest.raises(HandlePendingError):
        handle.result()

    handle.set_result(None)

    assert handle.settled
    assert handle.result() is None
    assert handle.exception() is None

    with pytest.raises(HandleAlreadySettledError):
        handle.set_result(2)

    with pytest.raises(HandleAlreadySettledError):
        handle.set_exception(ValueError())


def test_failed_handle():
    handle = ResultHandle("one")
    error = ValueError("boom")
    handle.set_exception(error)

    assert handle.exception() is error

    with pytest.raises(ValueError, match="boom"):
        handle.result()


def test_done_callback_after_settlement():
    handle = ResultHandle("one")
    seen = []

    handle.add_done_callback(seen.append)
    handle.set_result(1)
    handle.add_done_callback(seen.append)

    assert seen == [handle, handle]


@pytest.mark.anyio
async def test_many_waiters():
    handle = ResultHandle("one")
    values = []

    async def _wait():
        values.append(await handle.wait())

    with anyio.fail_after(1):
        async with anyio.create_task_group() as tg:
            for _ in range(3):
                tg.start_soon(_wait)

            await anyio.sleep(0.01)
            assert values == []
            handle.set_result(1)

    assert values == [1, 1, 1]


@pytest.mark.anyio
async def test_join():
    one, two = ResultHandle("one"), ResultHandle("two")

    async def _settle():
        await anyio.sleep(0.02)
        two.set_result(2)
        await anyio.sleep(0.02)
        one.set_result(1)

    with anyio.fail_after(1):
        async with anyio.create_task_group() as tg:
            tg.start_soon(_settle)
            assert await join({"one": one, "two": two}) == {"one": 1, "two": 2}


@pytest.mark.anyio
async def test_join_fails_fast():
    one, two = ResultHandle("one"), ResultHandle("two")

    with anyio.fail_after(1):
        async with anyio.create_task_group() as tg:
            tg.start_soon(_fail_later, two)

            with pytest.raises(ValueError, match="two"):
                await join({"one": one, "two": two})

            # 'one' never settles, the join did not wait for it
            assert not one.settled


async def _fail_later(handle: ResultHandle) -> None:
    await anyio.sleep(0.01)
    handle.set_exception(ValueError(handle.name))


@pytest.mark.anyio
async def test_join_nothing():
    assert await join({}) == {}
