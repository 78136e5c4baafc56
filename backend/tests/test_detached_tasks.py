"""Tests for DetachedTasks."""

import asyncio

from pytest_mock import MockerFixture

from laundry.tasks.detached import DetachedTasks


async def test_spawn_returns_before_completion() -> None:
    tasks = DetachedTasks()
    gate = asyncio.Event()
    done: list[str] = []

    async def work() -> None:
        await gate.wait()
        done.append("ok")

    tasks.spawn(work(), name="work")
    assert tasks.pending == 1
    assert done == []

    gate.set()
    await tasks.drain(timeout=1)
    assert done == ["ok"]
    assert tasks.pending == 0


async def test_failure_is_logged_not_raised(mocker: MockerFixture) -> None:
    logger = mocker.patch("laundry.tasks.detached.logger")
    tasks = DetachedTasks()

    async def boom() -> None:
        raise RuntimeError("gateway exploded")

    task = tasks.spawn(boom(), name="boom")
    await tasks.drain(timeout=1)

    assert task.done()
    logger.warning.assert_called_once()
    assert logger.warning.call_args.kwargs["error"] == "gateway exploded"


async def test_drain_cancels_stragglers() -> None:
    tasks = DetachedTasks()

    async def forever() -> None:
        await asyncio.sleep(3600)

    task = tasks.spawn(forever())
    await tasks.drain(timeout=0.01)

    assert task.cancelled()
    assert tasks.pending == 0


async def test_task_names_are_numbered() -> None:
    tasks = DetachedTasks()

    async def noop() -> None:
        return None

    first = tasks.spawn(noop(), name="notify:ready")
    second = tasks.spawn(noop(), name="notify:ready")
    await tasks.drain(timeout=1)

    assert first.get_name() == "detached:notify:ready:1"
    assert second.get_name() == "detached:notify:ready:2"
