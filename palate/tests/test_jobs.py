"""Inline task dispatch and background job entrypoints."""

from __future__ import annotations

import asyncio
import logging

import pytest

from palate.jobs import embeddings as embedding_jobs
from palate.jobs import schedule_registry
from palate.models.dish import EmbeddingStatus
from palate.models.history import UserDishHistory
from palate.services import profile_embedding_service
from palate.services.task_queue import TaskQueue, task_queue
from palate.tests.utils import basis_vector, make_dish, make_restaurant, make_user


@pytest.mark.asyncio
async def test_dispatch_runs_inline_without_waiting():
    queue = TaskQueue()
    started = asyncio.Event()
    finished: list[str] = []

    async def _work(*, name: str) -> None:
        started.set()
        await asyncio.sleep(0)
        finished.append(name)

    job_id = await queue.dispatch(lambda **_: None, inline=_work, description="work", name="first")

    assert job_id is None
    assert queue.pending == 1
    assert finished == []
    await queue.drain()
    assert started.is_set()
    assert finished == ["first"]
    assert queue.pending == 0


@pytest.mark.asyncio
async def test_inline_failures_are_logged_not_raised(caplog):
    queue = TaskQueue()
    caplog.set_level(logging.ERROR, logger="palate.services.task_queue")

    async def _boom() -> None:
        raise RuntimeError("nope")

    await queue.dispatch(lambda: None, inline=_boom, description="boom")
    await queue.drain()

    assert any("Inline task boom failed" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_embedding_task_refreshes_profiles_of_raters(session, embedding_client):
    owner = await make_user(session)
    diner = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    dish = await make_dish(session, restaurant, "Laksa")
    session.add(UserDishHistory(user_id=diner.id, dish_id=dish.id, liked=True))
    diner.rating_version = 1
    await session.commit()
    embedding_client.vectors["Laksa"] = basis_vector(4)

    result = await embedding_jobs.generate_dish_embedding_task(dish_id=str(dish.id))
    await task_queue.drain()

    assert result == {"dish_id": str(dish.id), "status": EmbeddingStatus.READY.value, "refreshed_users": 1}
    profile = await profile_embedding_service.get_profile_embedding(session, diner.id)
    assert profile.embedding[4] == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_backfill_task_summarizes_outcomes(session, embedding_client):
    owner = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    await make_dish(session, restaurant, "Pending one")
    await make_dish(session, restaurant, "Pending two", status=EmbeddingStatus.FAILED_RETRYABLE)
    await make_dish(session, restaurant, "Given up", status=EmbeddingStatus.FAILED)

    result = await embedding_jobs.backfill_dish_embeddings_task(batch_size=10)

    assert result == {"ready": 2, "failed": 0, "missing": 0, "refreshed_users": 0}
    assert sorted(embedding_client.calls) == ["Pending one", "Pending two"]


def test_backfill_is_scheduled_on_the_maintenance_queue():
    entries = schedule_registry._schedule_entries()

    assert [entry["id"] for entry in entries] == ["embeddings:backfill"]
    assert entries[0]["func"] is embedding_jobs.backfill_dish_embeddings_job
    assert entries[0]["queue_name"] == "maintenance"
