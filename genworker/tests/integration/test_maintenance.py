"""
TaskMaintenance 통합 테스트
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from genworker.features.canvas.repository import CanvasRepository
from genworker.features.canvas.rooms import RoomManager
from genworker.features.tasks.maintenance import TaskMaintenance
from genworker.features.tasks.models import TaskStatus, TaskType
from genworker.features.tasks.repository import TaskRepository
from genworker.features.tasks.schemas import TaskUpdate


@pytest.mark.asyncio
async def test_run_once_releases_archives_and_persists(session_factory):
    repository = TaskRepository(session_factory)
    canvases = CanvasRepository(session_factory)
    rooms = RoomManager(canvases)
    maintenance = TaskMaintenance(repository, rooms, interval=60)
    now = datetime.now(timezone.utc)

    stale = await repository.create_task(TaskType.IMAGE_REMOVE_BACKGROUND, "user-1", uuid.uuid4(), {})
    old = await repository.create_task(TaskType.IMAGE_REMOVE_BACKGROUND, "user-1", uuid.uuid4(), {})
    await repository.update_task(stale.id, TaskUpdate(worker_id="worker-dead", claimed_at=now - timedelta(days=1)))
    await repository.update_task(old.id, TaskUpdate(status=TaskStatus.COMPLETED, completed_at=now - timedelta(days=90)))

    canvas_id = await canvases.create_canvas(uuid.uuid4(), {"clock": 0, "documents": []})
    room = await rooms.make_or_load_room(canvas_id)
    room.needs_persist = True

    assert await maintenance.run_once() == {"released": 1, "archived": 1, "persisted": 1}
    assert (await repository.get_task(stale.id)).worker_id is None
    assert await repository.get_task(old.id) is None
    assert room.needs_persist is False


@pytest.mark.asyncio
async def test_run_once_without_rooms(session_factory):
    maintenance = TaskMaintenance(TaskRepository(session_factory), interval=60)

    assert await maintenance.run_once() == {"released": 0, "archived": 0, "persisted": 0}


@pytest.mark.asyncio
async def test_release_uses_repository_stale_window(session_factory):
    repository = TaskRepository(session_factory, stale_claim_minutes=60)
    maintenance = TaskMaintenance(repository, interval=60)
    task = await repository.create_task(TaskType.GENERATE_IMAGE, "user-1", uuid.uuid4(), {})
    claimed_at = datetime.now(timezone.utc) - timedelta(minutes=30)
    await repository.update_task(task.id, TaskUpdate(worker_id="worker-slow", claimed_at=claimed_at))

    assert (await maintenance.run_once())["released"] == 0
    assert (await repository.get_task(task.id)).worker_id == "worker-slow"
