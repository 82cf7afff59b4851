"""
Pytest Configuration and Fixtures
테스트용 Fixture 및 Fake 구성요소
"""

import uuid
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy.pool import StaticPool

from genworker.core.database import Base, build_engine, build_session_factory
from genworker.core.rate_limiter import SimpleRateLimiter
from genworker.features.assets.service import StoredAsset
from genworker.features.tasks.models import TaskType
from genworker.features.tasks.processors import ProcessorContext
from genworker.features.tasks.schemas import Task, TaskUpdate

# 모델 등록 (create_all 대상)
import genworker.features.assets.models  # noqa: F401
import genworker.features.canvas.models  # noqa: F401
import genworker.features.tasks.models  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ==================== Database ====================


@pytest.fixture
async def engine():
    """인메모리 SQLite 엔진 (모든 세션이 같은 연결 공유)"""
    test_engine = build_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


# ==================== Fakes ====================


def make_task(
    task_type: Any = TaskType.GENERATE_IMAGE,
    body: Optional[Dict[str, Any]] = None,
    retry_count: int = 0,
    max_retries: int = 3,
    shape_id: Optional[str] = None,
    user_id: str = "user-1",
    project_id: Optional[uuid.UUID] = None,
) -> Task:
    """테스트용 작업 생성"""
    if body is None:
        body = {
            "modelId": "google/nano-banana",
            "modelParams": {"prompt": "a red fox in the snow", "aspect_ratio": "16:9"},
            "storageAssetId": "asset:generated-1",
        }
    return Task(
        id=uuid.uuid4(),
        task_type=task_type,
        user_id=user_id,
        project_id=project_id or uuid.uuid4(),
        shape_id=shape_id,
        body=body,
        retry_count=retry_count,
        max_retries=max_retries,
    )


class FakeTaskStore:
    """claim_tasks / update_task 를 메모리에서 처리"""

    def __init__(self, tasks: Optional[List[Task]] = None):
        self.queue: List[Task] = list(tasks or [])
        self.claim_calls: List[int] = []
        self.updates: List[tuple] = []
        self.claim_error: Optional[Exception] = None

    async def claim_tasks(self, worker_id: str, max_count: int) -> List[Task]:
        self.claim_calls.append(max_count)
        if self.claim_error is not None:
            raise self.claim_error
        claimed, self.queue = self.queue[:max_count], self.queue[max_count:]
        return claimed

    async def update_task(self, task_id: uuid.UUID, patch: TaskUpdate) -> None:
        self.updates.append((task_id, patch))

    def update_for(self, task_id: uuid.UUID) -> TaskUpdate:
        matches = [patch for tid, patch in self.updates if tid == task_id]
        assert len(matches) == 1, f"expected exactly one update for {task_id}, got {len(matches)}"
        return matches[0]


class FakeAssetStore:
    """메모리 에셋 저장소"""

    def __init__(self, events: Optional[List[str]] = None):
        self.assets: Dict[str, StoredAsset] = {}
        self.owners: Dict[str, str] = {}
        self.events = events if events is not None else []

    def asset_url(self, asset_id: str) -> str:
        return f"http://test/v1/assets/{asset_id}"

    async def store_asset(self, asset_id: str, user_id: str, data: bytes, content_type: str) -> None:
        self.events.append(f"store:{asset_id}")
        self.assets[asset_id] = StoredAsset(data=data, content_type=content_type, file_size=len(data))
        self.owners[asset_id] = user_id

    async def load_asset(self, asset_id: str, user_id: Optional[str] = None) -> Optional[StoredAsset]:
        self.events.append(f"load:{asset_id}")
        return self.assets.get(asset_id)


class FakeImageProvider:
    """호출 순서를 events 에 기록하는 이미지 Provider"""

    def __init__(self, events: Optional[List[str]] = None, output: bytes = b"\x89PNG-fake-output"):
        self.events = events if events is not None else []
        self.output = output
        self.error: Optional[BaseException] = None
        self.calls: List[tuple] = []

    async def _respond(self, name: str, *args) -> bytes:
        self.events.append(f"provider:{name}")
        self.calls.append((name, *args))
        if self.error is not None:
            raise self.error
        return self.output

    async def generate_image(self, model_id: str, params: Dict[str, Any]) -> bytes:
        return await self._respond("generate_image", model_id, params)

    async def upscale_image(self, image_data: bytes, factor: int, content_type: str = "image/png") -> bytes:
        return await self._respond("upscale_image", image_data, factor, content_type)

    async def remove_background(self, image_data: bytes, content_type: str = "image/png") -> bytes:
        return await self._respond("remove_background", image_data, content_type)


class FakeTitleProvider:
    def __init__(self, events: Optional[List[str]] = None, title: str = "Red Fox In Snow"):
        self.events = events if events is not None else []
        self.title = title
        self.error: Optional[BaseException] = None

    async def generate_title_from_prompt(self, prompt: str, user_id: Optional[str] = None) -> str:
        self.events.append("title")
        if self.error is not None:
            raise self.error
        return self.title


class RecordingRateLimiter(SimpleRateLimiter):
    """acquire 호출을 events 에 기록"""

    def __init__(self, events: List[str], requests_per_second: float = 1000):
        super().__init__(requests_per_second)
        self.events = events

    async def acquire(self) -> None:
        self.events.append("rate_limiter")
        await super().acquire()


@pytest.fixture
def events() -> List[str]:
    return []


@pytest.fixture
def image_provider(events):
    return FakeImageProvider(events)


@pytest.fixture
def asset_store(events):
    return FakeAssetStore(events)


@pytest.fixture
def title_provider(events):
    return FakeTitleProvider(events)


@pytest.fixture
def processor_context(events, image_provider, asset_store, title_provider):
    return ProcessorContext(
        image_provider=image_provider,
        asset_store=asset_store,
        rate_limiter=RecordingRateLimiter(events),
        title_provider=title_provider,
    )
