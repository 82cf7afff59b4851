"""
Task Processor Base
작업 타입별 처리기 인터페이스와 공용 의존성
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol

from ....core.rate_limiter import SimpleRateLimiter
from ....infrastructure.ai.base import ImageProcessingProvider, TitleGenerationProvider
from ...assets.service import StoredAsset
from ..schemas import Task, TaskResult


class AssetStore(Protocol):
    """처리기가 사용하는 에셋 저장소 (AssetService 가 구현)"""

    def asset_url(self, asset_id: str) -> str: ...

    async def store_asset(
        self, asset_id: str, user_id: str, data: bytes, content_type: str
    ) -> None: ...

    async def load_asset(
        self, asset_id: str, user_id: Optional[str] = None
    ) -> Optional[StoredAsset]: ...


@dataclass
class ProcessorContext:
    """처리기 공용 의존성"""
    image_provider: ImageProcessingProvider
    asset_store: AssetStore
    rate_limiter: SimpleRateLimiter
    title_provider: Optional[TitleGenerationProvider] = None


class TaskProcessor(ABC):
    """
    작업 처리기

    성공 시 TaskResult 를 반환하고 실패 시 예외를 던집니다.
    재시도/클레임은 워커가 담당하므로 처리기는 알지 못합니다.
    """

    def __init__(self, ctx: ProcessorContext):
        self.ctx = ctx

    @abstractmethod
    async def process(self, task: Task) -> TaskResult:
        pass
