"""
Asset Service
스토리지 + 메타데이터 DB 를 묶은 에셋 저장/조회 서비스
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...core.config import settings
from ...infrastructure.storage import AbstractStorageService
from .exceptions import AssetAccessDeniedError, AssetTooLargeError
from .models import Asset

logger = logging.getLogger(__name__)


@dataclass
class StoredAsset:
    """조회된 에셋 데이터"""
    data: bytes
    content_type: str
    file_size: int


def asset_key(user_id: str, asset_id: str) -> str:
    """스토리지 키: assets/{user_id}/{asset_id}"""
    return f"assets/{user_id}/{asset_id}"


class AssetService:
    """
    에셋 서비스

    바이너리는 스토리지에, 메타데이터(위치/크기/타입)는 assets 테이블에 저장합니다.
    """

    def __init__(
        self,
        storage: AbstractStorageService,
        session_factory: async_sessionmaker[AsyncSession],
        base_url: Optional[str] = None,
        max_asset_size: Optional[int] = None,
    ):
        self.storage = storage
        self.session_factory = session_factory
        self.base_url = (base_url or settings.public_base_url).rstrip("/")
        self.max_asset_size = max_asset_size or settings.max_asset_size

    def asset_url(self, asset_id: str) -> str:
        """공개 에셋 URL"""
        return f"{self.base_url}/v1/assets/{asset_id}"

    async def store_asset(
        self,
        asset_id: str,
        user_id: str,
        data: bytes,
        content_type: str,
        original_filename: Optional[str] = None,
    ) -> None:
        """
        에셋 저장

        Raises:
            AssetTooLargeError: 최대 크기 초과
        """
        if len(data) > self.max_asset_size:
            raise AssetTooLargeError(len(data), self.max_asset_size)

        key = asset_key(user_id, asset_id)
        etag = await self.storage.save(
            data,
            key,
            content_type,
            metadata={"userId": user_id, "assetId": asset_id},
        )

        async with self.session_factory() as session:
            result = await session.execute(select(Asset).where(Asset.asset_id == asset_id))
            asset = result.scalar_one_or_none()
            if asset is None:
                asset = Asset(asset_id=asset_id)
                session.add(asset)

            asset.user_id = user_id
            asset.oss_provider = self.storage.provider_name
            asset.oss_bucket = self.storage.bucket_name
            asset.oss_key = key
            asset.oss_etag = etag
            asset.content_type = content_type
            asset.file_size = len(data)
            asset.original_filename = original_filename
            await session.commit()

        logger.info(f"Stored asset {asset_id} ({len(data)} bytes) at {key}")

    async def load_asset(self, asset_id: str, user_id: Optional[str] = None) -> Optional[StoredAsset]:
        """
        에셋 조회

        Args:
            asset_id: 에셋 ID
            user_id: 지정 시 소유자 검증

        Returns:
            Optional[StoredAsset]: 메타데이터가 없으면 None

        Raises:
            AssetAccessDeniedError: 다른 사용자의 에셋
        """
        async with self.session_factory() as session:
            result = await session.execute(select(Asset).where(Asset.asset_id == asset_id))
            asset = result.scalar_one_or_none()

        if asset is None:
            return None

        if user_id and asset.user_id != user_id:
            raise AssetAccessDeniedError(asset_id)

        stored = await self.storage.get(asset.oss_key)
        return StoredAsset(
            data=stored.data,
            content_type=stored.content_type,
            file_size=len(stored.data),
        )
