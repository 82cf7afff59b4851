"""
Local Storage Service
로컬 파일 시스템을 사용하는 스토리지 서비스 구현체
"""

import hashlib
import json
import os
from pathlib import Path
from typing import Dict, Optional

import aiofiles

from .base import AbstractStorageService, StoredObject
from ...core.config import settings

CONTENT_TYPE_SUFFIX = ".meta.json"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class LocalStorageService(AbstractStorageService):
    """
    로컬 파일 시스템 스토리지 서비스

    content_type/metadata 는 "<파일>.meta.json" 사이드카 파일에 저장합니다.
    """

    provider_name = "local"

    def __init__(self, base_path: Optional[str] = None):
        """
        Args:
            base_path: 파일이 저장될 로컬 기본 경로
        """
        self.base_path = Path(base_path or settings.storage_base_path or "data/storage")

        # 기본 디렉토리 생성
        os.makedirs(self.base_path, exist_ok=True)

    @property
    def bucket_name(self) -> str:
        return str(self.base_path)

    def _full_path(self, path: str) -> Path:
        return self.base_path / path.lstrip("/")

    async def save(
        self,
        file_data: bytes,
        path: str,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Optional[str]:
        """파일 저장"""
        full_path = self._full_path(path)

        # 상위 디렉토리 생성
        os.makedirs(full_path.parent, exist_ok=True)

        async with aiofiles.open(full_path, "wb") as f:
            await f.write(file_data)

        sidecar = {"content_type": content_type, "metadata": metadata or {}}
        async with aiofiles.open(f"{full_path}{CONTENT_TYPE_SUFFIX}", "w") as f:
            await f.write(json.dumps(sidecar))

        return hashlib.md5(file_data).hexdigest()

    async def get(self, path: str) -> StoredObject:
        """파일 조회"""
        full_path = self._full_path(path)

        if not full_path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        async with aiofiles.open(full_path, "rb") as f:
            data = await f.read()

        content_type = DEFAULT_CONTENT_TYPE
        sidecar_path = Path(f"{full_path}{CONTENT_TYPE_SUFFIX}")
        if sidecar_path.exists():
            async with aiofiles.open(sidecar_path, "r") as f:
                content_type = json.loads(await f.read()).get("content_type", DEFAULT_CONTENT_TYPE)

        return StoredObject(data=data, content_type=content_type)

    async def delete(self, path: str) -> bool:
        """파일 삭제"""
        full_path = self._full_path(path)

        if full_path.exists():
            os.remove(full_path)
            sidecar_path = Path(f"{full_path}{CONTENT_TYPE_SUFFIX}")
            if sidecar_path.exists():
                os.remove(sidecar_path)
            return True
        return False

    async def exists(self, path: str) -> bool:
        """파일 존재 여부 확인"""
        return self._full_path(path).exists()
