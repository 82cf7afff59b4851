"""
Storage Service Interface
파일 저장소 추상화 계층
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class StoredObject:
    """저장소에서 읽어온 객체"""
    data: bytes
    content_type: str


class AbstractStorageService(ABC):
    """
    스토리지 서비스 추상 클래스

    로컬 파일 시스템, Cloudflare R2 등 다양한 스토리지 백엔드를 지원하기 위한 인터페이스
    """

    #: 에셋 메타데이터에 기록되는 저장소 제공자 이름
    provider_name: str = "unknown"

    @property
    @abstractmethod
    def bucket_name(self) -> str:
        """버킷(또는 루트 디렉토리) 이름"""
        pass

    @abstractmethod
    async def save(
        self,
        file_data: bytes,
        path: str,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Optional[str]:
        """
        파일 저장

        Args:
            file_data: 저장할 파일 데이터
            path: 저장 키 (예: assets/{user_id}/{asset_id})
            content_type: MIME 타입
            metadata: 객체 메타데이터 (옵션)

        Returns:
            Optional[str]: ETag (백엔드가 제공하는 경우)
        """
        pass

    @abstractmethod
    async def get(self, path: str) -> StoredObject:
        """
        파일 조회

        Raises:
            FileNotFoundError: 파일이 없는 경우
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """파일 삭제"""
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """파일 존재 여부 확인"""
        pass
