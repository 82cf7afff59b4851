"""
AI Provider Abstract Base Classes
모든 AI 제공자가 구현해야 하는 인터페이스 정의
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional


class ImageProviderType(str, Enum):
    """이미지 처리 제공자 타입"""

    REPLICATE = "replicate"


class TitleProviderType(str, Enum):
    """제목 생성 제공자 타입"""

    OPENAI = "openai"


# ==================== Image Processing Provider ====================


class ImageProcessingProvider(ABC):
    """
    이미지 처리 Provider 인터페이스

    텍스트→이미지 생성, 업스케일, 배경 제거를 수행하는 Provider.
    모든 메서드는 결과 이미지 바이너리를 반환합니다.
    """

    @abstractmethod
    async def generate_image(self, model_id: str, params: Dict[str, Any]) -> bytes:
        """
        이미지 생성

        Args:
            model_id: 모델 식별자 (예: google/nano-banana)
            params: 모델별 파라미터 (prompt, aspect_ratio 등)

        Returns:
            bytes: 생성된 이미지 바이너리 데이터

        Raises:
            UnsupportedModelError: 지원하지 않는 모델
            ProviderRateLimitError: 업스트림 속도 제한
            ProviderError: 그 외 호출 실패
        """
        pass

    @abstractmethod
    async def upscale_image(
        self,
        image_data: bytes,
        factor: int,
        content_type: str = "image/png",
    ) -> bytes:
        """
        이미지 업스케일

        Args:
            image_data: 원본 이미지
            factor: 해상도 배수 (2 또는 4)
            content_type: 원본 MIME 타입
        """
        pass

    @abstractmethod
    async def remove_background(
        self,
        image_data: bytes,
        content_type: str = "image/png",
    ) -> bytes:
        """이미지 배경 제거"""
        pass


# ==================== Title Generation Provider ====================


class TitleGenerationProvider(ABC):
    """
    제목 생성 Provider 인터페이스

    이미지 프롬프트로부터 짧은 제목을 생성합니다. 실패할 수 있으며
    호출하는 쪽에서 대체 제목을 사용합니다.
    """

    @abstractmethod
    async def generate_title_from_prompt(
        self,
        prompt: str,
        user_id: Optional[str] = None,
    ) -> str:
        """
        제목 생성

        Args:
            prompt: 이미지 생성 프롬프트
            user_id: 요청 사용자 ID

        Returns:
            str: 3~8 단어 제목
        """
        pass
