"""
AI Provider Factory
설정에 따라 적절한 AI Provider 인스턴스를 생성
"""

from functools import lru_cache
from typing import Optional

from ...core.config import settings
from .base import (
    ImageProcessingProvider,
    ImageProviderType,
    TitleGenerationProvider,
    TitleProviderType,
)
from .providers.openai_title import OpenAITitleProvider
from .providers.replicate import ReplicateProvider


class AIProviderFactory:
    """AI Provider Factory"""

    @staticmethod
    def get_image_provider(provider_type: Optional[str] = None) -> ImageProcessingProvider:
        """이미지 처리 Provider 반환"""
        ptype = provider_type or ImageProviderType.REPLICATE

        if ptype == ImageProviderType.REPLICATE:
            return ReplicateProvider()
        raise ValueError(f"Unknown image provider: {ptype}")

    @staticmethod
    def get_title_provider(provider_type: Optional[str] = None) -> TitleGenerationProvider:
        """제목 생성 Provider 반환"""
        ptype = provider_type or settings.ai_title_provider

        if ptype == TitleProviderType.OPENAI:
            return OpenAITitleProvider()
        raise ValueError(f"Unknown title provider: {ptype}")


@lru_cache()
def get_ai_factory() -> AIProviderFactory:
    """Factory 싱글톤 반환"""
    return AIProviderFactory()
