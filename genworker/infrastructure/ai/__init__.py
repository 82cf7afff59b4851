"""
AI Infrastructure Module
AI Provider 추상화 계층
"""

from .base import (
    ImageProviderType,
    TitleProviderType,
    ImageProcessingProvider,
    TitleGenerationProvider,
)
from .exceptions import ProviderError, ProviderRateLimitError, UnsupportedModelError

__all__ = [
    "ImageProviderType",
    "TitleProviderType",
    "ImageProcessingProvider",
    "TitleGenerationProvider",
    "ProviderError",
    "ProviderRateLimitError",
    "UnsupportedModelError",
]
