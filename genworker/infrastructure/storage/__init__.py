"""
Storage Module
설정에 따라 스토리지 백엔드 선택
"""

from .base import AbstractStorageService, StoredObject
from .local import LocalStorageService
from .r2 import R2StorageService
from ...core.config import settings


def get_storage_service(provider: str = None) -> AbstractStorageService:
    """
    스토리지 서비스 반환

    Args:
        provider: "local" 또는 "r2" (None이면 settings.storage_provider)
    """
    name = (provider or settings.storage_provider).lower()
    if name == "r2":
        return R2StorageService()
    if name == "local":
        return LocalStorageService()
    raise ValueError(f"Unknown storage provider: {name}")


__all__ = [
    "AbstractStorageService",
    "StoredObject",
    "LocalStorageService",
    "R2StorageService",
    "get_storage_service",
]
