"""
R2 Storage Service (Cloudflare)
Cloudflare R2 (S3 호환 API) 를 사용하는 스토리지 서비스
"""

import asyncio
import logging
from functools import partial
from typing import Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from .base import AbstractStorageService, StoredObject
from ...core.config import settings

logger = logging.getLogger(__name__)


class R2StorageService(AbstractStorageService):
    """
    Cloudflare R2 스토리지 서비스

    boto3 클라이언트는 동기 API 이므로 executor 에서 실행합니다.
    """

    provider_name = "cloudflare"

    def __init__(
        self,
        account_id: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        bucket_name: Optional[str] = None,
        s3_client=None,
    ):
        self.account_id = account_id or settings.r2_account_id
        self._bucket_name = bucket_name or settings.r2_bucket_name

        if not self._bucket_name:
            raise ValueError("R2_BUCKET_NAME is not set")

        if s3_client is not None:
            self.s3_client = s3_client
        else:
            if not self.account_id:
                raise ValueError("R2_ACCOUNT_ID is not set")
            # R2 endpoint 형식
            endpoint_url = f"https://{self.account_id}.r2.cloudflarestorage.com"
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key_id or settings.r2_access_key_id,
                aws_secret_access_key=secret_access_key or settings.r2_secret_access_key,
                region_name="auto",  # R2 는 'auto' 리전 사용
                config=Config(signature_version="s3v4"),
            )

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    async def _run(self, func, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, **kwargs))

    async def save(
        self,
        file_data: bytes,
        path: str,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Optional[str]:
        """R2에 파일 업로드"""
        key = path.lstrip("/")
        try:
            response = await self._run(
                self.s3_client.put_object,
                Bucket=self._bucket_name,
                Key=key,
                Body=file_data,
                ContentType=content_type,
                Metadata=metadata or {},
            )
            return response.get("ETag")
        except ClientError as e:
            logger.error(f"R2 upload failed for {key}: {e}")
            raise

    async def get(self, path: str) -> StoredObject:
        """R2에서 파일 다운로드"""
        key = path.lstrip("/")
        try:
            response = await self._run(
                self.s3_client.get_object, Bucket=self._bucket_name, Key=key
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "NoSuchKey":
                raise FileNotFoundError(f"File not found in R2: {path}")
            raise

        body = response["Body"]
        data = await asyncio.get_running_loop().run_in_executor(None, body.read)
        return StoredObject(
            data=data,
            content_type=response.get("ContentType") or "application/octet-stream",
        )

    async def delete(self, path: str) -> bool:
        """R2 파일 삭제"""
        try:
            await self._run(
                self.s3_client.delete_object, Bucket=self._bucket_name, Key=path.lstrip("/")
            )
            return True
        except ClientError:
            return False

    async def exists(self, path: str) -> bool:
        """R2 파일 존재 확인"""
        try:
            await self._run(
                self.s3_client.head_object, Bucket=self._bucket_name, Key=path.lstrip("/")
            )
            return True
        except ClientError:
            return False
