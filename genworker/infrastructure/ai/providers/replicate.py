"""
Replicate Provider
Replicate HTTP API를 사용한 이미지 생성/업스케일/배경 제거
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

import httpx

from ..base import ImageProcessingProvider
from ..exceptions import ProviderError, ProviderRateLimitError, UnsupportedModelError
from ..utils import to_data_url
from ....core.config import settings
from ....core.exceptions import ErrorCode

logger = logging.getLogger(__name__)

NANO_BANANA = "google/nano-banana"
SEEDREAM_4 = "bytedance/seedream-4"
FLUX_11_PRO = "black-forest-labs/flux-1.1-pro"
UPSCALE_MODEL = "bria/increase-resolution"
REMOVE_BACKGROUND_MODEL = "bria/remove-background"

TERMINAL_STATUSES = frozenset({"succeeded", "failed", "canceled"})


def _optional(params: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    """값이 있는 키만 골라냄"""
    return {key: params[key] for key in keys if params.get(key)}


def build_nano_banana_input(params: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "prompt": params.get("prompt"),
        "aspect_ratio": params.get("aspect_ratio") or "1:1",
        "output_format": params.get("output_format") or "png",
        **_optional(params, "image_input"),
    }


def build_seedream_input(params: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "prompt": params.get("prompt"),
        "size": params.get("size") or "2K",
        "aspect_ratio": params.get("aspect_ratio") or "4:3",
        "sequential_image_generation": params.get("sequential_image_generation") or "disabled",
        "max_images": params.get("max_images") or 1,
        "enhance_prompt": params.get("enhance_prompt", False),
        **_optional(params, "image_input", "width", "height"),
    }


def build_flux_input(params: Dict[str, Any]) -> Dict[str, Any]:
    model_input = {
        "prompt": params.get("prompt"),
        "aspect_ratio": params.get("aspect_ratio") or "1:1",
        "output_format": params.get("output_format") or "webp",
        "output_quality": params.get("output_quality", 80),
        "safety_tolerance": params.get("safety_tolerance", 2),
        "prompt_upsampling": params.get("prompt_upsampling", False),
        **_optional(params, "width", "height", "image_prompt"),
    }
    if params.get("seed") is not None:
        model_input["seed"] = params["seed"]
    return model_input


# 모델 ID -> 입력 빌더
MODEL_INPUT_BUILDERS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    NANO_BANANA: build_nano_banana_input,
    SEEDREAM_4: build_seedream_input,
    FLUX_11_PRO: build_flux_input,
}


class ReplicateProvider(ImageProcessingProvider):
    """
    Replicate Provider

    predictions API 로 작업을 생성(Prefer: wait)하고, 완료되지 않았으면
    urls.get 을 폴링한 뒤 출력 URL 의 이미지를 다운로드합니다.
    """

    def __init__(
        self,
        api_token: Optional[str] = None,
        api_url: Optional[str] = None,
        wait_seconds: Optional[int] = None,
        poll_interval: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_token: Replicate API 토큰 (None일 경우 settings에서 가져옴)
            api_url: API 기본 URL
            wait_seconds: Prefer: wait 동기 대기 시간
            poll_interval: 상태 폴링 간격 (초)
            transport: httpx 전송 계층 (테스트용)
        """
        self.api_token = api_token or settings.replicate_api_token
        self.api_url = (api_url or settings.replicate_api_url).rstrip("/")
        self.wait_seconds = wait_seconds if wait_seconds is not None else settings.replicate_wait_seconds
        self.poll_interval = (
            poll_interval if poll_interval is not None else settings.replicate_poll_interval
        )
        self.timeout = httpx.Timeout(settings.http_timeout, read=settings.http_read_timeout)
        self._transport = transport

    # ==================== Public API ====================

    async def generate_image(self, model_id: str, params: Dict[str, Any]) -> bytes:
        builder = MODEL_INPUT_BUILDERS.get(model_id)
        if builder is None:
            raise UnsupportedModelError(model_id)

        model_input = builder(params or {})
        logger.info(f"[Replicate] Generating image with {model_id}")
        return await self._run(model_id, model_input)

    async def upscale_image(
        self,
        image_data: bytes,
        factor: int,
        content_type: str = "image/png",
    ) -> bytes:
        model_input = {
            "image": to_data_url(image_data, content_type),
            "desired_increase": factor,
            "preserve_alpha": True,
            "sync": True,
            "content_moderation": False,
        }
        return await self._run(UPSCALE_MODEL, model_input)

    async def remove_background(
        self,
        image_data: bytes,
        content_type: str = "image/png",
    ) -> bytes:
        model_input = {
            "image": to_data_url(image_data, content_type),
            "preserve_partial_alpha": True,
            "content_moderation": False,
        }
        return await self._run(REMOVE_BACKGROUND_MODEL, model_input)

    # ==================== Internal ====================

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _headers(self) -> Dict[str, str]:
        if not self.api_token:
            raise ProviderError(
                "REPLICATE_API_TOKEN is not configured",
                error_code=ErrorCode.PROVIDER_NOT_CONFIGURED,
            )
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "Prefer": f"wait={self.wait_seconds}",
        }

    async def _run(self, model: str, model_input: Dict[str, Any]) -> bytes:
        """예측 생성 -> 완료 대기 -> 결과 다운로드"""
        headers = self._headers()

        async with self._client() as client:
            prediction = await self._request(
                client,
                "POST",
                f"{self.api_url}/models/{model}/predictions",
                headers=headers,
                json={"input": model_input},
            )

            while prediction.get("status") not in TERMINAL_STATUSES:
                poll_url = (prediction.get("urls") or {}).get("get")
                if not poll_url:
                    raise ProviderError(
                        f"Prediction for {model} has no polling URL",
                        error_code=ErrorCode.PROVIDER_INVALID_RESPONSE,
                    )
                await asyncio.sleep(self.poll_interval)
                prediction = await self._request(client, "GET", poll_url, headers=headers)

            if prediction["status"] != "succeeded":
                raise ProviderError(
                    f"Replicate prediction {prediction['status']}: {prediction.get('error')}",
                    details={"model": model, "prediction_id": prediction.get("id")},
                )

            output_url = self._output_url(prediction.get("output"))
            if not output_url:
                raise ProviderError(
                    f"Replicate prediction for {model} returned no output",
                    error_code=ErrorCode.PROVIDER_INVALID_RESPONSE,
                )

            return await self._download(client, output_url)

    @staticmethod
    def _output_url(output: Any) -> Optional[str]:
        """출력은 단일 URL 또는 URL 목록 (첫 번째 사용)"""
        if isinstance(output, list):
            output = output[0] if output else None
        return output if isinstance(output, str) else None

    async def _request(self, client: httpx.AsyncClient, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(f"Replicate request failed: {e}") from e

        self._raise_for_status(response)
        return response.json()

    async def _download(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise ProviderError(f"Failed to download file from {url}: {e}") from e

        self._raise_for_status(response)
        return response.content

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code == 429:
            raise ProviderRateLimitError(
                f"Replicate rate limit exceeded (429): {response.text[:200]}"
            )
        if response.is_error:
            raise ProviderError(
                f"Replicate API error {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
