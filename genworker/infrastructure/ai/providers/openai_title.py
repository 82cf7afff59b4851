"""
OpenAI Title Provider
OpenAI Chat Completions API를 사용한 이미지 제목 생성
"""

import logging
from typing import Optional

import httpx

from ..base import TitleGenerationProvider
from ..exceptions import ProviderError, ProviderRateLimitError
from ....core.config import settings
from ....core.exceptions import ErrorCode

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional image title generator. "
    "You write simple, clear, and concise titles. "
    "Generate a short title (3-8 words) based on the image description prompt. "
    "Return ONLY the title text, nothing else."
)

QUOTE_CHARS = "\"'"


def clean_title(text: str) -> str:
    """앞뒤 공백과 감싸는 따옴표 제거"""
    title = text.strip()
    if title[:1] in QUOTE_CHARS:
        title = title[1:]
    if title[-1:] in QUOTE_CHARS:
        title = title[:-1]
    return title.strip()


class OpenAITitleProvider(TitleGenerationProvider):
    """
    OpenAI 제목 생성 Provider

    빠르고 저렴한 gpt-4o-mini 로 3~8 단어 제목을 생성합니다.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.openai_api_key
        self.api_url = (api_url or settings.openai_api_url).rstrip("/")
        self.model = model or settings.title_model
        self.timeout = httpx.Timeout(settings.http_timeout)
        self._transport = transport

    async def generate_title_from_prompt(
        self,
        prompt: str,
        user_id: Optional[str] = None,
    ) -> str:
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValueError("prompt is required and must be a non-empty string")

        if not self.api_key:
            raise ProviderError(
                "OPENAI_API_KEY is not configured",
                error_code=ErrorCode.PROVIDER_NOT_CONFIGURED,
            )

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f"Generate a concise title for an image described as: {prompt}",
                },
            ],
        }
        if user_id:
            payload["user"] = user_id

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self.api_url}/chat/completions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
            except httpx.HTTPError as e:
                raise ProviderError(f"OpenAI request failed: {e}") from e

        if response.status_code == 429:
            raise ProviderRateLimitError("OpenAI rate limit exceeded (429)")
        if response.is_error:
            raise ProviderError(
                f"OpenAI API error {response.status_code}",
                status_code=response.status_code,
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(
                "OpenAI returned an unexpected response",
                error_code=ErrorCode.PROVIDER_INVALID_RESPONSE,
            ) from e

        return clean_title(content or "")
