"""
Generate Image Processor
텍스트 프롬프트로 이미지를 생성하여 프론트엔드가 지정한 에셋 ID로 저장
"""

import logging

from ..exceptions import TaskValidationError
from ..schemas import GenerateImageBody, Task, TaskResult
from .base import TaskProcessor
from .utils import calculate_dimensions_from_aspect_ratio, fallback_title, positive_int

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = "1:1"


class GenerateImageProcessor(TaskProcessor):
    """generate_image 처리기"""

    async def process(self, task: Task) -> TaskResult:
        body = GenerateImageBody.model_validate(task.body)
        model_params = body.model_params or {}
        prompt = model_params.get("prompt")

        if not prompt:
            raise TaskValidationError("prompt")
        if not body.storage_asset_id:
            raise TaskValidationError("storageAssetId")
        if not body.model_id:
            raise TaskValidationError("modelId")

        logger.info(
            f"[Worker] Generating image with model {body.model_id}",
            extra={"task_id": str(task.id), "model_params": model_params},
        )

        title = await self._generate_title(task, prompt)

        # 외부 API 호출 직전에만 rate limit 토큰 획득
        await self.ctx.rate_limiter.acquire()
        image_data = await self.ctx.image_provider.generate_image(body.model_id, model_params)

        await self.ctx.asset_store.store_asset(
            body.storage_asset_id, task.user_id, image_data, "image/png"
        )

        width = positive_int(model_params.get("width"))
        height = positive_int(model_params.get("height"))
        if not (width and height):
            width, height = calculate_dimensions_from_aspect_ratio(
                model_params.get("aspect_ratio") or DEFAULT_ASPECT_RATIO
            )

        return TaskResult(
            asset_id=body.storage_asset_id,
            asset_url=self.ctx.asset_store.asset_url(body.storage_asset_id),
            metadata={
                "width": width,
                "height": height,
                "fileSize": len(image_data),
                "title": title,
            },
        )

    async def _generate_title(self, task: Task, prompt: str) -> str:
        """제목 생성 (실패하면 잘린 프롬프트)"""
        if self.ctx.title_provider is None:
            return fallback_title(prompt)
        try:
            return await self.ctx.title_provider.generate_title_from_prompt(prompt, task.user_id)
        except Exception as e:
            logger.warning(f"[Worker] Failed to generate title for task {task.id}: {e}")
            return fallback_title(prompt)
