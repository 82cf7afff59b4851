"""
Image Upscale Processor
"""

import logging

from ....infrastructure.ai.utils import inspect_image
from ..exceptions import SourceAssetNotFoundError, TaskValidationError
from ..schemas import Task, TaskResult, UpscaleBody
from .base import TaskProcessor
from .utils import new_asset_id, normalize_upscale_factor

logger = logging.getLogger(__name__)


class UpscaleImageProcessor(TaskProcessor):
    """image_upscale 처리기 (결과는 새 asset: ID 로 저장)"""

    async def process(self, task: Task) -> TaskResult:
        body = UpscaleBody.model_validate(task.body)
        if not body.source_asset_id:
            raise TaskValidationError("sourceAssetId")

        factor = normalize_upscale_factor(body.factor)

        source = await self.ctx.asset_store.load_asset(body.source_asset_id, task.user_id)
        if source is None:
            raise SourceAssetNotFoundError(body.source_asset_id)

        await self.ctx.rate_limiter.acquire()
        output = await self.ctx.image_provider.upscale_image(
            source.data, factor, source.content_type
        )

        asset_id = new_asset_id()
        await self.ctx.asset_store.store_asset(asset_id, task.user_id, output, "image/png")

        metadata = {
            "fileSize": len(output),
            "sourceAssetId": body.source_asset_id,
            "factor": factor,
        }
        info = inspect_image(output)
        if info is not None:
            metadata.update(width=info.width, height=info.height)

        logger.info(f"[Worker] Upscaled {body.source_asset_id} x{factor} -> {asset_id}")
        return TaskResult(
            asset_id=asset_id,
            asset_url=self.ctx.asset_store.asset_url(asset_id),
            metadata=metadata,
        )
