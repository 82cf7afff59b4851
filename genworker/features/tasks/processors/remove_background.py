"""
Remove Background Processor
"""

from ....infrastructure.ai.utils import inspect_image
from ..exceptions import SourceAssetNotFoundError, TaskValidationError
from ..schemas import RemoveBackgroundBody, Task, TaskResult
from .base import TaskProcessor
from .utils import new_asset_id


class RemoveBackgroundProcessor(TaskProcessor):
    """image_remove_background 처리기"""

    async def process(self, task: Task) -> TaskResult:
        body = RemoveBackgroundBody.model_validate(task.body)
        if not body.source_asset_id:
            raise TaskValidationError("sourceAssetId")

        source = await self.ctx.asset_store.load_asset(body.source_asset_id, task.user_id)
        if source is None:
            raise SourceAssetNotFoundError(body.source_asset_id)

        await self.ctx.rate_limiter.acquire()
        output = await self.ctx.image_provider.remove_background(source.data, source.content_type)

        asset_id = new_asset_id()
        await self.ctx.asset_store.store_asset(asset_id, task.user_id, output, "image/png")

        metadata = {"fileSize": len(output), "sourceAssetId": body.source_asset_id}
        info = inspect_image(output)
        if info is not None:
            metadata.update(width=info.width, height=info.height)

        return TaskResult(
            asset_id=asset_id,
            asset_url=self.ctx.asset_store.asset_url(asset_id),
            metadata=metadata,
        )
