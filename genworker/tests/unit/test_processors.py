"""
작업 처리기 단위 테스트
"""

import io

import pytest
from PIL import Image

from genworker.features.assets.service import StoredAsset
from genworker.features.tasks.exceptions import SourceAssetNotFoundError, TaskValidationError
from genworker.features.tasks.models import TaskType
from genworker.features.tasks.processors import (
    PROCESSOR_CLASSES,
    GenerateImageProcessor,
    RemoveBackgroundProcessor,
    UpscaleImageProcessor,
    build_processors,
)

from ..conftest import make_task


def png_bytes(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (width, height), (255, 0, 0, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


class TestGenerateImageProcessor:
    @pytest.mark.asyncio
    async def test_generates_and_stores_under_requested_id(self, processor_context, image_provider, asset_store):
        task = make_task()

        result = await GenerateImageProcessor(processor_context).process(task)

        assert result.asset_id == "asset:generated-1"
        assert result.asset_url == "http://test/v1/assets/asset:generated-1"
        assert result.metadata == {
            "width": 1024,
            "height": 576,
            "fileSize": len(image_provider.output),
            "title": "Red Fox In Snow",
        }
        assert asset_store.assets["asset:generated-1"].content_type == "image/png"
        assert asset_store.owners["asset:generated-1"] == "user-1"
        name, model_id, params = image_provider.calls[0]
        assert (name, model_id) == ("generate_image", "google/nano-banana")
        assert params["prompt"] == "a red fox in the snow"

    @pytest.mark.asyncio
    async def test_rate_limiter_acquired_only_before_provider_call(self, processor_context, events):
        await GenerateImageProcessor(processor_context).process(make_task())

        assert events == ["title", "rate_limiter", "provider:generate_image", "store:asset:generated-1"]

    @pytest.mark.asyncio
    async def test_explicit_dimensions_win(self, processor_context):
        task = make_task(
            body={
                "modelId": "black-forest-labs/flux-1.1-pro",
                "modelParams": {"prompt": "city", "width": 800, "height": 600, "aspect_ratio": "16:9"},
                "storageAssetId": "asset:flux",
            }
        )

        result = await GenerateImageProcessor(processor_context).process(task)

        assert (result.metadata["width"], result.metadata["height"]) == (800, 600)

    @pytest.mark.asyncio
    async def test_default_aspect_ratio_is_square(self, processor_context):
        task = make_task(
            body={"modelId": "google/nano-banana", "modelParams": {"prompt": "x"}, "storageAssetId": "asset:sq"}
        )

        result = await GenerateImageProcessor(processor_context).process(task)

        assert (result.metadata["width"], result.metadata["height"]) == (1024, 1024)

    @pytest.mark.asyncio
    async def test_title_failure_falls_back_to_truncated_prompt(self, processor_context, title_provider):
        title_provider.error = RuntimeError("openai down")
        prompt = "a very long prompt describing a sunset over the mountains with many birds"
        task = make_task(
            body={"modelId": "google/nano-banana", "modelParams": {"prompt": prompt}, "storageAssetId": "asset:t"}
        )

        result = await GenerateImageProcessor(processor_context).process(task)

        assert result.metadata["title"] == prompt[:47] + "..."

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body, field",
        [
            ({"modelId": "m", "modelParams": {}, "storageAssetId": "asset:a"}, "prompt"),
            ({"modelId": "m", "modelParams": {"prompt": "p"}}, "storageAssetId"),
            ({"modelParams": {"prompt": "p"}, "storageAssetId": "asset:a"}, "modelId"),
        ],
    )
    async def test_missing_fields(self, processor_context, events, body, field):
        with pytest.raises(TaskValidationError) as exc_info:
            await GenerateImageProcessor(processor_context).process(make_task(body=body))

        assert exc_info.value.message == f"Missing {field} in task body"
        assert "rate_limiter" not in events

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, processor_context, image_provider, asset_store):
        image_provider.error = RuntimeError("Replicate API error 500")

        with pytest.raises(RuntimeError):
            await GenerateImageProcessor(processor_context).process(make_task())

        assert asset_store.assets == {}


class TestUpscaleImageProcessor:
    @pytest.mark.asyncio
    async def test_factor_three_becomes_four(self, processor_context, image_provider, asset_store, events):
        asset_store.assets["asset:src"] = StoredAsset(data=b"src", content_type="image/jpeg", file_size=3)
        image_provider.output = png_bytes(8, 6)
        task = make_task(task_type=TaskType.IMAGE_UPSCALE, body={"sourceAssetId": "asset:src", "factor": 3})

        result = await UpscaleImageProcessor(processor_context).process(task)

        assert image_provider.calls[0] == ("upscale_image", b"src", 4, "image/jpeg")
        assert result.asset_id.startswith("asset:")
        assert result.asset_id != "asset:src"
        assert result.metadata == {
            "fileSize": len(image_provider.output),
            "sourceAssetId": "asset:src",
            "factor": 4,
            "width": 8,
            "height": 6,
        }
        assert events.index("load:asset:src") < events.index("rate_limiter") < events.index("provider:upscale_image")

    @pytest.mark.asyncio
    async def test_missing_source_asset(self, processor_context, events):
        task = make_task(task_type=TaskType.IMAGE_UPSCALE, body={"sourceAssetId": "asset:gone", "factor": 2})

        with pytest.raises(SourceAssetNotFoundError):
            await UpscaleImageProcessor(processor_context).process(task)

        assert "rate_limiter" not in events

    @pytest.mark.asyncio
    async def test_missing_source_asset_id(self, processor_context):
        task = make_task(task_type=TaskType.IMAGE_UPSCALE, body={"factor": 2})

        with pytest.raises(TaskValidationError):
            await UpscaleImageProcessor(processor_context).process(task)

    @pytest.mark.asyncio
    async def test_unreadable_output_has_no_dimensions(self, processor_context, asset_store):
        asset_store.assets["asset:src"] = StoredAsset(data=b"src", content_type="image/png", file_size=3)
        task = make_task(task_type=TaskType.IMAGE_UPSCALE, body={"sourceAssetId": "asset:src"})

        result = await UpscaleImageProcessor(processor_context).process(task)

        assert "width" not in result.metadata
        assert result.metadata["factor"] == 4


class TestRemoveBackgroundProcessor:
    @pytest.mark.asyncio
    async def test_removes_background(self, processor_context, image_provider, asset_store):
        asset_store.assets["asset:photo"] = StoredAsset(data=b"photo", content_type="image/webp", file_size=5)
        task = make_task(task_type=TaskType.IMAGE_REMOVE_BACKGROUND, body={"sourceAssetId": "asset:photo"})

        result = await RemoveBackgroundProcessor(processor_context).process(task)

        assert image_provider.calls[0] == ("remove_background", b"photo", "image/webp")
        assert asset_store.assets[result.asset_id].data == image_provider.output
        assert result.metadata["sourceAssetId"] == "asset:photo"

    @pytest.mark.asyncio
    async def test_missing_source(self, processor_context):
        task = make_task(task_type=TaskType.IMAGE_REMOVE_BACKGROUND, body={"sourceAssetId": "asset:none"})

        with pytest.raises(SourceAssetNotFoundError):
            await RemoveBackgroundProcessor(processor_context).process(task)


def test_registry_covers_every_task_type(processor_context):
    processors = build_processors(processor_context)

    assert set(processors) == {t.value for t in TaskType}


def test_registry_rejects_missing_processor(processor_context, monkeypatch):
    partial = dict(PROCESSOR_CLASSES)
    partial.pop(TaskType.IMAGE_UPSCALE)
    monkeypatch.setattr("genworker.features.tasks.processors.PROCESSOR_CLASSES", partial)

    with pytest.raises(RuntimeError, match="image_upscale"):
        build_processors(processor_context)
