"""
Canvas Projection
완료된 작업 결과를 캔버스의 이미지 도형에 반영
"""

import logging
import time
import uuid
from typing import Any, Dict, Optional, Protocol

from ..tasks.processors.utils import ASSET_ID_PREFIX, new_asset_id
from ..tasks.schemas import Task, TaskResult
from .rooms import RoomManager, RoomStore

logger = logging.getLogger(__name__)

DEFAULT_ASSET_NAME = "generated-image.png"


class CanvasLookup(Protocol):
    async def get_canvas_id_by_project_id(self, project_id: uuid.UUID) -> Optional[uuid.UUID]: ...


def normalize_asset_id(storage_asset_id: str) -> str:
    """asset: 접두사를 가진 ID 는 그대로, 아니면 새 ID 생성"""
    if storage_asset_id.startswith(ASSET_ID_PREFIX) and len(storage_asset_id) > len(ASSET_ID_PREFIX):
        return storage_asset_id
    return new_asset_id()


def update_image_shape(
    store: RoomStore,
    shape: Dict[str, Any],
    storage_asset_id: str,
    asset_url: str,
    metadata: Optional[Dict[str, Any]] = None,
    now_ms: Optional[int] = None,
) -> None:
    """
    이미지 도형과 에셋 레코드 갱신

    크기는 metadata 의 width/height, 없으면 기존 도형 크기를 사용합니다.
    """
    metadata = metadata or {}
    props = shape.get("props") or {}
    width = metadata.get("width", props.get("w"))
    height = metadata.get("height", props.get("h"))
    title = metadata.get("title")
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)

    asset_id = normalize_asset_id(storage_asset_id)
    existing_asset = store.get(asset_id) or {}

    asset_props = {
        "w": width,
        "h": height,
        "name": f"{title}.png" if title else DEFAULT_ASSET_NAME,
        "isAnimated": False,
        "mimeType": "image/png",
        "src": asset_url,
    }
    if metadata.get("fileSize"):
        asset_props["fileSize"] = metadata["fileSize"]

    asset_meta = {**(existing_asset.get("meta") or {}), "storageAssetId": storage_asset_id}
    if title:
        asset_meta["title"] = title

    shape_meta = {
        **(shape.get("meta") or {}),
        "isGenerating": False,
        "isProcessing": False,
        "generatedAt": now_ms,
        "storageAssetId": storage_asset_id,
    }
    if title:
        shape_meta["title"] = title

    store.put(
        {
            "id": asset_id,
            "typeName": "asset",
            "type": "image",
            "props": asset_props,
            "meta": asset_meta,
        }
    )
    store.put(
        {
            **shape,
            "props": {**props, "assetId": asset_id, "url": asset_url, "w": width, "h": height},
            "meta": shape_meta,
        }
    )


class CanvasProjector:
    """
    캔버스 반영기

    프로젝트에 캔버스가 없거나 도형이 없으면 로그만 남기고 건너뜁니다.
    """

    def __init__(self, canvas_lookup: CanvasLookup, room_manager: RoomManager):
        self.canvas_lookup = canvas_lookup
        self.room_manager = room_manager

    async def project(self, task: Task, result: TaskResult) -> None:
        canvas_id = await self.canvas_lookup.get_canvas_id_by_project_id(task.project_id)
        if canvas_id is None:
            logger.warning(
                f"[Worker] Project {task.project_id} has no canvas, skipping shape update"
            )
            return

        shape_id = task.shape_id
        room = await self.room_manager.make_or_load_room(canvas_id)

        def mutator(store: RoomStore) -> None:
            shape = store.get(shape_id)
            if shape is None:
                logger.warning(f"[Worker] Shape {shape_id} not found in {canvas_id}")
                return
            if shape.get("type") != "image":
                logger.warning(
                    f"[Worker] Shape {shape_id} has unsupported type {shape.get('type')}"
                )
                return
            update_image_shape(store, shape, result.asset_id, result.asset_url, result.metadata)

        await room.update_store(mutator)
        logger.info(f"[Worker] Canvas {canvas_id} updated: shape {shape_id} -> asset {result.asset_id}")
