"""
Task Processors
작업 타입별 처리기 레지스트리
"""

from typing import Dict

from ..models import TaskType
from .base import ProcessorContext, TaskProcessor
from .generate_image import GenerateImageProcessor
from .remove_background import RemoveBackgroundProcessor
from .upscale import UpscaleImageProcessor

PROCESSOR_CLASSES = {
    TaskType.GENERATE_IMAGE: GenerateImageProcessor,
    TaskType.IMAGE_UPSCALE: UpscaleImageProcessor,
    TaskType.IMAGE_REMOVE_BACKGROUND: RemoveBackgroundProcessor,
}


def build_processors(ctx: ProcessorContext) -> Dict[str, TaskProcessor]:
    """
    모든 TaskType 에 대한 처리기 생성

    Raises:
        RuntimeError: 처리기가 등록되지 않은 TaskType 이 있는 경우
    """
    missing = [t.value for t in TaskType if t not in PROCESSOR_CLASSES]
    if missing:
        raise RuntimeError(f"No processor registered for task types: {missing}")

    return {task_type.value: cls(ctx) for task_type, cls in PROCESSOR_CLASSES.items()}


__all__ = [
    "ProcessorContext",
    "TaskProcessor",
    "GenerateImageProcessor",
    "UpscaleImageProcessor",
    "RemoveBackgroundProcessor",
    "PROCESSOR_CLASSES",
    "build_processors",
]
