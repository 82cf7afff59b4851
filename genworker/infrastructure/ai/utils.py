"""
AI Provider Utilities
이미지 정보 감지 및 data URL 변환 유틸리티
"""

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Pillow format -> MIME type 매핑
FORMAT_TO_MIME = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
    "TIFF": "image/tiff",
}


@dataclass(frozen=True)
class ImageInfo:
    """이미지 포맷과 픽셀 크기"""
    mime_type: str
    width: int
    height: int


def inspect_image(image_bytes: bytes) -> Optional[ImageInfo]:
    """
    이미지 포맷/크기 감지

    Args:
        image_bytes: 이미지 바이너리

    Returns:
        Optional[ImageInfo]: 인식할 수 없는 데이터면 None
    """
    if not image_bytes:
        return None

    try:
        with Image.open(BytesIO(image_bytes)) as img:
            fmt = (img.format or "").upper()
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not inspect image data: {e}")
        return None

    return ImageInfo(
        mime_type=FORMAT_TO_MIME.get(fmt, "application/octet-stream"),
        width=width,
        height=height,
    )


def to_data_url(data: bytes, content_type: str = "image/png") -> str:
    """바이너리를 base64 data URL 로 변환"""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"
