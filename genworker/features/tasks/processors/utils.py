"""
Processor Utilities
크기 계산, 업스케일 배수 보정, 제목 대체값 등
"""

import math
import uuid
from typing import Any, Tuple

BASE_IMAGE_SIZE = 1024
ALLOWED_UPSCALE_FACTORS = (2, 4)
DEFAULT_UPSCALE_FACTOR = 4
TITLE_MAX_LENGTH = 50
ASSET_ID_PREFIX = "asset:"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_dimensions_from_aspect_ratio(
    aspect_ratio: Any, base_size: int = BASE_IMAGE_SIZE
) -> Tuple[int, int]:
    """
    "W:H" 비율로부터 픽셀 크기 계산

    - 가로형/정사각형: width = base_size
    - 세로형: height = base_size
    - 형식 오류 또는 0 이하 값: base_size x base_size

    Examples:
        >>> calculate_dimensions_from_aspect_ratio("16:9")
        (1024, 576)
        >>> calculate_dimensions_from_aspect_ratio("9:16")
        (576, 1024)
    """
    if not isinstance(aspect_ratio, str):
        return base_size, base_size

    parts = aspect_ratio.split(":")
    if len(parts) != 2:
        return base_size, base_size

    try:
        ratio_w, ratio_h = float(parts[0]), float(parts[1])
    except ValueError:
        return base_size, base_size

    if not (math.isfinite(ratio_w) and math.isfinite(ratio_h)) or ratio_w <= 0 or ratio_h <= 0:
        return base_size, base_size

    if ratio_w >= ratio_h:
        return base_size, _round_half_up(base_size * ratio_h / ratio_w)
    return _round_half_up(base_size * ratio_w / ratio_h), base_size


def normalize_upscale_factor(factor: Any) -> int:
    """
    업스케일 배수를 {2, 4} 중 가장 가까운 값으로 보정

    같은 거리(3)이거나 숫자가 아니면 4.
    """
    if isinstance(factor, bool):
        return DEFAULT_UPSCALE_FACTOR
    try:
        value = float(factor)
    except (TypeError, ValueError):
        return DEFAULT_UPSCALE_FACTOR
    if not math.isfinite(value):
        return DEFAULT_UPSCALE_FACTOR

    return min(
        ALLOWED_UPSCALE_FACTORS,
        key=lambda allowed: (abs(allowed - value), -allowed),
    )


def fallback_title(prompt: str) -> str:
    """제목 생성 실패 시 프롬프트를 잘라서 사용"""
    if len(prompt) > TITLE_MAX_LENGTH:
        return prompt[: TITLE_MAX_LENGTH - 3] + "..."
    return prompt


def new_asset_id() -> str:
    return f"{ASSET_ID_PREFIX}{uuid.uuid4().hex}"


def positive_int(value: Any) -> int:
    """양의 정수로 변환 가능하면 그 값, 아니면 0"""
    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return number if number > 0 else 0
