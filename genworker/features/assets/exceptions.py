"""
Asset Domain Exceptions
"""

from ...core.exceptions import AuthorizationException, ValidationException, ErrorCode


class AssetTooLargeError(ValidationException):
    """에셋 크기 제한 초과"""

    def __init__(self, size: int, max_size: int):
        super().__init__(
            error_code=ErrorCode.ASSET_TOO_LARGE,
            message=f"Asset size exceeds maximum allowed size of {max_size} bytes",
            details={"size": size, "max_size": max_size},
        )


class AssetAccessDeniedError(AuthorizationException):
    """다른 사용자의 에셋 접근"""

    def __init__(self, asset_id: str):
        super().__init__(
            error_code=ErrorCode.ASSET_ACCESS_DENIED,
            message="Unauthorized: Asset does not belong to user",
            details={"asset_id": asset_id},
        )
