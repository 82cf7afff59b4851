"""
Core Exceptions Module
"""

from .base import (
    AppException,
    ValidationException,
    NotFoundException,
    AuthorizationException,
    BusinessLogicException,
    ExternalServiceException,
)
from .codes import ErrorCode

__all__ = [
    # Base Exceptions
    "AppException",
    "ValidationException",
    "NotFoundException",
    "AuthorizationException",
    "BusinessLogicException",
    "ExternalServiceException",
    # Error Codes
    "ErrorCode",
]
