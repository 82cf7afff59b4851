"""
Database Module
"""

from .base import Base, JSONType
from .session import build_engine, build_session_factory

__all__ = ["Base", "JSONType", "build_engine", "build_session_factory"]
