"""
Database Base Class
모든 ORM 모델의 베이스 클래스
"""

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# PostgreSQL에서는 JSONB, 그 외(테스트용 SQLite)에서는 JSON
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """
    SQLAlchemy Base Class

    모든 ORM 모델은 이 클래스를 상속받아야 함
    """
    pass
