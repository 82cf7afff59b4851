"""
Database Session Management
비동기 SQLAlchemy 세션 관리
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from ..config import settings


def build_engine(database_url: str = None, **kwargs) -> AsyncEngine:
    """
    비동기 엔진 생성

    Args:
        database_url: DB URL (None이면 settings 사용)
        **kwargs: create_async_engine 추가 인자
    """
    url = database_url or settings.database_url
    options = {"echo": settings.debug, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        options.update(pool_size=10, max_overflow=20)
    options.update(kwargs)
    return create_async_engine(url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """비동기 세션 팩토리 생성"""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
