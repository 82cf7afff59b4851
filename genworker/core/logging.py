"""
Core Logging Configuration
structlog 기반의 구조화된 로깅 설정
"""

import logging
import sys

import structlog

from genworker.core.config import settings


def configure_logging() -> None:
    """
    structlog 및 표준 로깅 설정

    merge_contextvars 로 컨텍스트 변수를 모든 로그에 붙입니다.
    워커는 폴링 루프에서 worker_id, 작업 처리 중에는 task_id 를 바인딩합니다
    (GenerativeAIWorker._run_loop / _handle_task).
    """

    # 공통 프로세서 (structlog & standard logging)
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.stdlib.ExtraAdder(),  # extra 인자 표시
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.processors.StackInfoRenderer(),
    ]

    # 렌더러 선택
    if settings.log_json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=20,
        )

    # 1. structlog 자체 설정
    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # 2. 표준 logging 포맷터 설정 (structlog를 통해 렌더링)
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # 3. 루트 로거 설정
    root_logger = logging.getLogger()
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level.upper())

    # 4. Uvicorn 및 라이브러리 로거 조정
    for _log in ["uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine"]:
        logger = logging.getLogger(_log)
        logger.handlers = []
        logger.propagate = True

    # httpx 요청 로그는 WARNING 이상만
    logging.getLogger("httpx").setLevel(logging.WARNING)
