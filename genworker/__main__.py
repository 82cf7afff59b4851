"""
python -m genworker
"""

import uvicorn

from .core.config import settings


def main() -> None:
    uvicorn.run(
        "genworker.main:app",
        host="0.0.0.0",
        port=settings.backend_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
