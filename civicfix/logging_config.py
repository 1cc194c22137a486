"""애플리케이션 로깅 설정.

Application logging setup. Modules log through ``logging.getLogger(__name__)``;
API request logs go to Axiom separately (see middleware.axiom_logging).
"""

import logging

from civicfix.config import settings


def configure_logging(level: int | None = None) -> None:
    """루트 로거를 한 번 구성합니다.

    Configure the root logger. Safe to call more than once: when handlers
    already exist only the level is adjusted.

    Args:
        level: 로그 레벨, None이면 settings.LOG_LEVEL 사용
               (Log level; defaults to settings.LOG_LEVEL)
    """
    if level is None:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # SQL 로그는 DEBUG 설정(echo)으로만 — SQL echo is controlled by settings.DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
