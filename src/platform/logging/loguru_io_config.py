"""
Loguru sinks and shared log context.

One stdout sink, plus an hourly rotated file under `logs/` when
`LOG_FILE_ENABLED` is set. Stdlib loggers (uvicorn, sqlalchemy, httpx) are
routed into the same sinks so every line carries the service context.
"""

from contextvars import ContextVar
from datetime import datetime
from enum import StrEnum
import logging
import os
import sys
from typing import TYPE_CHECKING

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR
from src.platform.logging.service_context import get_service_context


# Argument names whose values never reach the logs
SENSITIVE_KEYWORDS = {
    'password',
    'secret',
    'key_secret',
    'signature',
    'provider_signature',
    'razorpay_signature',
    'token',
    'authorization',
}
MASK = '********'

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


BASE_EXTRA: dict[str, str] = {
    ExtraField.SERVICE_CONTEXT: get_service_context(),
    ExtraField.CHAIN_START_TIME: '',
    ExtraField.CALL_TARGET: '',
}

LOG_FORMAT = (
    f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</> | '
    '<lvl>{level:<8}</> | '
    f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</> | '
    '{message} | '
    '<lk>{elapsed}</> | '
    f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>'
)


class InterceptHandler(logging.Handler):
    """Route stdlib logging into loguru, keeping the original caller location."""

    def __init__(self, target: 'LoguruLogger') -> None:
        super().__init__()
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        self.target.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _log_file_path() -> str:
    log_dir = os.environ.get('TEST_LOG_DIR', str(LOG_DIR))
    prefix = 'test_' if os.environ.get('TEST_LOG_DIR') else ''
    return f'{log_dir}/{prefix}{datetime.now().strftime("%Y-%m-%d_%H")}.log'


def configure_logger() -> 'LoguruLogger':
    level = 'DEBUG' if settings.DEBUG else 'INFO'
    loguru_logger.remove()
    bound = loguru_logger.bind(**BASE_EXTRA)
    bound.add(sys.stdout, format=LOG_FORMAT, level=level, enqueue=True)
    if settings.LOG_FILE_ENABLED:
        bound.add(
            _log_file_path(),
            format=LOG_FORMAT,
            level=level,
            rotation='1 hour',
            retention='7 days',
            compression='gz',
            enqueue=True,
        )
    logging.basicConfig(handlers=[InterceptHandler(bound)], level=0, force=True)
    return bound


custom_logger = configure_logger()
