"""Package logger.

Every record carries a short per-process run id so that log lines from one CLI
invocation or API process can be grepped together.
"""
from __future__ import annotations

import logging
import sys
import uuid

from payrun.config import settings

_RUN_ID = uuid.uuid4().hex[:8]


class _RunIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID
        return True


def get_run_id() -> str:
    return _RUN_ID


def _configure() -> logging.Logger:
    log = logging.getLogger("payrun")
    if log.handlers:
        return log
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] [%(run_id)s] %(name)s: %(message)s"
    ))
    handler.addFilter(_RunIdFilter())
    log.addHandler(handler)
    log.setLevel(settings.LOG_LEVEL.upper())
    return log


logger = _configure()
