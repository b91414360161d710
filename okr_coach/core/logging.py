"""
Structured logging for the coaching service.

structlog sits on top of stdlib logging so the same event dicts reach two
sinks: the console and one log file per process start under ``logs/``.
Debug mode renders coloured key/value lines, otherwise every line is JSON.

Modules log with ``structlog.get_logger(__name__)`` and snake_case event
names; request and session identifiers travel through contextvars.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import structlog
from structlog.typing import Processor

from okr_coach.core.config import settings

LOG_FILE_PREFIX = "okr_coach_"


def _level() -> int:
    return logging.DEBUG if settings.debug else logging.INFO


def _prune_log_files(logs_dir: Path, keep: int) -> None:
    """Remove all but the ``keep`` newest okr_coach log files in ``logs_dir``."""
    by_age = sorted(
        logs_dir.glob(f"{LOG_FILE_PREFIX}*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    for stale in by_age[keep:]:
        try:
            stale.unlink()
        except OSError:
            pass  # held open by another process


def _processor_chain() -> List[Processor]:
    chain: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
    ]
    if settings.debug:
        chain.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        chain.extend([structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()])
    return chain


def _install_handlers(log_file: Path) -> None:
    root = logging.getLogger()
    # Reconfiguring (tests, reloads) must not stack handlers
    for existing in list(root.handlers):
        existing.close()
        root.removeHandler(existing)

    root.setLevel(_level())
    plain = logging.Formatter("%(message)s")
    for handler in (logging.StreamHandler(), logging.FileHandler(log_file, mode="w")):
        handler.setFormatter(plain)
        root.addHandler(handler)


def configure_logging(
    log_sessions_to_keep: Optional[int] = None, logs_dir: Path = Path("logs")
) -> None:
    """Configure structlog and the stdlib root logger.

    Called from the application lifespan. Safe to call again; handlers are
    replaced rather than added.

    Args:
        log_sessions_to_keep: How many log files survive, counting the new
            one (default: settings.log_sessions_to_keep)
        logs_dir: Where ``okr_coach_YYYYMMDD_HHMMSS.log`` files are written
    """
    keep = log_sessions_to_keep or settings.log_sessions_to_keep

    logs_dir.mkdir(parents=True, exist_ok=True)
    _prune_log_files(logs_dir, keep=max(keep - 1, 0))

    log_file = logs_dir / f"{LOG_FILE_PREFIX}{datetime.now():%Y%m%d_%H%M%S}.log"
    _install_handlers(log_file)

    structlog.configure(
        processors=_processor_chain(),
        wrapper_class=structlog.make_filtering_bound_logger(_level()),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger for ``name``, usually the calling module's ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Attach values (request_id, session_id) to every later log line in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
