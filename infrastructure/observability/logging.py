"""
Run logging: console plus an optional rotating run log.

The run tag and the current evaluation step (holdout, bootstrap, delong, ...) live in
contextvars and are stamped on every record by ContextInjectFilter.
"""

import contextvars
import hashlib
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Context variables for dynamic log metadata
cv_run_tag = contextvars.ContextVar("run_tag", default="-")
cv_step = contextvars.ContextVar("step", default="-")

# Full run id kept for metadata (not printed every line)
cv_run_id_full = contextvars.ContextVar("run_id_full", default="-")


def make_run_tag(run_id_full: str, length: int = 8) -> str:
    """
    Stable short tag derived from the full run_id.
    Uses BLAKE2s for collision resistance.
    """
    h = hashlib.blake2s(run_id_full.encode("utf-8"), digest_size=8).hexdigest()
    return h[:length]


class ContextInjectFilter(logging.Filter):
    """Inject context variables into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run = cv_run_tag.get() or "-"
        record.step = cv_step.get() or "-"
        return True


def set_log_context(
    *,
    run_id_full: str | None = None,
    step: str | None = None,
) -> None:
    """Update logging context (thread-safe via contextvars)."""
    if run_id_full is not None:
        cv_run_id_full.set(str(run_id_full))
        cv_run_tag.set(make_run_tag(str(run_id_full)))

    if step is not None:
        cv_step.set(str(step))


def get_log_context() -> dict[str, str]:
    """Return the current context in a convenient dict form (e.g. for JSON artifacts)."""
    return {
        "run_tag": str(cv_run_tag.get() or "-"),
        "run_id_full": str(cv_run_id_full.get() or "-"),
        "step": str(cv_step.get() or "-"),
    }


@contextmanager
def log_step(step: str) -> Iterator[None]:
    """Tag every log line emitted inside the block with the given evaluation step."""
    token = cv_step.set(step)
    try:
        yield
    finally:
        cv_step.reset(token)


# Third-party loggers that flood DEBUG output during plotting, downloads and parallel resampling
_NOISY_LOGGERS = ("matplotlib", "PIL", "joblib", "httpx", "httpcore")

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] r=%(run)s s=%(step)s | %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s | r=%(run)s s=%(step)s | %(message)s"


def _attach_handler(
    root: logging.Logger,
    handler: logging.Handler,
    level: int,
    fmt: str,
    datefmt: str,
) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    handler.addFilter(ContextInjectFilter())
    root.addHandler(handler)


def configure_logging(
    *,
    log_file: Path | None = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 10_000_000,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Route all loggers to the console and, when log_file is given, to a rotating run log.

    Each line carries the run tag and the evaluation step active when it was emitted.
    Calling it again replaces the previous handlers.

    Args:
        log_file: Run log path (console only when None)
        console_level: Minimum level printed to the console
        file_level: Minimum level written to the run log
        max_bytes: Size at which the run log rotates
        backup_count: Rotated run logs kept next to the current one
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)  # handlers enforce levels

    _attach_handler(root, logging.StreamHandler(), console_level, CONSOLE_FORMAT, "%H:%M:%S")

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        _attach_handler(root, rotating, file_level, FILE_FORMAT, "%Y-%m-%d %H:%M:%S")

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured (console_level=%s, run_log=%s)",
        logging.getLevelName(console_level),
        log_file if log_file is not None else "-",
    )
