"""
Logging
=======

pqhelper modules log through ``logging.getLogger(__name__)`` and the
package ships only a NullHandler, so the library is silent until an
application opts in with configure_logging().

Every handler installed here carries SecureLogFilter. Keys, KEM
ciphertexts and envelope fields are all long Base64 or hex runs, and the
filter rewrites any such run to [REDACTED] before a record is formatted.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Optional, Pattern

if TYPE_CHECKING:
    from pqhelper.core.config import SecureConfig

PACKAGE_LOGGER: Final[str] = "pqhelper"

_ASSIGNED_VALUE: Final[str] = r'\s*[=:]\s*["\']?[^\s"\']+["\']?'

# (label, pattern); matches become "label=[REDACTED]"
_SENSITIVE_PATTERNS: Final[list[tuple[str, Pattern[str]]]] = [
    ("secret", re.compile(r"(?i)(secret|private[_-]?key|shared[_-]?secret)" + _ASSIGNED_VALUE)),
    ("password", re.compile(r"(?i)(password|passwd|pwd)" + _ASSIGNED_VALUE)),
    ("token", re.compile(r"(?i)(token|bearer)" + _ASSIGNED_VALUE)),
    ("base64_secret", re.compile(r"[A-Za-z0-9+/]{40,}={0,2}")),
    ("hex_secret", re.compile(r"(?i)(?:0x)?[a-f0-9]{32,}")),
]

_REDACTED_TEXT: Final[str] = "[REDACTED]"

_CONSOLE_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_FILE_FORMAT: Final[str] = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
)


class SecureLogFilter(logging.Filter):
    """
    Redacts key material from a record's message and string arguments.

    Never drops a record. Extra patterns may be supplied; their matches
    are replaced with a bare [REDACTED].
    """

    def __init__(self, name: str = "", additional_patterns: Optional[list[Pattern[str]]] = None) -> None:
        super().__init__(name)
        self._additional_patterns = list(additional_patterns or [])

    def _clean(self, value: Any) -> Any:
        return self.sanitize(value) if isinstance(value, str) else value

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str) and record.msg:
            record.msg = self.sanitize(record.msg)

        if isinstance(record.args, dict):
            record.args = {key: self._clean(value) for key, value in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._clean(arg) for arg in record.args)

        return True

    def sanitize(self, text: str) -> str:
        for label, pattern in _SENSITIVE_PATTERNS:
            text = pattern.sub(f"{label}={_REDACTED_TEXT}", text)
        for pattern in self._additional_patterns:
            text = pattern.sub(_REDACTED_TEXT, text)
        return text


class StructuredLogFormatter(logging.Formatter):
    """JSON lines output: one object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class SecureRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that makes its parent directory and rejects '..' segments."""

    def __init__(
        self,
        filename: str | Path,
        mode: str = "a",
        maxBytes: int = 10 * 1024 * 1024,
        backupCount: int = 5,
        encoding: str = "utf-8",
    ) -> None:
        path = Path(filename)
        if ".." in path.parts:
            raise ValueError(f"refusing log file path with '..': {filename}")

        path = path.resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(
            str(path),
            mode=mode,
            maxBytes=maxBytes,
            backupCount=backupCount,
            encoding=encoding,
        )


def _filtered(handler: logging.Handler, formatter: logging.Formatter, secure_filter: SecureLogFilter) -> logging.Handler:
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    handler.addFilter(secure_filter)
    return handler


def get_secure_logger(
    name: str = PACKAGE_LOGGER,
    log_dir: Optional[Path] = None,
    level: str = "INFO",
    enable_console: bool = True,
    enable_file: bool = False,
    enable_json: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """
    (Re)attach redacting handlers to the named logger.

    Handlers from a previous call are closed and replaced; NullHandlers
    stay. File output needs both enable_file and log_dir, and is written
    to ``<log_dir>/<name with dots as underscores>.log``.

    The logger stops propagating, so pqhelper records do not reach the
    application's root handlers unfiltered.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    for stale in [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]:
        logger.removeHandler(stale)
        stale.close()

    secure_filter = SecureLogFilter()

    if enable_console:
        logger.addHandler(_filtered(
            logging.StreamHandler(sys.stderr),
            logging.Formatter(_CONSOLE_FORMAT, datefmt="%H:%M:%S"),
            secure_filter,
        ))

    if enable_file and log_dir:
        formatter = (
            StructuredLogFormatter() if enable_json
            else logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(_filtered(
            SecureRotatingFileHandler(
                filename=Path(log_dir) / f"{name.replace('.', '_')}.log",
                maxBytes=max_file_size,
                backupCount=backup_count,
            ),
            formatter,
            secure_filter,
        ))

    logger.propagate = False
    return logger


def configure_logging(config: Optional[SecureConfig] = None) -> logging.Logger:
    """
    Apply config.logging (default: the process configuration) to the "pqhelper" logger.

    With file output enabled, log_dir is created first with owner-only permissions.
    """
    if config is None:
        from pqhelper.core.config import SecureConfig

        config = SecureConfig.get_instance()

    settings = config.logging
    if settings.enable_file:
        config.ensure_directories()

    return get_secure_logger(
        PACKAGE_LOGGER,
        log_dir=config.paths.log_dir,
        level=settings.level,
        enable_console=settings.enable_console,
        enable_file=settings.enable_file,
        enable_json=settings.enable_json,
        max_file_size=settings.max_file_size_bytes,
        backup_count=settings.backup_count,
    )
