"""
Configuration
=============

Read-only settings for pqhelper, grouped in four sections (paths, crypto,
logging, app). Each section is a frozen dataclass with validated fields.

Any field can be overridden from the environment as
``<PREFIX>_<SECTION>__<FIELD>``. Names that look like they carry secrets
(password, key, salt, ...) are never taken from the environment: key
material reaches the library through function arguments only.
"""

from __future__ import annotations

import dataclasses
import hashlib
import os
import platform
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Optional

from pqhelper.core.crypto.suites import DEFAULT_SUITE, AlgorithmSuite

_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "key", "token", "api_key",
    "private", "credential", "auth", "salt",
})

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})

_LOG_LEVELS: Final[frozenset[str]] = frozenset({
    "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL",
})


def _looks_sensitive(dotted_key: str) -> bool:
    lowered = dotted_key.lower()
    return any(marker in lowered for marker in _SENSITIVE_KEYS)


def _default_log_dir() -> Path:
    system = platform.system()
    home = Path.home()

    if system == "Windows":
        return Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local")) / "pqhelper" / "Logs"
    if system == "Darwin":
        return home / "Library" / "Logs" / "pqhelper"
    return Path(os.environ.get("XDG_STATE_HOME", home / ".local" / "state")) / "pqhelper" / "logs"


@dataclass(frozen=True, slots=True)
class PathConfig:
    """Where file logging goes when it is enabled."""

    log_dir: Path = field(default_factory=_default_log_dir)

    def __post_init__(self) -> None:
        if not self.log_dir.is_absolute():
            raise ValueError(f"log_dir has to be absolute, got {self.log_dir}")


@dataclass(frozen=True, slots=True)
class CryptoConfig:
    """
    Suite used by generate and encrypt when the caller passes none.

    Accepts a suite identifier string and resolves it. Key records that
    predate the algorithm field still import as ML-KEM-1024 regardless.
    """

    default_suite: AlgorithmSuite = DEFAULT_SUITE

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "default_suite", AlgorithmSuite.from_identifier(self.default_suite)
        )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "INFO"
    enable_console: bool = True
    enable_file: bool = False
    enable_json: bool = False
    max_file_size_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    def __post_init__(self) -> None:
        if self.level.upper() not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {self.level!r}")
        if self.max_file_size_bytes <= 0:
            raise ValueError(f"max_file_size_bytes must be > 0, got {self.max_file_size_bytes}")
        if self.backup_count < 0:
            raise ValueError(f"backup_count must be >= 0, got {self.backup_count}")


@dataclass(frozen=True, slots=True)
class AppConfig:
    app_name: str = "pqhelper"
    version: str = "1.0.0"


_SECTIONS: Final[dict[str, type]] = {
    "paths": PathConfig,
    "crypto": CryptoConfig,
    "logging": LoggingConfig,
    "app": AppConfig,
}


def _coerce(raw: str, default: Any) -> Any:
    """Parse raw into the same type as the field default."""
    # bool before int: bool is an int subclass
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUE_VALUES
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, Path):
        return Path(raw)
    if isinstance(default, AlgorithmSuite):
        return AlgorithmSuite.from_identifier(raw)
    return raw


class SecureConfig:
    """
    The assembled configuration. Frozen once constructed.

    Most callers use get_config(), which loads from the environment once
    per process:

        suite = get_config().crypto.default_suite
    """

    __slots__ = ("_paths", "_crypto", "_logging", "_app", "_frozen", "_config_hash")

    _instance: Optional[SecureConfig] = None

    def __init__(
        self,
        paths: Optional[PathConfig] = None,
        crypto: Optional[CryptoConfig] = None,
        logging: Optional[LoggingConfig] = None,
        app: Optional[AppConfig] = None,
    ) -> None:
        values = {
            "_paths": paths or PathConfig(),
            "_crypto": crypto or CryptoConfig(),
            "_logging": logging or LoggingConfig(),
            "_app": app or AppConfig(),
        }
        object.__setattr__(self, "_frozen", False)
        for name, value in values.items():
            object.__setattr__(self, name, value)
        object.__setattr__(self, "_config_hash", self._digest())
        object.__setattr__(self, "_frozen", True)

    def _digest(self) -> str:
        # identifies an instance in logs without printing paths
        material = "|".join(repr(section) for section in (self._paths, self._crypto, self._logging, self._app))
        return hashlib.sha256(material.encode()).hexdigest()[:16]

    @property
    def paths(self) -> PathConfig:
        return self._paths

    @property
    def crypto(self) -> CryptoConfig:
        return self._crypto

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def app(self) -> AppConfig:
        return self._app

    @property
    def config_hash(self) -> str:
        return self._config_hash

    @classmethod
    def load(cls, env_prefix: str = "PQHELPER") -> SecureConfig:
        """
        Build a configuration from defaults plus environment overrides.

        Examples:
            PQHELPER_LOGGING__LEVEL=DEBUG
            PQHELPER_CRYPTO__DEFAULT_SUITE=ML-KEM-768
            PQHELPER_PATHS__LOG_DIR=/var/log/pqhelper

        Variables naming an unknown section or field are skipped.

        Raises:
            ValueError: If an override does not parse or fails validation
            UnsupportedSuite: If PQHELPER_CRYPTO__DEFAULT_SUITE is unknown
        """
        overrides = cls._parse_env_overrides(env_prefix)

        sections: dict[str, Any] = {}
        for section_name, section_cls in _SECTIONS.items():
            defaults = section_cls()
            changed = {
                f.name: _coerce(overrides[f"{section_name}.{f.name}"], getattr(defaults, f.name))
                for f in dataclasses.fields(section_cls)
                if f"{section_name}.{f.name}" in overrides
            }
            sections[section_name] = section_cls(**changed) if changed else None

        return cls(**sections)

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Map PREFIX_SECTION__FIELD variables to "section.field" keys."""
        lead = f"{prefix.upper()}_"
        overrides: dict[str, str] = {}

        for name, value in os.environ.items():
            if not name.startswith(lead):
                continue
            dotted = name[len(lead):].lower().replace("__", ".")
            if _looks_sensitive(dotted):
                continue
            overrides[dotted] = value

        return overrides

    @classmethod
    def get_instance(cls) -> SecureConfig:
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the cached instance so the next access reloads (tests)."""
        cls._instance = None

    def ensure_directories(self) -> None:
        """Create log_dir; on POSIX restrict it to the owner (0700)."""
        log_dir = self._paths.log_dir
        log_dir.mkdir(parents=True, exist_ok=True)
        if platform.system() != "Windows":
            log_dir.chmod(stat.S_IRWXU)

    def __repr__(self) -> str:
        return (
            f"SecureConfig(hash={self._config_hash}, app={self._app.app_name}, "
            f"suite={self._crypto.default_suite.value})"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(f"cannot set {name!r}: SecureConfig is read-only")
        super().__setattr__(name, value)


def get_config() -> SecureConfig:
    """Process-wide configuration, loaded on first use."""
    return SecureConfig.get_instance()
