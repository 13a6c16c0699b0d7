"""
Core module - Contains configuration, logging, errors and the crypto core.
"""

from pqhelper.core.config import SecureConfig, get_config
from pqhelper.core.exceptions import PQHelperError
from pqhelper.core.logging import SecureLogFilter, configure_logging, get_secure_logger

__all__ = [
    "SecureConfig",
    "get_config",
    "PQHelperError",
    "SecureLogFilter",
    "configure_logging",
    "get_secure_logger",
]
