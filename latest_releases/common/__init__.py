"""
Common utilities shared across the release version tools.
"""

from latest_releases.common.utils import get_logger, logger
from latest_releases.common.http_utils import (
    http_get,
    DEFAULT_TIMEOUT_SEC,
)

__all__ = [
    # Utils
    "get_logger",
    "logger",

    # HTTP utilities
    "http_get",
    "DEFAULT_TIMEOUT_SEC",
]
