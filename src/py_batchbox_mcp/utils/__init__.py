"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .cleanup_helpers import HandleManager
from .file_helpers import is_accepted_image, partition_accepted
from .logging_helpers import configure_logging, get_logger
from .message_formatter import (
    MessageFormatter,
    format_item_error,
    format_validation_error,
)
from .naming_helpers import FileNamingStrategy


__all__ = [
    "FileNamingStrategy",
    "HandleManager",
    "MessageFormatter",
    "configure_logging",
    "format_item_error",
    "format_validation_error",
    "get_logger",
    "is_accepted_image",
    "partition_accepted",
]
