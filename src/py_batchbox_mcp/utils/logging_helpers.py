"""日志工具模块。

提供统一的日志记录功能，标准化日志格式和配置。
"""

import inspect
import logging
from logging.handlers import RotatingFileHandler


PACKAGE_LOGGER = "py_batchbox_mcp"


def get_logger(name: str | None = None) -> logging.Logger:
    """获取标准化配置的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    if name is None:
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def configure_logging() -> logging.Logger:
    """按 LoggingDefaults 配置包级日志记录器

    重复调用不会重复添加处理器。

    Returns:
        logging.Logger: 包级日志记录器
    """
    from ..config import get_config

    settings = get_config().logging
    root = logging.getLogger(PACKAGE_LOGGER)
    root.setLevel(settings.LOG_LEVEL)

    if getattr(root, "_batchbox_configured", False):
        return root

    formatter = logging.Formatter(settings.LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if settings.ENABLE_FILE_LOGGING:
        file_handler = RotatingFileHandler(
            settings.LOG_FILE_PATH,
            maxBytes=settings.LOG_FILE_MAX_SIZE,
            backupCount=settings.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root._batchbox_configured = True  # type: ignore[attr-defined]
    return root
