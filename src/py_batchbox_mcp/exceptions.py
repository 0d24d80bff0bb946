"""批处理异常处理模块。

定义统一的异常类和错误处理机制，包含图像处理异常转换装饰器。
"""

import asyncio
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter, format_item_error


logger = get_logger()
T = TypeVar("T")


# 统一的异常类型
class BatchBoxError(Exception):
    """批处理相关错误基类"""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.message = message
        self.source = source


class ValidationError(BatchBoxError):
    """参数验证错误"""

    pass


class ScanError(BatchBoxError):
    """目录或文件无法读取"""

    pass


class DecodeError(BatchBoxError):
    """输入数据不是可解码的图像"""

    pass


class EncodeError(BatchBoxError):
    """图像重新编码失败"""

    pass


class ArchiveError(BatchBoxError):
    """归档压缩或生成失败"""

    pass


class BatchBusyError(BatchBoxError):
    """批处理正在运行时再次启动"""

    pass


def handle_image_errors(
    operation_name: str = "图像处理",
    error_class: type[BatchBoxError] = DecodeError,
):
    """统一的图像处理异常转换装饰器

    已经是 BatchBoxError 的异常原样抛出，其余异常转换为 error_class。

    Args:
        operation_name: 操作名称，用于日志记录
        error_class: 转换后的异常类型
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except BatchBoxError:
                raise
            except UnidentifiedImageError as e:
                logger.debug(f"{operation_name} - 无法识别图像格式: {e}")
                raise error_class(f"无法识别的图像格式: {e}") from e
            except DecompressionBombError as e:
                logger.debug(f"{operation_name} - 图像过大: {e}")
                raise error_class(f"图像尺寸过大，可能存在安全风险: {e}") from e
            except OSError as e:
                logger.debug(f"{operation_name} - 数据读写失败: {e}")
                raise error_class(f"{operation_name}失败: {e}") from e
            except (ValueError, TypeError) as e:
                logger.debug(f"{operation_name} - 参数错误: {e}")
                raise error_class(f"{operation_name}参数错误: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    把处理过程中的异常转换为可展示给用户的错误描述，并按级别记录日志。
    """

    @staticmethod
    def _log_error(
        operation: str, target: str, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"图片转换"、"文件夹打包"等）
            target: 相关条目名称
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = format_item_error(operation, target, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def describe(error: Exception) -> str:
        """生成面向用户的错误描述"""
        match error:
            case DecodeError():
                return f"无法解码图像: {error}"
            case EncodeError():
                return f"图像编码失败: {error}"
            case ArchiveError():
                return f"归档失败: {error}"
            case asyncio.TimeoutError() | TimeoutError():
                return "处理超时"
            case FileNotFoundError():
                return f"文件不存在: {error}"
            case PermissionError():
                return MessageFormatter.permission_error(error.filename or str(error), "读取")
            case BatchBoxError():
                return error.message
            case _:
                return f"处理失败: {error}"

    @staticmethod
    def handle_item_error(
        error: Exception, target: str, operation: str = "批处理"
    ) -> str:
        """记录单项失败并返回错误描述

        Args:
            error: 异常对象
            target: 失败条目的名称
            operation: 操作名称

        Returns:
            str: 记录到条目上的错误描述
        """
        level = "warning" if isinstance(error, DecodeError) else "error"
        ErrorHandler._log_error(operation, target, error, level)
        return ErrorHandler.describe(error)
