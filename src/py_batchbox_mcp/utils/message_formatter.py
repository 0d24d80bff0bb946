"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path
from typing import Any

from humanize import naturalsize


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def permission_error(path: str | Path, operation: str = "访问") -> str:
        """权限错误消息"""
        return f"权限错误，无法{operation}: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def validation_error(field: str, value: Any, reason: str | None = None) -> str:
        """参数验证错误消息"""
        msg = f"参数验证失败 - {field}: {value}"
        if reason:
            msg += f" ({reason})"
        return msg

    @staticmethod
    def format_error(operation: str, target: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{target}]: {error}"

    @staticmethod
    def skipped_entry(path: str, error: Exception) -> str:
        """扫描时跳过条目的消息"""
        return f"跳过无法读取的条目 {path}: {error}"

    @staticmethod
    def unsupported_type(name: str, mime_type: str | None) -> str:
        """不支持的文件类型消息"""
        return f"不支持的文件类型 {name} ({mime_type or '未知'})，仅支持 PNG 和 JPG"

    @staticmethod
    def item_completed(name: str, input_size: int, output_size: int) -> str:
        """单项处理完成消息"""
        return (
            f"处理完成: {name} "
            f"({naturalsize(input_size, binary=True)} → "
            f"{naturalsize(output_size, binary=True)})"
        )

    @staticmethod
    def export_ready(file_name: str, entry_count: int, size: int) -> str:
        """导出完成消息"""
        return (
            f"已生成归档 {file_name}: {entry_count} 个条目, "
            f"{naturalsize(size, binary=True)}"
        )


# 便捷函数
def format_item_error(operation: str, name: str, error: Exception) -> str:
    """格式化单项处理错误消息"""
    return MessageFormatter.format_error(operation, name, error)


def format_validation_error(field: str, value: Any, expected: str | None = None) -> str:
    """格式化验证错误消息"""
    reason = f"期望: {expected}" if expected else None
    return MessageFormatter.validation_error(field, value, reason)
