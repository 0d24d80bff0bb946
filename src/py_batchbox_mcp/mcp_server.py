"""批量图片转换与文件夹打包 MCP 服务器。

在本地会话中触发批处理：导入图片或文件夹，运行转换或打包，导出 ZIP。
"""

from pathlib import Path
from typing import Any, Literal

from fastmcp import FastMCP

from .exceptions import (
    ArchiveError,
    BatchBoxError,
    BatchBusyError,
    ValidationError,
)
from .session import BatchBoxSession, describe_export, describe_item
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPBatchResponse = dict[str, Any]
ItemKind = Literal["images", "folders"]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str, field: str | None = None) -> dict[str, Any]:
        details = {"field": field} if field else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="validation",
            details=details,
        )

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> dict[str, Any]:
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="file",
            details=details,
        )

    @staticmethod
    def processing_error(message: str, operation: str | None = None) -> dict[str, Any]:
        details = {"operation": operation} if operation else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="processing",
            details=details,
        )

    @staticmethod
    def from_exception(error: Exception, operation: str) -> dict[str, Any]:
        """按异常类型选择响应格式"""
        match error:
            case ValidationError():
                return MCPResponseBuilder.validation_error(error.message)
            case BatchBusyError():
                return MCPResponseBuilder.error(error.message, "busy")
            case ArchiveError():
                return MCPResponseBuilder.processing_error(error.message, operation)
            case BatchBoxError():
                return MCPResponseBuilder.processing_error(error.message, operation)
            case KeyError():
                return MCPResponseBuilder.error(str(error.args[0]), "not_found")
            case _:
                return MCPResponseBuilder.processing_error(
                    MessageFormatter.operation_failed(operation, "", error), operation
                )


configure_logging()
logger = get_logger()

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("批量图片转换与文件夹打包服务")

# 全局会话实例
session = BatchBoxSession()


def _missing_paths(paths: list[str]) -> list[str]:
    return [p for p in paths if not Path(p).exists()]


def _batch_for(kind: ItemKind):
    return session.images if kind == "images" else session.folders


# ============================================================================
# 图片转换
# ============================================================================


@mcp.tool()
async def add_images(paths: list[str]) -> MCPBatchResponse:
    """导入图片文件或目录（递归），只接受 PNG 和 JPEG。

    Args:
        paths: 文件或目录路径列表

    Returns:
        dict: 新建的任务和被拒绝的文件
    """
    missing = _missing_paths(paths)
    if missing:
        return MCPResponseBuilder.file_error(
            MessageFormatter.file_not_found(missing[0]), missing[0]
        )
    try:
        items, rejected = await session.images.add_paths(paths)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("导入图片", ", ".join(paths), e))
        return MCPResponseBuilder.from_exception(e, "导入图片")

    return {
        "success": True,
        "added": [describe_item(item) for item in items],
        "rejected": [
            MessageFormatter.unsupported_type(f.name, f.mime_type) for f in rejected
        ],
    }


@mcp.tool()
async def convert_images(
    quality_percent: int | None = None,
    scale_percent: int | None = None,
    trim_right: int | None = None,
    matte_color: str | None = None,
) -> MCPBatchResponse:
    """把所有未完成的图片转换为 JPEG。

    透明区域用底色填充，可按比例缩放并裁掉右侧若干像素。
    未提供的参数沿用当前配置；已完成的图片不会重复处理。

    Args:
        quality_percent: JPEG 质量 10-100
        scale_percent: 缩放比例 1-100
        trim_right: 右侧裁剪像素 0-50
        matte_color: 底色，例如 "#FFFFFF"

    Returns:
        dict: 运行摘要和各任务状态
    """
    try:
        summary = await session.convert(
            quality_percent=quality_percent,
            scale_percent=scale_percent,
            trim_right=trim_right,
            matte_color=matte_color,
        )
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("图片转换", "批处理", e))
        return MCPResponseBuilder.from_exception(e, "图片转换")

    return {
        "success": summary.failed == 0,
        "summary": summary.get_summary(),
        "success_rate": summary.get_success_rate(),
        "items": [describe_item(item) for item in session.images.snapshot()],
    }


@mcp.tool()
async def export_images(output_dir: str) -> MCPBatchResponse:
    """把所有已转换的图片打包为一个 ZIP 并写入输出目录。

    Args:
        output_dir: 输出目录

    Returns:
        dict: 导出文件信息
    """
    try:
        result = await session.images.export()
        path = result.save(output_dir)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("导出图片", output_dir, e))
        return MCPResponseBuilder.from_exception(e, "导出图片")

    return {"success": True, "export": describe_export(result, path)}


# ============================================================================
# 文件夹打包
# ============================================================================


@mcp.tool()
async def add_folders(
    paths: list[str], loose_group: str | None = None
) -> MCPBatchResponse:
    """导入文件夹，每个顶层文件夹成为一个打包任务。

    Args:
        paths: 文件夹（或文件）路径列表
        loose_group: 不在任何文件夹中的散文件归入的分组名；不提供时散文件被忽略

    Returns:
        dict: 新建的打包任务和被忽略的散文件
    """
    missing = _missing_paths(paths)
    if missing:
        return MCPResponseBuilder.file_error(
            MessageFormatter.file_not_found(missing[0]), missing[0]
        )
    try:
        tasks, leftover = await session.folders.add_paths(paths, loose_group)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("导入文件夹", ", ".join(paths), e))
        return MCPResponseBuilder.from_exception(e, "导入文件夹")

    return {
        "success": True,
        "added": [describe_item(task) for task in tasks],
        "ungrouped": [s.relative_path for s in leftover],
    }


@mcp.tool()
async def zip_folders() -> MCPBatchResponse:
    """顺序压缩所有未完成的文件夹打包任务。"""
    try:
        summary = await session.zip_folders()
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("文件夹打包", "批处理", e))
        return MCPResponseBuilder.from_exception(e, "文件夹打包")

    return {
        "success": summary.failed == 0,
        "summary": summary.get_summary(),
        "success_rate": summary.get_success_rate(),
        "items": [describe_item(task) for task in session.folders.snapshot()],
    }


@mcp.tool()
async def export_folder_zips(output_dir: str) -> MCPBatchResponse:
    """把每个已完成的打包任务写为单独的 ZIP 文件。

    Args:
        output_dir: 输出目录
    """
    try:
        results = session.folders.export_all()
        exports = [describe_export(r, r.save(output_dir)) for r in results]
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("导出文件夹", output_dir, e))
        return MCPResponseBuilder.from_exception(e, "导出文件夹")

    if not exports:
        return MCPResponseBuilder.processing_error("没有已完成的打包任务", "导出文件夹")
    return {"success": True, "exports": exports}


# ============================================================================
# 任务管理
# ============================================================================


@mcp.tool()
def list_items(kind: ItemKind = "images") -> MCPBatchResponse:
    """列出图片转换或文件夹打包任务。

    Args:
        kind: "images" 或 "folders"
    """
    batch = _batch_for(kind)
    return {
        "success": True,
        "kind": kind,
        "stats": batch.stats().model_dump(),
        "items": [describe_item(item) for item in batch.snapshot()],
    }


@mcp.tool()
def remove_item(item_id: str) -> MCPBatchResponse:
    """移除一个任务并释放它的临时文件。

    Args:
        item_id: 任务标识
    """
    if not session.remove(item_id):
        return MCPResponseBuilder.error(f"任务不存在: {item_id}", "not_found")
    return {"success": True, "removed": item_id}


@mcp.tool()
def clear_items(kind: ItemKind = "images") -> MCPBatchResponse:
    """清空图片转换或文件夹打包任务列表。

    Args:
        kind: "images" 或 "folders"
    """
    batch = _batch_for(kind)
    if batch.is_running:
        return MCPResponseBuilder.error("批处理正在运行，不能清空", "busy")
    return {"success": True, "kind": kind, "removed": batch.clear()}


@mcp.tool()
def get_status() -> MCPBatchResponse:
    """返回当前转换配置和两个任务列表的统计。"""
    return {"success": True, **session.describe()}


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动批量图片转换与文件夹打包 MCP 服务器")
    try:
        mcp.run()
    finally:
        session.close()


if __name__ == "__main__":
    main()
