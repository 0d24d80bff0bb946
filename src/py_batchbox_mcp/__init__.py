"""批量图片转换与文件夹打包库。

把 PNG/JPEG 批量转换为带底色的 JPEG，或把每个顶层文件夹压缩为单独的 ZIP。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "批量图片转换与文件夹打包，基于 Pillow 11"

# 核心功能导出
from .core.archiver import Archiver
from .engine import ConfigBuilder, FolderBatch, ImageBatch
from .models import (
    ConversionConfig,
    ExportResult,
    ItemStatus,
    RunSummary,
    ScannedFile,
    SourceFile,
    WorkItem,
    ZipGroupTask,
)
from .session import BatchBoxSession


__all__ = [
    "Archiver",
    "BatchBoxSession",
    "ConfigBuilder",
    "ConversionConfig",
    "ExportResult",
    "FolderBatch",
    "ImageBatch",
    "ItemStatus",
    "RunSummary",
    "ScannedFile",
    "SourceFile",
    "WorkItem",
    "ZipGroupTask",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
