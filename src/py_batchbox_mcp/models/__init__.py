"""数据模型包。

定义批处理相关的数据结构和模型。
"""

from .batch_result import BatchStats, ExportResult, RunSummary
from .constants import ImageFormats, guess_mime_type
from .conversion_config import ConversionConfig
from .source import ScannedFile, SourceFile
from .work_item import BatchTask, ItemStatus, WorkItem, ZipGroupTask, generate_id


__all__ = [
    "BatchStats",
    "BatchTask",
    "ConversionConfig",
    "ExportResult",
    "ImageFormats",
    "ItemStatus",
    "RunSummary",
    "ScannedFile",
    "SourceFile",
    "WorkItem",
    "ZipGroupTask",
    "generate_id",
    "guess_mime_type",
]
