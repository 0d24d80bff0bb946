"""核心处理模块包。

包含目录扫描、分组、图片转换和归档四个无状态组件。
"""

from .archiver import Archiver, ProgressCallback
from .grouping import GroupingResult, group_by_top_folder
from .scanner import (
    DirectoryReader,
    LocalPathEntry,
    MemoryPathEntry,
    PathEntry,
    collect_drop,
    collect_scan,
    flat_entries,
    scan_entries,
    scan_paths,
)
from .transform import (
    read_dimensions,
    read_dimensions_async,
    target_dimensions,
    transform,
    transform_async,
)


__all__ = [
    "Archiver",
    "DirectoryReader",
    "GroupingResult",
    "LocalPathEntry",
    "MemoryPathEntry",
    "PathEntry",
    "ProgressCallback",
    "collect_drop",
    "collect_scan",
    "flat_entries",
    "group_by_top_folder",
    "read_dimensions",
    "read_dimensions_async",
    "scan_entries",
    "scan_paths",
    "target_dimensions",
    "transform",
    "transform_async",
]
