"""批处理引擎模块。

包含顺序编排器、图片转换器、文件夹打包器和配置构建。
"""

from .config import ConfigBuilder
from .converter import ImageBatch
from .orchestrator import BatchOrchestrator
from .zipper import FolderBatch


__all__ = [
    "BatchOrchestrator",
    "ConfigBuilder",
    "FolderBatch",
    "ImageBatch",
]
