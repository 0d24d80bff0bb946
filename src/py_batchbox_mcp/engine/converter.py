"""图片批量转换器模块。

管理图片转换任务：导入时读取尺寸，顺序转换为 JPEG，按需导出为一个 ZIP。
"""

import asyncio
from collections.abc import Iterable
from pathlib import Path

from ..core.archiver import Archiver
from ..core.scanner import scan_paths
from ..core.transform import read_dimensions_async, transform_async
from ..exceptions import ArchiveError, BatchBusyError
from ..models.batch_result import ExportResult
from ..models.conversion_config import ConversionConfig
from ..models.source import SourceFile
from ..models.work_item import WorkItem
from ..utils.cleanup_helpers import HandleManager
from ..utils.file_helpers import partition_accepted
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import FileNamingStrategy
from .config import ConfigBuilder
from .orchestrator import BatchOrchestrator


logger = get_logger()


class ImageBatch(BatchOrchestrator[WorkItem]):
    """图片批量转换器

    配置在两次运行之间可以修改；运行开始时复制一份快照，运行期间不可修改。
    """

    operation_name = "图片转换"

    def __init__(
        self,
        config: ConversionConfig | None = None,
        item_timeout: float | None = None,
        handles: HandleManager | None = None,
    ):
        super().__init__(item_timeout=item_timeout, handles=handles)
        self._config = config or ConfigBuilder().build()
        self._run_config = self._config

    @property
    def config(self) -> ConversionConfig:
        return self._config

    @config.setter
    def config(self, value: ConversionConfig) -> None:
        if self.is_running:
            raise BatchBusyError("转换进行中，不能修改配置")
        self._config = value

    # ------------------------------------------------------------------
    # 导入
    # ------------------------------------------------------------------

    async def add_files(
        self, sources: Iterable[SourceFile]
    ) -> tuple[list[WorkItem], list[SourceFile]]:
        """导入文件，只接受 PNG 和 JPEG

        Args:
            sources: 输入文件

        Returns:
            tuple: (新建的任务, 被拒绝的文件)
        """
        accepted, rejected = partition_accepted(sources)
        dimensions = await asyncio.gather(
            *(read_dimensions_async(source) for source in accepted)
        )
        items = [
            WorkItem(source_file=source, source_dimensions=dims)
            for source, dims in zip(accepted, dimensions, strict=True)
        ]
        self.add(items)
        logger.info(f"导入 {len(items)} 张图片，拒绝 {len(rejected)} 个文件")
        return items, rejected

    async def add_paths(
        self, paths: Iterable[str | Path]
    ) -> tuple[list[WorkItem], list[SourceFile]]:
        """导入本地文件或目录中的图片"""
        scanned = await scan_paths(paths)
        return await self.add_files(s.file for s in scanned)

    # ------------------------------------------------------------------
    # 处理
    # ------------------------------------------------------------------

    def _before_run(self) -> None:
        self._run_config = self._config.model_copy()

    async def _process(self, item: WorkItem) -> bytes:
        return await transform_async(item.source_file, self._run_config)

    def _input_size(self, item: WorkItem) -> int:
        return item.source_file.size

    def _release(self, item: WorkItem) -> None:
        super()._release(item)
        item.preview_handle = None

    # ------------------------------------------------------------------
    # 预览与导出
    # ------------------------------------------------------------------

    def preview(self, item_id: str, converted: bool = False) -> Path:
        """为任务生成预览临时文件，替换并释放之前的预览

        Args:
            item_id: 任务标识
            converted: True 预览转换结果，False 预览原图

        Returns:
            Path: 临时文件路径
        """
        item = self._require(item_id)
        if converted:
            if item.output_payload is None:
                raise ValueError(f"任务尚未完成: {item.display_name}")
            payload = item.output_payload
            name = FileNamingStrategy.converted_entry_name(item.source_file.name)
        else:
            payload = item.source_file.read_bytes()
            name = item.source_file.name

        item.preview_handle = self.handles.acquire(item.id, payload, name)
        return item.preview_handle

    async def export(self) -> ExportResult:
        """把所有已完成的转换结果打包为一个 ZIP

        只读操作，不修改任何任务状态。

        Raises:
            ArchiveError: 没有已完成的任务或归档生成失败
        """
        completed = self.completed_items()
        if not completed:
            raise ArchiveError("没有可导出的已完成任务")

        archiver = Archiver()
        used: set[str] = set()
        for item in completed:
            name = FileNamingStrategy.ensure_unique_name(
                FileNamingStrategy.converted_entry_name(item.source_file.name), used
            )
            archiver.add_entry(name, item.output_payload)  # type: ignore[arg-type]

        try:
            payload = await archiver.finalize_async()
        except ArchiveError as e:
            logger.error(MessageFormatter.operation_failed("导出图片", "zip", e))
            raise

        result = ExportResult(
            file_name=FileNamingStrategy.export_archive_name(),
            payload=payload,
            entry_count=archiver.entry_count,
        )
        logger.info(
            MessageFormatter.export_ready(result.file_name, result.entry_count, result.size)
        )
        return result
