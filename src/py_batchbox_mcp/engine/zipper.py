"""文件夹批量打包器模块。

每个顶层文件夹对应一个打包任务，顺序压缩并记录进度。
"""

from collections.abc import Iterable
from pathlib import Path

from ..core.archiver import Archiver
from ..core.grouping import group_by_top_folder
from ..core.scanner import PathEntry, collect_drop, scan_paths
from ..exceptions import ArchiveError
from ..models.batch_result import ExportResult
from ..models.source import ScannedFile, SourceFile
from ..models.work_item import ItemStatus, ZipGroupTask
from ..utils.logging_helpers import get_logger
from ..utils.naming_helpers import FileNamingStrategy
from .orchestrator import BatchOrchestrator


logger = get_logger()


class FolderBatch(BatchOrchestrator[ZipGroupTask]):
    """文件夹批量打包器"""

    operation_name = "文件夹打包"

    def add_scanned(
        self, scanned: Iterable[ScannedFile], loose_group: str | None = None
    ) -> tuple[list[ZipGroupTask], list[ScannedFile]]:
        """按顶层目录分组并创建打包任务

        Args:
            scanned: 扫描结果
            loose_group: 散文件的伪分组名；为 None 时散文件不进入任何任务

        Returns:
            tuple: (新建的任务, 未进入任何任务的散文件)
        """
        grouping = group_by_top_folder(scanned)
        groups = dict(grouping.groups)
        leftover = grouping.ungrouped

        if loose_group and leftover:
            groups.setdefault(loose_group, []).extend(leftover)
            leftover = []
        elif leftover:
            logger.warning(
                f"{len(leftover)} 个文件不在任何文件夹中，未加入打包任务: "
                + ", ".join(s.relative_path for s in leftover[:5])
            )

        tasks = [
            ZipGroupTask(group_name=name, member_files=tuple(members))
            for name, members in groups.items()
        ]
        self.add(tasks)
        logger.info(f"新增 {len(tasks)} 个打包任务")
        return tasks, leftover

    async def add_drop(
        self, items: Iterable[PathEntry | SourceFile], loose_group: str | None = None
    ) -> tuple[list[ZipGroupTask], list[ScannedFile]]:
        """导入拖放内容（目录条目或散文件）"""
        return self.add_scanned(await collect_drop(items), loose_group)

    async def add_paths(
        self, paths: Iterable[str | Path], loose_group: str | None = None
    ) -> tuple[list[ZipGroupTask], list[ScannedFile]]:
        """导入本地目录"""
        return self.add_scanned(await scan_paths(paths), loose_group)

    async def _process(self, item: ZipGroupTask) -> bytes:
        archiver = Archiver()
        for member in item.member_files:
            archiver.add_entry(item.archive_path(member), member.file)

        attempt = item.attempt

        def on_progress(percent: float) -> None:
            # 超时后被放弃的工作线程仍会回调，只接受当前这次处理的进度
            if item.status == ItemStatus.PROCESSING and item.attempt == attempt:
                item.progress_percent = percent

        return await archiver.finalize_async(on_progress)

    def _input_size(self, item: ZipGroupTask) -> int:
        return item.total_input_bytes

    def export_one(self, task_id: str) -> ExportResult:
        """导出单个已完成的打包任务"""
        task = self._require(task_id)
        if not task.is_completed or task.output_archive is None:
            raise ArchiveError(f"打包任务尚未完成: {task.group_name}", task_id)
        return ExportResult(
            file_name=FileNamingStrategy.group_archive_name(task.group_name),
            payload=task.output_archive,
            entry_count=len(task.member_files),
        )

    def export_all(self) -> list[ExportResult]:
        """导出所有已完成的打包任务，每个分组一个 ZIP"""
        results = []
        used: set[str] = set()
        for task in self.completed_items():
            result = self.export_one(task.id)
            result.file_name = FileNamingStrategy.ensure_unique_name(
                result.file_name, used
            )
            results.append(result)
        return results
