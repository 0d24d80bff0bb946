"""批处理会话接口。

把图片转换器和文件夹打包器组合在一起，共享临时句柄管理，
为上层触发界面提供简洁的入口。
"""

from pathlib import Path
from typing import Any

from .engine.config import ConfigBuilder
from .engine.converter import ImageBatch
from .engine.zipper import FolderBatch
from .models.batch_result import ExportResult, RunSummary
from .models.work_item import BatchTask, WorkItem, ZipGroupTask
from .utils.cleanup_helpers import HandleManager
from .utils.logging_helpers import get_logger


logger = get_logger()


class BatchBoxSession:
    """一次会话内的全部批处理状态

    只保存在内存中，关闭会话时释放所有临时句柄。

    Examples:
        >>> with BatchBoxSession() as session:
        ...     await session.images.add_paths(["photos/"])
        ...     await session.convert(quality_percent=80)
        ...     (await session.images.export()).save("out/")
    """

    def __init__(self, item_timeout: float | None = None):
        self.handles = HandleManager()
        self.config_builder = ConfigBuilder()
        self.images = ImageBatch(item_timeout=item_timeout, handles=self.handles)
        self.folders = FolderBatch(item_timeout=item_timeout, handles=self.handles)
        logger.debug("创建批处理会话")

    async def convert(
        self,
        quality_percent: int | None = None,
        scale_percent: int | None = None,
        trim_right: int | None = None,
        matte_color: str | None = None,
    ) -> RunSummary:
        """更新转换配置（未提供的参数保持不变）并运行图片转换"""
        self.images.config = self.config_builder.from_ui(
            quality_percent=quality_percent,
            scale_percent=scale_percent,
            trim_right=trim_right,
            matte_color=matte_color,
            base=self.images.config,
        )
        return await self.images.run()

    async def zip_folders(self) -> RunSummary:
        return await self.folders.run()

    async def export_images(self, output_dir: str | Path) -> Path:
        result = await self.images.export()
        return result.save(output_dir)

    def export_folders(self, output_dir: str | Path) -> list[Path]:
        return [result.save(output_dir) for result in self.folders.export_all()]

    def find(self, item_id: str) -> BatchTask | None:
        return self.images.get(item_id) or self.folders.get(item_id)

    def remove(self, item_id: str) -> bool:
        return self.images.remove(item_id) or self.folders.remove(item_id)

    def describe(self) -> dict[str, Any]:
        """会话状态概览"""
        return {
            "config": ConfigBuilder.to_ui(self.images.config),
            "images": self.images.stats().model_dump(),
            "folders": self.folders.stats().model_dump(),
            "running": self.images.is_running or self.folders.is_running,
        }

    def close(self) -> None:
        self.images.clear()
        self.folders.clear()
        self.handles.release_all()

    def __enter__(self):
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        del exc_type, exc_val, exc_tb
        self.close()


def describe_item(item: BatchTask) -> dict[str, Any]:
    """把任务转换为可序列化的字典"""
    info: dict[str, Any] = {
        "id": item.id,
        "name": item.display_name,
        "status": item.status.value,
        "error": item.error_detail,
    }
    match item:
        case WorkItem():
            info.update(
                kind="image",
                input_size=item.source_file.size,
                dimensions=item.source_dimensions,
                output_size=item.output_size,
            )
        case ZipGroupTask():
            info.update(
                kind="folder",
                file_count=len(item.member_files),
                input_size=item.total_input_bytes,
                progress=item.progress_percent,
                output_size=item.output_size,
            )
    return info


def describe_export(result: ExportResult, path: Path) -> dict[str, Any]:
    return {
        "file_name": result.file_name,
        "path": str(path),
        "entries": result.entry_count,
        "size": result.size,
        "size_human": result.get_size_human(),
    }
