"""批处理结果模型。

定义单次运行摘要、集合统计和导出结果的数据结构。
"""

from pathlib import Path

from humanize import naturalsize
from pydantic import BaseModel, Field


class BaseResult(BaseModel):
    """结果基类"""

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)


class RunSummary(BaseResult):
    """一次批处理运行的摘要"""

    processed: int = Field(0, description="本次处理的任务数")
    completed: int = Field(0, description="成功数")
    failed: int = Field(0, description="失败数")
    skipped: int = Field(0, description="已完成而跳过的任务数")
    output_bytes: int = Field(0, description="本次输出总大小")

    def get_success_rate(self) -> float:
        """成功率（百分比）"""
        if self.processed == 0:
            return 0.0
        return (self.completed / self.processed) * 100

    def get_summary(self) -> str:
        """运行摘要"""
        return (
            f"处理 {self.completed}/{self.processed} 个任务 "
            f"(成功率 {self.get_success_rate():.1f}%, 跳过 {self.skipped}), "
            f"输出 {self.format_size(self.output_bytes)}"
        )


class BatchStats(BaseResult):
    """任务集合统计"""

    total: int = Field(description="任务总数")
    completed: int = Field(description="已完成数")
    failed: int = Field(description="失败数")
    total_output_bytes: int = Field(description="已完成任务的输出总大小")

    @property
    def all_completed(self) -> bool:
        return self.total > 0 and self.completed == self.total


class ExportResult(BaseResult):
    """可下载的导出归档"""

    file_name: str = Field(description="归档文件名")
    payload: bytes = Field(repr=False, description="归档数据")
    entry_count: int = Field(description="条目数")

    @property
    def size(self) -> int:
        return len(self.payload)

    def get_size_human(self) -> str:
        return self.format_size(self.size)

    def save(self, directory: str | Path) -> Path:
        """把归档写入目录，返回文件路径"""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / self.file_name
        target.write_bytes(self.payload)
        return target
