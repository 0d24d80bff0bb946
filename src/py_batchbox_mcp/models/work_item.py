"""批处理任务模型。

定义图片转换任务（WorkItem）和文件夹打包任务（ZipGroupTask）及其状态。
状态只能由编排器通过 mark_* 方法修改。
"""

import uuid
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .source import ScannedFile, SourceFile


class ItemStatus(str, Enum):
    """任务状态枚举"""

    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


def generate_id() -> str:
    """生成任务标识"""
    return uuid.uuid4().hex[:12]


class BatchTask(BaseModel):
    """任务基类，包含状态机和输出字段"""

    id: str = Field(default_factory=generate_id, description="任务标识")
    status: ItemStatus = Field(ItemStatus.IDLE, description="任务状态")
    error_detail: str | None = Field(None, description="错误描述")
    attempt: int = Field(0, ge=0, description="进入处理状态的次数")

    @property
    def display_name(self) -> str:
        raise NotImplementedError

    @property
    def output(self) -> bytes | None:
        raise NotImplementedError

    @property
    def is_completed(self) -> bool:
        return self.status == ItemStatus.COMPLETED

    def mark_processing(self) -> None:
        self.attempt += 1
        self.status = ItemStatus.PROCESSING
        self.error_detail = None
        self._clear_output()

    def mark_completed(self, payload: bytes) -> None:
        if self.output is not None:
            raise RuntimeError(f"任务 {self.id} 的输出已设置，不可覆盖")
        self._set_output(payload)
        self.error_detail = None
        self.status = ItemStatus.COMPLETED

    def mark_error(self, detail: str) -> None:
        self._clear_output()
        self.error_detail = detail
        self.status = ItemStatus.ERROR

    def mark_idle(self) -> None:
        self._clear_output()
        self.error_detail = None
        self.status = ItemStatus.IDLE

    def _set_output(self, payload: bytes) -> None:
        raise NotImplementedError

    def _clear_output(self) -> None:
        raise NotImplementedError


class WorkItem(BatchTask):
    """单张图片的转换任务"""

    source_file: SourceFile = Field(description="原始输入文件")
    source_dimensions: tuple[int, int] | None = Field(None, description="原始尺寸")
    output_payload: bytes | None = Field(None, repr=False, description="输出数据")
    preview_handle: Path | None = Field(None, description="预览临时文件")

    @property
    def display_name(self) -> str:
        return self.source_file.name

    @property
    def output(self) -> bytes | None:
        return self.output_payload

    @property
    def output_size(self) -> int | None:
        """输出大小（字节）"""
        return len(self.output_payload) if self.output_payload is not None else None

    def _set_output(self, payload: bytes) -> None:
        self.output_payload = payload

    def _clear_output(self) -> None:
        self.output_payload = None


class ZipGroupTask(BatchTask):
    """一个顶层文件夹的打包任务"""

    group_name: str = Field(description="分组名称（顶层目录名）")
    member_files: tuple[ScannedFile, ...] = Field(description="成员文件，创建后不可变")
    progress_percent: float = Field(0.0, ge=0, le=100, description="打包进度")
    output_archive: bytes | None = Field(None, repr=False, description="输出归档")

    @property
    def display_name(self) -> str:
        return self.group_name

    @property
    def output(self) -> bytes | None:
        return self.output_archive

    @property
    def output_size(self) -> int | None:
        """归档大小（字节）"""
        return len(self.output_archive) if self.output_archive is not None else None

    @property
    def total_input_bytes(self) -> int:
        """成员文件总大小"""
        return sum(member.file.size for member in self.member_files)

    def archive_path(self, member: ScannedFile) -> str:
        """成员在归档内的路径：去掉开头的分组目录段"""
        segments = member.segments
        if len(segments) > 1 and segments[0] == self.group_name:
            stripped = "/".join(segments[1:])
            if stripped:
                return stripped
        return member.file.name

    def mark_processing(self) -> None:
        super().mark_processing()
        self.progress_percent = 0.0

    def mark_completed(self, payload: bytes) -> None:
        super().mark_completed(payload)
        self.progress_percent = 100.0

    def mark_idle(self) -> None:
        super().mark_idle()
        self.progress_percent = 0.0

    def _set_output(self, payload: bytes) -> None:
        self.output_archive = payload

    def _clear_output(self) -> None:
        self.output_archive = None
