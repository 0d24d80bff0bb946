"""归档模块。

把若干 (名称, 数据) 条目打包为内存中的 ZIP，压缩过程中报告进度。
"""

import asyncio
import zipfile
import zlib
from collections.abc import Callable
from io import BytesIO

from ..config import get_config
from ..exceptions import ArchiveError
from ..models.source import SourceFile
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()

ProgressCallback = Callable[[float], None]
EntryPayload = bytes | SourceFile

# 超过该大小的条目需要显式启用 ZIP64
_ZIP64_THRESHOLD = 0x7FFFFFFF


class _ProgressReporter:
    """保证进度单调不减、最后一次为 100"""

    def __init__(self, callback: ProgressCallback | None, total: int):
        self.callback = callback
        self.total = total
        self.done = 0
        self.last = 0.0

    def advance(self, count: int) -> None:
        self.done += count
        if self.callback is None or self.total <= 0:
            return
        percent = min(100.0, self.done / self.total * 100)
        # 100 只在真正完成时报告
        if self.last < percent < 100.0:
            self.last = percent
            self.callback(percent)

    def finish(self) -> None:
        self.last = 100.0
        if self.callback is not None:
            self.callback(100.0)


class Archiver:
    """内存 ZIP 归档器

    每个实例只能 finalize 一次。条目名称不做去重，调用方需要保证不冲突。
    """

    def __init__(self, compress_level: int | None = None, chunk_size: int | None = None):
        settings = get_config().archive
        self.compress_level = (
            compress_level if compress_level is not None else settings.COMPRESS_LEVEL
        )
        self.chunk_size = chunk_size or settings.CHUNK_SIZE
        self._entries: list[tuple[str, EntryPayload]] = []
        self._finalized = False

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self._entries]

    def add_entry(self, path: str, payload: EntryPayload) -> None:
        """追加一个条目

        Args:
            path: 归档内路径（以 / 分隔）
            payload: 条目数据，或在生成时才读取的输入文件
        """
        if self._finalized:
            raise ArchiveError("归档已生成，不能再添加条目")
        self._entries.append((path, payload))

    def finalize(self, progress: ProgressCallback | None = None) -> bytes:
        """生成 ZIP 数据

        Args:
            progress: 进度回调，参数为 0-100 的百分比；可能一次中间回调都没有，
                但完成时一定以 100 调用

        Returns:
            bytes: ZIP 数据

        Raises:
            ArchiveError: 条目数据无法读取或压缩失败
        """
        if self._finalized:
            raise ArchiveError("归档已生成，不能重复使用")
        self._finalized = True

        reporter = _ProgressReporter(progress, self._total_input_bytes())
        buffer = BytesIO()
        try:
            with zipfile.ZipFile(
                buffer,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.compress_level,
            ) as zf:
                for name, payload in self._entries:
                    self._write_entry(zf, name, payload, reporter)
        except ArchiveError:
            buffer.close()
            raise
        except (OSError, ValueError, zlib.error, zipfile.LargeZipFile) as e:
            buffer.close()
            raise ArchiveError(MessageFormatter.operation_failed("压缩归档", "zip", e)) from e

        data = buffer.getvalue()
        reporter.finish()
        logger.debug(f"归档生成完成: {len(self._entries)} 个条目, {len(data)} 字节")
        return data

    async def finalize_async(self, progress: ProgressCallback | None = None) -> bytes:
        """在工作线程中生成归档，进度回调在事件循环中执行"""
        relay: ProgressCallback | None = None
        if progress is not None:
            loop = asyncio.get_running_loop()

            def relay(percent: float) -> None:
                loop.call_soon_threadsafe(progress, percent)

        return await asyncio.to_thread(self.finalize, relay)

    def _total_input_bytes(self) -> int:
        return sum(
            payload.size if isinstance(payload, SourceFile) else len(payload)
            for _, payload in self._entries
        )

    def _write_entry(
        self,
        zf: zipfile.ZipFile,
        name: str,
        payload: EntryPayload,
        reporter: _ProgressReporter,
    ) -> None:
        data = self._resolve(name, payload)
        with zf.open(name, "w", force_zip64=len(data) > _ZIP64_THRESHOLD) as entry:
            view = memoryview(data)
            for offset in range(0, len(view), self.chunk_size):
                chunk = view[offset : offset + self.chunk_size]
                entry.write(chunk)
                reporter.advance(len(chunk))

    @staticmethod
    def _resolve(name: str, payload: EntryPayload) -> bytes:
        if isinstance(payload, SourceFile):
            try:
                return payload.read_bytes()
            except OSError as e:
                raise ArchiveError(
                    MessageFormatter.operation_failed("读取条目数据", name, e), name
                ) from e
        return payload
