"""目录扫描模块。

把拖放进来的文件和目录树递归展开为 (文件, 相对路径) 序列。
扫描算法只依赖 PathEntry 能力接口，本地文件系统和内存树各有一个适配器。
"""

import asyncio
import os
from collections.abc import AsyncIterator, Iterable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..config import get_config
from ..exceptions import ScanError
from ..models.source import ScannedFile, SourceFile
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()


class DirectoryReader(Protocol):
    """分页读取目录条目，读完后返回空列表"""

    async def read_entries(self) -> list["PathEntry"]: ...


@runtime_checkable
class PathEntry(Protocol):
    """文件系统条目的能力接口"""

    @property
    def name(self) -> str: ...

    @property
    def is_file(self) -> bool: ...

    @property
    def is_directory(self) -> bool: ...

    def create_reader(self) -> DirectoryReader: ...

    async def read_file(self) -> SourceFile: ...


# ============================================================================
# 本地文件系统适配器
# ============================================================================


class LocalDirectoryReader:
    """本地目录的分页读取器"""

    def __init__(self, path: Path, batch_size: int):
        self.path = path
        self.batch_size = max(1, batch_size)
        self._names: list[str] | None = None
        self._offset = 0

    async def read_entries(self) -> list["LocalPathEntry"]:
        if self._names is None:
            try:
                self._names = await asyncio.to_thread(self._list_names)
            except OSError as e:
                raise ScanError(
                    MessageFormatter.operation_failed("读取目录", self.path, e),
                    str(self.path),
                ) from e

        batch = self._names[self._offset : self._offset + self.batch_size]
        self._offset += len(batch)
        return [LocalPathEntry(self.path / name, self.batch_size) for name in batch]

    def _list_names(self) -> list[str]:
        with os.scandir(self.path) as it:
            return sorted(entry.name for entry in it)


class LocalPathEntry:
    """pathlib 之上的 PathEntry 实现"""

    def __init__(self, path: str | Path, batch_size: int | None = None):
        self.path = Path(path)
        self.batch_size = batch_size or get_config().scan.READ_BATCH_SIZE

    def __repr__(self) -> str:
        return f"LocalPathEntry({str(self.path)!r})"

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_file(self) -> bool:
        return self.path.is_file()

    @property
    def is_directory(self) -> bool:
        # 不跟随目录符号链接，避免循环
        return self.path.is_dir() and not self.path.is_symlink()

    def create_reader(self) -> LocalDirectoryReader:
        return LocalDirectoryReader(self.path, self.batch_size)

    async def read_file(self) -> SourceFile:
        try:
            return await asyncio.to_thread(SourceFile.from_path, self.path)
        except OSError as e:
            raise ScanError(
                MessageFormatter.operation_failed("读取文件", self.path, e),
                str(self.path),
            ) from e


# ============================================================================
# 内存树适配器
# ============================================================================


class MemoryDirectoryReader:
    """内存目录的分页读取器"""

    def __init__(self, children: Sequence["MemoryPathEntry"], batch_size: int):
        self._children = list(children)
        self._batch_size = max(1, batch_size)
        self._offset = 0

    async def read_entries(self) -> list["MemoryPathEntry"]:
        await asyncio.sleep(0)
        batch = self._children[self._offset : self._offset + self._batch_size]
        self._offset += len(batch)
        return batch


class MemoryPathEntry:
    """内存中的 PathEntry 实现，适合已持有数据的调用方"""

    def __init__(
        self,
        name: str,
        data: bytes | None = None,
        children: Sequence["MemoryPathEntry"] | None = None,
        batch_size: int = 2,
    ):
        if (data is None) == (children is None):
            raise ValueError("data 和 children 必须且只能提供一个")
        self._name = name
        self._data = data
        self._children = list(children) if children is not None else None
        self._batch_size = batch_size

    @classmethod
    def file(cls, name: str, data: bytes) -> "MemoryPathEntry":
        return cls(name, data=data)

    @classmethod
    def directory(
        cls, name: str, children: Sequence["MemoryPathEntry"], batch_size: int = 2
    ) -> "MemoryPathEntry":
        return cls(name, children=children, batch_size=batch_size)

    def __repr__(self) -> str:
        kind = "file" if self.is_file else "dir"
        return f"MemoryPathEntry({self._name!r}, {kind})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_file(self) -> bool:
        return self._data is not None

    @property
    def is_directory(self) -> bool:
        return self._children is not None

    def create_reader(self) -> MemoryDirectoryReader:
        if self._children is None:
            raise ScanError(f"不是目录: {self._name}", self._name)
        return MemoryDirectoryReader(self._children, self._batch_size)

    async def read_file(self) -> SourceFile:
        if self._data is None:
            raise ScanError(f"不是文件: {self._name}", self._name)
        return SourceFile.from_bytes(self._name, self._data)


# ============================================================================
# 扫描算法
# ============================================================================


async def read_all_entries(entry: PathEntry) -> list[PathEntry]:
    """反复读取目录条目直到返回空批次"""
    reader = entry.create_reader()
    children: list[PathEntry] = []
    while True:
        batch = await reader.read_entries()
        if not batch:
            return children
        children.extend(batch)


async def _walk(entry: PathEntry, prefix: str) -> list[ScannedFile]:
    """深度优先展开一个条目，子目录并发遍历，结果保持发现顺序"""
    path = prefix + entry.name
    try:
        if entry.is_file:
            source = await entry.read_file()
            logger.debug(f"发现文件: {path}")
            return [ScannedFile(file=source, relative_path=path)]
        if not entry.is_directory:
            return []
        children = await read_all_entries(entry)
    except ScanError as e:
        logger.warning(MessageFormatter.skipped_entry(path, e))
        return []

    branches = await asyncio.gather(*(_walk(child, path + "/") for child in children))
    return [scanned for branch in branches for scanned in branch]


async def scan_entries(roots: Iterable[PathEntry]) -> AsyncIterator[ScannedFile]:
    """扫描拖放根条目，逐个产出叶子文件

    单次遍历，不可重启。每个根条目完整展开后才产出它的文件。

    Args:
        roots: 拖放的根条目（文件或目录）

    Yields:
        ScannedFile: 文件及其相对于拖放根的路径
    """
    for root in roots:
        for scanned in await _walk(root, ""):
            yield scanned


async def collect_scan(roots: Iterable[PathEntry]) -> list[ScannedFile]:
    """完整扫描并返回全部结果"""
    results = [scanned async for scanned in scan_entries(roots)]
    logger.info(f"扫描完成，共 {len(results)} 个文件")
    return results


async def scan_paths(paths: Iterable[str | Path]) -> list[ScannedFile]:
    """扫描本地路径（文件或目录）"""
    roots: list[PathEntry] = []
    for path in paths:
        path = Path(path)
        if not path.exists():
            logger.warning(MessageFormatter.file_not_found(path))
            continue
        roots.append(LocalPathEntry(path))
    return await collect_scan(roots)


def flat_entries(files: Iterable[SourceFile]) -> list[ScannedFile]:
    """不支持目录条目时的降级处理：每个文件都是没有分组路径的根级文件"""
    return [ScannedFile(file=f, relative_path=f.name) for f in files]


async def collect_drop(items: Iterable[PathEntry | SourceFile]) -> list[ScannedFile]:
    """处理混合拖放：目录条目递归扫描，普通文件按根级文件处理"""
    results: list[ScannedFile] = []
    for item in items:
        if isinstance(item, SourceFile):
            results.extend(flat_entries([item]))
        else:
            results.extend(await _walk(item, ""))
    return results
