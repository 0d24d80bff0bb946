"""归档模块测试。"""

import asyncio
import zipfile
from io import BytesIO
from pathlib import Path

import pytest

from py_batchbox_mcp.core.archiver import Archiver
from py_batchbox_mcp.exceptions import ArchiveError
from py_batchbox_mcp.models.source import SourceFile


def _read_zip(payload: bytes) -> dict[str, bytes]:
    with zipfile.ZipFile(BytesIO(payload)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


class TestArchiver:
    """内存 ZIP 归档测试"""

    def test_entries_are_preserved(self):
        """测试解压后条目名称和内容完全一致"""
        archiver = Archiver()
        archiver.add_entry("a.jpg", b"alpha")
        archiver.add_entry("sub/b.jpg", b"beta" * 100)

        contents = _read_zip(archiver.finalize())

        assert contents == {"a.jpg": b"alpha", "sub/b.jpg": b"beta" * 100}
        assert archiver.entry_count == 2
        assert archiver.names == ["a.jpg", "sub/b.jpg"]

    def test_entries_are_deflated(self):
        archiver = Archiver()
        archiver.add_entry("text.txt", b"a" * 10000)

        with zipfile.ZipFile(BytesIO(archiver.finalize())) as zf:
            info = zf.getinfo("text.txt")

        assert info.compress_type == zipfile.ZIP_DEFLATED
        assert info.compress_size < info.file_size

    def test_source_file_entries(self, temp_dir: Path):
        """测试条目数据可以延迟到生成时从磁盘读取"""
        path = temp_dir / "photo.png"
        path.write_bytes(b"on disk")

        archiver = Archiver()
        archiver.add_entry("photo.png", SourceFile.from_path(path))

        assert _read_zip(archiver.finalize()) == {"photo.png": b"on disk"}

    def test_empty_archive(self):
        assert _read_zip(Archiver().finalize()) == {}

    def test_progress_is_monotonic_and_ends_at_100(self):
        """测试进度单调递增且最后一次回调为 100"""
        archiver = Archiver(chunk_size=1024)
        for i in range(4):
            archiver.add_entry(f"{i}.bin", bytes(range(256)) * 16)

        reported: list[float] = []
        archiver.finalize(reported.append)

        assert reported[-1] == 100
        assert reported == sorted(reported)
        assert all(p < 100 for p in reported[:-1])
        assert len(reported) > 2

    def test_progress_with_empty_entries(self):
        """测试没有数据时仍然以 100 结束"""
        archiver = Archiver()
        archiver.add_entry("empty.txt", b"")

        reported: list[float] = []
        archiver.finalize(reported.append)

        assert reported == [100]

    def test_unreadable_source_raises_archive_error(self, temp_dir: Path):
        """测试条目数据无法读取时整个归档失败"""
        missing = SourceFile(
            name="missing.png",
            size=10,
            mime_type="image/png",
            path=temp_dir / "missing.png",
        )
        archiver = Archiver()
        archiver.add_entry("ok.txt", b"fine")
        archiver.add_entry("missing.png", missing)

        reported: list[float] = []
        with pytest.raises(ArchiveError):
            archiver.finalize(reported.append)
        assert 100 not in reported

    def test_single_use(self):
        """测试归档器只能生成一次"""
        archiver = Archiver()
        archiver.add_entry("a.txt", b"a")
        archiver.finalize()

        with pytest.raises(ArchiveError):
            archiver.finalize()
        with pytest.raises(ArchiveError):
            archiver.add_entry("b.txt", b"b")

    def test_finalize_async_relays_progress(self):
        """测试异步生成时进度在事件循环中回调"""
        archiver = Archiver(chunk_size=512)
        archiver.add_entry("data.bin", b"x" * 4096)
        reported: list[float] = []

        async def run():
            payload = await archiver.finalize_async(reported.append)
            # 让排队的回调执行完
            await asyncio.sleep(0)
            return payload

        payload = asyncio.run(run())

        assert _read_zip(payload) == {"data.bin": b"x" * 4096}
        assert reported[-1] == 100
        assert reported == sorted(reported)
