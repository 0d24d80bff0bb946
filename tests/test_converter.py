"""图片批量转换器测试。"""

import asyncio
import zipfile
from datetime import date
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from py_batchbox_mcp.engine.converter import ImageBatch
from py_batchbox_mcp.exceptions import ArchiveError, BatchBusyError
from py_batchbox_mcp.models.conversion_config import ConversionConfig
from py_batchbox_mcp.models.work_item import ItemStatus
from tests.conftest import make_image_bytes, make_source


def _sources(count: int, corrupt_index: int | None = None, corrupt: bytes = b""):
    sources = []
    for i in range(count):
        data = corrupt if i == corrupt_index else make_image_bytes((8 + i, 8))
        sources.append(make_source(f"img{i}.png", data))
    return sources


class TestImport:
    """导入测试"""

    def test_add_files_reads_dimensions(self, png_bytes: bytes):
        batch = ImageBatch()

        items, rejected = asyncio.run(
            batch.add_files([make_source("a.png", png_bytes)])
        )

        assert rejected == []
        assert len(batch) == 1
        assert items[0].status == ItemStatus.IDLE
        assert items[0].source_dimensions == (64, 48)

    def test_rejects_unsupported_types(self, png_bytes: bytes):
        """测试只接受 PNG 和 JPEG"""
        batch = ImageBatch()
        sources = [
            make_source("a.png", png_bytes),
            make_source("notes.txt", b"hello"),
            make_source("anim.gif", make_image_bytes(fmt="GIF")),
        ]

        items, rejected = asyncio.run(batch.add_files(sources))

        assert [i.display_name for i in items] == ["a.png"]
        assert [r.name for r in rejected] == ["notes.txt", "anim.gif"]

    def test_corrupt_image_is_still_imported(self, corrupt_bytes: bytes):
        """测试无法读取尺寸的图片也会加入，只是没有尺寸"""
        batch = ImageBatch()

        items, _ = asyncio.run(batch.add_files([make_source("bad.png", corrupt_bytes)]))

        assert items[0].source_dimensions is None

    def test_oversized_image_does_not_abort_import(self, monkeypatch):
        """测试超出像素上限的图片不会中断导入，转换时标记为失败"""
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        batch = ImageBatch()
        sources = [
            make_source("ok.png", make_image_bytes((10, 10))),
            make_source("huge.png", make_image_bytes((100, 100), color=1, mode="1")),
        ]

        items, rejected = asyncio.run(batch.add_files(sources))

        assert rejected == []
        assert len(items) == 2
        assert items[0].source_dimensions == (10, 10)
        assert items[1].source_dimensions is None

        asyncio.run(batch.run())

        assert items[0].status == ItemStatus.COMPLETED
        assert items[1].status == ItemStatus.ERROR
        assert items[1].error_detail

    def test_add_paths(self, folder_tree: Path):
        batch = ImageBatch()

        items, rejected = asyncio.run(batch.add_paths([folder_tree]))

        assert len(items) == 4
        assert rejected == []
        assert items[0].source_file.path == folder_tree / "AlbumA" / "a.png"


class TestRun:
    """批量转换测试"""

    def test_failure_is_isolated(self, corrupt_bytes: bytes):
        """测试单个失败不影响其余任务"""
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(5, corrupt_index=2, corrupt=corrupt_bytes)))

        summary = asyncio.run(batch.run())

        statuses = [item.status for item in batch.snapshot()]
        assert statuses == [
            ItemStatus.COMPLETED,
            ItemStatus.COMPLETED,
            ItemStatus.ERROR,
            ItemStatus.COMPLETED,
            ItemStatus.COMPLETED,
        ]
        assert summary.processed == 5
        assert summary.completed == 4
        assert summary.failed == 1
        failed = batch.snapshot()[2]
        assert failed.error_detail
        assert failed.output_payload is None
        assert not batch.is_running

    def test_completed_items_have_output(self):
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(2)))

        asyncio.run(batch.run())

        for item in batch.snapshot():
            assert item.output_payload is not None
            assert item.output_size == len(item.output_payload)
            assert item.error_detail is None

    def test_rerun_skips_completed(self, corrupt_bytes: bytes):
        """测试重新运行只处理未完成的任务"""
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(3, corrupt_index=1, corrupt=corrupt_bytes)))
        asyncio.run(batch.run())
        first_outputs = [item.output_payload for item in batch.snapshot()]

        summary = asyncio.run(batch.run())

        assert summary.skipped == 2
        assert summary.processed == 1
        assert summary.failed == 1
        assert [item.output_payload for item in batch.snapshot()] == first_outputs

    def test_rerun_after_all_completed_is_noop(self):
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(2)))
        asyncio.run(batch.run())

        summary = asyncio.run(batch.run())

        assert summary.processed == 0
        assert summary.skipped == 2
        assert batch.stats().all_completed

    def test_config_snapshot_is_used(self):
        """测试运行使用当前配置"""
        batch = ImageBatch(config=ConversionConfig(scale=0.5, trim_right=2))
        asyncio.run(batch.add_files([make_source("a.png", make_image_bytes((20, 10)))]))

        asyncio.run(batch.run())

        output = Image.open(BytesIO(batch.snapshot()[0].output_payload))
        assert output.size == (8, 5)

    def test_config_cannot_change_while_running(self):
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(1)))

        async def run_and_modify():
            task = asyncio.create_task(batch.run())
            await asyncio.sleep(0)
            with pytest.raises(BatchBusyError):
                batch.config = ConversionConfig(quality=0.5)
            with pytest.raises(BatchBusyError):
                await batch.run()
            return await task

        summary = asyncio.run(run_and_modify())
        assert summary.completed == 1
        batch.config = ConversionConfig(quality=0.5)
        assert batch.config.quality == 0.5

    def test_timeout_marks_error(self, monkeypatch):
        """测试超时的任务被标记为失败"""
        batch = ImageBatch(item_timeout=0.01)
        asyncio.run(batch.add_files(_sources(1)))

        async def slow(item):
            await asyncio.sleep(1)
            return b""

        monkeypatch.setattr(batch, "_process", slow)
        summary = asyncio.run(batch.run())

        item = batch.snapshot()[0]
        assert summary.failed == 1
        assert item.status == ItemStatus.ERROR
        assert item.error_detail == "处理超时"

    def test_processed_count_follows_each_item(self, corrupt_bytes: bytes):
        """测试已处理计数在每个任务后递增（无论成败），新运行开始时归零"""
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(5, corrupt_index=2, corrupt=corrupt_bytes)))
        seen: list[int] = []
        process = batch._process

        async def counting(item):
            seen.append(batch.processed_count)
            return await process(item)

        batch._process = counting  # type: ignore[method-assign]
        asyncio.run(batch.run())

        assert seen == [0, 1, 2, 3, 4]
        assert batch.processed_count == 5

        asyncio.run(batch.run())

        assert seen[5:] == [0]
        assert batch.processed_count == 1

    def test_reset_allows_reprocessing(self):
        batch = ImageBatch()
        items, _ = asyncio.run(batch.add_files(_sources(1)))
        asyncio.run(batch.run())

        batch.reset(items[0].id)

        assert items[0].status == ItemStatus.IDLE
        assert items[0].output_payload is None
        assert asyncio.run(batch.run()).completed == 1


class TestManagement:
    """任务管理测试"""

    def test_remove_releases_preview(self, png_bytes: bytes):
        """测试移除任务会释放预览临时文件"""
        batch = ImageBatch()
        items, _ = asyncio.run(batch.add_files([make_source("a.png", png_bytes)]))
        handle = batch.preview(items[0].id)
        assert handle.read_bytes() == png_bytes

        assert batch.remove(items[0].id)

        assert not handle.exists()
        assert batch.handles.active_count == 0
        assert batch.get(items[0].id) is None
        assert not batch.remove(items[0].id)

    def test_new_preview_replaces_old(self, png_bytes: bytes):
        batch = ImageBatch()
        items, _ = asyncio.run(batch.add_files([make_source("a.png", png_bytes)]))
        asyncio.run(batch.run())

        original = batch.preview(items[0].id)
        converted = batch.preview(items[0].id, converted=True)

        assert not original.exists()
        assert converted.name == "a.jpg"
        assert converted.read_bytes() == items[0].output_payload
        assert batch.handles.active_count == 1
        batch.clear()

    def test_preview_converted_requires_completion(self, png_bytes: bytes):
        batch = ImageBatch()
        items, _ = asyncio.run(batch.add_files([make_source("a.png", png_bytes)]))

        with pytest.raises(ValueError):
            batch.preview(items[0].id, converted=True)

    def test_clear(self):
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(3)))

        assert batch.clear() == 3
        assert len(batch) == 0

    def test_stats(self, corrupt_bytes: bytes):
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(3, corrupt_index=0, corrupt=corrupt_bytes)))
        asyncio.run(batch.run())

        stats = batch.stats()

        assert stats.total == 3
        assert stats.completed == 2
        assert stats.failed == 1
        assert stats.total_output_bytes > 0
        assert not stats.all_completed


class TestExport:
    """导出测试"""

    def test_export_contains_completed_only(self, corrupt_bytes: bytes):
        """测试导出只包含已完成的任务，条目名改为 .jpg"""
        batch = ImageBatch()
        sources = [
            make_source("one.PNG", make_image_bytes()),
            make_source("two.jpeg", make_image_bytes(fmt="JPEG")),
            make_source("three.png", corrupt_bytes),
        ]
        asyncio.run(batch.add_files(sources))
        asyncio.run(batch.run())

        result = asyncio.run(batch.export())

        with zipfile.ZipFile(BytesIO(result.payload)) as zf:
            names = zf.namelist()
            first = zf.read("one.jpg")
        assert names == ["one.jpg", "two.jpg"]
        assert first == batch.snapshot()[0].output_payload
        assert result.entry_count == 2
        assert result.file_name == f"BatchBox_Images_{date.today().isoformat()}.zip"

    def test_export_does_not_change_state(self):
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(2)))
        asyncio.run(batch.run())
        before = [(i.status, i.output_payload) for i in batch.snapshot()]

        asyncio.run(batch.export())

        assert [(i.status, i.output_payload) for i in batch.snapshot()] == before

    def test_duplicate_names_are_made_unique(self):
        """测试 a.png 和 a.jpg 转换后重名时自动加后缀"""
        batch = ImageBatch()
        sources = [
            make_source("a.png", make_image_bytes()),
            make_source("a.jpg", make_image_bytes(fmt="JPEG")),
        ]
        asyncio.run(batch.add_files(sources))
        asyncio.run(batch.run())

        result = asyncio.run(batch.export())

        with zipfile.ZipFile(BytesIO(result.payload)) as zf:
            assert zf.namelist() == ["a.jpg", "a_1.jpg"]

    def test_export_without_completed_items(self, corrupt_bytes: bytes):
        batch = ImageBatch()
        with pytest.raises(ArchiveError):
            asyncio.run(batch.export())

        asyncio.run(batch.add_files([make_source("bad.png", corrupt_bytes)]))
        asyncio.run(batch.run())
        with pytest.raises(ArchiveError):
            asyncio.run(batch.export())

    def test_save(self, temp_dir: Path):
        batch = ImageBatch()
        asyncio.run(batch.add_files(_sources(1)))
        asyncio.run(batch.run())

        path = asyncio.run(batch.export()).save(temp_dir / "out")

        assert path.exists()
        assert zipfile.is_zipfile(path)
