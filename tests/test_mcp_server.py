"""MCP 服务器与会话测试。"""

import asyncio
import zipfile
from pathlib import Path

from fastmcp import Client

from py_batchbox_mcp.models.work_item import ItemStatus
from py_batchbox_mcp.session import BatchBoxSession, describe_item


class TestMCPServer:
    """MCP服务器功能测试"""

    def test_mcp_server_imports(self):
        """测试MCP服务器模块导入"""
        from py_batchbox_mcp.mcp_server import mcp

        assert mcp is not None

    def test_mcp_tools(self):
        """测试 MCP 工具注册（通过服务器自身的工具列表）"""
        from py_batchbox_mcp.mcp_server import mcp

        async def list_names() -> set[str]:
            async with Client(mcp) as client:
                return {tool.name for tool in await client.list_tools()}

        expected = {
            "add_images",
            "convert_images",
            "export_images",
            "add_folders",
            "zip_folders",
            "export_folder_zips",
            "list_items",
            "remove_item",
            "clear_items",
            "get_status",
        }
        assert expected <= asyncio.run(list_names())

    def test_response_builder(self):
        from py_batchbox_mcp.exceptions import BatchBusyError, ValidationError
        from py_batchbox_mcp.mcp_server import MCPResponseBuilder

        busy = MCPResponseBuilder.from_exception(BatchBusyError("忙"), "图片转换")
        invalid = MCPResponseBuilder.from_exception(ValidationError("错"), "图片转换")
        missing = MCPResponseBuilder.from_exception(KeyError("任务不存在: x"), "查询")

        assert busy == {"success": False, "error": "忙", "error_type": "busy"}
        assert invalid["error_type"] == "validation"
        assert missing["error_type"] == "not_found"


class TestSession:
    """会话端到端测试"""

    def test_convert_workflow(self, folder_tree: Path, temp_dir: Path):
        """测试导入、转换、导出的完整流程"""
        with BatchBoxSession() as session:
            asyncio.run(session.images.add_paths([folder_tree]))
            summary = asyncio.run(session.convert(quality_percent=70, scale_percent=50))
            path = asyncio.run(session.export_images(temp_dir / "out"))

            assert summary.completed == 4
            assert session.images.config.jpeg_quality == 70
            with zipfile.ZipFile(path) as zf:
                assert zf.namelist() == ["a.jpg", "b.jpg", "c.jpg", "loose.jpg"]

    def test_convert_keeps_unspecified_settings(self):
        with BatchBoxSession() as session:
            asyncio.run(session.convert(trim_right=4))
            asyncio.run(session.convert(quality_percent=50))

            assert session.images.config.trim_right == 4
            assert session.images.config.jpeg_quality == 50

    def test_folder_workflow(self, folder_tree: Path, temp_dir: Path):
        with BatchBoxSession() as session:
            asyncio.run(
                session.folders.add_paths(
                    [folder_tree / "AlbumA", folder_tree / "AlbumB"]
                )
            )
            asyncio.run(session.zip_folders())
            paths = session.export_folders(temp_dir / "zips")

            assert [p.name for p in paths] == ["AlbumA.zip", "AlbumB.zip"]

    def test_find_and_remove(self, folder_tree: Path):
        with BatchBoxSession() as session:
            items, _ = asyncio.run(session.images.add_paths([folder_tree / "loose.png"]))
            tasks, _ = asyncio.run(session.folders.add_paths([folder_tree / "AlbumB"]))

            assert session.find(items[0].id) is items[0]
            assert session.find(tasks[0].id) is tasks[0]
            assert session.remove(tasks[0].id)
            assert session.find(tasks[0].id) is None
            assert not session.remove("missing")

    def test_describe(self, folder_tree: Path):
        with BatchBoxSession() as session:
            items, _ = asyncio.run(session.images.add_paths([folder_tree / "loose.png"]))
            tasks, _ = asyncio.run(session.folders.add_paths([folder_tree / "AlbumA"]))

            image_info = describe_item(items[0])
            folder_info = describe_item(tasks[0])
            overview = session.describe()

            assert image_info["kind"] == "image"
            assert image_info["status"] == ItemStatus.IDLE.value
            assert image_info["dimensions"] == (64, 48)
            assert folder_info["kind"] == "folder"
            assert folder_info["file_count"] == 2
            assert overview["images"]["total"] == 1
            assert overview["config"]["quality_percent"] == 90
            assert not overview["running"]
