"""测试配置文件。

提供测试所需的fixtures和配置。
"""

import tempfile
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_batchbox_mcp.config import reset_config
from py_batchbox_mcp.models.source import SourceFile


def make_image_bytes(
    size: tuple[int, int] = (10, 10),
    color: tuple[int, ...] | str = "red",
    mode: str = "RGB",
    fmt: str = "PNG",
) -> bytes:
    """生成内存中的测试图片"""
    img = Image.new(mode, size, color=color)
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def make_source(name: str, data: bytes) -> SourceFile:
    """创建内存输入文件"""
    return SourceFile.from_bytes(name, data)


@pytest.fixture(autouse=True)
def fresh_config():
    """每个测试使用全新的全局配置"""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes((64, 48), color="blue")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes((40, 30), color="green", fmt="JPEG")


@pytest.fixture
def transparent_png() -> bytes:
    """完全透明的 10×10 PNG"""
    return make_image_bytes((10, 10), color=(0, 0, 0, 0), mode="RGBA")


@pytest.fixture
def half_transparent_png() -> bytes:
    """左半不透明红色、右半透明的 20×10 PNG"""
    img = Image.new("RGBA", (20, 10), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle([0, 0, 9, 9], fill=(255, 0, 0, 255))
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def corrupt_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\n this is not really an image"


@pytest.fixture
def folder_tree(temp_dir: Path, png_bytes: bytes, jpeg_bytes: bytes) -> Path:
    """磁盘上的拖放目录结构

    drop/
        AlbumA/a.png
        AlbumA/nested/b.png
        AlbumB/c.jpg
        loose.png
    """
    root = temp_dir / "drop"
    (root / "AlbumA" / "nested").mkdir(parents=True)
    (root / "AlbumB").mkdir()
    (root / "AlbumA" / "a.png").write_bytes(png_bytes)
    (root / "AlbumA" / "nested" / "b.png").write_bytes(png_bytes)
    (root / "AlbumB" / "c.jpg").write_bytes(jpeg_bytes)
    (root / "loose.png").write_bytes(png_bytes)
    return root
