"""图片转换引擎模块。

解码 → 缩放 → 右侧裁剪 → 底色填充 → 合成 → JPEG 编码。
纯函数：只返回输出数据，不修改任何任务状态。
"""

import asyncio
import math
from io import BytesIO

from PIL import Image, ImageOps
from PIL.Image import DecompressionBombError

from ..exceptions import DecodeError, EncodeError, handle_image_errors
from ..models.constants import ImageFormats
from ..models.conversion_config import ConversionConfig
from ..models.source import SourceFile
from ..utils.logging_helpers import get_logger


logger = get_logger()

# EXIF 方向值中需要交换宽高的取值
_ROTATED_ORIENTATIONS = {5, 6, 7, 8}
_ORIENTATION_TAG = 0x0112


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def target_dimensions(width: int, height: int, scale: float) -> tuple[int, int]:
    """按比例计算目标尺寸，最小 1×1"""
    return (
        max(1, _round_half_up(width * scale)),
        max(1, _round_half_up(height * scale)),
    )


def _read_source(source: SourceFile) -> bytes:
    try:
        return source.read_bytes()
    except OSError as e:
        raise DecodeError(f"无法读取文件: {e}", source.name) from e


@handle_image_errors("图像解码", DecodeError)
def decode_image(data: bytes) -> Image.Image:
    """把输入数据解码为原始尺寸的 RGBA 图像（已应用 EXIF 方向）"""
    if not data:
        raise DecodeError("输入数据为空")
    with Image.open(BytesIO(data)) as img:
        img.load()
        oriented = ImageOps.exif_transpose(img)
        return oriented.convert("RGBA")


def compose(img: Image.Image, config: ConversionConfig) -> Image.Image:
    """缩放、裁剪并合成到底色上

    必须先填充底色再合成，透明像素才会显示为底色。

    Args:
        img: RGBA 源图像
        config: 转换配置

    Returns:
        Image.Image: RGB 目标图像
    """
    target_w, target_h = target_dimensions(img.width, img.height, config.scale)
    dest_w = max(1, target_w - config.trim_right)

    canvas = Image.new("RGB", (dest_w, target_h), config.matte_rgb)

    scaled = img
    if scaled.size != (target_w, target_h):
        scaled = img.resize((target_w, target_h), Image.Resampling.LANCZOS)
    if dest_w < target_w:
        scaled = scaled.crop((0, 0, dest_w, target_h))

    canvas.paste(scaled, (0, 0), scaled)
    return canvas


@handle_image_errors("图像编码", EncodeError)
def encode_jpeg(img: Image.Image, quality: int) -> bytes:
    """编码为 JPEG"""
    buffer = BytesIO()
    img.save(buffer, format=ImageFormats.OUTPUT_FORMAT, quality=quality, optimize=True)
    payload = buffer.getvalue()
    if not payload:
        raise EncodeError("编码结果为空")
    return payload


def transform(source: SourceFile, config: ConversionConfig) -> bytes:
    """转换单张图片

    Args:
        source: 输入文件
        config: 转换配置

    Returns:
        bytes: JPEG 数据

    Raises:
        DecodeError: 输入无法解码为图像
        EncodeError: 输出编码失败
    """
    img = decode_image(_read_source(source))
    try:
        composed = compose(img, config)
    except (ValueError, OSError) as e:
        raise EncodeError(f"图像合成失败: {e}", source.name) from e

    payload = encode_jpeg(composed, config.jpeg_quality)
    logger.debug(
        f"转换 {source.name}: {img.size} → {composed.size}, 质量 {config.jpeg_quality}"
    )
    return payload


async def transform_async(source: SourceFile, config: ConversionConfig) -> bytes:
    """在工作线程中执行 transform，避免阻塞事件循环"""
    return await asyncio.to_thread(transform, source, config)


def read_dimensions(source: SourceFile) -> tuple[int, int] | None:
    """读取原始尺寸（考虑 EXIF 方向），无法解码时返回 None"""
    try:
        with Image.open(BytesIO(_read_source(source))) as img:
            width, height = img.size
            orientation = img.getexif().get(_ORIENTATION_TAG)
    except (DecodeError, DecompressionBombError, OSError, ValueError) as e:
        logger.debug(f"无法读取尺寸 {source.name}: {e}")
        return None

    if orientation in _ROTATED_ORIENTATIONS:
        return height, width
    return width, height


async def read_dimensions_async(source: SourceFile) -> tuple[int, int] | None:
    return await asyncio.to_thread(read_dimensions, source)
