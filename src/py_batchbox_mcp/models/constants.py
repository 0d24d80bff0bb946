"""文件类型相关常量定义。

基于 Pillow 动态能力的格式识别，避免硬编码重复。
"""

import re
from functools import lru_cache
from typing import Final

from PIL import Image


class ImageFormats:
    """基于 Pillow 的动态图像格式管理"""

    # 只定义 Pillow 未提供的特殊 MIME 类型
    SPECIAL_MIME_TYPES: Final[dict[str, str]] = {
        "ICO": "image/x-icon",
        "PPM": "image/x-portable-pixmap",
    }

    # 转换器接受的输入类型
    ACCEPTED_MIME_TYPES: Final[frozenset[str]] = frozenset({"image/png", "image/jpeg"})

    OUTPUT_FORMAT: Final[str] = "JPEG"
    OUTPUT_EXTENSION: Final[str] = ".jpg"

    # 输出命名时去除的原始扩展名
    STRIPPED_SUFFIX: Final[re.Pattern[str]] = re.compile(
        r"\.(png|jpe?g)$", re.IGNORECASE
    )

    DEFAULT_MIME_TYPE: Final[str] = "application/octet-stream"

    @classmethod
    def get_mime_type(cls, format_name: str) -> str:
        """根据 Pillow 格式名获取 MIME 类型"""
        format_upper = format_name.upper()
        if format_upper in cls.SPECIAL_MIME_TYPES:
            return cls.SPECIAL_MIME_TYPES[format_upper]
        return Image.MIME.get(format_upper, f"image/{format_upper.lower()}")

    @classmethod
    def is_accepted(cls, mime_type: str | None) -> bool:
        """判断是否为转换器接受的输入类型"""
        return mime_type in cls.ACCEPTED_MIME_TYPES


@lru_cache(maxsize=256)
def guess_mime_type(file_name: str) -> str:
    """根据文件扩展名推断声明的 MIME 类型

    使用 Pillow 的扩展名注册表，非图像文件返回 application/octet-stream。
    """
    dot = file_name.rfind(".")
    if dot == -1:
        return ImageFormats.DEFAULT_MIME_TYPE

    format_name = Image.registered_extensions().get(file_name[dot:].lower())
    if not format_name:
        return ImageFormats.DEFAULT_MIME_TYPE
    return ImageFormats.get_mime_type(format_name)
