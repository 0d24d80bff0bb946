"""文件命名工具模块。

提供导出条目和导出归档的统一命名规则。
"""

import itertools
from datetime import date

from ..config import get_config
from ..models.constants import ImageFormats


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def converted_entry_name(source_name: str) -> str:
        """转换后的条目名：去掉结尾的 .png/.jpg/.jpeg（不区分大小写）再加 .jpg

        Args:
            source_name: 原始文件名

        Returns:
            str: 归档内条目名
        """
        stem = ImageFormats.STRIPPED_SUFFIX.sub("", source_name)
        return f"{stem}{ImageFormats.OUTPUT_EXTENSION}"

    @staticmethod
    def export_archive_name(today: date | None = None) -> str:
        """图片导出归档名，包含日期戳"""
        today = today or date.today()
        template = get_config().conversion.EXPORT_NAME_TEMPLATE
        return template.format(date=today.isoformat())

    @staticmethod
    def group_archive_name(group_name: str) -> str:
        """文件夹打包的归档名"""
        return f"{group_name}.zip"

    @staticmethod
    def ensure_unique_name(name: str, used: set[str]) -> str:
        """确保名称在 used 中唯一，冲突时添加数字后缀，并登记到 used

        Args:
            name: 原始名称
            used: 已使用的名称集合

        Returns:
            str: 唯一的名称
        """
        if name not in used:
            used.add(name)
            return name

        dot = name.rfind(".")
        base, suffix = (name[:dot], name[dot:]) if dot > 0 else (name, "")
        for counter in itertools.count(1):
            candidate = f"{base}_{counter}{suffix}"
            if candidate not in used:
                used.add(candidate)
                return candidate

        return name  # pragma: no cover
