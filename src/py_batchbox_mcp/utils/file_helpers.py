"""文件筛选工具模块。

按声明的 MIME 类型筛选转换器可接受的输入文件。
"""

from collections.abc import Iterable

from ..models.constants import ImageFormats
from ..models.source import SourceFile
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def is_accepted_image(source: SourceFile) -> bool:
    """是否为 PNG 或 JPEG 输入"""
    return ImageFormats.is_accepted(source.mime_type)


def partition_accepted(
    sources: Iterable[SourceFile],
) -> tuple[list[SourceFile], list[SourceFile]]:
    """把输入文件分为可接受和被拒绝两部分，保持原顺序

    Returns:
        tuple: (可接受的文件, 被拒绝的文件)
    """
    accepted: list[SourceFile] = []
    rejected: list[SourceFile] = []
    for source in sources:
        if is_accepted_image(source):
            accepted.append(source)
        else:
            logger.warning(MessageFormatter.unsupported_type(source.name, source.mime_type))
            rejected.append(source)
    return accepted, rejected
