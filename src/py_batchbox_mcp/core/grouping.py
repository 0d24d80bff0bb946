"""分组模块。

按相对路径的第一段把扫描结果划分为命名分组，没有目录的文件单独归入未分组。
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..models.source import ScannedFile
from ..utils.logging_helpers import get_logger


logger = get_logger()


@dataclass
class GroupingResult:
    """分组结果"""

    groups: dict[str, list[ScannedFile]] = field(default_factory=dict)
    ungrouped: list[ScannedFile] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return sum(len(members) for members in self.groups.values()) + len(
            self.ungrouped
        )


def group_by_top_folder(scanned: Iterable[ScannedFile]) -> GroupingResult:
    """按顶层目录名分组

    路径多于一段的文件以第一段为分组名；单段路径（直接拖放的散文件）
    不进入任何命名分组。分组顺序和组内顺序都保持扫描发现顺序。

    Args:
        scanned: 扫描结果

    Returns:
        GroupingResult: 分组映射和未分组文件
    """
    result = GroupingResult()
    for item in scanned:
        segments = item.segments
        if len(segments) > 1:
            result.groups.setdefault(segments[0], []).append(item)
        else:
            result.ungrouped.append(item)

    logger.debug(
        f"分组完成: {len(result.groups)} 个分组, {len(result.ungrouped)} 个未分组文件"
    )
    return result
