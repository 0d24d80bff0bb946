"""临时句柄管理模块。

预览和下载用的临时文件按所属任务登记，任务移除或句柄被替换时释放。
"""

import shutil
import tempfile
from pathlib import Path
from typing import Any

from .logging_helpers import get_logger


logger = get_logger()


class HandleManager:
    """临时文件句柄管理器

    每个所属者（通常是任务 id）同时最多持有一个句柄，新句柄会替换并释放旧句柄。
    """

    def __init__(self, prefix: str = "batchbox_"):
        self.prefix = prefix
        self._root: Path | None = None
        self._handles: dict[str, Path] = {}

    @property
    def active_count(self) -> int:
        return len(self._handles)

    def get(self, owner: str) -> Path | None:
        return self._handles.get(owner)

    def acquire(self, owner: str, payload: bytes, file_name: str) -> Path:
        """为所属者写入临时文件并返回路径

        Args:
            owner: 所属者标识
            payload: 文件内容
            file_name: 临时文件名（不含目录）

        Returns:
            Path: 临时文件路径
        """
        self.release(owner)

        owner_dir = self._ensure_root() / owner
        owner_dir.mkdir(parents=True, exist_ok=True)
        handle = owner_dir / Path(file_name).name
        handle.write_bytes(payload)
        self._handles[owner] = handle
        logger.debug(f"创建临时句柄: {handle}")
        return handle

    def release(self, owner: str) -> bool:
        """释放所属者的句柄，返回是否确实释放了句柄"""
        handle = self._handles.pop(owner, None)
        if handle is None:
            return False
        try:
            shutil.rmtree(handle.parent, ignore_errors=False)
            logger.debug(f"已释放临时句柄: {handle}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"释放临时句柄失败 {handle}: {e}")
        return True

    def release_all(self) -> int:
        """释放所有句柄"""
        released = 0
        for owner in list(self._handles):
            if self.release(owner):
                released += 1
        if self._root is not None:
            shutil.rmtree(self._root, ignore_errors=True)
            self._root = None
        return released

    def _ensure_root(self) -> Path:
        if self._root is None or not self._root.exists():
            self._root = Path(tempfile.mkdtemp(prefix=self.prefix))
        return self._root

    def __enter__(self):
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """上下文管理器退出时释放所有句柄"""
        del exc_type, exc_val, exc_tb
        self.release_all()
