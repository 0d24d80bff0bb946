"""批处理编排器基类。

持有任务集合并独占状态写入权，按顺序逐个处理任务，单个任务失败不影响其余任务。
"""

import asyncio
from collections.abc import Awaitable, Iterable
from typing import Generic, TypeVar

from ..config import get_config
from ..exceptions import BatchBusyError, ErrorHandler
from ..models.batch_result import BatchStats, RunSummary
from ..models.work_item import BatchTask, ItemStatus
from ..utils.cleanup_helpers import HandleManager
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()

TaskT = TypeVar("TaskT", bound=BatchTask)


class BatchOrchestrator(Generic[TaskT]):
    """顺序批处理编排器

    子类实现 _process 返回单个任务的输出数据；状态转换全部在这里完成。
    同一时间只处理一个任务，以限制内存占用并保证进度和错误归属明确。
    """

    operation_name = "批处理"

    def __init__(
        self,
        item_timeout: float | None = None,
        handles: HandleManager | None = None,
    ):
        """初始化编排器

        Args:
            item_timeout: 单个任务超时秒数，None 使用全局配置（默认不限制）
            handles: 临时句柄管理器
        """
        self._items: dict[str, TaskT] = {}
        self._running = False
        self._processed_count = 0
        self.item_timeout = (
            item_timeout
            if item_timeout is not None
            else get_config().processing.ITEM_TIMEOUT_SECONDS
        )
        self.handles = handles or HandleManager()

    # ------------------------------------------------------------------
    # 集合操作
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def processed_count(self) -> int:
        """当前（或最近一次）运行中已处理的任务数"""
        return self._processed_count

    def __len__(self) -> int:
        return len(self._items)

    def add(self, items: Iterable[TaskT]) -> list[TaskT]:
        added = []
        for item in items:
            self._items[item.id] = item
            added.append(item)
        return added

    def get(self, item_id: str) -> TaskT | None:
        return self._items.get(item_id)

    def snapshot(self) -> list[TaskT]:
        """当前任务列表的浅拷贝，按添加顺序"""
        return list(self._items.values())

    def remove(self, item_id: str) -> bool:
        """移除任务并释放其临时句柄

        已开始处理的任务无法中断；尚未轮到的任务会在本次运行中被跳过。
        """
        item = self._items.pop(item_id, None)
        if item is None:
            return False
        self._release(item)
        logger.debug(f"移除任务: {item.display_name}")
        return True

    def clear(self) -> int:
        """清空任务集合"""
        count = len(self._items)
        for item in self._items.values():
            self._release(item)
        self._items.clear()
        self._processed_count = 0
        return count

    def reset(self, item_id: str) -> TaskT:
        """把任务恢复为 idle，使下一次运行重新处理它"""
        item = self._require(item_id)
        if item.status == ItemStatus.PROCESSING:
            raise BatchBusyError(f"任务正在处理中: {item.display_name}", item_id)
        self._release(item)
        item.mark_idle()
        return item

    def stats(self) -> BatchStats:
        items = self.snapshot()
        completed = [i for i in items if i.status == ItemStatus.COMPLETED]
        return BatchStats(
            total=len(items),
            completed=len(completed),
            failed=sum(1 for i in items if i.status == ItemStatus.ERROR),
            total_output_bytes=sum(len(i.output or b"") for i in completed),
        )

    def completed_items(self) -> list[TaskT]:
        return [i for i in self.snapshot() if i.is_completed and i.output is not None]

    # ------------------------------------------------------------------
    # 运行
    # ------------------------------------------------------------------

    async def run(self) -> RunSummary:
        """处理所有未完成的任务

        已完成的任务被跳过；失败的任务会重试。单个任务的异常只记录在任务上，
        不会从这里抛出。

        Returns:
            RunSummary: 本次运行摘要

        Raises:
            BatchBusyError: 已有运行在进行
        """
        if self._running:
            raise BatchBusyError(f"{self.operation_name}正在运行")

        self._running = True
        self._processed_count = 0
        summary = RunSummary()
        try:
            snapshot = self.snapshot()
            pending = [item for item in snapshot if not item.is_completed]
            summary.skipped = len(snapshot) - len(pending)
            logger.info(
                f"开始{self.operation_name}: {len(pending)} 个待处理, "
                f"{summary.skipped} 个已完成"
            )
            self._before_run()

            for item in pending:
                if item.id not in self._items:
                    logger.debug(f"任务已移除，跳过: {item.display_name}")
                    continue
                await self._run_one(item, summary)
                self._processed_count += 1
                summary.processed += 1
        finally:
            self._running = False

        logger.info(summary.get_summary())
        return summary

    async def _run_one(self, item: TaskT, summary: RunSummary) -> None:
        item.mark_processing()
        try:
            payload = await self._with_timeout(self._process(item))
        except asyncio.CancelledError:
            item.mark_idle()
            raise
        except Exception as e:
            detail = ErrorHandler.handle_item_error(
                e, item.display_name, self.operation_name
            )
            item.mark_error(detail)
            summary.failed += 1
            return

        item.mark_completed(payload)
        summary.completed += 1
        summary.output_bytes += len(payload)
        logger.info(
            MessageFormatter.item_completed(
                item.display_name, self._input_size(item), len(payload)
            )
        )

    async def _with_timeout(self, work: Awaitable[bytes]) -> bytes:
        if self.item_timeout is None:
            return await work
        return await asyncio.wait_for(work, timeout=self.item_timeout)

    def _require(self, item_id: str) -> TaskT:
        item = self._items.get(item_id)
        if item is None:
            raise KeyError(f"任务不存在: {item_id}")
        return item

    # ------------------------------------------------------------------
    # 子类扩展点
    # ------------------------------------------------------------------

    def _before_run(self) -> None:
        """运行开始前的钩子，例如复制配置快照"""

    async def _process(self, item: TaskT) -> bytes:
        raise NotImplementedError

    def _input_size(self, item: TaskT) -> int:
        raise NotImplementedError

    def _release(self, item: TaskT) -> None:
        self.handles.release(item.id)
