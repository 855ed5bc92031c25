"""并发执行器模块。

把 (输入, 指令) 配对分发到线程池或进程池，按完成顺序产出结果。
"""

from collections.abc import Callable, Iterable, Iterator, Sequence
from concurrent.futures import (
    FIRST_COMPLETED,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from dataclasses import dataclass
from itertools import chain, islice
from pathlib import Path
from typing import Any

from ..config import get_config
from ..core.formats import Codec
from ..core.transform_engine import transform_image
from ..exceptions import ErrorHandler
from ..models.instruction import Instruction
from ..models.results import OutputImage
from ..utils.logging_helpers import get_logger


logger = get_logger()


@dataclass(frozen=True)
class PairTask:
    """单个配对的任务描述

    只携带字节而不是流，可以安全地传给进程池。
    """

    data: bytes
    instruction: Instruction
    codec: Codec
    source_path: Path | None
    destination_path: Path
    extension: str
    suffix: str


def process_pair(task: PairTask) -> OutputImage:
    """执行一个配对；任何失败都转换为失败结果，不向外抛出"""
    try:
        content, dimensions = transform_image(task.data, task.instruction, task.codec)
    except Exception as e:
        return ErrorHandler.handle_pairing_error(
            e,
            task.source_path,
            destination_path=task.destination_path,
            extension=task.extension,
            suffix=task.suffix,
        )

    logger.debug(f"写入路径: {task.destination_path}")
    return OutputImage(
        success=True,
        source_path=task.source_path,
        destination_path=task.destination_path,
        extension=task.extension,
        content=content,
        suffix=task.suffix,
        format_used=task.codec.name,
        dimensions=dimensions,
    )


class ConcurrentExecutor:
    """通用并发执行器

    统一的任务提交和结果收集，执行器类型可以强制指定或按任务特征自动选择。
    """

    def __init__(self, max_workers: int | None = None, force_executor_type: str | None = None):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数，默认取配置
            force_executor_type: 强制指定执行器类型 ('thread'/'process'/None为自动选择)
        """
        self.max_workers = max_workers or get_config().compression.MAX_WORKERS
        self.force_executor_type = force_executor_type

    def execute_tasks(
        self,
        tasks: Iterable[PairTask | OutputImage],
        task_function: Callable[[PairTask], OutputImage] = process_pair,
    ) -> Iterator[OutputImage]:
        """执行并发任务，按完成顺序产出结果

        任务按需从 tasks 中取出，同时在途的任务不超过 max_workers * 2 个。
        执行器类型按首批任务的特征选择。

        Args:
            tasks: 配对任务，已经是结果的条目直接产出
            task_function: 要执行的任务函数，使用进程池时必须可序列化

        Yields:
            OutputImage: 每个配对的结果
        """
        items = iter(tasks)
        window = self.max_workers * 2
        first_batch = list(islice(items, window))
        if not first_batch:
            return

        executor_class = self._choose_executor(
            [item for item in first_batch if isinstance(item, PairTask)]
        )

        with executor_class(max_workers=self.max_workers) as executor:
            pending: dict[Future, PairTask] = {}
            for item in chain(first_batch, items):
                if isinstance(item, OutputImage):
                    yield item
                    continue

                failed = self._submit_task(executor, item, task_function, pending)
                if failed is not None:
                    yield failed

                if len(pending) >= window:
                    yield from self._collect_completed(pending)

            while pending:
                yield from self._collect_completed(pending)

    def _submit_task(
        self,
        executor: Any,
        task: PairTask,
        task_function: Callable[[PairTask], OutputImage],
        pending: dict[Future, PairTask],
    ) -> OutputImage | None:
        """提交任务到执行器，提交失败时返回失败结果"""
        try:
            future = executor.submit(task_function, task)
        except Exception as e:
            return self._task_error(e, task, "任务提交")

        pending[future] = task
        return None

    def _collect_completed(
        self, pending: dict[Future, PairTask]
    ) -> Iterator[OutputImage]:
        """等待至少一个任务完成并收集其结果"""
        done, _ = wait(pending, return_when=FIRST_COMPLETED)
        for future in done:
            task = pending.pop(future)

            try:
                result = future.result()
            except Exception as e:
                yield self._task_error(e, task, "并发任务处理")
                continue

            if result.success:
                logger.debug(f"处理成功: {task.source_path} → {task.destination_path}")
            else:
                logger.warning(f"处理失败: {task.source_path} - {result.error}")
            yield result

    @staticmethod
    def _task_error(error: Exception, task: PairTask, operation: str) -> OutputImage:
        return ErrorHandler.handle_pairing_error(
            error,
            task.source_path,
            operation=operation,
            destination_path=task.destination_path,
            extension=task.extension,
            suffix=task.suffix,
        )

    def _choose_executor(self, tasks: Sequence[PairTask]) -> type:
        """根据任务特征选择合适的执行器

        Returns:
            执行器类 (ThreadPoolExecutor 或 ProcessPoolExecutor)
        """
        if self.force_executor_type == "thread":
            return ThreadPoolExecutor
        if self.force_executor_type == "process":
            return ProcessPoolExecutor

        task_count = len(tasks)
        total_bytes = sum(len(task.data) for task in tasks)
        executor_type = get_config().choose_executor_type(task_count, total_bytes)

        logger.debug(
            f"使用{executor_type}执行器: 任务数={task_count}, "
            f"总大小={total_bytes / 1024 / 1024:.1f}MB"
        )
        if executor_type == "process":
            return ProcessPoolExecutor
        return ThreadPoolExecutor
