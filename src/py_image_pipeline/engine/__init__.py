"""执行引擎包。

指令构建、批量执行和并发调度。
"""

from .batch import BatchExecutor
from .builder import InstructionBuilder
from .concurrent_executor import ConcurrentExecutor, PairTask, process_pair


__all__ = [
    "BatchExecutor",
    "ConcurrentExecutor",
    "InstructionBuilder",
    "PairTask",
    "process_pair",
]
