"""批量执行器模块。

对 输入 × 指令 做惰性展开，每个配对产出一个输出结果。
"""

from collections.abc import Iterable, Iterator
from pathlib import Path

from ..core.formats import resolve_codec
from ..exceptions import ErrorHandler
from ..models.documents import SourceImage
from ..models.instruction import Instruction
from ..models.results import OutputImage
from ..utils.file_helpers import ensure_directory
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import (
    destination_directory,
    destination_file_name,
    instruction_suffix,
)
from .concurrent_executor import ConcurrentExecutor, PairTask, process_pair


logger = get_logger()


class BatchExecutor:
    """批量图像执行器

    按输入顺序、每个输入内按指令顺序处理配对。单个配对的失败只影响
    该配对的结果，不会中断整个批次。
    """

    def __init__(
        self,
        max_workers: int | None = None,
        force_executor_type: str | None = None,
    ):
        """初始化批量执行器

        Args:
            max_workers: 并发运行时的最大并发数
            force_executor_type: 强制指定执行器类型 ('thread'/'process'/None为自动选择)
        """
        self.concurrent_executor = ConcurrentExecutor(max_workers, force_executor_type)

    def iter_pairs(
        self,
        inputs: Iterable[SourceImage],
        instructions: Iterable[Instruction],
        input_root: str | Path,
        output_root: str | Path,
    ) -> Iterator[PairTask | OutputImage]:
        """展开所有可执行的配对

        没有源路径的输入和无法解析编码器的配对会被跳过。
        无法准备的配对直接以失败结果产出。

        Yields:
            PairTask 或失败的 OutputImage
        """
        instructions = tuple(instructions)
        input_root = Path(input_root)
        output_root = Path(output_root)

        for source in inputs:
            if not source.has_source_path:
                logger.debug(MessageFormatter.skipped("输入", "没有源路径"))
                continue

            source_path = source.source_path
            target_dir = destination_directory(source_path, input_root, output_root)

            try:
                ensure_directory(target_dir)
            except OSError as e:
                yield from self._directory_failures(source, instructions, target_dir, e)
                continue

            for instruction in instructions:
                codec = resolve_codec(source.extension, instruction.jpeg_quality)
                if codec is None:
                    logger.debug(
                        MessageFormatter.skipped(source_path, "不支持的输出格式")
                    )
                    continue

                suffix = instruction_suffix(instruction)
                destination_path = target_dir / destination_file_name(
                    source_path, instruction
                )

                try:
                    data = source.read_all()
                except (OSError, ValueError) as e:
                    yield ErrorHandler.handle_pairing_error(
                        e,
                        source_path,
                        operation="读取输入",
                        destination_path=destination_path,
                        extension=source.extension,
                        suffix=suffix,
                    )
                    continue

                yield PairTask(
                    data=data,
                    instruction=instruction,
                    codec=codec,
                    source_path=source_path,
                    destination_path=destination_path,
                    extension=source.extension,
                    suffix=suffix,
                )

    def _directory_failures(
        self,
        source: SourceImage,
        instructions: tuple[Instruction, ...],
        target_dir: Path,
        error: OSError,
    ) -> Iterator[OutputImage]:
        """目录创建失败时，为该输入的每个可解析配对产出失败结果"""
        for instruction in instructions:
            if resolve_codec(source.extension, instruction.jpeg_quality) is None:
                continue
            yield ErrorHandler.handle_pairing_error(
                error,
                source.source_path,
                operation="创建输出目录",
                destination_path=target_dir
                / destination_file_name(source.source_path, instruction),
                extension=source.extension,
                suffix=instruction_suffix(instruction),
            )

    def run(
        self,
        inputs: Iterable[SourceImage],
        instructions: Iterable[Instruction],
        input_root: str | Path,
        output_root: str | Path,
    ) -> Iterator[OutputImage]:
        """顺序执行，惰性产出结果

        Args:
            inputs: 输入图像
            instructions: 指令序列
            input_root: 输入根目录，用于计算相对目录
            output_root: 输出根目录

        Yields:
            OutputImage: 每个配对的结果，顺序为输入顺序、指令顺序
        """
        for item in self.iter_pairs(inputs, instructions, input_root, output_root):
            if isinstance(item, OutputImage):
                yield item
            else:
                yield process_pair(item)

    def run_concurrent(
        self,
        inputs: Iterable[SourceImage],
        instructions: Iterable[Instruction],
        input_root: str | Path,
        output_root: str | Path,
    ) -> Iterator[OutputImage]:
        """并发执行，按完成顺序产出结果

        结果集合与 run 相同，但不保证顺序。配对按需读取，
        同时在途的配对数量有上限。
        """
        yield from self.concurrent_executor.execute_tasks(
            self.iter_pairs(inputs, instructions, input_root, output_root),
            process_pair,
        )
