"""图像流水线接口。

在指令构建器上提供执行和目录处理能力的简洁用户接口。
"""

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from .config import get_config
from .engine.batch import BatchExecutor
from .engine.builder import InstructionBuilder
from .exceptions import ErrorHandler, ValidationError
from .models import BatchResult, Instruction, OutputImage, SourceImage
from .utils.file_helpers import ensure_directory, find_image_files
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()


class ImagePipeline(InstructionBuilder):
    """图像指令流水线

    用流式调用配置指令，再对一批输入执行，每个 (输入, 指令) 配对产出一张图像。

    Examples:
        >>> pipeline = ImagePipeline()
        >>> pipeline.resize(100, 100).and_.apply_filters("greyscale")
        >>> result = pipeline.process_directory("photos", "output")
        >>> print(result.get_summary())
    """

    def __init__(
        self,
        instructions: Iterable[Instruction | dict[str, Any]] | None = None,
        max_workers: int | None = None,
        force_executor_type: str | None = None,
    ):
        """初始化流水线

        Args:
            instructions: 预先提供的指令
            max_workers: 并发执行时的最大并发数
            force_executor_type: 强制指定执行器类型 ('thread'/'process'/None为自动选择)
        """
        if max_workers is not None and max_workers <= 0:
            raise ValidationError("max_workers 必须大于 0")

        if force_executor_type is not None and force_executor_type not in {
            "thread",
            "process",
        }:
            raise ValidationError(
                "force_executor_type 必须是 'thread', 'process' 或 None"
            )

        super().__init__(instructions)
        self.batch_executor = BatchExecutor(max_workers, force_executor_type)

    def execute(
        self,
        inputs: Iterable[SourceImage],
        input_root: str | Path,
        output_root: str | Path,
        concurrent: bool = False,
    ) -> Iterator[OutputImage]:
        """对输入执行当前的全部指令，惰性产出结果

        Args:
            inputs: 输入图像
            input_root: 输入根目录
            output_root: 输出根目录
            concurrent: 是否并发执行（结果按完成顺序产出）
        """
        instructions = self.instructions
        logger.debug(f"执行 {len(instructions)} 条指令")

        if concurrent:
            return self.batch_executor.run_concurrent(
                inputs, instructions, input_root, output_root
            )
        return self.batch_executor.run(inputs, instructions, input_root, output_root)

    def process_directory(
        self,
        input_dir: str | Path,
        output_dir: str | Path,
        recursive: bool | None = None,
        exclude_dirs: list[str] | None = None,
        concurrent: bool = False,
    ) -> BatchResult:
        """处理目录中的所有图像并写入输出目录

        输出目录保持输入目录的子目录结构。

        Args:
            input_dir: 输入目录
            output_dir: 输出目录
            recursive: 是否递归处理子目录，默认读取配置
            exclude_dirs: 要排除的目录名列表
            concurrent: 是否并发执行

        Returns:
            BatchResult: 批量处理结果
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        if recursive is None:
            recursive = get_config().processing.DEFAULT_RECURSIVE

        try:
            if not input_dir.is_dir():
                raise ValidationError(MessageFormatter.directory_not_found(input_dir))

            ensure_directory(output_dir)
            exclude_dirs = list(exclude_dirs or [])
            # 输出目录在输入目录内时不要再把输出当作输入
            try:
                output_dir.resolve().relative_to(input_dir.resolve())
                if output_dir.resolve() != input_dir.resolve():
                    exclude_dirs.append(output_dir.name)
            except ValueError:
                pass

            sources = (
                SourceImage.from_path(path)
                for path in find_image_files(input_dir, recursive, exclude_dirs)
            )
            results = [
                self._write(result)
                for result in self.execute(sources, input_dir, output_dir, concurrent)
            ]
            return self._create_batch_result(input_dir, output_dir, results)

        except Exception as e:
            ErrorHandler._log_error("目录批量处理", input_dir, e, "error")
            return ErrorHandler.create_error_batch_result(
                input_dir=input_dir,
                output_dir=output_dir,
                error_message=str(e),
            )

    @staticmethod
    def _write(result: OutputImage) -> OutputImage:
        """写入成功的结果；写入失败转换为失败结果"""
        if not result.success:
            return result
        try:
            result.write()
        except OSError as e:
            return ErrorHandler.handle_pairing_error(
                e,
                result.source_path,
                operation="写入输出",
                destination_path=result.destination_path,
                extension=result.extension,
                suffix=result.suffix,
            )
        return result

    @staticmethod
    def _create_batch_result(
        input_dir: Path, output_dir: Path, results: list[OutputImage]
    ) -> BatchResult:
        """创建批量处理结果"""
        if not results:
            return BatchResult(
                input_dir=input_dir,
                output_dir=output_dir,
                results=[],
                success=True,
                error="没有可处理的图像",
            )

        success = any(r.success for r in results)
        return BatchResult(
            input_dir=input_dir,
            output_dir=output_dir,
            results=results,
            success=success,
            error=None if success else "所有配对处理都失败",
        )
