"""图像流水线异常处理模块。

定义统一的异常类和错误处理机制，包含异常转换装饰器。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.results import BatchResult, OutputImage
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


class PipelineError(Exception):
    """流水线相关错误基类"""

    def __init__(self, message: str, input_path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.input_path = input_path


class ValidationError(PipelineError):
    """参数验证错误，构建指令时抛出"""

    pass


class ProcessingError(PipelineError):
    """解码、变换或编码过程中的错误"""

    pass


class UnsupportedFormatError(PipelineError):
    """无法识别的输入图像格式"""

    pass


def handle_image_errors(operation_name: str = "图像处理"):
    """统一的图像处理异常转换装饰器

    把 Pillow 和系统异常转换为流水线异常。

    Args:
        operation_name: 操作名称，用于日志记录
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except PipelineError:
                raise
            except UnidentifiedImageError as e:
                logger.debug(f"{operation_name} - 无法识别图像格式: {e}")
                raise UnsupportedFormatError(f"无法识别的图像数据: {e}") from e
            except DecompressionBombError as e:
                logger.debug(f"{operation_name} - 图像过大: {e}")
                raise ProcessingError(f"图像尺寸过大: {e}") from e
            except OSError as e:
                logger.debug(f"{operation_name} - 读写失败: {e}")
                raise ProcessingError(f"图像读写失败: {e}") from e
            except (ValueError, TypeError) as e:
                logger.debug(f"{operation_name} - 参数错误: {e}")
                raise ProcessingError(f"参数错误: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    记录日志并把异常转换为失败的输出结果，保证单个配对失败不会中断批处理。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path | None, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录"""
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def create_error_output(
        source_path: Path | None,
        error_msg: str,
        destination_path: Path | None = None,
        extension: str = "",
        suffix: str = "",
    ) -> OutputImage:
        """创建标准化的失败结果"""
        return OutputImage(
            success=False,
            error=error_msg,
            source_path=source_path,
            destination_path=destination_path,
            extension=extension,
            suffix=suffix,
        )

    @staticmethod
    def handle_pairing_error(
        error: Exception,
        source_path: Path | None,
        operation: str = "图像变换",
        destination_path: Path | None = None,
        extension: str = "",
        suffix: str = "",
    ) -> OutputImage:
        """按错误类型记录日志并返回失败结果"""
        match error:
            case UnsupportedFormatError():
                level = "warning"
            case ValidationError():
                level = "warning"
            case PermissionError():
                operation = f"{operation} - 权限错误"
                level = "error"
            case OSError():
                operation = f"{operation} - 系统错误"
                level = "error"
            case _:
                level = "error"

        ErrorHandler._log_error(operation, source_path, error, level)
        return ErrorHandler.create_error_output(
            source_path=source_path,
            error_msg=f"{operation}: {error}",
            destination_path=destination_path,
            extension=extension,
            suffix=suffix,
        )

    @staticmethod
    def create_error_batch_result(
        input_dir: Path,
        output_dir: Path | None,
        error_message: str,
    ) -> BatchResult:
        """创建错误的批量处理结果"""
        return BatchResult(
            input_dir=input_dir,
            output_dir=output_dir or input_dir,
            results=[],
            success=False,
            error=error_message,
        )
