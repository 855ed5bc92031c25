"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .file_helpers import ensure_directory, find_image_files
from .logging_helpers import configure_logging, get_logger
from .message_formatter import MessageFormatter, format_validation_error
from .naming_helpers import (
    destination_directory,
    destination_file_name,
    instruction_suffix,
)


__all__ = [
    "MessageFormatter",
    "configure_logging",
    "destination_directory",
    "destination_file_name",
    "ensure_directory",
    "find_image_files",
    "format_validation_error",
    "get_logger",
    "instruction_suffix",
]
