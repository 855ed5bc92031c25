"""文件工具模块。

提供图像文件查找和目录创建等实用函数。
"""

from collections.abc import Iterator
from pathlib import Path

from PIL import Image

from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def find_image_files(
    directory: str | Path,
    recursive: bool = True,
    exclude_dirs: list[str] | None = None,
) -> Iterator[Path]:
    """查找目录中的图像文件。

    按 Pillow 注册的扩展名识别图像；流水线不支持的格式也会被返回，
    由格式解析阶段跳过。

    Args:
        directory: 搜索目录
        recursive: 是否递归搜索子目录
        exclude_dirs: 要排除的目录名列表

    Yields:
        Path: 图像文件路径，按路径排序
    """
    directory = Path(directory)
    exclude_dirs = exclude_dirs or []

    if not directory.exists():
        logger.warning(MessageFormatter.directory_not_found(directory))
        return

    if not directory.is_dir():
        logger.warning(MessageFormatter.path_not_directory(directory))
        return

    pattern = "**/*" if recursive else "*"
    supported_extensions = set(Image.registered_extensions().keys())

    try:
        for file_path in sorted(directory.glob(pattern)):
            relative_parts = file_path.relative_to(directory).parts
            if (
                file_path.is_file()
                and file_path.suffix.lower() in supported_extensions
                and not any(part in exclude_dirs for part in relative_parts)
            ):
                yield file_path
    except PermissionError:
        logger.error(MessageFormatter.permission_error(directory, "访问目录"))


def ensure_directory(directory: Path) -> Path:
    """创建目录；目录已存在（包括并发创建）视为成功

    Raises:
        OSError: 无法创建目录时
    """
    directory.mkdir(parents=True, exist_ok=True)
    return directory
