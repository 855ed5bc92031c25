"""指令驱动的图像变换流水线。

用流式指令描述输出变体，对一批输入图像逐一生成衍生图像。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "指令驱动的图像变换流水线，基于 Pillow 11"

from .engine import BatchExecutor, InstructionBuilder
from .exceptions import (
    PipelineError,
    ProcessingError,
    UnsupportedFormatError,
    ValidationError,
)
from .models import (
    AnchorPosition,
    BatchResult,
    HueSetting,
    ImageFilter,
    Instruction,
    OutputImage,
    SourceImage,
)
from .pipeline import ImagePipeline


__all__ = [
    "AnchorPosition",
    "BatchExecutor",
    "BatchResult",
    "HueSetting",
    "ImageFilter",
    "ImagePipeline",
    "Instruction",
    "InstructionBuilder",
    "OutputImage",
    "PipelineError",
    "ProcessingError",
    "SourceImage",
    "UnsupportedFormatError",
    "ValidationError",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
