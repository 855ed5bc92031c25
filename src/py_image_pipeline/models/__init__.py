"""数据模型包。

定义指令、输入文档和处理结果的数据结构。
"""

from .constants import ImageFormats, ValidationLimits
from .documents import SourceImage
from .instruction import (
    AnchorPosition,
    HueSetting,
    ImageFilter,
    Instruction,
    InstructionValidators,
    normalize_color,
)
from .results import BatchResult, OutputImage


__all__ = [
    "AnchorPosition",
    "BatchResult",
    "HueSetting",
    "ImageFilter",
    "ImageFormats",
    "Instruction",
    "InstructionValidators",
    "OutputImage",
    "SourceImage",
    "ValidationLimits",
    "normalize_color",
]
