"""核心模块包。

格式解析、滤镜、变换算子和变换引擎。
"""

from .filters import FILTERS, apply_filter
from .formats import Codec, prepare_for_codec, resolve_codec
from .transform_engine import render_image, transform_image


__all__ = [
    "FILTERS",
    "Codec",
    "apply_filter",
    "prepare_for_codec",
    "render_image",
    "resolve_codec",
    "transform_image",
]
