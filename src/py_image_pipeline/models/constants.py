"""图像处理相关常量定义。

集中管理编码格式表和参数取值范围。
"""

from typing import Final


class ImageFormats:
    """流水线支持的编码格式"""

    # 扩展名（小写）到 Pillow 格式名
    EXTENSION_FORMATS: Final[dict[str, str]] = {
        ".jpg": "JPEG",
        ".jpeg": "JPEG",
        ".gif": "GIF",
        ".png": "PNG",
    }

    MIME_TYPES: Final[dict[str, str]] = {
        "JPEG": "image/jpeg",
        "GIF": "image/gif",
        "PNG": "image/png",
    }

    TRANSPARENCY_FORMATS: Final[set[str]] = {"PNG", "GIF"}
    EXIF_FORMATS: Final[set[str]] = {"JPEG", "PNG"}

    @classmethod
    def get_supported_extensions(cls) -> set[str]:
        return set(cls.EXTENSION_FORMATS)

    @classmethod
    def get_format(cls, extension: str) -> str | None:
        """按扩展名查找格式名，大小写不敏感"""
        return cls.EXTENSION_FORMATS.get(extension.lower())


class ValidationLimits:
    """构建指令时的取值范围"""

    PERCENTAGE: Final[tuple[int, int]] = (0, 100)
    SIGNED_PERCENTAGE: Final[tuple[int, int]] = (-100, 100)
    HUE_DEGREES: Final[tuple[int, int]] = (0, 360)
    JPEG_QUALITY: Final[tuple[int, int]] = (0, 100)

    # 图像尺寸限制
    MAX_DIMENSION: Final[int] = 50000
