"""图像处理指令模型。

一条指令描述一个输出变体的完整变换配方。
"""

from enum import Enum
from typing import Annotated, Any

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import ValidationLimits


ColorChannel = Annotated[int, Field(ge=0, le=255)]
RGBAColor = tuple[ColorChannel, ColorChannel, ColorChannel, ColorChannel]


class AnchorPosition(str, Enum):
    """裁剪锚点位置"""

    TOP_LEFT = "top_left"
    TOP = "top"
    TOP_RIGHT = "top_right"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM = "bottom"
    BOTTOM_RIGHT = "bottom_right"

    @property
    def centering(self) -> tuple[float, float]:
        """对应 ImageOps.fit 的 centering 参数 (水平, 垂直)"""
        return _ANCHOR_CENTERING[self]


_ANCHOR_CENTERING: dict[AnchorPosition, tuple[float, float]] = {
    AnchorPosition.TOP_LEFT: (0.0, 0.0),
    AnchorPosition.TOP: (0.5, 0.0),
    AnchorPosition.TOP_RIGHT: (1.0, 0.0),
    AnchorPosition.LEFT: (0.0, 0.5),
    AnchorPosition.CENTER: (0.5, 0.5),
    AnchorPosition.RIGHT: (1.0, 0.5),
    AnchorPosition.BOTTOM_LEFT: (0.0, 1.0),
    AnchorPosition.BOTTOM: (0.5, 1.0),
    AnchorPosition.BOTTOM_RIGHT: (1.0, 1.0),
}


class ImageFilter(str, Enum):
    """预设滤镜（颜色矩阵或组合效果）"""

    BLACK_WHITE = "black_white"
    COMIC = "comic"
    GOTHAM = "gotham"
    GREYSCALE = "greyscale"
    HI_SATCH = "hi_satch"
    INVERT = "invert"
    LOMOGRAPH = "lomograph"
    LO_SATCH = "lo_satch"
    POLAROID = "polaroid"
    SEPIA = "sepia"


class HueSetting(BaseModel):
    """色相设置：rotate 为 True 时旋转色相，否则将色相替换为指定角度"""

    model_config = ConfigDict(frozen=True)

    degrees: int = Field(ge=0, le=360, description="色相角度")
    rotate: bool = Field(False, description="是否为旋转模式")


def normalize_color(value: Any) -> tuple[int, int, int, int]:
    """把颜色统一为 RGBA 四元组

    支持 RGBA/RGB 元组以及 Pillow 可识别的颜色字符串（"#ff000080"、"red"）。
    """
    if isinstance(value, str):
        color = ImageColor.getcolor(value, "RGBA")
        return tuple(color)  # type: ignore[return-value]
    if isinstance(value, tuple | list):
        if len(value) == 3:
            return (int(value[0]), int(value[1]), int(value[2]), 255)
        if len(value) == 4:
            return (int(value[0]), int(value[1]), int(value[2]), int(value[3]))
    raise ValueError(f"无法识别的颜色: {value!r}")


class Instruction(BaseModel):
    """单个输出变体的变换配方（不可变）"""

    model_config = ConfigDict(frozen=True)

    # 尺寸
    width: int | None = Field(None, gt=0, description="目标宽度")
    height: int | None = Field(None, gt=0, description="目标高度")
    anchor: AnchorPosition = Field(AnchorPosition.CENTER, description="裁剪锚点")
    constraint: tuple[int, int] | None = Field(None, description="等比约束的最大尺寸")

    # 滤镜，按插入顺序应用
    filters: tuple[ImageFilter, ...] = Field((), description="滤镜序列")

    # 颜色调整
    brightness: int | None = Field(None, ge=-100, le=100, description="亮度百分比")
    saturation: int | None = Field(None, ge=-100, le=100, description="饱和度百分比")
    contrast: int | None = Field(None, ge=-100, le=100, description="对比度百分比")
    opacity: int | None = Field(None, ge=0, le=100, description="不透明度百分比")
    hue: HueSetting | None = Field(None, description="色相设置")
    tint: RGBAColor | None = Field(None, description="着色颜色")
    vignette: RGBAColor | None = Field(None, description="暗角颜色")

    # 编码
    jpeg_quality: int | None = Field(None, ge=0, le=100, description="JPEG 质量")

    @field_validator("tint", "vignette", mode="before")
    @classmethod
    def validate_color(cls, v: Any) -> Any:
        if v is None:
            return v
        return normalize_color(v)

    @field_validator("constraint")
    @classmethod
    def validate_constraint(cls, v: tuple[int, int] | None) -> tuple[int, int] | None:
        if v is not None and (v[0] <= 0 or v[1] <= 0):
            raise ValueError(f"约束尺寸必须为正数: {v}")
        return v

    @property
    def needs_resize(self) -> bool:
        """是否设置了尺寸目标"""
        return self.width is not None or self.height is not None

    @property
    def crop_required(self) -> bool:
        """宽高都指定时需要按锚点裁剪"""
        return self.width is not None and self.height is not None

    @property
    def is_empty(self) -> bool:
        """未设置任何字段，只做重新编码"""
        return self == Instruction()


class InstructionValidators:
    """构建指令时的参数验证器集合"""

    @staticmethod
    def validate_range(field: str, value: int, limits: tuple[int, int]) -> int:
        """验证数值在闭区间内

        Raises:
            ValidationError: 不是整数或超出范围时
        """
        from ..exceptions import ValidationError
        from ..utils.message_formatter import MessageFormatter

        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{field}必须是整数，得到: {value!r}")

        minimum, maximum = limits
        if value < minimum or value > maximum:
            raise ValidationError(
                MessageFormatter.out_of_range(field, value, minimum, maximum)
            )
        return value

    @staticmethod
    def validate_dimensions(
        width: int | None, height: int | None
    ) -> tuple[int | None, int | None]:
        """验证尺寸参数"""
        from ..exceptions import ValidationError

        for name, value in (("宽度", width), ("高度", height)):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValidationError(f"{name}必须是正整数，得到: {value!r}")
            if value > ValidationLimits.MAX_DIMENSION:
                raise ValidationError(
                    f"{name}超过限制 {ValidationLimits.MAX_DIMENSION}，得到: {value}"
                )

        return width, height

    @staticmethod
    def validate_filter(value: ImageFilter | str) -> ImageFilter:
        """把滤镜名称转换为 ImageFilter"""
        from ..exceptions import ValidationError
        from ..utils.message_formatter import format_validation_error

        if isinstance(value, ImageFilter):
            return value
        try:
            return ImageFilter(str(value).lower())
        except ValueError as e:
            expected = ", ".join(f.value for f in ImageFilter)
            raise ValidationError(
                format_validation_error("filter", value, expected)
            ) from e

    @staticmethod
    def validate_color(value: Any) -> tuple[int, int, int, int]:
        from ..exceptions import ValidationError

        try:
            color = normalize_color(value)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if any(not 0 <= channel <= 255 for channel in color):
            raise ValidationError(f"颜色通道必须在 0-255 之间: {color}")
        return color
