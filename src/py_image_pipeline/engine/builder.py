"""指令构建器模块。

流式 API：配置调用修改"当前"指令（没有时新建一条），
分隔调用 and_ 结束当前指令，下一次配置调用从新指令开始。
"""

from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..models.constants import ValidationLimits
from ..models.instruction import (
    AnchorPosition,
    HueSetting,
    ImageFilter,
    Instruction,
    InstructionValidators,
)
from ..utils.logging_helpers import get_logger


logger = get_logger()


class InstructionBuilder:
    """指令序列构建器

    每次配置调用都用新的不可变 Instruction 替换当前位置的指令，
    已经结束的指令不会再被修改。

    Examples:
        >>> builder = InstructionBuilder()
        >>> builder.resize(100, 100).and_.apply_filters(ImageFilter.GREYSCALE)
        >>> len(builder.instructions)
        2
    """

    def __init__(self, instructions: Iterable[Instruction | dict[str, Any]] | None = None):
        self._instructions: list[Instruction] = []
        self._current: int | None = None
        if instructions is not None:
            self.extend(instructions)

    # ------------------------------------------------------------------
    # 序列状态
    # ------------------------------------------------------------------

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        """当前指令序列的不可变快照"""
        return tuple(self._instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def _update(self, **changes: Any) -> "InstructionBuilder":
        if self._current is None:
            self._instructions.append(Instruction())
            self._current = len(self._instructions) - 1
            logger.debug(f"开始第 {self._current + 1} 条指令")

        current = self._instructions[self._current]
        self._instructions[self._current] = current.model_copy(update=changes)
        return self

    @property
    def and_(self) -> "InstructionBuilder":
        """结束当前指令，下一次配置调用会开始新指令"""
        self._current = None
        return self

    def separate(self) -> "InstructionBuilder":
        """与 and_ 相同，便于方法链调用"""
        return self.and_

    def extend(
        self, instructions: Iterable[Instruction | dict[str, Any]]
    ) -> "InstructionBuilder":
        """追加现成的指令（Instruction 或字典），追加后没有当前指令

        Raises:
            ValidationError: 字典无法通过验证时
        """
        for index, item in enumerate(instructions):
            if isinstance(item, Instruction):
                self._instructions.append(item)
                continue
            try:
                self._instructions.append(Instruction.model_validate(item))
            except PydanticValidationError as e:
                raise ValidationError(
                    f"第 {index + 1} 条指令无效: {self._format_validation_error(e)}"
                ) from e
        self._current = None
        return self

    @classmethod
    def from_instructions(
        cls, instructions: Iterable[Instruction | dict[str, Any]]
    ) -> "InstructionBuilder":
        return cls(instructions)

    @staticmethod
    def _format_validation_error(error: PydanticValidationError) -> str:
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            messages.append(f"{field}: {msg}" if field else msg)
        return "; ".join(messages)

    # ------------------------------------------------------------------
    # 尺寸
    # ------------------------------------------------------------------

    def resize(
        self,
        width: int | None = None,
        height: int | None = None,
        anchor: AnchorPosition | str = AnchorPosition.CENTER,
    ) -> "InstructionBuilder":
        """设置尺寸目标；宽高都给定时按锚点裁剪到精确尺寸"""
        InstructionValidators.validate_dimensions(width, height)
        try:
            anchor = AnchorPosition(anchor)
        except ValueError as e:
            raise ValidationError(f"无效的锚点: {anchor}") from e
        return self._update(width=width, height=height, anchor=anchor)

    def constrain(self, width: int, height: int) -> "InstructionBuilder":
        """设置等比约束的最大尺寸"""
        InstructionValidators.validate_dimensions(width, height)
        return self._update(constraint=(width, height))

    # ------------------------------------------------------------------
    # 滤镜
    # ------------------------------------------------------------------

    def apply_filters(self, *filters: ImageFilter | str) -> "InstructionBuilder":
        """追加滤镜，保持调用顺序"""
        validated = tuple(InstructionValidators.validate_filter(f) for f in filters)
        current_filters = (
            self._instructions[self._current].filters
            if self._current is not None
            else ()
        )
        return self._update(filters=current_filters + validated)

    # ------------------------------------------------------------------
    # 颜色调整
    # ------------------------------------------------------------------

    def brighten(self, percentage: int) -> "InstructionBuilder":
        InstructionValidators.validate_range(
            "亮度", percentage, ValidationLimits.PERCENTAGE
        )
        return self._update(brightness=percentage)

    def darken(self, percentage: int) -> "InstructionBuilder":
        InstructionValidators.validate_range(
            "亮度", percentage, ValidationLimits.PERCENTAGE
        )
        return self._update(brightness=-percentage)

    def set_opacity(self, percentage: int) -> "InstructionBuilder":
        InstructionValidators.validate_range(
            "不透明度", percentage, ValidationLimits.PERCENTAGE
        )
        return self._update(opacity=percentage)

    def set_hue(self, degrees: int, rotate: bool = False) -> "InstructionBuilder":
        """设置色相；rotate 为 True 时旋转色相"""
        InstructionValidators.validate_range(
            "色相角度", degrees, ValidationLimits.HUE_DEGREES
        )
        return self._update(hue=HueSetting(degrees=degrees, rotate=rotate))

    def tint(self, color: Any) -> "InstructionBuilder":
        return self._update(tint=InstructionValidators.validate_color(color))

    def vignette(self, color: Any) -> "InstructionBuilder":
        return self._update(vignette=InstructionValidators.validate_color(color))

    def saturate(self, percentage: int) -> "InstructionBuilder":
        InstructionValidators.validate_range(
            "饱和度", percentage, ValidationLimits.PERCENTAGE
        )
        return self._update(saturation=percentage)

    def desaturate(self, percentage: int) -> "InstructionBuilder":
        InstructionValidators.validate_range(
            "饱和度", percentage, ValidationLimits.PERCENTAGE
        )
        return self._update(saturation=-percentage)

    def set_contrast(self, percentage: int) -> "InstructionBuilder":
        InstructionValidators.validate_range(
            "对比度", percentage, ValidationLimits.SIGNED_PERCENTAGE
        )
        return self._update(contrast=percentage)

    # ------------------------------------------------------------------
    # 编码
    # ------------------------------------------------------------------

    def set_jpeg_quality(self, quality: int) -> "InstructionBuilder":
        InstructionValidators.validate_range(
            "JPEG 质量", quality, ValidationLimits.JPEG_QUALITY
        )
        return self._update(jpeg_quality=quality)
