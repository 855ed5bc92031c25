"""文件命名工具模块。

根据指令生成稳定的文件名后缀，并把输入路径映射到输出目录。
"""

from pathlib import Path

from ..models.instruction import AnchorPosition, Instruction
from .logging_helpers import get_logger


logger = get_logger()


def _hex_color(color: tuple[int, int, int, int]) -> str:
    return "".join(f"{channel:02x}" for channel in color)


def instruction_suffix(instruction: Instruction) -> str:
    """生成指令的文件名后缀

    按固定顺序拼接每个已设置字段的标记，同一指令总是得到相同的后缀，
    结构不同的指令得到不同的后缀。未设置任何字段时返回空字符串。

    Examples:
        >>> instruction_suffix(Instruction(width=100, height=100))
        '-w100-h100'
    """
    parts: list[str] = []

    if instruction.width is not None:
        parts.append(f"w{instruction.width}")
    if instruction.height is not None:
        parts.append(f"h{instruction.height}")
    if instruction.anchor != AnchorPosition.CENTER:
        parts.append(instruction.anchor.value)

    if instruction.constraint is not None:
        max_width, max_height = instruction.constraint
        parts.append(f"cw{max_width}-ch{max_height}")

    parts.extend(image_filter.value for image_filter in instruction.filters)

    if instruction.brightness is not None:
        parts.append(f"b{instruction.brightness}")
    if instruction.opacity is not None:
        parts.append(f"o{instruction.opacity}")
    if instruction.hue is not None:
        rotate_flag = "r" if instruction.hue.rotate else ""
        parts.append(f"hue{instruction.hue.degrees}{rotate_flag}")
    if instruction.tint is not None:
        parts.append(f"t{_hex_color(instruction.tint)}")
    if instruction.vignette is not None:
        parts.append(f"v{_hex_color(instruction.vignette)}")
    if instruction.saturation is not None:
        parts.append(f"s{instruction.saturation}")
    if instruction.contrast is not None:
        parts.append(f"c{instruction.contrast}")
    if instruction.jpeg_quality is not None:
        parts.append(f"q{instruction.jpeg_quality}")

    return "".join(f"-{part}" for part in parts)


def destination_directory(
    source_path: Path, input_root: Path, output_root: Path
) -> Path:
    """把源文件所在目录映射到输出根目录下的同名相对目录

    源文件不在输入根目录内时直接使用输出根目录。
    """
    try:
        relative_dir = source_path.parent.resolve().relative_to(input_root.resolve())
    except ValueError:
        logger.debug(f"{source_path} 不在输入目录 {input_root} 内，输出到根目录")
        relative_dir = Path()
    return output_root / relative_dir


def destination_file_name(source_path: Path, instruction: Instruction) -> str:
    """输出文件名：原文件名 + 指令后缀 + 原扩展名"""
    return f"{source_path.stem}{instruction_suffix(instruction)}{source_path.suffix}"
