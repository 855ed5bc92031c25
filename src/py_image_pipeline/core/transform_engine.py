"""变换引擎模块。

按固定顺序把一条指令应用到一张输入图像上并编码输出。
引擎是纯函数：相同的输入字节、指令和编码器总是得到相同的输出。
"""

from io import BytesIO
from typing import BinaryIO

from PIL import Image, ImageOps

from ..exceptions import handle_image_errors
from ..models.instruction import Instruction
from ..utils.logging_helpers import get_logger
from . import operators
from .filters import apply_filter
from .formats import Codec, get_save_parameters, prepare_for_codec


logger = get_logger()


def _decode(data: bytes | BinaryIO) -> tuple[Image.Image, bytes | None]:
    """解码为 RGBA 工作图像，按 EXIF 方向摆正并返回剩余的 EXIF 数据"""
    source = BytesIO(data) if isinstance(data, bytes | bytearray) else data
    with Image.open(source) as img:
        img.load()
        transposed = ImageOps.exif_transpose(img)
        exif = transposed.getexif()
        exif_bytes = exif.tobytes() if len(exif) else None
        return transposed.convert("RGBA"), exif_bytes


def _resize(img: Image.Image, instruction: Instruction) -> Image.Image:
    """尺寸目标：宽高都给定时按锚点裁剪，否则等比缩放"""
    if not instruction.needs_resize:
        return img

    if instruction.crop_required:
        return operators.crop_to_size(
            img, instruction.width, instruction.height, instruction.anchor
        )
    return operators.resize_to_fit(img, instruction.width, instruction.height)


def _adjust(img: Image.Image, instruction: Instruction) -> Image.Image:
    """固定顺序的颜色调整与约束"""
    if instruction.brightness is not None:
        img = operators.adjust_brightness(img, instruction.brightness)

    if instruction.constraint is not None:
        img = operators.constrain(img, *instruction.constraint)

    if instruction.opacity is not None:
        img = operators.set_opacity(img, instruction.opacity)

    if instruction.hue is not None:
        img = operators.adjust_hue(img, instruction.hue)

    if instruction.tint is not None:
        img = operators.apply_tint(img, instruction.tint)

    if instruction.vignette is not None:
        img = operators.apply_vignette(img, instruction.vignette)

    if instruction.saturation is not None:
        img = operators.adjust_saturation(img, instruction.saturation)

    if instruction.contrast is not None:
        img = operators.adjust_contrast(img, instruction.contrast)

    return img


def _render(
    data: bytes | BinaryIO, instruction: Instruction
) -> tuple[Image.Image, bytes | None]:
    img, exif = _decode(data)
    if instruction.is_empty:
        logger.debug("空指令，只重新编码")
        return img, exif

    img = _resize(img, instruction)

    for image_filter in instruction.filters:
        img = apply_filter(img, image_filter)

    return _adjust(img, instruction), exif


@handle_image_errors("图像变换")
def render_image(data: bytes | BinaryIO, instruction: Instruction) -> Image.Image:
    """解码并应用指令，返回未编码的 RGBA 图像"""
    img, _ = _render(data, instruction)
    return img


@handle_image_errors("图像变换")
def transform_image(
    data: bytes | BinaryIO, instruction: Instruction, codec: Codec
) -> tuple[bytes, tuple[int, int]]:
    """对一张图像执行完整的指令并编码

    顺序：解码 → 尺寸目标 → 滤镜 → 亮度 → 约束 → 不透明度 → 色相
    → 着色 → 暗角 → 饱和度 → 对比度 → 编码。

    Args:
        data: 输入图像字节或字节流
        instruction: 变换指令
        codec: 输出编码器

    Returns:
        tuple: (编码后的字节, 输出尺寸)

    Raises:
        UnsupportedFormatError: 输入无法解码
        ProcessingError: 变换或编码失败
    """
    img, exif = _render(data, instruction)
    prepared = prepare_for_codec(img, codec)
    save_params = get_save_parameters(codec, prepared, exif)

    with BytesIO() as buffer:
        prepared.save(buffer, **save_params)
        content = buffer.getvalue()

    logger.debug(
        f"编码完成: {codec.name} {prepared.size[0]}x{prepared.size[1]}, "
        f"{len(content)} 字节"
    )
    return content, prepared.size
