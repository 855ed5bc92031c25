"""图像变换算子。

尺寸调整与颜色调整的单步操作。所有算子接收并返回 RGBA 图像，
不再检查取值范围，超出范围的参数按原值应用。
"""

from collections.abc import Callable

import numpy as np
from PIL import Image, ImageEnhance, ImageOps

from ..config import get_config
from ..models.instruction import AnchorPosition, HueSetting
from .color_matrix import apply_color_matrix, scale_offset_matrix


def get_resampling() -> Image.Resampling:
    """按配置获取重采样算法"""
    name = get_config().compression.RESAMPLING
    return getattr(Image.Resampling, name, Image.Resampling.LANCZOS)


def with_alpha(
    img: Image.Image, func: Callable[[Image.Image], Image.Image]
) -> Image.Image:
    """只对 RGB 通道执行 func，保留原 alpha 通道"""
    alpha = img.getchannel("A")
    result = func(img.convert("RGB")).convert("RGBA")
    result.putalpha(alpha)
    return result


# ============================================================================
# 尺寸
# ============================================================================


def crop_to_size(
    img: Image.Image, width: int, height: int, anchor: AnchorPosition
) -> Image.Image:
    """缩放并按锚点裁剪到精确尺寸

    沿与目标宽高比不一致的方向裁掉多余部分。
    """
    return ImageOps.fit(
        img,
        (width, height),
        method=get_resampling(),
        centering=anchor.centering,
    )


def resize_to_fit(
    img: Image.Image, width: int | None, height: int | None
) -> Image.Image:
    """缩放到给定宽或高，未给定的一边按比例计算"""
    current_width, current_height = img.size
    if width is None and height is None:
        return img

    if width is not None and height is not None:
        new_size = (width, height)
    elif width is not None:
        ratio = width / current_width
        new_size = (width, max(1, round(current_height * ratio)))
    else:
        ratio = height / current_height
        new_size = (max(1, round(current_width * ratio)), height)

    if new_size == img.size:
        return img
    return img.resize(new_size, get_resampling())


def constrain(img: Image.Image, max_width: int, max_height: int) -> Image.Image:
    """等比缩小到不超过给定尺寸，已在范围内时保持不变"""
    current_width, current_height = img.size
    if current_width <= max_width and current_height <= max_height:
        return img

    ratio = min(max_width / current_width, max_height / current_height)
    new_size = (
        max(1, round(current_width * ratio)),
        max(1, round(current_height * ratio)),
    )
    return img.resize(new_size, get_resampling())


# ============================================================================
# 颜色
# ============================================================================


def adjust_brightness(img: Image.Image, percentage: int) -> Image.Image:
    """按百分比整体增减 RGB 通道，负值变暗"""
    offset = percentage / 100
    return apply_color_matrix(
        img, scale_offset_matrix((1.0, 1.0, 1.0), (offset, offset, offset))
    )


def set_opacity(img: Image.Image, percentage: int) -> Image.Image:
    """把 alpha 通道缩放到原值的 percentage%"""
    alpha = np.asarray(img.getchannel("A"), dtype=np.float32) * (percentage / 100)
    result = img.copy()
    result.putalpha(Image.fromarray(np.clip(alpha + 0.5, 0, 255).astype(np.uint8)))
    return result


def adjust_hue(img: Image.Image, hue: HueSetting) -> Image.Image:
    """旋转色相或把色相替换为指定角度"""
    shift = round(hue.degrees * 256 / 360) % 256

    def _apply(rgb: Image.Image) -> Image.Image:
        h, s, v = rgb.convert("HSV").split()
        channel = np.asarray(h, dtype=np.int32)
        if hue.rotate:
            channel = (channel + shift) % 256
        else:
            channel = np.full_like(channel, shift)
        new_h = Image.fromarray(channel.astype(np.uint8))
        return Image.merge("HSV", (new_h, s, v)).convert("RGB")

    return with_alpha(img, _apply)


def apply_tint(img: Image.Image, color: tuple[int, int, int, int]) -> Image.Image:
    """按颜色相乘着色，颜色的 alpha 决定着色强度"""
    strength = color[3] / 255
    scale = tuple(1 - strength + strength * channel / 255 for channel in color[:3])
    return apply_color_matrix(img, scale_offset_matrix(scale, (0.0, 0.0, 0.0)))


def apply_vignette(
    img: Image.Image,
    color: tuple[int, int, int, int],
    start: float | None = None,
) -> Image.Image:
    """从中心向四角逐渐叠加颜色

    Args:
        img: RGBA 图像
        color: 暗角颜色，alpha 决定最大强度
        start: 开始叠加的位置（0 为中心，1 为角落），默认读取配置
    """
    if start is None:
        start = get_config().processing.VIGNETTE_START

    width, height = img.size
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    nx = (xs - (width - 1) / 2) / max(width / 2, 1)
    ny = (ys - (height - 1) / 2) / max(height / 2, 1)
    distance = np.sqrt(nx**2 + ny**2) / np.sqrt(2)

    span = max(1.0 - start, 1e-6)
    strength = np.clip((distance - start) / span, 0, 1) ** 2 * (color[3] / 255)

    pixels = np.asarray(img, dtype=np.float32)
    overlay = np.array(color[:3], dtype=np.float32)
    rgb = pixels[..., :3] * (1 - strength[..., None]) + overlay * strength[..., None]
    pixels = np.concatenate([rgb, pixels[..., 3:]], axis=2)
    return Image.fromarray(np.clip(pixels + 0.5, 0, 255).astype(np.uint8))


def adjust_saturation(img: Image.Image, percentage: int) -> Image.Image:
    """饱和度百分比，-100 为完全去色"""
    factor = 1 + percentage / 100
    return with_alpha(img, lambda rgb: ImageEnhance.Color(rgb).enhance(factor))


def adjust_contrast(img: Image.Image, percentage: int) -> Image.Image:
    """对比度百分比，-100 为纯灰"""
    factor = 1 + percentage / 100
    return with_alpha(img, lambda rgb: ImageEnhance.Contrast(rgb).enhance(factor))
