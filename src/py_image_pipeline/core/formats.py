"""格式解析模块。

按扩展名解析输出编码器，并为目标格式准备图像色彩模式。
"""

from collections.abc import Callable
from typing import Any

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

from ..config import get_config
from ..models.constants import ImageFormats


class Codec(BaseModel):
    """输出编码器：格式名加编码参数"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Pillow 格式名")
    save_params: dict[str, Any] = Field(default_factory=dict, description="编码参数")

    @property
    def supports_alpha(self) -> bool:
        return self.name in ImageFormats.TRANSPARENCY_FORMATS

    @property
    def supports_exif(self) -> bool:
        return self.name in ImageFormats.EXIF_FORMATS

    @property
    def mime_type(self) -> str:
        return ImageFormats.MIME_TYPES[self.name]

    @property
    def quality(self) -> int | None:
        return self.save_params.get("quality")


def _jpeg_codec(jpeg_quality: int | None) -> Codec:
    params = get_config().compression.get_format_defaults("JPEG")
    if jpeg_quality is not None:
        params["quality"] = jpeg_quality
    return Codec(name="JPEG", save_params=params)


def _gif_codec(jpeg_quality: int | None) -> Codec:
    del jpeg_quality  # GIF 没有质量参数
    params = get_config().compression.get_format_defaults("GIF")
    return Codec(name="GIF", save_params=params)


def _png_codec(jpeg_quality: int | None) -> Codec:
    del jpeg_quality  # PNG 没有质量参数
    params = get_config().compression.get_format_defaults("PNG")
    return Codec(name="PNG", save_params=params)


# 格式名到编码器构造函数，扩展新格式只需注册一项
CODEC_FACTORIES: dict[str, Callable[[int | None], Codec]] = {
    "JPEG": _jpeg_codec,
    "GIF": _gif_codec,
    "PNG": _png_codec,
}


def resolve_codec(extension: str, jpeg_quality: int | None = None) -> Codec | None:
    """按扩展名解析编码器

    Args:
        extension: 带点的扩展名，如 ".jpg"，大小写不敏感
        jpeg_quality: JPEG 质量，None 时使用配置中的默认值

    Returns:
        Codec | None: 不支持的扩展名返回 None，调用方应跳过该配对
    """
    format_name = ImageFormats.get_format(extension)
    if format_name is None:
        return None
    return CODEC_FACTORIES[format_name](jpeg_quality)


def prepare_for_codec(img: Image.Image, codec: Codec) -> Image.Image:
    """把 RGBA 工作图像转换为编码器可接受的色彩模式"""
    match codec.name:
        case "JPEG":
            return _prepare_for_jpeg(img)
        case "GIF":
            return _prepare_for_gif(img)
        case "PNG":
            return _prepare_for_png(img)
        case _:
            return img


def _is_opaque(img: Image.Image) -> bool:
    if img.mode != "RGBA":
        return True
    minimum, _ = img.getchannel("A").getextrema()
    return minimum == 255


def _prepare_for_jpeg(img: Image.Image) -> Image.Image:
    """JPEG 不支持透明度，使用 alpha 通道合成到白色背景"""
    if img.mode in ("RGBA", "LA"):
        if img.mode == "LA":
            img = img.convert("RGBA")
        rgb_img = Image.new("RGB", img.size, (255, 255, 255))
        rgb_img.paste(img, mask=img.getchannel("A"))
        return rgb_img

    if img.mode != "RGB":
        return img.convert("RGB")

    return img


def _prepare_for_png(img: Image.Image) -> Image.Image:
    """完全不透明时去掉 alpha 通道"""
    if img.mode == "RGBA" and _is_opaque(img):
        return img.convert("RGB")
    return img


def _prepare_for_gif(img: Image.Image) -> Image.Image:
    """GIF 为调色板格式，透明像素映射为单一透明色"""
    if _is_opaque(img):
        return img.convert("RGB").quantize(colors=256)

    alpha = img.getchannel("A")
    paletted = img.convert("RGB").quantize(colors=255)
    # 调色板补齐到 256 色，索引 255 保留给透明像素
    palette = paletted.getpalette() or []
    paletted.putpalette(palette + [0] * (768 - len(palette)))
    mask = alpha.point(lambda a: 255 if a < 128 else 0)
    paletted.paste(255, mask=mask)
    paletted.info["transparency"] = 255
    return paletted


def get_save_parameters(
    codec: Codec, img: Image.Image, exif: bytes | None = None
) -> dict[str, Any]:
    """组合编码参数

    Args:
        codec: 编码器
        img: 已经 prepare_for_codec 处理过的图像
        exif: 需要保留的 EXIF 数据
    """
    params = {"format": codec.name, **codec.save_params}
    if exif and codec.supports_exif:
        params["exif"] = exif
    if codec.name == "GIF" and "transparency" in img.info:
        params["transparency"] = img.info["transparency"]
    return params
