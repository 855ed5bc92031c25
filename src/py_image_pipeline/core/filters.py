"""预设滤镜。

大部分滤镜是固定的颜色矩阵，comic、gotham、lomograph 在矩阵之外
再组合 Pillow 的色调分离、边缘检测、对比度和暗角处理。
"""

from collections.abc import Callable

from PIL import Image, ImageChops, ImageEnhance, ImageOps
from PIL import ImageFilter as PILImageFilter

from ..models.instruction import ImageFilter
from .color_matrix import apply_color_matrix, make_matrix
from .operators import apply_vignette, with_alpha


COLOR_MATRICES = {
    ImageFilter.BLACK_WHITE: make_matrix(
        [
            [1.5, 1.5, 1.5, 0, 0],
            [1.5, 1.5, 1.5, 0, 0],
            [1.5, 1.5, 1.5, 0, 0],
            [0, 0, 0, 1, 0],
            [-1, -1, -1, 0, 1],
        ]
    ),
    ImageFilter.GREYSCALE: make_matrix(
        [
            [0.30, 0.30, 0.30, 0, 0],
            [0.59, 0.59, 0.59, 0, 0],
            [0.11, 0.11, 0.11, 0, 0],
            [0, 0, 0, 1, 0],
            [0, 0, 0, 0, 1],
        ]
    ),
    ImageFilter.HI_SATCH: make_matrix(
        [
            [3, -1, -1, 0, 0],
            [-1, 3, -1, 0, 0],
            [-1, -1, 3, 0, 0],
            [0, 0, 0, 1, 0],
            [0, 0, 0, 0, 1],
        ]
    ),
    ImageFilter.INVERT: make_matrix(
        [
            [-1, 0, 0, 0, 0],
            [0, -1, 0, 0, 0],
            [0, 0, -1, 0, 0],
            [0, 0, 0, 1, 0],
            [1, 1, 1, 0, 1],
        ]
    ),
    ImageFilter.LO_SATCH: make_matrix(
        [
            [1, 0, 0, 0, 0],
            [0, 1, 0, 0, 0],
            [0, 0, 1, 0, 0],
            [0, 0, 0, 1, 0],
            [0.25, 0.25, 0.25, 0, 1],
        ]
    ),
    ImageFilter.LOMOGRAPH: make_matrix(
        [
            [1.50, 0, 0, 0, 0],
            [0, 1.45, 0, 0, 0],
            [0, 0, 1.09, 0, 0],
            [0, 0, 0, 1, 0],
            [-0.10, 0.05, -0.08, 0, 1],
        ]
    ),
    ImageFilter.POLAROID: make_matrix(
        [
            [1.638, -0.062, -0.262, 0, 0],
            [-0.122, 1.378, -0.122, 0, 0],
            [1.016, -0.016, 1.383, 0, 0],
            [0, 0, 0, 1, 0],
            [0.06, -0.05, -0.05, 0, 1],
        ]
    ),
    ImageFilter.SEPIA: make_matrix(
        [
            [0.393, 0.349, 0.272, 0, 0],
            [0.769, 0.686, 0.534, 0, 0],
            [0.189, 0.168, 0.131, 0, 0],
            [0, 0, 0, 1, 0],
            [0, 0, 0, 0, 1],
        ]
    ),
    ImageFilter.GOTHAM: make_matrix(
        [
            [0.45, 0.35, 0.40, 0, 0],
            [0.45, 0.45, 0.45, 0, 0],
            [0.10, 0.20, 0.45, 0, 0],
            [0, 0, 0, 1, 0],
            [0, 0, 0.05, 0, 1],
        ]
    ),
}


def _lomograph(img: Image.Image) -> Image.Image:
    img = apply_color_matrix(img, COLOR_MATRICES[ImageFilter.LOMOGRAPH])
    return apply_vignette(img, (0, 0, 0, 255))


def _gotham(img: Image.Image) -> Image.Image:
    img = apply_color_matrix(img, COLOR_MATRICES[ImageFilter.GOTHAM])
    return with_alpha(img, lambda rgb: ImageEnhance.Contrast(rgb).enhance(1.4))


def _comic(img: Image.Image) -> Image.Image:
    """色调分离后叠加深色描边"""

    def _apply(rgb: Image.Image) -> Image.Image:
        flat = ImageOps.posterize(ImageEnhance.Color(rgb).enhance(1.5), 3)
        edges = rgb.convert("L").filter(PILImageFilter.FIND_EDGES)
        outline = ImageOps.invert(edges.point(lambda v: 255 if v > 40 else 0))
        return ImageChops.multiply(flat, outline.convert("RGB"))

    return with_alpha(img, _apply)


def _matrix_filter(image_filter: ImageFilter) -> Callable[[Image.Image], Image.Image]:
    matrix = COLOR_MATRICES[image_filter]
    return lambda img: apply_color_matrix(img, matrix)


FILTERS: dict[ImageFilter, Callable[[Image.Image], Image.Image]] = {
    ImageFilter.BLACK_WHITE: _matrix_filter(ImageFilter.BLACK_WHITE),
    ImageFilter.COMIC: _comic,
    ImageFilter.GOTHAM: _gotham,
    ImageFilter.GREYSCALE: _matrix_filter(ImageFilter.GREYSCALE),
    ImageFilter.HI_SATCH: _matrix_filter(ImageFilter.HI_SATCH),
    ImageFilter.INVERT: _matrix_filter(ImageFilter.INVERT),
    ImageFilter.LOMOGRAPH: _lomograph,
    ImageFilter.LO_SATCH: _matrix_filter(ImageFilter.LO_SATCH),
    ImageFilter.POLAROID: _matrix_filter(ImageFilter.POLAROID),
    ImageFilter.SEPIA: _matrix_filter(ImageFilter.SEPIA),
}


def apply_filter(img: Image.Image, image_filter: ImageFilter) -> Image.Image:
    """应用单个预设滤镜"""
    return FILTERS[image_filter](img)
