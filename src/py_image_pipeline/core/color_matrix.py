"""颜色矩阵工具。

5x5 行向量颜色矩阵：[r, g, b, a, 1] @ M，通道值归一化到 0-1。
"""

import numpy as np
from PIL import Image


def identity_matrix() -> np.ndarray:
    return np.identity(5, dtype=np.float32)


def make_matrix(rows: list[list[float]]) -> np.ndarray:
    """由 5 行 5 列的列表创建矩阵"""
    matrix = np.array(rows, dtype=np.float32)
    if matrix.shape != (5, 5):
        raise ValueError(f"颜色矩阵必须是 5x5，得到: {matrix.shape}")
    return matrix


def scale_offset_matrix(
    scale: tuple[float, float, float], offset: tuple[float, float, float]
) -> np.ndarray:
    """按通道缩放并偏移 RGB 的矩阵，alpha 不变"""
    matrix = identity_matrix()
    for channel in range(3):
        matrix[channel, channel] = scale[channel]
        matrix[4, channel] = offset[channel]
    return matrix


def apply_color_matrix(img: Image.Image, matrix: np.ndarray) -> Image.Image:
    """对 RGBA 图像应用颜色矩阵

    Args:
        img: 任意模式图像，内部转换为 RGBA
        matrix: 5x5 颜色矩阵

    Returns:
        Image.Image: RGBA 图像
    """
    if img.mode != "RGBA":
        img = img.convert("RGBA")

    pixels = np.asarray(img, dtype=np.float32) / 255.0
    ones = np.ones(pixels.shape[:2] + (1,), dtype=np.float32)
    transformed = np.concatenate([pixels, ones], axis=2) @ matrix
    result = np.clip(transformed[..., :4] * 255.0 + 0.5, 0, 255).astype(np.uint8)
    return Image.fromarray(result)
