"""测试配置文件。

提供测试所需的fixtures和配置。
"""

import tempfile
from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_image_pipeline.config import reset_config


def _draw_pattern(img: Image.Image) -> None:
    """左半红、右半蓝，中间一个绿色方块，便于检查裁剪区域"""
    width, height = img.size
    draw = ImageDraw.Draw(img)
    draw.rectangle([0, 0, width // 2 - 1, height - 1], fill=(255, 0, 0))
    draw.rectangle([width // 2, 0, width - 1, height - 1], fill=(0, 0, 255))
    cx, cy = width // 2, height // 2
    size = max(min(width, height) // 8, 1)
    draw.rectangle([cx - size, cy - size, cx + size, cy + size], fill=(0, 255, 0))


def create_image_bytes(
    size: tuple[int, int] = (200, 100),
    format: str = "PNG",
    mode: str = "RGB",
) -> bytes:
    """生成带图案的测试图像字节"""
    img = Image.new(mode, size, color=(255, 255, 255))
    if mode in ("RGB", "RGBA"):
        _draw_pattern(img)
    buffer = BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def fresh_config():
    """每个测试使用全新的全局配置"""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def input_dir(temp_dir: Path) -> Path:
    path = temp_dir / "input"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(temp_dir: Path) -> Path:
    return temp_dir / "output"


@pytest.fixture
def make_image() -> Callable[..., Path]:
    """在指定路径写入测试图像的工厂"""

    def _make(
        path: Path,
        size: tuple[int, int] = (200, 100),
        format: str = "PNG",
        mode: str = "RGB",
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(create_image_bytes(size, format, mode))
        return path

    return _make


@pytest.fixture
def make_image_bytes() -> Callable[..., bytes]:
    return create_image_bytes


@pytest.fixture
def png_bytes() -> bytes:
    return create_image_bytes((200, 100), "PNG")


@pytest.fixture
def photo_path(input_dir: Path, make_image) -> Path:
    """300x200 的 JPEG 照片"""
    return make_image(input_dir / "photo.jpg", size=(300, 200), format="JPEG")
