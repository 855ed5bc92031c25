"""变换引擎测试"""

from io import BytesIO

import pytest
from PIL import Image

from py_image_pipeline.core.formats import resolve_codec
from py_image_pipeline.core.transform_engine import render_image, transform_image
from py_image_pipeline.exceptions import ProcessingError, UnsupportedFormatError
from py_image_pipeline.models import (
    AnchorPosition,
    HueSetting,
    ImageFilter,
    Instruction,
)


def _solid(color, size=(40, 20), format="PNG", mode="RGB") -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=format)
    return buffer.getvalue()


class TestDeterminism:
    """相同输入得到相同输出"""

    def test_same_input_same_bytes(self, png_bytes):
        instruction = Instruction(
            width=120,
            filters=(ImageFilter.SEPIA, ImageFilter.LOMOGRAPH),
            brightness=10,
            vignette=(0, 0, 0, 200),
        )
        codec = resolve_codec(".png")

        first = transform_image(png_bytes, instruction, codec)
        second = transform_image(png_bytes, instruction, codec)

        assert first == second

    def test_accepts_stream(self, png_bytes):
        content, size = transform_image(
            BytesIO(png_bytes), Instruction(), resolve_codec(".png")
        )
        assert size == (200, 100)
        assert content


class TestGeometry:
    """尺寸目标与约束"""

    def test_top_left_crop_keeps_left_region(self, make_image_bytes):
        data = make_image_bytes((200, 50))
        img = render_image(
            data, Instruction(width=100, height=100, anchor=AnchorPosition.TOP_LEFT)
        )

        assert img.size == (100, 100)
        r, g, b, _ = img.getpixel((50, 50))
        assert r > 200 and g < 50 and b < 50

    def test_bottom_right_crop_keeps_right_region(self, make_image_bytes):
        data = make_image_bytes((200, 50))
        img = render_image(
            data,
            Instruction(width=100, height=100, anchor=AnchorPosition.BOTTOM_RIGHT),
        )

        r, g, b, _ = img.getpixel((50, 50))
        assert b > 200 and r < 50

    def test_center_crop_size(self, png_bytes):
        img = render_image(png_bytes, Instruction(width=100, height=100))
        assert img.size == (100, 100)

    def test_width_only_resize_keeps_aspect(self, png_bytes):
        assert render_image(png_bytes, Instruction(width=100)).size == (100, 50)

    def test_height_only_resize_keeps_aspect(self, png_bytes):
        assert render_image(png_bytes, Instruction(height=50)).size == (100, 50)

    def test_constraint_downscales(self, make_image_bytes):
        data = make_image_bytes((200, 100))
        assert render_image(data, Instruction(constraint=(50, 50))).size == (50, 25)

    def test_constraint_never_upscales(self, png_bytes):
        img = render_image(png_bytes, Instruction(constraint=(400, 400)))
        assert img.size == (200, 100)

    def test_constraint_applies_after_resize(self, png_bytes):
        img = render_image(png_bytes, Instruction(width=400, constraint=(100, 100)))
        assert img.size == (100, 50)

    def test_exif_orientation_applied(self):
        exif = Image.Exif()
        exif[0x0112] = 6
        buffer = BytesIO()
        Image.new("RGB", (200, 100), "red").save(buffer, format="JPEG", exif=exif)

        img = render_image(buffer.getvalue(), Instruction())
        assert img.size == (100, 200)


class TestColorOperations:
    """滤镜与颜色调整"""

    def test_greyscale_equal_channels(self, png_bytes):
        img = render_image(png_bytes, Instruction(filters=(ImageFilter.GREYSCALE,)))

        for point in [(10, 10), (150, 50), (100, 50)]:
            r, g, b, _ = img.getpixel(point)
            assert r == g == b

    def test_invert(self):
        img = render_image(_solid((255, 0, 0)), Instruction(filters=(ImageFilter.INVERT,)))
        assert img.getpixel((0, 0))[:3] == (0, 255, 255)

    def test_filters_apply_in_order(self):
        data = _solid((200, 30, 30))
        invert_first = render_image(
            data, Instruction(filters=(ImageFilter.INVERT, ImageFilter.LO_SATCH))
        )
        invert_last = render_image(
            data, Instruction(filters=(ImageFilter.LO_SATCH, ImageFilter.INVERT))
        )
        assert invert_first.getpixel((0, 0)) != invert_last.getpixel((0, 0))

    @pytest.mark.parametrize("image_filter", list(ImageFilter))
    def test_every_filter_keeps_size(self, png_bytes, image_filter):
        img = render_image(png_bytes, Instruction(filters=(image_filter,)))
        assert img.size == (200, 100)
        assert img.mode == "RGBA"

    def test_darken_to_black(self):
        img = render_image(_solid((120, 130, 140)), Instruction(brightness=-100))
        assert img.getpixel((0, 0))[:3] == (0, 0, 0)

    def test_brighten(self):
        img = render_image(_solid((100, 100, 100)), Instruction(brightness=20))
        assert img.getpixel((0, 0))[0] > 100

    def test_opacity_on_png(self):
        content, _ = transform_image(
            _solid((255, 0, 0)), Instruction(opacity=50), resolve_codec(".png")
        )
        with Image.open(BytesIO(content)) as img:
            assert img.mode == "RGBA"
            assert img.getpixel((0, 0))[3] == 128

    def test_hue_set(self):
        img = render_image(
            _solid((255, 0, 0)), Instruction(hue=HueSetting(degrees=120))
        )
        r, g, b, _ = img.getpixel((0, 0))
        assert g > r and g > b

    def test_hue_rotate_full_circle_is_identity(self):
        img = render_image(
            _solid((255, 0, 0)), Instruction(hue=HueSetting(degrees=360, rotate=True))
        )
        assert img.getpixel((0, 0))[:3] == (255, 0, 0)

    def test_tint_multiplies(self):
        img = render_image(_solid((255, 255, 255)), Instruction(tint=(255, 0, 0, 255)))
        assert img.getpixel((0, 0))[:3] == (255, 0, 0)

    def test_vignette_darkens_corners_only(self):
        img = render_image(
            _solid((255, 255, 255), size=(100, 100)),
            Instruction(vignette=(0, 0, 0, 255)),
        )
        assert img.getpixel((50, 50))[:3] == (255, 255, 255)
        assert img.getpixel((0, 0))[0] < 100

    def test_full_desaturation(self):
        img = render_image(_solid((200, 50, 50)), Instruction(saturation=-100))
        r, g, b, _ = img.getpixel((0, 0))
        assert abs(r - g) <= 1 and abs(g - b) <= 1

    def test_contrast_minimum_is_flat(self, png_bytes):
        img = render_image(png_bytes, Instruction(contrast=-100))
        assert img.getpixel((10, 10)) == img.getpixel((190, 90))


class TestEncoding:
    """编码输出"""

    def test_jpeg_output(self, png_bytes):
        content, size = transform_image(
            png_bytes, Instruction(opacity=50), resolve_codec(".jpg")
        )
        with Image.open(BytesIO(content)) as img:
            assert img.format == "JPEG"
            assert img.mode == "RGB"
            assert img.size == size

    def test_gif_output_with_transparency(self):
        content, _ = transform_image(
            _solid((0, 0, 0, 0), mode="RGBA"), Instruction(), resolve_codec(".gif")
        )
        with Image.open(BytesIO(content)) as img:
            assert img.format == "GIF"
            assert img.info.get("transparency") == 255

    def test_empty_instruction_reencodes(self, png_bytes):
        content, size = transform_image(png_bytes, Instruction(), resolve_codec(".png"))
        assert size == (200, 100)
        with Image.open(BytesIO(content)) as img:
            assert img.format == "PNG"


class TestErrors:
    """错误处理"""

    def test_corrupt_bytes_raise_unsupported_format(self):
        with pytest.raises(UnsupportedFormatError):
            transform_image(b"not an image", Instruction(), resolve_codec(".png"))

    def test_truncated_image_raises_pipeline_error(self, png_bytes):
        with pytest.raises((ProcessingError, UnsupportedFormatError)):
            transform_image(png_bytes[:60], Instruction(), resolve_codec(".png"))

    def test_out_of_range_values_pass_through(self):
        """绕过验证构造的指令按原值应用，不会报错"""
        instruction = Instruction.model_construct(brightness=150, opacity=200)
        img = render_image(_solid((10, 10, 10)), instruction)
        assert img.getpixel((0, 0)) == (255, 255, 255, 255)
