"""输出命名测试"""

from pathlib import Path

from py_image_pipeline.models import AnchorPosition, HueSetting, ImageFilter, Instruction
from py_image_pipeline.utils.naming_helpers import (
    destination_directory,
    destination_file_name,
    instruction_suffix,
)


class TestInstructionSuffix:
    """指令后缀"""

    def test_empty_instruction_has_empty_suffix(self):
        assert instruction_suffix(Instruction()) == ""

    def test_resize_suffix(self):
        assert instruction_suffix(Instruction(width=100, height=100)) == "-w100-h100"

    def test_anchor_only_when_not_center(self):
        top_left = Instruction(width=10, height=10, anchor=AnchorPosition.TOP_LEFT)
        assert instruction_suffix(top_left) == "-w10-h10-top_left"

    def test_filters_in_order(self):
        instruction = Instruction(filters=(ImageFilter.SEPIA, ImageFilter.INVERT))
        assert instruction_suffix(instruction) == "-sepia-invert"

    def test_full_suffix_order(self):
        instruction = Instruction(
            width=10,
            constraint=(20, 30),
            filters=(ImageFilter.GREYSCALE,),
            brightness=-5,
            opacity=50,
            hue=HueSetting(degrees=90, rotate=True),
            tint=(255, 0, 0, 128),
            vignette=(0, 0, 0, 255),
            saturation=10,
            contrast=-20,
            jpeg_quality=80,
        )
        assert instruction_suffix(instruction) == (
            "-w10-cw20-ch30-greyscale-b-5-o50-hue90r"
            "-tff000080-v000000ff-s10-c-20-q80"
        )

    def test_distinct_instructions_distinct_suffixes(self):
        suffixes = {
            instruction_suffix(i)
            for i in [
                Instruction(brightness=10),
                Instruction(brightness=-10),
                Instruction(saturation=10),
                Instruction(hue=HueSetting(degrees=10)),
                Instruction(hue=HueSetting(degrees=10, rotate=True)),
                Instruction(width=10),
                Instruction(height=10),
            ]
        }
        assert len(suffixes) == 7


class TestDestinationPaths:
    """输出路径映射"""

    def test_file_name_keeps_original_extension(self):
        name = destination_file_name(Path("in/Photo.JPG"), Instruction(width=50))
        assert name == "Photo-w50.JPG"

    def test_relative_directory_mirrored(self, temp_dir):
        input_root = temp_dir / "in"
        output_root = temp_dir / "out"
        source = input_root / "a" / "b" / "photo.png"

        assert destination_directory(source, input_root, output_root) == (
            output_root / "a" / "b"
        )

    def test_source_at_root(self, temp_dir):
        source = temp_dir / "in" / "photo.png"
        assert destination_directory(source, temp_dir / "in", temp_dir / "out") == (
            temp_dir / "out"
        )

    def test_source_outside_root_falls_back_to_output_root(self, temp_dir):
        source = temp_dir / "elsewhere" / "photo.png"
        assert destination_directory(source, temp_dir / "in", temp_dir / "out") == (
            temp_dir / "out"
        )
