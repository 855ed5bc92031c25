"""集成测试

端到端流程、目录处理和 MCP 服务器。
"""

from pathlib import Path

import pytest
from PIL import Image

from py_image_pipeline import ImagePipeline, ValidationError, get_version
from py_image_pipeline.config import ProcessingDefaults, get_config
from py_image_pipeline.models import ImageFilter, SourceImage


class TestEndToEnd:
    """端到端核心测试"""

    def test_photo_two_variants(self, input_dir: Path, output_dir: Path, photo_path: Path):
        """缩略图和黑白两个变体"""
        pipeline = ImagePipeline()
        pipeline.resize(100, 100).and_.apply_filters(ImageFilter.GREYSCALE)

        results = list(
            pipeline.execute([SourceImage.from_path(photo_path)], input_dir, output_dir)
        )

        assert [r.destination_path.name for r in results] == [
            "photo-w100-h100.jpg",
            "photo-greyscale.jpg",
        ]
        for result in results:
            result.write()

        with Image.open(output_dir / "photo-w100-h100.jpg") as thumb:
            assert thumb.format == "JPEG"
            assert thumb.size == (100, 100)

        with Image.open(output_dir / "photo-greyscale.jpg") as grey:
            assert grey.format == "JPEG"
            assert grey.size == (300, 200)
            rgb = grey.convert("RGB")
            for point in [(10, 10), (290, 190), (150, 100)]:
                r, g, b = rgb.getpixel(point)
                assert max(r, g, b) - min(r, g, b) <= 3

    def test_execute_concurrent(self, input_dir: Path, output_dir: Path, photo_path: Path):
        pipeline = ImagePipeline(force_executor_type="thread")
        pipeline.resize(width=150).and_.set_opacity(50)

        results = list(
            pipeline.execute(
                [SourceImage.from_path(photo_path)], input_dir, output_dir, concurrent=True
            )
        )

        assert {r.destination_path.name for r in results} == {
            "photo-w150.jpg",
            "photo-o50.jpg",
        }
        assert all(r.success for r in results)


class TestProcessDirectory:
    """目录处理"""

    def test_writes_outputs_with_structure(
        self, input_dir: Path, output_dir: Path, make_image
    ):
        make_image(input_dir / "a.png")
        make_image(input_dir / "nested" / "b.gif", format="GIF")
        make_image(input_dir / "nested" / "c.bmp", format="BMP")

        pipeline = ImagePipeline.from_instructions(
            [{"constraint": [50, 50]}, {"filters": ["sepia"], "tint": "#ff000040"}]
        )
        result = pipeline.process_directory(input_dir, output_dir)

        assert result.success
        assert result.get_total_count() == 4
        assert result.get_success_count() == 4
        assert (output_dir / "a-cw50-ch50.png").exists()
        assert (output_dir / "nested" / "b-sepia-tff000040.gif").exists()
        assert not list(output_dir.rglob("c*"))
        assert "4/4" in result.get_summary()

        with Image.open(output_dir / "a-cw50-ch50.png") as img:
            assert img.size == (50, 25)

    def test_non_recursive(self, input_dir: Path, output_dir: Path, make_image):
        make_image(input_dir / "a.png")
        make_image(input_dir / "nested" / "b.png")

        pipeline = ImagePipeline().brighten(10)
        result = pipeline.process_directory(input_dir, output_dir, recursive=False)

        assert result.get_written_paths() == [output_dir / "a-b10.png"]

    def test_recursive_default_from_config(
        self, monkeypatch, input_dir: Path, output_dir: Path, make_image
    ):
        make_image(input_dir / "a.png")
        make_image(input_dir / "nested" / "b.png")
        monkeypatch.setattr(
            get_config(), "processing", ProcessingDefaults(DEFAULT_RECURSIVE=False)
        )

        result = ImagePipeline().brighten(10).process_directory(input_dir, output_dir)

        assert result.get_written_paths() == [output_dir / "a-b10.png"]

    def test_unreadable_file_fails_only_its_pairs(
        self, monkeypatch, input_dir: Path, output_dir: Path, make_image
    ):
        """单个文件读取失败不影响其他文件"""
        for name in ("a.png", "b.png", "c.png"):
            make_image(input_dir / name)

        read_bytes = Path.read_bytes

        def deny_b(self):
            if self.name == "b.png":
                raise PermissionError("denied")
            return read_bytes(self)

        monkeypatch.setattr(Path, "read_bytes", deny_b)
        result = ImagePipeline().brighten(10).process_directory(input_dir, output_dir)

        assert result.success
        assert result.get_success_count() == 2
        assert result.get_failure_count() == 1
        failed = [r for r in result.results if not r.success]
        assert failed[0].source_path == input_dir / "b.png"
        assert "denied" in failed[0].error
        assert sorted(p.name for p in output_dir.iterdir()) == ["a-b10.png", "c-b10.png"]

    def test_output_inside_input_not_reprocessed(self, input_dir: Path, make_image):
        make_image(input_dir / "a.png")
        output_dir = input_dir / "out"
        output_dir.mkdir()
        make_image(output_dir / "old.png")

        result = ImagePipeline().darken(10).process_directory(input_dir, output_dir)

        assert result.get_written_paths() == [output_dir / "a-b-10.png"]

    def test_missing_input_directory(self, temp_dir: Path):
        result = ImagePipeline().brighten(10).process_directory(
            temp_dir / "missing", temp_dir / "out"
        )

        assert not result.success
        assert result.error

    def test_empty_directory(self, input_dir: Path, output_dir: Path):
        result = ImagePipeline().brighten(10).process_directory(input_dir, output_dir)

        assert result.success
        assert result.results == []

    def test_invalid_pipeline_options(self):
        with pytest.raises(ValidationError):
            ImagePipeline(max_workers=0)
        with pytest.raises(ValidationError):
            ImagePipeline(force_executor_type="fiber")


class TestMCPServer:
    """MCP服务器功能测试"""

    def test_mcp_server_imports(self):
        from py_image_pipeline.mcp_server import mcp

        assert mcp is not None

    def test_mcp_core_tools(self):
        """测试 MCP 核心工具"""
        from py_image_pipeline.mcp_server import describe_instructions, process_images

        assert hasattr(process_images, "name")
        assert process_images.name == "process_images"
        assert hasattr(describe_instructions, "name")
        assert describe_instructions.name == "describe_instructions"

    def test_process_images_recursive_default_from_config(
        self, monkeypatch, input_dir: Path, output_dir: Path, make_image
    ):
        from py_image_pipeline.mcp_server import process_images

        make_image(input_dir / "a.png")
        make_image(input_dir / "nested" / "b.png")
        monkeypatch.setattr(
            get_config(), "processing", ProcessingDefaults(DEFAULT_RECURSIVE=False)
        )

        response = process_images.fn(
            str(input_dir), str(output_dir), [{"brightness": 10}]
        )

        assert response["success"]
        assert response["total_outputs"] == 1
        assert response["results"][0]["destination_path"] == str(
            output_dir / "a-b10.png"
        )


    def test_response_builder_batch(self, input_dir: Path, output_dir: Path, make_image):
        from py_image_pipeline.mcp_server import MCPResponseBuilder

        make_image(input_dir / "a.png")
        result = ImagePipeline().resize(width=40).process_directory(input_dir, output_dir)
        response = MCPResponseBuilder.batch(result)

        assert response["success"]
        assert response["successful_outputs"] == 1
        assert response["results"][0]["dimensions"] == [40, 20]

    def test_response_builder_errors(self):
        from py_image_pipeline.mcp_server import MCPResponseBuilder

        response = MCPResponseBuilder.validation_error("坏参数", "instructions")
        assert response == {
            "success": False,
            "error": "坏参数",
            "error_type": "validation",
            "details": {"field": "instructions"},
        }


class TestPackage:
    """包信息"""

    def test_version(self):
        assert get_version() == "0.1.0"
