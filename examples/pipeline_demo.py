#!/usr/bin/env python3
"""图像指令流水线演示脚本。

展示 py_image_pipeline 库的核心功能，包括：
- 流式构建多条指令
- 单批输入的顺序与并发执行
- 目录批量处理并保持目录结构
"""

import shutil
from pathlib import Path

from PIL import Image, ImageDraw

from py_image_pipeline import (
    AnchorPosition,
    ImageFilter,
    ImagePipeline,
    SourceImage,
)


def get_output_dir(subdir: str = "") -> Path:
    """获取输出目录 - 使用项目的 tmp 目录"""
    project_root = Path(__file__).parent.parent
    output_dir = project_root / "tmp" / "examples"
    if subdir:
        output_dir = output_dir / subdir
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def create_demo_images(target_dir: Path) -> list[Path]:
    """创建演示用的图像"""
    target_dir.mkdir(parents=True, exist_ok=True)
    images = []

    photo = Image.new("RGB", (600, 400), "white")
    draw = ImageDraw.Draw(photo)
    for i in range(12):
        color = (i * 20 % 256, 120 + i * 10 % 136, 255 - i * 15 % 256)
        draw.ellipse([i * 45, i * 25, i * 45 + 120, i * 25 + 120], fill=color)
    photo_path = target_dir / "photo.jpg"
    photo.save(photo_path, "JPEG", quality=95)
    images.append(photo_path)

    logo = Image.new("RGBA", (256, 256), (0, 0, 0, 0))
    draw = ImageDraw.Draw(logo)
    draw.rounded_rectangle([16, 16, 240, 240], radius=40, fill=(30, 144, 255, 230))
    logo_path = target_dir / "icons" / "logo.png"
    logo_path.parent.mkdir(exist_ok=True)
    logo.save(logo_path, "PNG")
    images.append(logo_path)

    return images


def demo_builder() -> ImagePipeline:
    """演示流式构建指令"""
    print("\n🧱 构建指令")
    print("-" * 40)

    pipeline = ImagePipeline()
    (
        pipeline.resize(200, 200, anchor=AnchorPosition.TOP)
        .and_.apply_filters(ImageFilter.SEPIA)
        .vignette("#00000099")
        .and_.constrain(300, 300)
        .set_hue(200, rotate=True)
        .saturate(30)
        .and_.apply_filters(ImageFilter.GREYSCALE)
        .set_contrast(25)
        .set_jpeg_quality(70)
    )

    for index, instruction in enumerate(pipeline.instructions, 1):
        fields = instruction.model_dump(exclude_defaults=True)
        print(f"  {index}. {fields}")

    return pipeline


def demo_execute(pipeline: ImagePipeline, images: list[Path], input_dir: Path) -> None:
    """演示对一批输入执行指令"""
    print("\n⚙️ 执行（顺序）")
    print("-" * 40)

    output_dir = get_output_dir("execute")
    inputs = [SourceImage.from_path(path) for path in images]

    for result in pipeline.execute(inputs, input_dir, output_dir):
        if result.success:
            result.write()
        print(f"  {'✅' if result.success else '❌'} {result.get_summary()}")

    print("\n⚡ 执行（并发）")
    print("-" * 40)
    inputs = [SourceImage.from_path(path) for path in images]
    results = list(pipeline.execute(inputs, input_dir, output_dir, concurrent=True))
    print(f"  完成 {len(results)} 个配对，成功 {sum(r.success for r in results)} 个")


def demo_directory(images_dir: Path) -> None:
    """演示目录批量处理"""
    print("\n📂 目录批量处理")
    print("-" * 40)

    pipeline = ImagePipeline.from_instructions(
        [
            {"width": 120},
            {"filters": ["comic"]},
            {"filters": ["polaroid"], "opacity": 80},
        ]
    )
    result = pipeline.process_directory(images_dir, get_output_dir("directory"))

    print(f"  {result.get_summary()}")
    for path in result.get_written_paths():
        print(f"  - {path}")


def main() -> None:
    print("🎨 图像指令流水线演示")
    print("=" * 40)

    images_dir = get_output_dir("source")
    shutil.rmtree(images_dir)
    images = create_demo_images(images_dir)

    pipeline = demo_builder()
    demo_execute(pipeline, images, images_dir)
    demo_directory(images_dir)

    print("\n🎉 演示完成，输出位于", get_output_dir())


if __name__ == "__main__":
    main()
