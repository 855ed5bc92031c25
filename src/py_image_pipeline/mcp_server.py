"""图像指令流水线 MCP 服务器。

把目录批处理和指令说明以 MCP 工具的形式提供。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .exceptions import ValidationError
from .models import AnchorPosition, BatchResult, ImageFilter, ImageFormats
from .pipeline import ImagePipeline
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPProcessResponse = dict[str, Any]
MCPDescribeResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str, field: str | None = None) -> dict[str, Any]:
        details = {"field": field} if field else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="validation",
            details=details,
        )

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> dict[str, Any]:
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="file",
            details=details,
        )

    @staticmethod
    def processing_error(message: str, operation: str | None = None) -> dict[str, Any]:
        details = {"operation": operation} if operation else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="processing",
            details=details,
        )

    @staticmethod
    def batch(result: BatchResult) -> dict[str, Any]:
        """把批量结果格式化为响应"""
        return {
            "success": result.success,
            "error": result.error,
            "input_dir": str(result.input_dir),
            "output_dir": str(result.output_dir),
            "total_outputs": result.get_total_count(),
            "successful_outputs": result.get_success_count(),
            "failed_outputs": result.get_failure_count(),
            "success_rate": result.get_success_rate(),
            "total_output_size": result.get_total_output_size(),
            "summary": result.get_summary(),
            "results": [
                {
                    "source_path": str(r.source_path),
                    "destination_path": str(r.destination_path),
                    "success": r.success,
                    "format_used": r.format_used,
                    "dimensions": list(r.dimensions) if r.dimensions else None,
                    "size": r.size,
                    "error": r.error,
                }
                for r in result.results
            ],
        }


logger = get_logger(__name__)

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("图像指令流水线服务")


@mcp.tool()
def process_images(
    input_dir: str,
    output_dir: str,
    instructions: list[dict[str, Any]],
    recursive: bool | None = None,
) -> MCPProcessResponse:
    """按指令列表批量变换目录中的图像

    每张支持的图像（.jpg/.jpeg/.gif/.png）与每条指令组合，生成一个输出文件，
    文件名为 原文件名 + 指令后缀 + 原扩展名，输出目录保持输入的子目录结构。

    Args:
        input_dir: 输入目录
        output_dir: 输出目录
        instructions: 指令列表，每条指令是一个字典，字段包括
            width, height, anchor, constraint, filters, brightness, opacity,
            hue ({"degrees": 90, "rotate": true}), tint, vignette,
            saturation, contrast, jpeg_quality
        recursive: 是否递归子目录，默认读取配置

    Returns:
        dict: 批量处理结果

    使用场景:
        # 生成缩略图和黑白版本
        process_images("photos/", "output/", [
            {"width": 100, "height": 100},
            {"filters": ["greyscale"]},
        ])
    """
    input_path = Path(input_dir)
    if not input_path.exists():
        return MCPResponseBuilder.file_error(
            MessageFormatter.directory_not_found(input_dir), input_dir
        )
    if not input_path.is_dir():
        return MCPResponseBuilder.file_error(
            MessageFormatter.path_not_directory(input_dir), input_dir
        )

    try:
        pipeline = ImagePipeline.from_instructions(instructions)
    except ValidationError as e:
        logger.warning(MessageFormatter.operation_failed("解析指令", input_dir, e))
        return MCPResponseBuilder.validation_error(e.message, "instructions")

    try:
        result = pipeline.process_directory(
            input_path, Path(output_dir), recursive=recursive
        )
        return MCPResponseBuilder.batch(result)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("批量变换", input_dir, e))
        return MCPResponseBuilder.processing_error(
            MessageFormatter.operation_failed("批量变换", input_dir, e), "批量变换"
        )


@mcp.tool()
def describe_instructions() -> MCPDescribeResponse:
    """列出指令可用的字段、滤镜、锚点和支持的扩展名

    Returns:
        dict: 指令说明
    """
    return {
        "success": True,
        "filters": [f.value for f in ImageFilter],
        "anchors": [a.value for a in AnchorPosition],
        "extensions": sorted(ImageFormats.get_supported_extensions()),
        "fields": {
            "width": "正整数，目标宽度",
            "height": "正整数，目标高度；宽高都给定时按锚点裁剪",
            "anchor": "裁剪锚点，默认 center",
            "constraint": "[最大宽度, 最大高度]，只缩小不放大",
            "filters": "滤镜名列表，按顺序应用",
            "brightness": "-100 到 100",
            "opacity": "0 到 100",
            "hue": "{degrees: 0 到 360, rotate: 是否旋转}",
            "tint": "颜色字符串或 RGBA 数组",
            "vignette": "颜色字符串或 RGBA 数组",
            "saturation": "-100 到 100",
            "contrast": "-100 到 100",
            "jpeg_quality": "0 到 100，只对 JPEG 生效",
        },
    }


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    configure_logging()
    logger.info("启动图像指令流水线 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
