"""处理结果模型。

定义每个 (输入, 指令) 配对的输出产物以及批量处理汇总。
"""

from io import BytesIO
from pathlib import Path
from typing import Any

from humanize import naturalsize
from pydantic import BaseModel, Field


class BaseResult(BaseModel):
    """结果基类，包含通用字段和方法"""

    success: bool = Field(description="是否成功")
    error: str | None = Field(None, description="错误信息")

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)


class ResultCollection(BaseResult):
    """结果集合基类，提供通用的统计方法"""

    results: list[Any] = Field(description="结果列表")

    def get_successful_items(self) -> list[Any]:
        return [r for r in self.results if getattr(r, "success", False)]

    def get_failed_items(self) -> list[Any]:
        return [r for r in self.results if not getattr(r, "success", False)]

    def get_total_count(self) -> int:
        return len(self.results)

    def get_success_count(self) -> int:
        return len(self.get_successful_items())

    def get_failure_count(self) -> int:
        return len(self.get_failed_items())

    def get_success_rate(self) -> float:
        """获取成功率（百分比）"""
        total = self.get_total_count()
        if total == 0:
            return 0.0
        return (self.get_success_count() / total) * 100


class OutputImage(BaseResult):
    """单个配对的输出产物

    成功时 content 为编码后的字节；失败时 content 为空并携带 error。
    """

    source_path: Path | None = Field(None, description="源文件路径")
    destination_path: Path | None = Field(None, description="写入路径")
    extension: str = Field("", description="原始扩展名")
    content: bytes = Field(b"", description="编码后的图像数据")
    suffix: str = Field("", description="指令派生的文件名后缀")
    format_used: str | None = Field(None, description="使用的编码格式")
    dimensions: tuple[int, int] | None = Field(None, description="输出尺寸")

    @property
    def size(self) -> int:
        return len(self.content)

    def stream(self) -> BytesIO:
        """返回一个位于开头的新字节流"""
        return BytesIO(self.content)

    def write(self) -> Path:
        """把内容写入 destination_path

        Raises:
            ValueError: 失败的结果或缺少写入路径时
        """
        if not self.success or self.destination_path is None:
            raise ValueError(f"没有可写入的内容: {self.source_path}")
        self.destination_path.parent.mkdir(parents=True, exist_ok=True)
        self.destination_path.write_bytes(self.content)
        return self.destination_path

    def get_size_human(self) -> str:
        return self.format_size(self.size)

    def get_summary(self) -> str:
        if not self.success:
            return f"失败: {self.error}"
        width, height = self.dimensions or (0, 0)
        return (
            f"{self.destination_path} ({self.format_used}, {width}x{height}, "
            f"{self.get_size_human()})"
        )


class BatchResult(ResultCollection):
    """批量处理结果"""

    input_dir: Path = Field(description="输入目录")
    output_dir: Path | None = Field(None, description="输出目录")
    results: list[OutputImage] = Field(description="所有配对的处理结果")

    def get_total_output_size(self) -> int:
        return sum(r.size for r in self.results if r.success)

    def get_written_paths(self) -> list[Path]:
        return [
            r.destination_path
            for r in self.results
            if r.success and r.destination_path is not None
        ]

    def get_summary(self) -> str:
        """批量处理摘要"""
        if not self.success:
            return f"批量处理失败: {self.error}"

        total = self.get_total_count()
        successful = self.get_success_count()
        success_rate = self.get_success_rate()
        output_size = self.format_size(self.get_total_output_size())

        return (
            f"生成 {successful}/{total} 个输出 "
            f"(成功率 {success_rate:.1f}%), "
            f"共 {output_size}"
        )
