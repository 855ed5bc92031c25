"""输入文档模型。

宿主提供给流水线的输入图像：源路径加可读（可选可定位）的字节流。
没有字节流时按源路径在每次读取时从磁盘加载。
"""

from io import BytesIO, IOBase
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceImage(BaseModel):
    """待处理的输入图像"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    source_path: Path | None = Field(None, description="源文件路径")
    stream: IOBase | None = Field(None, description="图像字节流，为空时从源路径读取")

    @field_validator("source_path", mode="before")
    @classmethod
    def blank_path_to_none(cls, v: Any) -> Any:
        # 空字符串或纯空白视为没有源路径
        if v is None or not str(v).strip():
            return None
        return v

    @classmethod
    def from_path(cls, path: str | Path) -> "SourceImage":
        """按文件路径构造输入图像，文件内容在读取时才加载"""
        return cls(source_path=Path(path))

    @classmethod
    def from_bytes(
        cls, data: bytes, source_path: str | Path | None = None
    ) -> "SourceImage":
        return cls(source_path=source_path, stream=BytesIO(data))

    @property
    def has_source_path(self) -> bool:
        return self.source_path is not None

    @property
    def extension(self) -> str:
        return self.source_path.suffix if self.source_path else ""

    def read_all(self) -> bytes:
        """读取全部字节；流可定位时先回到开头

        Raises:
            OSError: 文件无法读取时
            ValueError: 流已关闭时
        """
        if self.stream is None:
            if self.source_path is None:
                return b""
            return self.source_path.read_bytes()
        if self.stream.seekable():
            self.stream.seek(0)
        return self.stream.read()
