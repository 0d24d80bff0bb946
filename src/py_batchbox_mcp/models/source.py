"""输入文件模型。

定义批处理输入文件的引用，以及扫描得到的 (文件, 相对路径) 对。
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import guess_mime_type


class SourceFile(BaseModel):
    """输入文件的不可变引用

    数据可以位于磁盘（path）或内存（data），读取延迟到真正需要时。
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="文件名")
    size: int = Field(ge=0, description="文件大小（字节）")
    mime_type: str = Field(description="声明的 MIME 类型")
    path: Path | None = Field(None, description="磁盘路径")
    data: bytes | None = Field(None, repr=False, description="内存数据")

    @model_validator(mode="after")
    def validate_location(self) -> "SourceFile":
        if self.path is None and self.data is None:
            raise ValueError("必须提供 path 或 data 之一")
        return self

    @classmethod
    def from_path(cls, path: str | Path) -> "SourceFile":
        """从磁盘文件创建引用"""
        path = Path(path)
        return cls(
            name=path.name,
            size=path.stat().st_size,
            mime_type=guess_mime_type(path.name),
            path=path,
        )

    @classmethod
    def from_bytes(
        cls, name: str, data: bytes, mime_type: str | None = None
    ) -> "SourceFile":
        """从内存数据创建引用"""
        return cls(
            name=name,
            size=len(data),
            mime_type=mime_type or guess_mime_type(name),
            data=data,
        )

    def read_bytes(self) -> bytes:
        """读取文件内容"""
        if self.data is not None:
            return self.data
        assert self.path is not None
        return self.path.read_bytes()


class ScannedFile(BaseModel):
    """扫描结果：文件及其相对于拖放根的路径（以 / 分隔）"""

    model_config = ConfigDict(frozen=True)

    file: SourceFile
    relative_path: str

    @property
    def segments(self) -> list[str]:
        """路径分段"""
        return self.relative_path.split("/")
