"""转换配置模型。

定义图片重新编码的四个用户可调参数。
"""

from PIL import ImageColor
from pydantic import BaseModel, Field, field_validator


class ConversionConfig(BaseModel):
    """图片转换配置

    运行开始时由编排器复制一份快照，运行期间只读。
    """

    quality: float = Field(0.9, ge=0.1, le=1.0, description="编码质量")
    matte_color: str = Field("#FFFFFF", description="透明像素下方的填充色")
    scale: float = Field(1.0, gt=0, le=1.0, description="等比缩放比例")
    trim_right: int = Field(0, ge=0, description="缩放后从右侧裁掉的像素数")

    @field_validator("matte_color")
    @classmethod
    def validate_matte_color(cls, v: str) -> str:
        # 使用 Pillow 的颜色解析，接受 #RGB、#RRGGBB、颜色名、rgb() 等
        try:
            ImageColor.getrgb(v)
        except ValueError as e:
            raise ValueError(f"无效的颜色值: {v}") from e
        return v

    @property
    def jpeg_quality(self) -> int:
        """Pillow 使用的 JPEG 质量值（10-100）"""
        return max(1, min(100, round(self.quality * 100)))

    @property
    def matte_rgb(self) -> tuple[int, int, int]:
        """填充色的 RGB 三元组"""
        return ImageColor.getcolor(self.matte_color, "RGB")  # type: ignore[return-value]
