"""配置构建器模块。

统一的转换配置构建逻辑，把界面单位（百分比、像素）换算为 ConversionConfig，
并集成参数验证。
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..config import get_config
from ..exceptions import ValidationError as CustomValidationError
from ..models.conversion_config import ConversionConfig
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import format_validation_error


logger = get_logger()


class ConfigBuilder:
    """转换配置构建器

    提供统一的配置构建接口和参数验证。
    """

    def build(
        self, base: ConversionConfig | None = None, **overrides: Any
    ) -> ConversionConfig:
        """构建转换配置

        Args:
            base: 作为起点的已有配置，None 时使用全局默认值
            **overrides: 需要覆盖的字段（quality、matte_color、scale、trim_right）

        Returns:
            ConversionConfig: 构建的配置对象

        Raises:
            CustomValidationError: 参数验证失败
        """
        values = base.model_dump() if base else self._defaults()
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return ConversionConfig(**values)
        except PydanticValidationError as e:
            message = self._format_validation_error(e)
            logger.warning(f"转换配置无效: {message}")
            raise CustomValidationError(message) from e

    def from_ui(
        self,
        quality_percent: int | None = None,
        scale_percent: int | None = None,
        trim_right: int | None = None,
        matte_color: str | None = None,
        base: ConversionConfig | None = None,
    ) -> ConversionConfig:
        """按界面单位构建配置

        Args:
            quality_percent: 质量 10-100（%）
            scale_percent: 缩放 1-100（%）
            trim_right: 右侧裁剪 0-50（像素）
            matte_color: 底色，任意有效颜色值
            base: 作为起点的已有配置

        Returns:
            ConversionConfig: 构建的配置对象

        Raises:
            CustomValidationError: 参数超出界面范围
        """
        self._validate_ui_params(quality_percent, scale_percent, trim_right)
        return self.build(
            base=base,
            quality=quality_percent / 100 if quality_percent is not None else None,
            scale=scale_percent / 100 if scale_percent is not None else None,
            trim_right=trim_right,
            matte_color=matte_color,
        )

    @staticmethod
    def to_ui(config: ConversionConfig) -> dict[str, Any]:
        """把配置换算回界面单位"""
        return {
            "quality_percent": round(config.quality * 100),
            "scale_percent": round(config.scale * 100),
            "trim_right": config.trim_right,
            "matte_color": config.matte_color,
        }

    def _validate_ui_params(
        self,
        quality_percent: int | None,
        scale_percent: int | None,
        trim_right: int | None,
    ) -> None:
        limits = get_config().conversion
        checks = [
            (
                "quality_percent",
                quality_percent,
                limits.MIN_QUALITY_PERCENT,
                limits.MAX_QUALITY_PERCENT,
            ),
            (
                "scale_percent",
                scale_percent,
                limits.MIN_SCALE_PERCENT,
                limits.MAX_SCALE_PERCENT,
            ),
            ("trim_right", trim_right, 0, limits.MAX_TRIM_RIGHT),
        ]
        for field, value, low, high in checks:
            if value is not None and not (low <= value <= high):
                raise CustomValidationError(
                    format_validation_error(field, value, f"{low}-{high}")
                )

    @staticmethod
    def _defaults() -> dict[str, Any]:
        defaults = get_config().conversion
        return {
            "quality": defaults.QUALITY,
            "matte_color": defaults.MATTE_COLOR,
            "scale": defaults.SCALE,
            "trim_right": defaults.TRIM_RIGHT,
        }

    def _format_validation_error(self, error: PydanticValidationError) -> str:
        """格式化验证错误"""
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            if field:
                messages.append(f"{field}: {msg}")
            else:
                messages.append(msg)
        return "; ".join(messages)
