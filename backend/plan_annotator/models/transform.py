"""
根节点配置模型 - 坐标变换与分组

对应 SVG 根节点属性：
data-origin-x / data-origin-y / data-scale-px-per-meter /
data-groups（JSON 数组）/ data-annotator-version
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .diagnostics import Diagnostic


class CoordinateTransform(BaseModel):
    """SVG 像素坐标 → 物理坐标（米）"""
    origin_x: float = Field(0.0, description="物理原点在 SVG 中的 x")
    origin_y: float = Field(0.0, description="物理原点在 SVG 中的 y")
    scale_px_per_meter: float | None = Field(None, gt=0, description="每米像素数")
    annotator_version: str | None = None
    y_up: bool = Field(True, description="物理 y 轴向上（SVG y 轴向下）")

    model_config = {"frozen": True}

    @property
    def has_scale(self) -> bool:
        return self.scale_px_per_meter is not None

    def to_meters(self, x: float, y: float) -> tuple[float, float]:
        """SVG 坐标转物理坐标，无比例时抛 ValueError"""
        scale = self._require_scale()
        mx = (x - self.origin_x) / scale
        if self.y_up:
            my = (self.origin_y - y) / scale
        else:
            my = (y - self.origin_y) / scale
        return mx, my

    def to_svg(self, mx: float, my: float) -> tuple[float, float]:
        """物理坐标转 SVG 坐标"""
        scale = self._require_scale()
        x = self.origin_x + mx * scale
        y = self.origin_y - my * scale if self.y_up else self.origin_y + my * scale
        return x, y

    def length_to_meters(self, px: float) -> float:
        return px / self._require_scale()

    def _require_scale(self) -> float:
        if self.scale_px_per_meter is None:
            raise ValueError("data-scale-px-per-meter is not set; physical units unavailable")
        return self.scale_px_per_meter


class Group(BaseModel):
    """分组（来自 data-groups，元素顺序有意义）"""
    id: str = Field(..., min_length=1)
    name: str = ""
    elements: tuple[str, ...] = Field(default_factory=tuple)
    declared: bool = Field(True, description="False 表示由元素 data-group 隐式产生")

    model_config = {"frozen": True}


class RootConfig(BaseModel):
    """根节点解析结果"""
    transform: CoordinateTransform = Field(default_factory=CoordinateTransform)
    groups: tuple[Group, ...] = Field(default_factory=tuple)
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}
