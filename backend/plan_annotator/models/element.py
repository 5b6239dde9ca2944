"""
元素记录模型 - 单个带 id 的 SVG 元素及其 data-* 标注

对应标注约定的逐元素属性：
id / data-type / data-zone / data-layer / data-group / data-address /
data-tags / data-scale-reference
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from .diagnostics import Diagnostic


class BBox(BaseModel):
    """边界框（SVG 局部坐标，y 轴向下）"""
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    model_config = {"frozen": True}

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def length(self) -> float:
        """最长边（比例参照线取此值）"""
        return max(self.width, self.height)

    @property
    def center(self) -> tuple[float, float]:
        return (self.xmin + self.xmax) / 2, (self.ymin + self.ymax) / 2

    def union(self, other: BBox) -> BBox:
        """合并两个边界框"""
        return BBox(
            xmin=min(self.xmin, other.xmin),
            ymin=min(self.ymin, other.ymin),
            xmax=max(self.xmax, other.xmax),
            ymax=max(self.ymax, other.ymax),
        )

    def intersects(self, other: BBox) -> bool:
        """判断是否相交"""
        return not (
            self.xmax < other.xmin or
            self.xmin > other.xmax or
            self.ymax < other.ymin or
            self.ymin > other.ymax
        )

    @classmethod
    def from_points(cls, points: list[tuple[float, float]]) -> BBox | None:
        if not points:
            return None
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return cls(xmin=min(xs), ymin=min(ys), xmax=max(xs), ymax=max(ys))


class DataType(str, Enum):
    """元素类型（开放词表：未识别的值归为 OTHER，原值保存在 type_label）"""
    ZONE = "zone"
    PANEL = "panel"
    SENSOR = "sensor"
    ARCHITECTURE = "architecture"
    BOUNDARY = "boundary"
    REFERENCE = "reference"
    FURNITURE = "furniture"
    PATH = "path"
    HOTSPOT = "hotspot"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> DataType | None:
        """按名称匹配（大小写不敏感），未识别返回 None"""
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None


class Layer(str, Enum):
    """元素图层"""
    TRACKING = "tracking"
    OUTPUT = "output"
    STRUCTURE = "structure"
    REFERENCE = "reference"
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, value: str) -> Layer | None:
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None


class ElementRecord(BaseModel):
    """元素记录（提取器输出，文档顺序）"""
    id: str = Field(..., min_length=1, description="元素 id（文档内唯一）")
    tag_name: str = Field(..., description="去命名空间后的标签名")
    order: int = Field(0, description="文档顺序（深度优先先序）")

    data_type: DataType | None = Field(None, description="data-type（未标注为 None）")
    type_label: str | None = Field(None, description="data-type 原值")
    zone: str | None = Field(None, description="data-zone")
    layer: Layer | None = Field(None, description="data-layer")
    group: str | None = Field(None, description="data-group")
    address: str | None = Field(None, description="data-address（原样保存，不校验格式）")
    tags: frozenset[str] = Field(default_factory=frozenset, description="data-tags")
    scale_reference: bool = Field(False, description="data-scale-reference=\"true\"")

    bounds: BBox | None = Field(None, description="几何包围盒（SVG 局部坐标）")
    attributes: dict[str, str] = Field(default_factory=dict, description="全部 data-* 原始属性")

    model_config = {"frozen": True}

    @property
    def effective_type(self) -> str | None:
        """用于文档对照的类型名：OTHER 取原值"""
        if self.data_type is None:
            return None
        if self.data_type is DataType.OTHER and self.type_label:
            return self.type_label.strip()
        return self.data_type.value

    @property
    def is_annotated(self) -> bool:
        """是否带有 data-type 标注"""
        return self.data_type is not None

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


class ExtractionResult(BaseModel):
    """提取器输出"""
    records: tuple[ElementRecord, ...] = Field(default_factory=tuple)
    root_tag: str = "svg"
    root_attributes: dict[str, str] = Field(default_factory=dict)
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    @property
    def ids(self) -> list[str]:
        return [r.id for r in self.records]
