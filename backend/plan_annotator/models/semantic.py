"""
语义模型 - 元素记录 + 坐标变换 + 分组的合并视图

约定：
- 区域（zone）不是独立实体，由 data-type="zone" 的元素 id 与 data-zone 取值隐式产生
- 分组由根节点 data-groups 声明，元素 data-group 视为隐式成员
- 模型构建后不可变，所有查询均为派生视图
"""

from __future__ import annotations

from pydantic import BaseModel, Field, PrivateAttr

from .diagnostics import Diagnostic
from .element import BBox, DataType, ElementRecord, Layer
from .transform import CoordinateTransform, Group


class Zone(BaseModel):
    """区域视图"""
    id: str
    element_ids: tuple[str, ...] = Field(default_factory=tuple)
    bounds: BBox | None = None

    model_config = {"frozen": True}


class AddressEntry(BaseModel):
    """地址表条目"""
    layer: Layer
    address: str
    element_id: str
    data_type: str | None = None

    model_config = {"frozen": True}


class AddressTable(BaseModel):
    """地址表 - 按 (图层, 地址) 查询声明该地址的元素

    未标注图层的元素归入 unspecified 图层。
    """
    entries: tuple[AddressEntry, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    def lookup(self, address: str, layer: Layer | str | None = None) -> tuple[str, ...]:
        """按地址查询元素 id（layer 为 None 时跨图层）"""
        target_layer = _coerce_layer(layer) if layer is not None else None
        return tuple(
            e.element_id
            for e in self.entries
            if e.address == address and (target_layer is None or e.layer == target_layer)
        )

    def collisions(self) -> list[tuple[Layer, str, tuple[str, ...]]]:
        """同图层同地址的多个元素（按首次出现顺序）"""
        buckets: dict[tuple[Layer, str], list[str]] = {}
        for e in self.entries:
            ids = buckets.setdefault((e.layer, e.address), [])
            if e.element_id not in ids:
                ids.append(e.element_id)
        return [(layer, addr, tuple(ids)) for (layer, addr), ids in buckets.items() if len(ids) > 1]

    def layers(self) -> list[Layer]:
        seen: list[Layer] = []
        for e in self.entries:
            if e.layer not in seen:
                seen.append(e.layer)
        return seen

    def __len__(self) -> int:
        return len(self.entries)


class SemanticModel(BaseModel):
    """语义模型（校验通过后的唯一输出）"""
    transform: CoordinateTransform = Field(default_factory=CoordinateTransform)
    elements: tuple[ElementRecord, ...] = Field(default_factory=tuple)
    declared_groups: tuple[Group, ...] = Field(default_factory=tuple)
    scale_reference_id: str | None = None
    source: str | None = None

    model_config = {"frozen": True}

    _index: dict[str, ElementRecord] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        self._index = {e.id: e for e in self.elements}

    # === 元素查询 ===

    def get(self, element_id: str) -> ElementRecord | None:
        return self._index.get(element_id)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._index

    @property
    def ids(self) -> list[str]:
        return [e.id for e in self.elements]

    def by_type(self, data_type: DataType | str) -> list[ElementRecord]:
        """按类型查询（字符串按 effective_type 匹配，支持开放词表）"""
        if isinstance(data_type, DataType):
            return [e for e in self.elements if e.data_type is data_type]
        return [e for e in self.elements if e.effective_type == data_type]

    def by_layer(self, layer: Layer | str) -> list[ElementRecord]:
        target = _coerce_layer(layer)
        return [e for e in self.elements if (e.layer or Layer.UNSPECIFIED) is target]

    def by_tag(self, tag: str) -> list[ElementRecord]:
        return [e for e in self.elements if tag in e.tags]

    @property
    def panels(self) -> list[ElementRecord]:
        return self.by_type(DataType.PANEL)

    @property
    def sensors(self) -> list[ElementRecord]:
        return self.by_type(DataType.SENSOR)

    @property
    def architecture(self) -> list[ElementRecord]:
        return self.by_type(DataType.ARCHITECTURE)

    @property
    def boundaries(self) -> list[ElementRecord]:
        return self.by_type(DataType.BOUNDARY)

    @property
    def scale_reference(self) -> ElementRecord | None:
        if self.scale_reference_id is None:
            return None
        return self.get(self.scale_reference_id)

    def observed_types(self) -> list[str]:
        """出现过的类型名（文档顺序去重）"""
        seen: list[str] = []
        for e in self.elements:
            t = e.effective_type
            if t and t not in seen:
                seen.append(t)
        return seen

    # === 区域视图 ===

    def zone_ids(self) -> list[str]:
        """zone 类型元素 id 与 data-zone 取值（首次出现顺序）"""
        seen: list[str] = []
        for e in self.elements:
            if e.data_type is DataType.ZONE and e.id not in seen:
                seen.append(e.id)
            if e.zone and e.zone not in seen:
                seen.append(e.zone)
        return seen

    def zone(self, zone_id: str) -> Zone | None:
        members = [
            e for e in self.elements
            if (e.data_type is DataType.ZONE and e.id == zone_id) or e.zone == zone_id
        ]
        if not members:
            return None
        bounds: BBox | None = None
        for e in members:
            if e.bounds is not None:
                bounds = e.bounds if bounds is None else bounds.union(e.bounds)
        return Zone(id=zone_id, element_ids=tuple(e.id for e in members), bounds=bounds)

    @property
    def zones(self) -> list[Zone]:
        return [z for z in (self.zone(zid) for zid in self.zone_ids()) if z is not None]

    # === 分组视图 ===

    def group(self, group_id: str) -> Group | None:
        for g in self.groups:
            if g.id == group_id:
                return g
        return None

    @property
    def groups(self) -> list[Group]:
        """声明分组 + 由 data-group 隐式产生的分组"""
        result = list(self.declared_groups)
        declared_ids = {g.id for g in self.declared_groups}
        implicit: dict[str, list[str]] = {}
        for e in self.elements:
            if e.group and e.group not in declared_ids:
                implicit.setdefault(e.group, []).append(e.id)
        for gid, members in implicit.items():
            result.append(Group(id=gid, elements=tuple(members), declared=False))
        return result

    def group_members(self, group_id: str) -> list[str]:
        """声明顺序在前，随后为 data-group 指向该组的其余元素"""
        members: list[str] = []
        for g in self.declared_groups:
            if g.id == group_id:
                members.extend(i for i in g.elements if i not in members)
        for e in self.elements:
            if e.group == group_id and e.id not in members:
                members.append(e.id)
        return members

    # === 地址表 ===

    def address_table(self, data_type: DataType | None = None) -> AddressTable:
        """构建地址表（默认包含所有带地址的元素）"""
        entries = [
            AddressEntry(
                layer=e.layer or Layer.UNSPECIFIED,
                address=e.address,
                element_id=e.id,
                data_type=e.effective_type,
            )
            for e in self.elements
            if e.address and (data_type is None or e.data_type is data_type)
        ]
        return AddressTable(entries=tuple(entries))

    def summary(self) -> dict[str, int]:
        return {
            "elements": len(self.elements),
            "zones": len(self.zone_ids()),
            "panels": len(self.panels),
            "sensors": len(self.sensors),
            "groups": len(self.groups),
        }


class BuildResult(BaseModel):
    """模型构建器输出"""
    model: SemanticModel | None = None
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}


def _coerce_layer(layer: Layer | str) -> Layer:
    if isinstance(layer, Layer):
        return layer
    parsed = Layer.parse(layer)
    if parsed is None:
        raise ValueError(f"unknown layer: {layer}")
    return parsed
