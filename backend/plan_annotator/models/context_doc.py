"""
上下文文档模型 - markdown 伴随文件的结构化表示

对应模板章节：
Overview / Spatial Configuration / Tracking System / Element Types /
Zones / Element Inventory / Groups / Interaction Rules / Data Structures /
Panel Control Interface / Additional Notes
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class InventoryRow(BaseModel):
    """元素清单表的一行"""
    id: str
    type: str | None = Field(None, description="人类可读类型（如 LED Panel）")
    data_type: str | None = Field(None, description="对应 data-type")
    zone: str | None = None
    address: str | None = None
    notes: str | None = None

    model_config = {"frozen": True}


class PanelControlInterface(BaseModel):
    """灯具控制接口章节"""
    protocol: str | None = None
    text: str = ""

    model_config = {"frozen": True}


class ContextDocument(BaseModel):
    """上下文文档"""
    source: str | None = None

    overview: str = ""
    spatial_configuration: str = ""
    tracking_system: str = ""
    element_types: dict[str, str] = Field(default_factory=dict, description="data-type → 描述")
    zones: dict[str, str] = Field(default_factory=dict, description="zone id → 行为描述")
    inventory: tuple[InventoryRow, ...] = Field(default_factory=tuple)
    groups: dict[str, str] = Field(default_factory=dict, description="group id → 描述")
    interaction_rules: str = ""
    data_structures: str = ""
    panel_control_interface: PanelControlInterface = Field(default_factory=PanelControlInterface)
    additional_notes: str = ""

    # 比例参照线声明的真实长度（来自 Spatial Configuration）
    scale_reference_length_m: float | None = None

    # 实际出现的章节（规范化后的键名，文档顺序）
    sections_present: tuple[str, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    @property
    def inventory_ids(self) -> list[str]:
        return [row.id for row in self.inventory]

    def inventory_row(self, element_id: str) -> InventoryRow | None:
        for row in self.inventory:
            if row.id == element_id:
                return row
        return None

    def has_section(self, key: str) -> bool:
        return key in self.sections_present
