"""
上下文文档解析器单元测试
"""

import pytest

from plan_annotator.context import ContextDocumentParser
from plan_annotator.context.markdown_parser import subsection_key
from plan_annotator.models import ContextDocument


@pytest.fixture
def parser(convention) -> ContextDocumentParser:
    return ContextDocumentParser(convention)


class TestSections:
    """章节划分测试"""

    def test_parse_sections(self, sample_document: ContextDocument):
        """测试示例文档 11 个章节齐全"""
        assert sample_document.sections_present == (
            "overview",
            "spatial_configuration",
            "tracking_system",
            "element_types",
            "zones",
            "element_inventory",
            "groups",
            "interaction_rules",
            "data_structures",
            "panel_control_interface",
            "additional_notes",
        )
        assert sample_document.overview.startswith("A lobby")
        assert sample_document.source == "plan.md"

    def test_numbered_headings(self, parser):
        """测试编号前缀标题"""
        doc = parser.parse("## 1. Overview\nHello\n\n## 5) Zones\n### zone-1\nEntry\n")
        assert doc.overview == "Hello"
        assert doc.zones == {"zone-1": "Entry"}

    def test_headings_in_code_fence_ignored(self, parser):
        """测试代码块内的标题忽略"""
        doc = parser.parse("## Overview\n```\n## Zones\n```\ntext\n")
        assert doc.sections_present == ("overview",)
        assert "## Zones" in doc.overview

    def test_unknown_section_dropped(self, parser):
        """测试未识别章节"""
        doc = parser.parse("## Budget\n### zone-1\n\n## Groups\n### g1\nAll\n")
        assert doc.sections_present == ("groups",)
        assert doc.zones == {}
        assert doc.groups == {"g1": "All"}


class TestSubsections:
    """子条目测试"""

    def test_heading_entries(self, sample_document: ContextDocument):
        """测试三级标题条目"""
        assert list(sample_document.element_types) == [
            "architecture", "zone", "panel", "sensor", "reference",
        ]
        assert sample_document.zones["zone-1"] == "Panels fade in while someone stands here."
        assert "entrance-panels" in sample_document.groups

    def test_bullet_fallback(self, parser):
        """测试无三级标题时使用反引号列表项"""
        doc = parser.parse("## Zones\n- `zone-1`: Entrance\n- **`zone-2`** — Exit corridor\n- plain\n")
        assert doc.zones == {"zone-1": "Entrance", "zone-2": "Exit corridor"}

    @pytest.mark.parametrize("heading,expected", [
        ("`zone-1` — Entrance", "zone-1"),
        ("zone-1 — Entrance", "zone-1"),
        ("zone-1: Entrance", "zone-1"),
        ("panel (LED)", "panel"),
        ("zone-1", "zone-1"),
    ])
    def test_subsection_key(self, heading, expected):
        """测试条目键提取"""
        assert subsection_key(heading) == expected


class TestInventory:
    """元素清单测试"""

    def test_parse_inventory_table(self, sample_document: ContextDocument):
        """测试清单表"""
        assert sample_document.inventory_ids == [
            "wall-north", "zone-1", "panel-1", "panel-2", "sensor-1", "scale-ref",
        ]
        row = sample_document.inventory_row("panel-1")
        assert row.type == "LED Panel"
        assert row.data_type == "panel"
        assert row.zone == "zone-1"
        assert row.address == "1"
        assert row.notes is None
        assert sample_document.inventory_row("zone-1").zone is None

    def test_column_aliases_and_order(self, parser):
        """测试列别名与列顺序无关"""
        doc = parser.parse(
            "## Inventory\n"
            "| Channel | Element ID |\n"
            "|:-------:|------------|\n"
            "| 12 | `panel-7` |\n"
        )
        assert doc.inventory[0].id == "panel-7"
        assert doc.inventory[0].address == "12"

    def test_table_without_id_column(self, parser):
        """测试缺少 id 列"""
        doc = parser.parse("## Element Inventory\n| Name | Zone |\n|---|---|\n| a | b |\n")
        assert doc.inventory == ()

    def test_no_table(self, parser):
        """测试无表格"""
        doc = parser.parse("## Element Inventory\nTo be written.\n")
        assert doc.inventory == ()


class TestPanelInterface:
    """控制接口测试"""

    def test_protocol_line(self, sample_document: ContextDocument):
        """测试 Protocol 行"""
        assert sample_document.panel_control_interface.protocol == "DMX"

    @pytest.mark.parametrize("text,expected", [
        ("**Protocol:** art-net", "Art-Net"),
        ("- Protocol: DMX512 over USB", "DMX"),
        ("Protocol: KNX gateway", "KNX"),
        ("Panels are driven over sACN from the media server.", "sACN"),
        ("Dimmers accept a 0-10V signal; OSC is used for cues.", "0-10V"),
        ("Controlled by hand.", None),
    ])
    def test_parse_protocol(self, parser, text, expected):
        """测试协议提取"""
        doc = parser.parse(f"## Panel Control Interface\n{text}\n")
        assert doc.panel_control_interface.protocol == expected


class TestScaleReferenceLength:
    """比例参照长度测试"""

    def test_sample_length(self, sample_document: ContextDocument):
        """测试示例文档"""
        assert sample_document.scale_reference_length_m == 5.0

    @pytest.mark.parametrize("text,expected", [
        ("Scale reference: 250 cm", 2.5),
        ("The scale-reference line spans 1500 mm.", 1.5),
        ("scale reference is 3.5 meters", 3.5),
        ("No calibration line.", None),
    ])
    def test_parse_scale_reference_length(self, parser, text, expected):
        """测试单位换算"""
        doc = parser.parse(f"## Spatial Configuration\n{text}\n")
        assert doc.scale_reference_length_m == expected
