"""
上下文文档解析器 - 解析 markdown 伴随文件的结构化章节

解析规则：
- 二级标题（## ）划分章节，标题匹配见 annotation_convention.yaml
- Element Types / Zones / Groups 下的三级标题（### ）为条目键；
  无三级标题时，取以反引号开头的列表项（- `zone-1`: ...）
- Element Inventory 取章节内第一张管道表，按表头别名定位列
- Panel Control Interface 取 "Protocol: X" 行，缺失时取正文中第一个已知协议
- Spatial Configuration 中 "scale reference ... 5 m" 为比例参照线的真实长度
- 代码块（```）内的标题与表格忽略

测试要点：
- test_parse_sections: 章节划分与编号前缀
- test_parse_inventory_table: 清单表列别名
- test_parse_protocol: 协议提取
- test_parse_scale_reference_length: 比例参照长度与单位换算
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ..config import ConventionSpec, load_convention
from ..interfaces import IContextParser
from ..models import ContextDocument, InventoryRow, PanelControlInterface

logger = logging.getLogger(__name__)

_H2 = re.compile(r"^##(?!#)\s*(.+?)\s*#*\s*$")
_H3 = re.compile(r"^###(?!#)\s*(.+?)\s*#*\s*$")
_FENCE = re.compile(r"^\s*(```|~~~)")
_BULLET_KEY = re.compile(r"^\s*[-*+]\s+\**`([^`]+)`")
_BACKTICK = re.compile(r"`([^`]+)`")
_KEY_SPLIT = re.compile(r"\s+[-–—]\s+|\s*:\s*|\s+\(")
_TABLE_SEPARATOR = re.compile(r"^\s*\|?\s*:?-{2,}:?\s*(\|\s*:?-{2,}:?\s*)*\|?\s*$")
_PROTOCOL_LINE = re.compile(r"^\s*(?:[-*+]\s+)?\**\s*protocol\s*\**\s*:\s*\**\s*(.+?)\s*$", re.IGNORECASE)
_SCALE_LENGTH = re.compile(
    r"scale[\s_-]*reference[^\n]*?(\d+(?:\.\d+)?)\s*(mm|cm|m|meters?|metres?)\b",
    re.IGNORECASE,
)
_EMPTY_CELL = {"", "-", "—", "–", "n/a", "none"}


class ContextDocumentParser(IContextParser):
    """上下文文档解析器实现"""

    def __init__(self, convention: ConventionSpec | None = None):
        self.convention = convention or load_convention()

    def parse_file(self, md_path: Path) -> ContextDocument:
        with open(md_path, encoding="utf-8") as f:
            text = f.read()
        return self.parse(text, source=str(md_path))

    def parse(self, markdown: str, source: str | None = None) -> ContextDocument:
        sections = self.split_sections(markdown)
        logger.info(f"上下文文档章节: {list(sections)} ({source or '<string>'})")

        def body(key: str) -> str:
            return "\n".join(sections.get(key, [])).strip()

        spatial = body("spatial_configuration")
        return ContextDocument(
            source=source,
            overview=body("overview"),
            spatial_configuration=spatial,
            tracking_system=body("tracking_system"),
            element_types=self.parse_subsections(sections.get("element_types", [])),
            zones=self.parse_subsections(sections.get("zones", [])),
            inventory=tuple(self.parse_inventory(sections.get("element_inventory", []))),
            groups=self.parse_subsections(sections.get("groups", [])),
            interaction_rules=body("interaction_rules"),
            data_structures=body("data_structures"),
            panel_control_interface=self.parse_panel_interface(body("panel_control_interface")),
            additional_notes=body("additional_notes"),
            scale_reference_length_m=self.parse_scale_reference_length(spatial),
            sections_present=tuple(sections),
        )

    # === 章节划分 ===

    def split_sections(self, markdown: str) -> dict[str, list[str]]:
        """按二级标题划分，返回 章节键 → 正文行（未识别章节丢弃）"""
        sections: dict[str, list[str]] = {}
        current: list[str] | None = None
        in_fence = False

        for line in markdown.splitlines():
            if _FENCE.match(line):
                in_fence = not in_fence
            if not in_fence:
                m = _H2.match(line)
                if m:
                    key = self.convention.match_section(m.group(1))
                    if key is None:
                        logger.debug(f"未识别章节: {m.group(1)}")
                        current = None
                    else:
                        current = sections.setdefault(key, [])
                    continue
            if current is not None:
                current.append(line)
        return sections

    def parse_subsections(self, lines: list[str]) -> dict[str, str]:
        """三级标题 → 描述；无三级标题时用反引号列表项"""
        entries: dict[str, list[str]] = {}
        current: list[str] | None = None
        in_fence = False

        for line in lines:
            if _FENCE.match(line):
                in_fence = not in_fence
            if not in_fence:
                m = _H3.match(line)
                if m:
                    current = entries.setdefault(subsection_key(m.group(1)), [])
                    continue
            if current is not None:
                current.append(line)

        if entries:
            return {k: "\n".join(v).strip() for k, v in entries.items()}

        bullets: dict[str, str] = {}
        for line in _outside_fences(lines):
            m = _BULLET_KEY.match(line)
            if m:
                rest = line[m.end():].lstrip("*").strip().lstrip(":—–-").strip()
                bullets.setdefault(m.group(1).strip(), rest)
        return bullets

    # === 元素清单 ===

    def parse_inventory(self, lines: list[str]) -> list[InventoryRow]:
        """章节内第一张管道表"""
        table: list[str] = []
        for line in _outside_fences(lines):
            if line.strip().startswith("|"):
                table.append(line)
            elif table:
                break

        if len(table) < 2 or not _TABLE_SEPARATOR.match(table[1]):
            return []

        header = [self.convention.match_inventory_column(c) for c in _split_row(table[0])]
        if "id" not in header:
            logger.warning(f"元素清单表缺少 id 列: {table[0].strip()}")
            return []

        rows: list[InventoryRow] = []
        for line in table[2:]:
            cells = _split_row(line)
            values: dict[str, str | None] = {}
            for field, cell in zip(header, cells):
                if field is not None and field not in values:
                    values[field] = _clean_cell(cell)
            if not values.get("id"):
                continue
            rows.append(InventoryRow(**values))
        return rows

    # === 控制接口 ===

    def parse_panel_interface(self, text: str) -> PanelControlInterface:
        protocol = None
        for line in _outside_fences(text.splitlines()):
            m = _PROTOCOL_LINE.match(line)
            if m:
                declared = m.group(1).strip("*` ").strip()
                protocol = self.find_protocol(declared, include_other=True) or (declared.split() or [None])[0]
                break
        if protocol is None and text:
            protocol = self.find_protocol(text, include_other=False)
        return PanelControlInterface(protocol=protocol, text=text)

    def find_protocol(self, text: str, include_other: bool) -> str | None:
        """正文中第一个出现的已知协议"""
        best: tuple[int, str] | None = None
        for protocol in self.convention.context.protocols:
            if protocol.lower() == "other" and not include_other:
                continue
            pattern = r"(?<![\w-])" + re.escape(protocol).replace(r"\-", r"[-\s]?") + r"(?![A-Za-z_-])"
            m = re.search(pattern, text, re.IGNORECASE)
            if m and (best is None or m.start() < best[0]):
                best = (m.start(), protocol)
        return best[1] if best else None

    # === 比例参照 ===

    def parse_scale_reference_length(self, text: str) -> float | None:
        """比例参照线真实长度（米）"""
        m = _SCALE_LENGTH.search(text)
        if not m:
            return None
        factor = self.convention.unit_factor(m.group(2))
        if factor is None:
            return None
        length = float(m.group(1)) * factor
        return length if length > 0 else None


def subsection_key(heading: str) -> str:
    """'`zone-1` — Entrance' / 'zone-1: Entrance' → 'zone-1'"""
    m = _BACKTICK.search(heading)
    if m:
        return m.group(1).strip()
    return _KEY_SPLIT.split(heading.strip(), maxsplit=1)[0].strip()


def _outside_fences(lines: list[str]) -> list[str]:
    result = []
    in_fence = False
    for line in lines:
        if _FENCE.match(line):
            in_fence = not in_fence
            continue
        if not in_fence:
            result.append(line)
    return result


def _split_row(line: str) -> list[str]:
    return [p.strip() for p in line.strip().strip("|").split("|")]


def _clean_cell(cell: str) -> str | None:
    value = cell.strip().strip("`").strip()
    if value.lower() in _EMPTY_CELL:
        return None
    return value
