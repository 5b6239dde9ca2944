"""
SVG 属性提取器 - 遍历文档提取带 id 元素的 data-* 标注

职责：
1. 解析 XML（格式错误整体失败，不返回部分结果）
2. 深度优先先序遍历，无 id 的元素跳过但继续遍历子元素
3. 解析逐元素属性（data-type/data-tags/data-layer 等）
4. 计算几何包围盒

测试要点：
- test_extract_document_order: 文档顺序
- test_extract_skips_elements_without_id: 无 id 元素跳过
- test_unknown_type_kept_as_other: 开放词表
- test_tags_split_and_dedup: 标签拆分去重
- test_malformed_xml: 格式错误
"""

from __future__ import annotations

import logging
from pathlib import Path
from xml.etree import ElementTree as ET

from ..config import ConventionSpec, load_convention
from ..interfaces import IAttributeExtractor, InvalidIdError, MalformedDocument
from ..models import (
    DataType,
    Diagnostic,
    DiagnosticCode,
    ElementRecord,
    ExtractionResult,
    Layer,
)
from .geometry import compute_bounds, local_name

logger = logging.getLogger(__name__)


class SvgAttributeExtractor(IAttributeExtractor):
    """SVG 属性提取器实现"""

    def __init__(self, convention: ConventionSpec | None = None):
        self.convention = convention or load_convention()
        self.attrs = self.convention.svg.element_attributes

    def extract_file(self, svg_path: Path) -> ExtractionResult:
        """读取文件后提取（文件完整读入后再解析）"""
        with open(svg_path, "rb") as f:
            data = f.read()
        return self.extract(data, source=str(svg_path))

    def extract(self, svg_text: str | bytes, source: str | None = None) -> ExtractionResult:
        """提取文档中所有带 id 的元素"""
        try:
            root = ET.fromstring(svg_text)
        except ET.ParseError as e:
            line, column = e.position
            raise MalformedDocument(
                f"malformed XML at line {line}, column {column}: {e}",
                source=source,
            ) from e

        bounds = compute_bounds(root)
        records: list[ElementRecord] = []
        diagnostics: list[Diagnostic] = []

        for el in root.iter():
            if "id" not in el.attrib:
                continue
            record = self._build_record(el, len(records), bounds, diagnostics, source)
            records.append(record)

        logger.info(f"提取完成: {len(records)} 个带 id 元素 ({source or '<string>'})")

        return ExtractionResult(
            records=records,
            root_tag=local_name(root.tag),
            root_attributes=dict(root.attrib),
            diagnostics=diagnostics,
        )

    def _build_record(
        self,
        el: ET.Element,
        order: int,
        bounds: dict,
        diagnostics: list[Diagnostic],
        source: str | None,
    ) -> ElementRecord:
        """构建单条元素记录"""
        a = el.attrib
        tag = local_name(el.tag)
        element_id = a["id"].strip()
        if not element_id:
            raise InvalidIdError(
                f"<{tag}> element #{order + 1} in document order has an empty id",
                source=source,
            )

        raw_type = _optional(a.get(self.attrs.type))
        data_type = None
        if raw_type is not None:
            data_type = DataType.parse(raw_type)
            if data_type is None:
                data_type = DataType.OTHER
                diagnostics.append(Diagnostic.warning(
                    DiagnosticCode.UNKNOWN_TYPE,
                    f"unrecognized data-type '{raw_type}', kept as other",
                    element_id,
                    source=source,
                ))

        raw_layer = _optional(a.get(self.attrs.layer))
        layer = None
        if raw_layer is not None:
            layer = Layer.parse(raw_layer)
            if layer is None:
                layer = Layer.UNSPECIFIED
                diagnostics.append(Diagnostic.warning(
                    DiagnosticCode.UNKNOWN_LAYER,
                    f"unrecognized data-layer '{raw_layer}', treated as unspecified",
                    element_id,
                    source=source,
                ))

        scale_flag = a.get(self.attrs.scale_reference, "")

        record = ElementRecord(
            id=element_id,
            tag_name=tag,
            order=order,
            data_type=data_type,
            type_label=raw_type,
            zone=_optional(a.get(self.attrs.zone)),
            layer=layer,
            group=_optional(a.get(self.attrs.group)),
            address=_non_blank(a.get(self.attrs.address)),
            tags=parse_tags(a.get(self.attrs.tags)),
            scale_reference=scale_flag.strip().lower() == "true",
            bounds=bounds.get(id(el)),
            attributes={k: v for k, v in a.items() if k.startswith("data-")},
        )
        logger.debug(f"元素 {record.id}: type={record.effective_type} zone={record.zone}")
        return record


def parse_tags(value: str | None) -> frozenset[str]:
    """逗号分隔 → 去空白、去空项、去重"""
    if not value:
        return frozenset()
    return frozenset(t.strip() for t in value.split(",") if t.strip())


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _non_blank(value: str | None) -> str | None:
    """空白值视为未设置，非空值原样保留"""
    if value is None or not value.strip():
        return None
    return value
