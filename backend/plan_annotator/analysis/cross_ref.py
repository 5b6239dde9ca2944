"""
交叉校验器 - 对照语义模型与 markdown 上下文文档

只产生警告/提示，不产生致命错误（SVG 本身须可独立通过校验）：
- OrphanDocumentedElement: 清单中的 id 在 SVG 中不存在
- UndocumentedElement: 已标注的 SVG 元素未出现在（非空）清单中
- InventoryMismatch: 清单行的 data-type/zone/address 与 SVG 不一致
- UndocumentedZone: 区域在 Zones 下无对应 ### 标题
- UndocumentedType: 出现的 data-type 在 Element Types 下无对应小节
- UndocumentedGroup: 声明的分组在 Groups 下无对应条目
- ScaleMismatch: 比例参照线长度与声明长度推算的比例偏差超限
- UnknownProtocol / MissingSection: 提示
"""

from __future__ import annotations

import logging

from ..config import ConventionSpec, load_convention
from ..interfaces import ICrossReferenceValidator
from ..models import ContextDocument, Diagnostic, DiagnosticCode, SemanticModel

logger = logging.getLogger(__name__)


class ContextCrossReferenceValidator(ICrossReferenceValidator):
    """交叉校验器实现"""

    def __init__(self, convention: ConventionSpec | None = None, scale_tolerance: float = 0.05):
        self.convention = convention or load_convention()
        self.scale_tolerance = scale_tolerance

    def validate(self, model: SemanticModel, context: ContextDocument) -> list[Diagnostic]:
        source = context.source
        diagnostics: list[Diagnostic] = []
        diagnostics.extend(self.check_sections(context, source))
        diagnostics.extend(self.check_inventory(model, context, source))
        diagnostics.extend(self.check_zones(model, context, source))
        diagnostics.extend(self.check_types(model, context, source))
        diagnostics.extend(self.check_groups(model, context, source))
        diagnostics.extend(self.check_scale(model, context, source))
        diagnostics.extend(self.check_protocol(context, source))
        logger.info(f"交叉校验完成: {len(diagnostics)} 条诊断")
        return diagnostics

    def check_sections(self, context: ContextDocument, source: str | None) -> list[Diagnostic]:
        return [
            Diagnostic.info(
                DiagnosticCode.MISSING_SECTION,
                f"context file has no '## {self.convention.section_title(key)}' section",
                source=source,
            )
            for key in self.convention.context.sections
            if not context.has_section(key)
        ]

    def check_inventory(
        self, model: SemanticModel, context: ContextDocument, source: str | None
    ) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for row in context.inventory:
            element = model.get(row.id)
            if element is None:
                diagnostics.append(Diagnostic.warning(
                    DiagnosticCode.ORPHAN_DOCUMENTED_ELEMENT,
                    f"'{row.id}' is listed in the Element Inventory but not present in the SVG",
                    row.id,
                    source=source,
                ))
                continue

            mismatches = []
            svg_type = element.effective_type
            if row.data_type and (svg_type or "").lower() != row.data_type.lower():
                mismatches.append(f"data-type '{row.data_type}' vs SVG '{svg_type}'")
            if row.zone and row.zone != element.zone:
                mismatches.append(f"zone '{row.zone}' vs SVG '{element.zone}'")
            if row.address and row.address != element.address:
                mismatches.append(f"address '{row.address}' vs SVG '{element.address}'")
            if mismatches:
                diagnostics.append(Diagnostic.warning(
                    DiagnosticCode.INVENTORY_MISMATCH,
                    f"inventory row for '{row.id}' disagrees with the SVG: {'; '.join(mismatches)}",
                    row.id,
                    source=source,
                ))

        # 清单为空时不做反向检查
        if context.inventory:
            documented = set(context.inventory_ids)
            for element in model.elements:
                if element.is_annotated and element.id not in documented:
                    diagnostics.append(Diagnostic.warning(
                        DiagnosticCode.UNDOCUMENTED_ELEMENT,
                        f"'{element.id}' is annotated in the SVG but missing from the Element Inventory",
                        element.id,
                        source=source,
                    ))
        return diagnostics

    def check_zones(
        self, model: SemanticModel, context: ContextDocument, source: str | None
    ) -> list[Diagnostic]:
        return [
            Diagnostic.warning(
                DiagnosticCode.UNDOCUMENTED_ZONE,
                f"zone '{zone_id}' has no '### {zone_id}' entry under Zones",
                zone_id,
                source=source,
            )
            for zone_id in model.zone_ids()
            if zone_id not in context.zones
        ]

    def check_types(
        self, model: SemanticModel, context: ContextDocument, source: str | None
    ) -> list[Diagnostic]:
        documented = {k.lower() for k in context.element_types}
        diagnostics: list[Diagnostic] = []
        for type_name in model.observed_types():
            if type_name.lower() in documented:
                continue
            examples = [e.id for e in model.by_type(type_name)]
            diagnostics.append(Diagnostic.warning(
                DiagnosticCode.UNDOCUMENTED_TYPE,
                f"data-type '{type_name}' has no subsection under Element Types",
                *examples,
                source=source,
            ))
        return diagnostics

    def check_groups(
        self, model: SemanticModel, context: ContextDocument, source: str | None
    ) -> list[Diagnostic]:
        return [
            Diagnostic.warning(
                DiagnosticCode.UNDOCUMENTED_GROUP,
                f"group '{group.id}' has no entry under Groups",
                group.id,
                source=source,
            )
            for group in model.declared_groups
            if group.id not in context.groups
        ]

    def check_scale(
        self, model: SemanticModel, context: ContextDocument, source: str | None
    ) -> list[Diagnostic]:
        """比例参照线长度 / 声明长度 ≈ data-scale-px-per-meter"""
        ref = model.scale_reference
        declared = context.scale_reference_length_m
        scale = model.transform.scale_px_per_meter
        if ref is None or ref.bounds is None or not declared or scale is None:
            return []

        measured = ref.bounds.length / declared
        deviation = abs(measured - scale) / scale
        if deviation <= self.scale_tolerance:
            return []
        return [Diagnostic.warning(
            DiagnosticCode.SCALE_MISMATCH,
            f"scale reference '{ref.id}' measures {ref.bounds.length:g} px for a declared "
            f"{declared:g} m ({measured:.4g} px/m), but data-scale-px-per-meter is {scale:g} "
            f"({deviation:.1%} off)",
            ref.id,
            source=source,
        )]

    def check_protocol(self, context: ContextDocument, source: str | None) -> list[Diagnostic]:
        protocol = context.panel_control_interface.protocol
        if protocol is None or self.convention.canonical_protocol(protocol) is not None:
            return []
        known = ", ".join(self.convention.context.protocols)
        return [Diagnostic.info(
            DiagnosticCode.UNKNOWN_PROTOCOL,
            f"protocol '{protocol}' is not one of {known}; passed through unchanged",
            source=source,
        )]
