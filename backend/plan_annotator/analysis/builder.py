"""
语义模型构建器 - 合并元素记录/坐标变换/分组并执行一致性检查

检查顺序（类间遇致命即停，类内累积）：
1. 唯一性：重复 id → 致命 DuplicateId，不产出模型
2. 引用完整性：分组引用的元素必须存在（DanglingReference 警告）；
   zone 与 data-group 为隐式声明，不检查
3. 比例参照：0 个 → 警告；多个 → 警告并取文档顺序第一个
4. 地址冲突：同图层同地址的不同元素 → 警告

测试要点：
- test_duplicate_id_is_fatal: 重复 id
- test_dangling_group_reference: 悬空引用
- test_scale_reference_count: 比例参照计数
- test_address_collision_same_layer: 地址冲突
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..interfaces import DuplicateIdError, IModelBuilder
from ..models import (
    BuildResult,
    CoordinateTransform,
    Diagnostic,
    DiagnosticCode,
    ElementRecord,
    Group,
    SemanticModel,
)

logger = logging.getLogger(__name__)


class SemanticModelBuilder(IModelBuilder):
    """语义模型构建器实现（纯函数，无副作用）"""

    def build(
        self,
        records: Sequence[ElementRecord],
        transform: CoordinateTransform,
        groups: Sequence[Group],
        source: str | None = None,
    ) -> BuildResult:
        """构建语义模型

        Raises:
            DuplicateIdError: 存在重复 id（携带每个重复 id 的诊断）
        """
        self.check_uniqueness(records, source)

        diagnostics: list[Diagnostic] = []
        ids = {r.id for r in records}
        diagnostics.extend(self.check_group_references(groups, ids, source))

        scale_diags, scale_reference_id = self.check_scale_references(records, source)
        diagnostics.extend(scale_diags)

        model = SemanticModel(
            transform=transform,
            elements=tuple(records),
            declared_groups=tuple(groups),
            scale_reference_id=scale_reference_id,
            source=source,
        )
        diagnostics.extend(self.check_address_collisions(model, source))

        logger.info(
            f"语义模型构建完成: elements={len(records)} zones={len(model.zone_ids())} "
            f"diagnostics={len(diagnostics)}"
        )
        return BuildResult(model=model, diagnostics=diagnostics)

    def check_uniqueness(self, records: Sequence[ElementRecord], source: str | None = None) -> None:
        """重复 id 检查（每个重复 id 一条错误，按首次出现顺序）"""
        counts: dict[str, int] = {}
        for r in records:
            counts[r.id] = counts.get(r.id, 0) + 1

        duplicates = [
            Diagnostic.error(
                DiagnosticCode.DUPLICATE_ID,
                f"id '{element_id}' appears {count} times; ids must be unique",
                element_id,
                source=source,
            )
            for element_id, count in counts.items()
            if count > 1
        ]
        if duplicates:
            logger.warning(f"发现重复 id: {[d.element_ids[0] for d in duplicates]}")
            raise DuplicateIdError(duplicates, source=source)

    def check_group_references(
        self, groups: Sequence[Group], ids: set[str], source: str | None = None
    ) -> list[Diagnostic]:
        """分组 → 元素引用（严格，每个缺失 id 一条警告，按首次出现顺序）"""
        missing: dict[str, list[str]] = {}
        for group in groups:
            for element_id in group.elements:
                if element_id in ids:
                    continue
                referrers = missing.setdefault(element_id, [])
                if group.id not in referrers:
                    referrers.append(group.id)

        diagnostics: list[Diagnostic] = []
        for element_id, referrers in missing.items():
            names = ", ".join(f"'{g}'" for g in referrers)
            if len(referrers) == 1:
                subject = f"group {names} references"
            else:
                subject = f"groups {names} reference"
            diagnostics.append(Diagnostic.warning(
                DiagnosticCode.DANGLING_REFERENCE,
                f"{subject} '{element_id}', which is not in the document",
                element_id,
                source=source,
            ))
        return diagnostics

    def check_scale_references(
        self, records: Sequence[ElementRecord], source: str | None = None
    ) -> tuple[list[Diagnostic], str | None]:
        """比例参照计数，返回 (诊断, 选中的参照 id)"""
        refs = [r.id for r in records if r.scale_reference]
        if not refs:
            return [Diagnostic.warning(
                DiagnosticCode.NO_SCALE_REFERENCE,
                "no scale reference found",
                source=source,
            )], None
        if len(refs) > 1:
            return [Diagnostic.warning(
                DiagnosticCode.MULTIPLE_SCALE_REFERENCES,
                f"multiple scale references, using first in document order ('{refs[0]}')",
                *refs,
                source=source,
            )], refs[0]
        return [], refs[0]

    def check_address_collisions(
        self, model: SemanticModel, source: str | None = None
    ) -> list[Diagnostic]:
        """同图层同地址冲突（不同图层不冲突）"""
        return [
            Diagnostic.warning(
                DiagnosticCode.ADDRESS_COLLISION,
                f"address '{address}' on layer '{layer.value}' is declared by {len(ids)} elements",
                *ids,
                source=source,
            )
            for layer, address, ids in model.address_table().collisions()
        ]
