"""
根节点配置解析器 - 坐标变换与分组

规则：
- data-origin-x / data-origin-y 缺省为 0（图纸左上角），非数值为致命错误
- data-scale-px-per-meter 须为正数；缺失为警告，零/负/非数值为致命错误
- data-groups 为 JSON 数组 [{id, name, elements: [...]}]；缺失或格式错误时
  不产生分组并给出警告（任一条目非法则整体丢弃）
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Mapping

from pydantic import BaseModel, Field, ValidationError

from ..config import ConventionSpec, load_convention
from ..interfaces import InvalidTransformError, IRootConfigParser
from ..models import CoordinateTransform, Diagnostic, DiagnosticCode, Group, RootConfig

logger = logging.getLogger(__name__)


class _GroupEntry(BaseModel):
    """data-groups 单个条目的形状"""
    id: str = Field(..., min_length=1)
    name: str = ""
    elements: list[str] = Field(default_factory=list)


class RootConfigParser(IRootConfigParser):
    """根节点配置解析器实现"""

    def __init__(self, convention: ConventionSpec | None = None, y_up: bool = True):
        self.convention = convention or load_convention()
        self.names = self.convention.svg.root_attributes
        self.y_up = y_up

    def parse(self, root_attributes: Mapping[str, str], source: str | None = None) -> RootConfig:
        diagnostics: list[Diagnostic] = []

        origin_x = self._parse_origin(root_attributes, self.names.origin_x, source)
        origin_y = self._parse_origin(root_attributes, self.names.origin_y, source)
        scale = self._parse_scale(root_attributes, source)
        if scale is None:
            diagnostics.append(Diagnostic.warning(
                DiagnosticCode.MISSING_SCALE,
                f"{self.names.scale} not set; coordinates cannot be converted to meters",
                source=source,
            ))

        version = root_attributes.get(self.names.annotator_version)
        transform = CoordinateTransform(
            origin_x=origin_x,
            origin_y=origin_y,
            scale_px_per_meter=scale,
            annotator_version=version.strip() if version and version.strip() else None,
            y_up=self.y_up,
        )

        groups = self._parse_groups(root_attributes.get(self.names.groups), diagnostics, source)
        logger.info(
            f"根节点配置: origin=({origin_x}, {origin_y}) scale={scale} groups={len(groups)}"
        )
        return RootConfig(transform=transform, groups=groups, diagnostics=diagnostics)

    def _parse_origin(self, attrs: Mapping[str, str], name: str, source: str | None) -> float:
        raw = attrs.get(name)
        if raw is None or not raw.strip():
            return 0.0
        value = _to_float(raw)
        if value is None:
            raise InvalidTransformError(
                f"{name}='{raw}' is not a number",
                code=DiagnosticCode.INVALID_ORIGIN.value,
                source=source,
            )
        return value

    def _parse_scale(self, attrs: Mapping[str, str], source: str | None) -> float | None:
        raw = attrs.get(self.names.scale)
        if raw is None or not raw.strip():
            return None
        value = _to_float(raw)
        if value is None or value <= 0:
            raise InvalidTransformError(
                f"{self.names.scale}='{raw}' must be a positive number",
                code=DiagnosticCode.INVALID_SCALE.value,
                source=source,
            )
        return value

    def _parse_groups(
        self, raw: str | None, diagnostics: list[Diagnostic], source: str | None
    ) -> list[Group]:
        """解析 data-groups（JSON-in-attribute）"""
        if raw is None or not raw.strip():
            diagnostics.append(Diagnostic.warning(
                DiagnosticCode.MISSING_GROUPS,
                f"{self.names.groups} not set; no groups declared",
                source=source,
            ))
            return []

        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as e:
            diagnostics.append(self._malformed(f"invalid JSON: {e.msg} (pos {e.pos})", source))
            return []

        if not isinstance(data, list):
            diagnostics.append(self._malformed("expected a JSON array of groups", source))
            return []

        groups: list[Group] = []
        seen: set[str] = set()
        for index, item in enumerate(data):
            try:
                entry = _GroupEntry.model_validate(item)
            except ValidationError as e:
                first = e.errors()[0]
                loc = ".".join(str(p) for p in first["loc"]) or "entry"
                diagnostics.append(self._malformed(
                    f"entry {index}: {loc}: {first['msg']}", source
                ))
                return []
            if entry.id in seen:
                diagnostics.append(self._malformed(
                    f"entry {index}: group id '{entry.id}' declared twice", source
                ))
                return []
            seen.add(entry.id)
            groups.append(Group(id=entry.id, name=entry.name, elements=tuple(entry.elements)))
        return groups

    def _malformed(self, detail: str, source: str | None) -> Diagnostic:
        return Diagnostic.warning(
            DiagnosticCode.MALFORMED_GROUPS,
            f"{self.names.groups} ignored, {detail}",
            source=source,
        )


def _to_float(raw: str) -> float | None:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value
