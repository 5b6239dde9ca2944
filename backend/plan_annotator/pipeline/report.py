"""
报告输出 - 文本/JSON 两种格式

职责：
1. 文本：每条诊断一行 + 汇总行（控制台）
2. JSON：诊断 + 模型摘要（区域/分组/地址表），供下游工具消费
"""

from __future__ import annotations

import json
from typing import Any

from ..models import Severity, ValidationReport


class ReportRenderer:
    """报告渲染器"""

    def __init__(self, show_info: bool = True):
        self.show_info = show_info

    def render(self, report: ValidationReport, fmt: str = "text") -> str:
        if fmt == "json":
            return self.render_json(report)
        if fmt == "text":
            return self.render_text(report)
        raise ValueError(f"unsupported report format: {fmt}")

    def render_text(self, report: ValidationReport) -> str:
        lines = [
            d.format_line()
            for d in report.diagnostics
            if self.show_info or d.severity is not Severity.INFO
        ]
        counts = report.counts()
        summary = (
            f"{report.svg_path or '<svg>'}: {counts['error']} error(s), "
            f"{counts['warning']} warning(s), {counts['info']} info"
        )
        if report.model is not None:
            s = report.model.summary()
            summary += (
                f"; {s['elements']} elements, {s['zones']} zones, "
                f"{s['panels']} panels, {s['groups']} groups"
            )
        lines.append(summary)
        return "\n".join(lines)

    def render_json(self, report: ValidationReport) -> str:
        return json.dumps(self.to_dict(report), ensure_ascii=False, indent=2)

    def to_dict(self, report: ValidationReport) -> dict[str, Any]:
        data: dict[str, Any] = {
            "schema_version": "1.0",
            "svg": report.svg_path,
            "context": report.context_path,
            "exit_code": int(report.exit_code),
            "counts": report.counts(),
            "diagnostics": [
                d.model_dump(mode="json")
                for d in report.diagnostics
                if self.show_info or d.severity is not Severity.INFO
            ],
            "model": None,
        }
        model = report.model
        if model is not None:
            data["model"] = {
                "summary": model.summary(),
                "transform": model.transform.model_dump(mode="json"),
                "scale_reference": model.scale_reference_id,
                "zones": [
                    {"id": z.id, "elements": list(z.element_ids)} for z in model.zones
                ],
                "groups": [
                    {
                        "id": g.id,
                        "name": g.name,
                        "elements": model.group_members(g.id),
                        "declared": g.declared,
                    }
                    for g in model.groups
                ],
                "addresses": [
                    e.model_dump(mode="json") for e in model.address_table().entries
                ],
            }
        return data
