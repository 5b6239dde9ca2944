"""
校验报告模型 - 流水线的唯一输出

退出码约定：
- 0: 无错误无警告
- 1: 仅有警告
- 2: 存在致命错误
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field

from .diagnostics import Diagnostic, Severity
from .semantic import SemanticModel


class ExitCode(IntEnum):
    OK = 0
    WARNINGS = 1
    ERRORS = 2


class ValidationReport(BaseModel):
    """校验报告"""
    svg_path: str | None = None
    context_path: str | None = None
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)
    model: SemanticModel | None = None

    model_config = {"frozen": True}

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.diagnostics)

    @property
    def has_warnings(self) -> bool:
        return any(d.severity is Severity.WARNING for d in self.diagnostics)

    @property
    def exit_code(self) -> ExitCode:
        if self.has_errors:
            return ExitCode.ERRORS
        if self.has_warnings:
            return ExitCode.WARNINGS
        return ExitCode.OK

    def by_code(self, code: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.code == code]

    def counts(self) -> dict[str, int]:
        result = {s.value: 0 for s in Severity}
        for d in self.diagnostics:
            result[d.severity.value] += 1
        return result
