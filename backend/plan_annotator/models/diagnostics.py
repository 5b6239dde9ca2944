"""
诊断模型 - 校验过程中收集的错误/警告/提示

所有模块只产出 Diagnostic，不向工具边界外抛异常
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """诊断级别"""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class DiagnosticCode(str, Enum):
    """诊断代码"""
    # 致命
    MALFORMED_DOCUMENT = "MalformedDocument"
    DUPLICATE_ID = "DuplicateId"
    EMPTY_ID = "EmptyId"
    INVALID_SCALE = "InvalidScale"
    INVALID_ORIGIN = "InvalidOrigin"
    FILE_NOT_READABLE = "FileNotReadable"
    # 结构警告
    DANGLING_REFERENCE = "DanglingReference"
    ADDRESS_COLLISION = "AddressCollision"
    NO_SCALE_REFERENCE = "NoScaleReference"
    MULTIPLE_SCALE_REFERENCES = "MultipleScaleReferences"
    MISSING_SCALE = "MissingScale"
    MISSING_GROUPS = "MissingGroups"
    MALFORMED_GROUPS = "MalformedGroups"
    UNKNOWN_TYPE = "UnknownType"
    UNKNOWN_LAYER = "UnknownLayer"
    # 文档警告
    ORPHAN_DOCUMENTED_ELEMENT = "OrphanDocumentedElement"
    UNDOCUMENTED_ZONE = "UndocumentedZone"
    UNDOCUMENTED_TYPE = "UndocumentedType"
    UNDOCUMENTED_ELEMENT = "UndocumentedElement"
    UNDOCUMENTED_GROUP = "UndocumentedGroup"
    INVENTORY_MISMATCH = "InventoryMismatch"
    SCALE_MISMATCH = "ScaleMismatch"
    # 提示
    UNKNOWN_PROTOCOL = "UnknownProtocol"
    MISSING_SECTION = "MissingSection"


class Diagnostic(BaseModel):
    """单条诊断"""
    severity: Severity
    code: str
    message: str
    element_ids: tuple[str, ...] = Field(default_factory=tuple, description="相关元素 id")
    source: str | None = Field(None, description="来源文件")
    stage: str | None = Field(None, description="产生诊断的流水线阶段")

    model_config = {"frozen": True}

    @classmethod
    def error(cls, code: DiagnosticCode | str, message: str, *ids: str, **kwargs) -> Diagnostic:
        return cls(severity=Severity.ERROR, code=_code(code), message=message, element_ids=ids, **kwargs)

    @classmethod
    def warning(cls, code: DiagnosticCode | str, message: str, *ids: str, **kwargs) -> Diagnostic:
        return cls(severity=Severity.WARNING, code=_code(code), message=message, element_ids=ids, **kwargs)

    @classmethod
    def info(cls, code: DiagnosticCode | str, message: str, *ids: str, **kwargs) -> Diagnostic:
        return cls(severity=Severity.INFO, code=_code(code), message=message, element_ids=ids, **kwargs)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def format_line(self) -> str:
        """单行可读文本：SEVERITY CODE [ids] message (source)"""
        parts = [self.severity.value.upper(), self.code]
        if self.element_ids:
            parts.append(f"[{', '.join(self.element_ids)}]")
        parts.append(self.message)
        line = " ".join(parts)
        if self.source:
            line += f" ({self.source})"
        return line


def _code(code: DiagnosticCode | str) -> str:
    return code.value if isinstance(code, DiagnosticCode) else code
