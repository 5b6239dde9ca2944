"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- ElementRecord: 单个带 id 元素的标注
- CoordinateTransform / Group: 根节点配置
- SemanticModel: 校验后的语义模型（区域/灯具/分组/地址表）
- ContextDocument: markdown 上下文文档
- Diagnostic / ValidationReport: 诊断与报告
"""

from .context_doc import ContextDocument, InventoryRow, PanelControlInterface
from .diagnostics import Diagnostic, DiagnosticCode, Severity
from .element import BBox, DataType, ElementRecord, ExtractionResult, Layer
from .report import ExitCode, ValidationReport
from .semantic import AddressEntry, AddressTable, BuildResult, SemanticModel, Zone
from .transform import CoordinateTransform, Group, RootConfig

__all__ = [
    "BBox",
    "DataType",
    "Layer",
    "ElementRecord",
    "ExtractionResult",
    "CoordinateTransform",
    "Group",
    "RootConfig",
    "Zone",
    "AddressEntry",
    "AddressTable",
    "SemanticModel",
    "BuildResult",
    "ContextDocument",
    "InventoryRow",
    "PanelControlInterface",
    "Diagnostic",
    "DiagnosticCode",
    "Severity",
    "ExitCode",
    "ValidationReport",
]
