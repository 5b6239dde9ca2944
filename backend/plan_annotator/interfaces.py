"""
模块接口契约 - 定义各模块的抽象接口与异常

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 致命错误以异常在模块内部传递，由流水线统一转换为诊断

使用方式：
    from plan_annotator.interfaces import IAttributeExtractor

    class MyExtractor(IAttributeExtractor):
        def extract(self, svg_text: str, source: str | None = None) -> ExtractionResult:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from .models import Diagnostic, Severity

if TYPE_CHECKING:
    from .models import (
        BuildResult,
        ContextDocument,
        ElementRecord,
        ExtractionResult,
        Group,
        RootConfig,
        SemanticModel,
        CoordinateTransform,
    )


# ============================================================================
# SVG 解析模块接口
# ============================================================================

class IAttributeExtractor(ABC):
    """SVG 属性提取器接口 - 遍历文档提取 id 与 data-* 属性"""

    @abstractmethod
    def extract(self, svg_text: str, source: str | None = None) -> ExtractionResult:
        """
        提取文档中所有带 id 的元素

        Args:
            svg_text: SVG 文档文本
            source: 来源文件路径（仅用于诊断定位）

        Returns:
            元素记录（文档顺序）+ 根节点属性 + 非致命诊断

        Raises:
            MalformedDocument: XML 格式错误（不返回部分结果）
        """
        ...


class IRootConfigParser(ABC):
    """根节点配置解析器接口 - 坐标变换与分组"""

    @abstractmethod
    def parse(self, root_attributes: Mapping[str, str], source: str | None = None) -> RootConfig:
        """
        解析根节点 data-* 属性

        Args:
            root_attributes: 根元素属性表
            source: 来源文件路径

        Returns:
            坐标变换 + 分组列表 + 非致命诊断

        Raises:
            InvalidTransformError: 比例/原点数值非法
        """
        ...


# ============================================================================
# 分析模块接口
# ============================================================================

class IModelBuilder(ABC):
    """语义模型构建器接口"""

    @abstractmethod
    def build(
        self,
        records: Sequence[ElementRecord],
        transform: CoordinateTransform,
        groups: Sequence[Group],
        source: str | None = None,
    ) -> BuildResult:
        """
        合并元素记录/坐标变换/分组为语义模型

        Returns:
            语义模型 + 非致命诊断

        Raises:
            DuplicateIdError: 存在重复 id（不产出模型）
        """
        ...


class IContextParser(ABC):
    """上下文文档解析器接口"""

    @abstractmethod
    def parse(self, markdown: str, source: str | None = None) -> ContextDocument:
        """解析 markdown 上下文文档"""
        ...


class ICrossReferenceValidator(ABC):
    """交叉校验器接口（只产生非致命诊断）"""

    @abstractmethod
    def validate(
        self, model: SemanticModel, context: ContextDocument
    ) -> list[Diagnostic]:
        """对比语义模型与上下文文档"""
        ...


# ============================================================================
# 异常定义
# ============================================================================

class AnnotatorError(Exception):
    """基础异常（携带一条致命诊断）"""

    code = "AnnotatorError"

    def __init__(
        self,
        message: str,
        *,
        element_ids: tuple[str, ...] = (),
        source: str | None = None,
        stage: str | None = None,
        **details: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.element_ids = tuple(element_ids)
        self.source = source
        self.stage = stage
        self.details = details

    def to_diagnostic(self) -> Diagnostic:
        """转换为错误级诊断"""
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=self.message,
            element_ids=self.element_ids,
            source=self.source,
            stage=self.stage,
        )

    def to_diagnostics(self) -> list[Diagnostic]:
        return [self.to_diagnostic()]


class MalformedDocument(AnnotatorError):
    """XML 格式错误"""

    code = "MalformedDocument"


class DuplicateIdError(AnnotatorError):
    """重复 id（可能包含多条诊断）"""

    code = "DuplicateId"

    def __init__(self, diagnostics: list[Diagnostic], *, source: str | None = None) -> None:
        ids = tuple(i for d in diagnostics for i in d.element_ids)
        super().__init__(
            f"duplicate element ids: {', '.join(ids)}",
            element_ids=ids,
            source=source,
        )
        self.diagnostics = diagnostics

    def to_diagnostics(self) -> list[Diagnostic]:
        return list(self.diagnostics)


class InvalidTransformError(AnnotatorError):
    """坐标变换数值非法（比例/原点）"""

    code = "InvalidTransform"

    def __init__(self, message: str, *, code: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.code = code


class InputReadError(AnnotatorError):
    """输入文件不可读"""

    code = "FileNotReadable"


class InvalidIdError(AnnotatorError):
    """元素 id 为空"""

    code = "EmptyId"
