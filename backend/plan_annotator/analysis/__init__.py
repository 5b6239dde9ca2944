"""
分析模块 - 语义模型构建与上下文交叉校验

子模块：
- builder: 唯一性/引用/比例参照/地址冲突检查并构建语义模型
- cross_ref: 语义模型与 markdown 上下文文档对照
"""

from .builder import SemanticModelBuilder
from .cross_ref import ContextCrossReferenceValidator

__all__ = [
    "SemanticModelBuilder",
    "ContextCrossReferenceValidator",
]
