"""
流水线模块 - 校验编排与报告输出

子模块：
- stages: 流水线各阶段定义
- executor: 流水线执行器
- report: 文本/JSON 报告
"""

from .executor import ValidationPipeline
from .report import ReportRenderer
from .stages import VALIDATION_STAGES, PipelineStage, StageEnum

__all__ = [
    "PipelineStage",
    "StageEnum",
    "VALIDATION_STAGES",
    "ValidationPipeline",
    "ReportRenderer",
]
