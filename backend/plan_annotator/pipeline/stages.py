"""
流水线阶段定义

职责：
1. 定义各阶段的名称与顺序
2. 阶段名写入诊断的 stage 字段，便于定位
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StageEnum(str, Enum):
    """流水线阶段枚举"""
    READ_INPUTS = "READ_INPUTS"
    EXTRACT_ATTRIBUTES = "EXTRACT_ATTRIBUTES"
    PARSE_ROOT_CONFIG = "PARSE_ROOT_CONFIG"
    BUILD_MODEL = "BUILD_MODEL"
    PARSE_CONTEXT = "PARSE_CONTEXT"
    CROSS_REFERENCE = "CROSS_REFERENCE"


@dataclass(frozen=True)
class PipelineStage:
    """流水线阶段"""
    name: str
    fatal_aborts: bool  # 致命错误是否终止后续阶段
    requires_context: bool = False


# 校验流水线各阶段配置
VALIDATION_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.READ_INPUTS.value, fatal_aborts=True),
    PipelineStage(StageEnum.EXTRACT_ATTRIBUTES.value, fatal_aborts=True),
    PipelineStage(StageEnum.PARSE_ROOT_CONFIG.value, fatal_aborts=True),
    PipelineStage(StageEnum.BUILD_MODEL.value, fatal_aborts=True),
    PipelineStage(StageEnum.PARSE_CONTEXT.value, fatal_aborts=False, requires_context=True),
    PipelineStage(StageEnum.CROSS_REFERENCE.value, fatal_aborts=False, requires_context=True),
]
