"""
流水线执行器 - 编排校验各阶段

职责：
1. 按顺序执行各阶段（读取 → 提取 → 根配置 → 建模 → 上下文 → 交叉校验）
2. 将致命异常转换为错误诊断，不向调用方抛出
3. 致命错误终止后续阶段，不产出部分模型
4. 同一输入重复执行得到相同诊断（无跨次共享的可变状态）

测试要点：
- test_end_to_end_scenario: 端到端场景
- test_deterministic_diagnostics: 重复执行一致
- test_missing_file: 文件不存在
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..analysis import ContextCrossReferenceValidator, SemanticModelBuilder
from ..config import ConventionSpec, RuntimeConfig, get_config, load_convention
from ..context import ContextDocumentParser
from ..interfaces import AnnotatorError, InputReadError
from ..models import Diagnostic, DiagnosticCode, ValidationReport
from ..svg import RootConfigParser, SvgAttributeExtractor
from .stages import VALIDATION_STAGES, PipelineStage, StageEnum

logger = logging.getLogger(__name__)


class ValidationPipeline:
    """校验流水线执行器"""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        convention: ConventionSpec | None = None,
    ):
        self.config = config or get_config()
        self.convention = convention or load_convention(self.config.convention_path)

        self.extractor = SvgAttributeExtractor(self.convention)
        self.root_parser = RootConfigParser(self.convention, y_up=self.config.validation.y_up)
        self.builder = SemanticModelBuilder()
        self.context_parser = ContextDocumentParser(self.convention)
        self.cross_ref = ContextCrossReferenceValidator(
            self.convention,
            scale_tolerance=self.config.validation.scale_tolerance,
        )

    def run(self, svg_path: str | Path, context_path: str | Path | None = None) -> ValidationReport:
        """校验 SVG 文件（及可选的上下文文件）"""
        state: dict[str, Any] = {
            "svg_path": Path(svg_path),
            "context_path": Path(context_path) if context_path else None,
            "svg_data": None,
            "markdown": None,
        }
        return self._execute(state)

    def run_documents(
        self,
        svg_text: str | bytes,
        markdown: str | None = None,
        *,
        svg_source: str | None = None,
        context_source: str | None = None,
    ) -> ValidationReport:
        """校验内存中的文档（跳过文件读取）"""
        state: dict[str, Any] = {
            "svg_path": Path(svg_source) if svg_source else None,
            "context_path": Path(context_source) if context_source else None,
            "svg_data": svg_text,
            "markdown": markdown,
        }
        return self._execute(state)

    def _execute(self, state: dict[str, Any]) -> ValidationReport:
        state.update({"extraction": None, "root": None, "model": None, "context_doc": None})
        diagnostics: list[Diagnostic] = []
        has_context = state["context_path"] is not None or state["markdown"] is not None

        if not has_context and self.config.validation.require_context:
            diagnostics.append(Diagnostic.error(
                DiagnosticCode.FILE_NOT_READABLE,
                "a context file is required but none was given",
                source=_str(state["svg_path"]),
                stage=StageEnum.READ_INPUTS.value,
            ))

        for stage in VALIDATION_STAGES:
            if stage.requires_context and not has_context:
                continue
            logger.info(f"开始阶段: {stage.name}")
            try:
                produced = self._execute_stage(stage, state)
            except AnnotatorError as e:
                logger.error(f"阶段失败 {stage.name}: {e.message}")
                diagnostics.extend(_stamp(e.to_diagnostics(), stage.name))
                if stage.fatal_aborts:
                    return self._report(state, diagnostics, model=None)
                continue
            diagnostics.extend(_stamp(produced, stage.name))

        return self._report(state, diagnostics, model=state["model"])

    def _execute_stage(self, stage: PipelineStage, state: dict[str, Any]) -> list[Diagnostic]:
        """执行单个阶段，返回该阶段产生的非致命诊断"""
        svg_source = _str(state["svg_path"])

        if stage.name == StageEnum.READ_INPUTS.value:
            if state["svg_data"] is None:
                state["svg_data"] = _read_bytes(state["svg_path"])
            return []

        if stage.name == StageEnum.EXTRACT_ATTRIBUTES.value:
            extraction = self.extractor.extract(state["svg_data"], source=svg_source)
            state["extraction"] = extraction
            return list(extraction.diagnostics)

        if stage.name == StageEnum.PARSE_ROOT_CONFIG.value:
            root = self.root_parser.parse(state["extraction"].root_attributes, source=svg_source)
            state["root"] = root
            return list(root.diagnostics)

        if stage.name == StageEnum.BUILD_MODEL.value:
            result = self.builder.build(
                state["extraction"].records,
                state["root"].transform,
                state["root"].groups,
                source=svg_source,
            )
            state["model"] = result.model
            return list(result.diagnostics)

        if stage.name == StageEnum.PARSE_CONTEXT.value:
            markdown = state["markdown"]
            if markdown is None:
                markdown = _read_text(state["context_path"])
            state["context_doc"] = self.context_parser.parse(
                markdown, source=_str(state["context_path"])
            )
            return []

        if stage.name == StageEnum.CROSS_REFERENCE.value:
            if state["model"] is None or state["context_doc"] is None:
                return []
            return self.cross_ref.validate(state["model"], state["context_doc"])

        raise ValueError(f"未知阶段: {stage.name}")

    def _report(self, state: dict[str, Any], diagnostics: list[Diagnostic], model) -> ValidationReport:
        report = ValidationReport(
            svg_path=_str(state["svg_path"]),
            context_path=_str(state["context_path"]),
            diagnostics=diagnostics,
            model=model,
        )
        logger.info(f"校验完成: {report.counts()} exit={int(report.exit_code)}")
        return report


def _stamp(diagnostics: list[Diagnostic], stage: str) -> list[Diagnostic]:
    """补全诊断的阶段字段"""
    return [d if d.stage else d.model_copy(update={"stage": stage}) for d in diagnostics]


def _read_bytes(path: Path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise InputReadError(f"cannot read file: {e.strerror or e}", source=str(path)) from e


def _read_text(path: Path) -> str:
    data = _read_bytes(path)
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InputReadError(f"file is not valid UTF-8: {e.reason}", source=str(path)) from e


def _str(path: Path | None) -> str | None:
    return str(path) if path is not None else None
