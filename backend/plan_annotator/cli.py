"""
命令行入口

用法：
    plan-annotator validate PLAN.svg [--context PLAN.md] [--format text|json]
    plan-annotator addresses PLAN.svg [--layer tracking]

退出码：0 无问题 / 1 仅警告 / 2 存在错误
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config import RuntimeConfig, load_convention
from .config.runtime_config import DEFAULT_CONFIG_PATH, LoggingConfig
from .models import ExitCode, Layer
from .pipeline import ReportRenderer, ValidationPipeline

logger = logging.getLogger(__name__)


def setup_logging(cfg: LoggingConfig, verbose: bool = False) -> None:
    """按配置初始化日志（输出到 stderr，可选文件）"""
    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.WARNING)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if cfg.log_file:
        handlers.append(logging.FileHandler(cfg.log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=cfg.log_format, handlers=handlers)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="plan-annotator",
        description="Validate annotated SVG floor plans and their markdown context files.",
    )
    ap.add_argument("--config", default=None, help=f"Runtime YAML (default: {DEFAULT_CONFIG_PATH})")
    ap.add_argument("--convention", default=None, help="Annotation convention YAML override")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = ap.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="Validate a plan and optional context file")
    p_validate.add_argument("svg", help="Annotated SVG floor plan")
    p_validate.add_argument("--context", default=None, help="Companion markdown context file")
    p_validate.add_argument(
        "--format",
        choices=["text", "json"],
        default=None,
        help="Report format (default from runtime config)",
    )
    p_validate.add_argument("--quiet-info", action="store_true", help="Hide info diagnostics")

    p_addr = sub.add_parser("addresses", help="Print the address table of a plan")
    p_addr.add_argument("svg", help="Annotated SVG floor plan")
    p_addr.add_argument("--layer", default=None, help="Only list this layer")

    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    try:
        config = RuntimeConfig.from_yaml(args.config or DEFAULT_CONFIG_PATH)
        setup_logging(config.logging, verbose=args.verbose)
        convention = load_convention(args.convention or config.convention_path)
    except (OSError, ValueError, ValidationError, yaml.YAMLError) as e:
        print(f"error: {_one_line(e)}", file=sys.stderr)
        return int(ExitCode.ERRORS)

    pipeline = ValidationPipeline(config=config, convention=convention)

    if args.command == "validate":
        return _cmd_validate(pipeline, config, args)
    if args.command == "addresses":
        return _cmd_addresses(pipeline, args)
    ap.error(f"unknown command: {args.command}")
    return int(ExitCode.ERRORS)


def _cmd_validate(pipeline: ValidationPipeline, config: RuntimeConfig, args) -> int:
    report = pipeline.run(Path(args.svg), Path(args.context) if args.context else None)
    renderer = ReportRenderer(show_info=config.report.show_info and not args.quiet_info)
    print(renderer.render(report, args.format or config.report.format))
    return int(report.exit_code)


def _cmd_addresses(pipeline: ValidationPipeline, args) -> int:
    layer = None
    if args.layer:
        layer = Layer.parse(args.layer)
        if layer is None:
            print(f"error: unknown layer: {args.layer}", file=sys.stderr)
            return int(ExitCode.ERRORS)

    report = pipeline.run(Path(args.svg))
    if report.model is None:
        for d in report.errors:
            print(d.format_line(), file=sys.stderr)
        return int(report.exit_code)

    for entry in report.model.address_table().entries:
        if layer is not None and entry.layer is not layer:
            continue
        print(f"{entry.layer.value}\t{entry.address}\t{entry.element_id}\t{entry.data_type or ''}")
    return int(report.exit_code)


def _one_line(exc: Exception) -> str:
    """多行异常信息压成一行"""
    return " ".join(str(exc).split())


if __name__ == "__main__":
    raise SystemExit(main())
