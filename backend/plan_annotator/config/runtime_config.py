"""
运行期配置 - 读取 plan_annotator.yaml

职责：
- 加载校验阈值/报告格式/日志等运行参数
- 提供环境变量覆盖机制（前缀 PLAN_ANNOTATOR_，嵌套分隔符 __）
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class ValidationConfig(BaseModel):
    """校验配置"""

    scale_tolerance: float = Field(0.05, ge=0, description="比例复核允许的相对偏差")
    require_context: bool = False
    y_up: bool = True


class ReportConfig(BaseModel):
    """报告配置"""

    format: str = "text"
    show_info: bool = True


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "WARNING"
    log_file: str | None = None
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    # 标注约定文件（为空则使用内置约定）
    convention_path: Path | None = None

    # 各子配置
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "PLAN_ANNOTATOR_",
        "env_nested_delimiter": "__",
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置（文件不存在时返回默认值）"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"配置文件顶层必须为映射: {path}")

        runtime_opts = data.get("runtime_options") or {}

        config = cls(
            validation=ValidationConfig(**cls._extract(runtime_opts, "validation")),
            report=ReportConfig(**cls._extract(runtime_opts, "report")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )
        convention = runtime_opts.get("convention_path")
        if convention:
            config.convention_path = cls._resolve_path(Path(convention), base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置（支持 {default: x} 写法）"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    @staticmethod
    def _resolve_path(path: Path, base_dir: Path) -> Path:
        """相对路径基于配置文件所在目录解析"""
        if path.is_absolute():
            return path
        return (base_dir / path).resolve()


# 全局配置实例
_config: RuntimeConfig | None = None

DEFAULT_CONFIG_PATH = Path("plan_annotator.yaml")


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
