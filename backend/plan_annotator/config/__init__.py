"""
配置层 - 加载标注约定与运行期配置

职责：
- 加载 annotation_convention.yaml（标注约定，包内置）
- 加载 plan_annotator.yaml（运行期参数，可选）
- 提供类型安全的配置访问接口
"""

from .convention_loader import ConventionLoader, ConventionSpec, load_convention
from .runtime_config import RuntimeConfig, get_config, reload_config

__all__ = [
    "ConventionLoader",
    "ConventionSpec",
    "load_convention",
    "RuntimeConfig",
    "get_config",
    "reload_config",
]
