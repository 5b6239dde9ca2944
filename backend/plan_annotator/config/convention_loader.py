"""
约定加载器 - 读取 annotation_convention.yaml

职责：
- 解析YAML并提供类型安全访问
- 提供属性名、上下文章节标题、清单列别名、已知协议等约定
- 缓存加载结果（避免重复解析）

使用方式：
    convention = ConventionLoader.load()
    key = convention.match_section("3. Zones")          # -> "zones"
    field = convention.match_inventory_column("Data-Type")  # -> "data_type"
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONVENTION_PATH = Path(__file__).with_name("annotation_convention.yaml")

_NUMBER_PREFIX = re.compile(r"^\s*(?:\d+[.)]?\s*)+")


class RootAttributeNames(BaseModel):
    """根节点属性名"""
    origin_x: str = "data-origin-x"
    origin_y: str = "data-origin-y"
    scale: str = "data-scale-px-per-meter"
    groups: str = "data-groups"
    annotator_version: str = "data-annotator-version"


class ElementAttributeNames(BaseModel):
    """逐元素属性名"""
    type: str = "data-type"
    zone: str = "data-zone"
    layer: str = "data-layer"
    group: str = "data-group"
    address: str = "data-address"
    tags: str = "data-tags"
    scale_reference: str = "data-scale-reference"


class SvgConvention(BaseModel):
    root_attributes: RootAttributeNames = Field(default_factory=RootAttributeNames)
    element_attributes: ElementAttributeNames = Field(default_factory=ElementAttributeNames)


class SectionDefinition(BaseModel):
    """上下文章节定义"""
    title: str
    aliases: list[str] = Field(default_factory=list)

    def names(self) -> list[str]:
        return [self.title, *self.aliases]


class ContextConvention(BaseModel):
    sections: dict[str, SectionDefinition] = Field(default_factory=dict)
    inventory_columns: dict[str, list[str]] = Field(default_factory=dict)
    protocols: list[str] = Field(default_factory=list)
    length_units: dict[str, float] = Field(default_factory=lambda: {"m": 1.0})


class ConventionSpec(BaseModel):
    """标注约定（annotation_convention.yaml 的结构化表示）"""
    schema_version: str
    svg: SvgConvention = Field(default_factory=SvgConvention)
    context: ContextConvention = Field(default_factory=ContextConvention)

    # === 便捷访问方法 ===

    def match_section(self, heading: str) -> str | None:
        """二级标题 → 章节键（去编号，大小写不敏感）"""
        normalized = _normalize_heading(heading)
        for key, section in self.context.sections.items():
            if any(_normalize_heading(name) == normalized for name in section.names()):
                return key
        return None

    def section_title(self, key: str) -> str:
        section = self.context.sections.get(key)
        return section.title if section else key

    def match_inventory_column(self, header: str) -> str | None:
        """清单表列名 → 字段名"""
        normalized = header.strip().strip("`").strip().lower()
        for field, aliases in self.context.inventory_columns.items():
            if normalized in (a.lower() for a in aliases):
                return field
        return None

    def canonical_protocol(self, value: str) -> str | None:
        """协议名规范化（大小写与连字符不敏感），未知返回 None"""
        wanted = _protocol_key(value)
        for protocol in self.context.protocols:
            if _protocol_key(protocol) == wanted:
                return protocol
        return None

    def unit_factor(self, unit: str) -> float | None:
        return self.context.length_units.get(unit.strip().lower())


class ConventionLoader:
    """约定加载器（缓存）"""

    @classmethod
    @lru_cache(maxsize=4)
    def load(cls, convention_path: str | Path = DEFAULT_CONVENTION_PATH) -> ConventionSpec:
        """加载并缓存约定"""
        path = Path(convention_path)
        if not path.exists():
            raise FileNotFoundError(f"约定文件不存在: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"约定文件顶层必须为映射: {path}")

        return ConventionSpec(**data)

    @classmethod
    def reload(cls, convention_path: str | Path = DEFAULT_CONVENTION_PATH) -> ConventionSpec:
        """强制重新加载（清除缓存）"""
        cls.load.cache_clear()
        return cls.load(convention_path)


# 便捷函数
def load_convention(convention_path: str | Path | None = None) -> ConventionSpec:
    """加载标注约定（默认使用包内置约定）"""
    return ConventionLoader.load(convention_path or DEFAULT_CONVENTION_PATH)


def _normalize_heading(text: str) -> str:
    text = _NUMBER_PREFIX.sub("", text.strip().strip("#").strip())
    return re.sub(r"\s+", " ", text).strip().lower()


def _protocol_key(value: str) -> str:
    return re.sub(r"[\s_\-]", "", value.strip().strip("`*").lower())
