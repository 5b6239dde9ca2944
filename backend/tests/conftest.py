"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(convention, sample_model):
        assert convention.schema_version == "1.0"
        assert "panel-1" in sample_model
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from plan_annotator.analysis import SemanticModelBuilder
from plan_annotator.config import ConventionSpec, RuntimeConfig, load_convention
from plan_annotator.context import ContextDocumentParser
from plan_annotator.models import ContextDocument, SemanticModel
from plan_annotator.svg import RootConfigParser, SvgAttributeExtractor


# ============================================================================
# 示例文档
# ============================================================================

SAMPLE_SVG = """\
<svg xmlns="http://www.w3.org/2000/svg" width="1000" height="500"
     data-origin-x="0" data-origin-y="500" data-scale-px-per-meter="100"
     data-annotator-version="1.2"
     data-groups='[{"id": "entrance-panels", "name": "Entrance", "elements": ["panel-1", "panel-2"]}]'>
  <g id="architecture">
    <rect id="wall-north" data-type="architecture" data-layer="structure"
          x="0" y="0" width="1000" height="10"/>
  </g>
  <rect id="zone-1" data-type="zone" x="0" y="100" width="400" height="300"/>
  <g>
    <circle id="panel-1" data-type="panel" data-zone="zone-1" data-layer="output"
            data-address="1" data-tags="led, ceiling" cx="100" cy="200" r="10"/>
    <circle id="panel-2" data-type="panel" data-zone="zone-1" data-layer="output"
            data-address="2" cx="200" cy="200" r="10"/>
  </g>
  <circle id="sensor-1" data-type="sensor" data-zone="zone-1" data-layer="tracking"
          data-address="1" cx="300" cy="250" r="5"/>
  <line id="scale-ref" data-type="reference" data-scale-reference="true"
        x1="0" y1="480" x2="500" y2="480"/>
</svg>
"""

SAMPLE_CONTEXT = """\
# Entrance Installation

## Overview
A lobby with two ceiling LED panels that react to visitors.

## Spatial Configuration
Origin sits at the bottom-left corner of the drawing, 100 px per meter.
The scale reference line `scale-ref` is 5 m long.

## Tracking System
One overhead depth sensor covers the entrance.

## Element Types

### `architecture`
Walls, drawn for context only.

### `zone`
Logical trigger regions.

### `panel`
Ceiling LED panels.

### `sensor`
Presence sensors.

### `reference`
Calibration geometry.

## Zones

### zone-1 — Entrance
Panels fade in while someone stands here.

## Element Inventory

| ID | Type | Data-Type | Zone | Address | Notes |
|----|------|-----------|------|---------|-------|
| `wall-north` | Wall | architecture | - | - | |
| `zone-1` | Zone | zone | - | - | entrance |
| `panel-1` | LED Panel | panel | zone-1 | 1 | |
| `panel-2` | LED Panel | panel | zone-1 | 2 | |
| `sensor-1` | Depth Sensor | sensor | zone-1 | 1 | overhead |
| `scale-ref` | Scale Line | reference | - | - | 5 m |

## Groups

### entrance-panels
Both entrance panels, faded together.

## Interaction Rules
When sensor-1 reports presence in zone-1, fade entrance-panels to full.

## Data Structures
Presence events carry a zone id and a timestamp.

## Panel Control Interface
Protocol: DMX
Universe 1, one channel per panel.

## Additional Notes
None.
"""


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def convention() -> ConventionSpec:
    """加载内置标注约定（会话级别缓存）"""
    return load_convention()


@pytest.fixture
def runtime_config() -> RuntimeConfig:
    """运行期配置"""
    return RuntimeConfig()


# ============================================================================
# 文档 Fixtures
# ============================================================================

@pytest.fixture
def sample_svg() -> str:
    """示例平面图（所有元素均已文档化）"""
    return SAMPLE_SVG


@pytest.fixture
def sample_context() -> str:
    """示例上下文文档（11 个章节齐全）"""
    return SAMPLE_CONTEXT


@pytest.fixture
def svg_factory() -> Callable[..., str]:
    """按正文与根属性拼装 SVG 文本

    默认根属性：原点 (0, 500)、100 px/m、空分组
    """
    def make(body: str = "", **root_attrs: str) -> str:
        attrs = {
            "data-origin-x": "0",
            "data-origin-y": "500",
            "data-scale-px-per-meter": "100",
            "data-groups": "[]",
        }
        for key, value in root_attrs.items():
            name = "data-" + key.replace("_", "-")
            if value is None:
                attrs.pop(name, None)
            else:
                attrs[name] = value
        rendered = " ".join(f"{k}='{v}'" for k, v in attrs.items())
        return f'<svg xmlns="http://www.w3.org/2000/svg" {rendered}>{body}</svg>'

    return make


# ============================================================================
# 模型 Fixtures
# ============================================================================

@pytest.fixture
def sample_model(convention: ConventionSpec) -> SemanticModel:
    """示例平面图的语义模型"""
    extraction = SvgAttributeExtractor(convention).extract(SAMPLE_SVG, source="plan.svg")
    root = RootConfigParser(convention).parse(extraction.root_attributes, source="plan.svg")
    result = SemanticModelBuilder().build(
        extraction.records, root.transform, root.groups, source="plan.svg"
    )
    return result.model


@pytest.fixture
def sample_document(convention: ConventionSpec) -> ContextDocument:
    """示例上下文文档的解析结果"""
    return ContextDocumentParser(convention).parse(SAMPLE_CONTEXT, source="plan.md")


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def plan_files(temp_dir: Path) -> tuple[Path, Path]:
    """写入磁盘的示例 SVG + markdown"""
    svg_path = temp_dir / "plan.svg"
    md_path = temp_dir / "plan.md"
    svg_path.write_text(SAMPLE_SVG, encoding="utf-8")
    md_path.write_text(SAMPLE_CONTEXT, encoding="utf-8")
    return svg_path, md_path
