"""
SVG 处理模块 - 属性提取/根节点配置/几何包围盒

子模块：
- extractor: 遍历文档提取 id 与 data-* 标注
- root_config: 坐标变换与 data-groups 解析
- geometry: 元素包围盒计算
"""

from .extractor import SvgAttributeExtractor
from .root_config import RootConfigParser

__all__ = [
    "SvgAttributeExtractor",
    "RootConfigParser",
]
