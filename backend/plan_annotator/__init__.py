"""
平面图标注校验工具 - 后端核心模块

模块结构：
- config/     运行期配置与标注约定加载
- models/     数据模型定义（元素/坐标变换/语义模型/诊断）
- svg/        SVG 解析（属性提取/根节点配置/几何包围盒）
- context/    markdown 上下文文档解析
- analysis/   语义模型构建与交叉校验
- pipeline/   校验流水线编排与报告输出
"""

__version__ = "0.1.0"
