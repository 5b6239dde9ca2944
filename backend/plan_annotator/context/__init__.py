"""
上下文文档模块 - markdown 伴随文件解析
"""

from .markdown_parser import ContextDocumentParser

__all__ = ["ContextDocumentParser"]
