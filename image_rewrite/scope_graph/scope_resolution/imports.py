"""
本模块定义了 ES import 语句的本地抽象结构。

用途：
- 记录 import 语句的来源模块与本地名称到导出名称的映射
- 在作用域查找命中 import 时给出对应的声明形态
"""

from typing import Dict, Optional

from image_rewrite.scope_graph.utils import TextRange

from .definition import Declaration, ImportDecl, NamespaceDecl

# 命名空间导入（import * as X）在 specifiers 中的占位导出名
NAMESPACE_IMPORT = "*"


class LocalImportStmt:
    """
    表示一条 import 语句。

    统一表示以下形式：
    - import X from 'm'
    - import { A, B as C } from 'm'
    - import * as NS from 'm'
    - import X, { A } from 'm'
    """

    def __init__(
        self,
        range: TextRange,
        from_name: str,
        specifiers: Optional[Dict[str, str]] = None,
    ):
        """
        :param range: import 语句在源码中的整体文本范围
        :param from_name: 来源模块名
        :param specifiers: 本地名称 -> 导出名称
        """
        self.range = range
        self.from_name = from_name
        self.specifiers = specifiers or {}

    def declaration_for(self, name: str) -> Optional[Declaration]:
        imported = self.specifiers.get(name)
        if imported is None:
            return None
        if imported == NAMESPACE_IMPORT:
            return NamespaceDecl(module=self.from_name)
        return ImportDecl(module=self.from_name, export=imported)

