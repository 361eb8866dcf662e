"""
本模块负责收集一个 JavaScript 模块的导出表。

导出表把“对外导出名”映射为在该模块根作用域中继续解析的声明形态：

- export const X = ... / export function X() {}  -> ProxyDecl("X")
- export { A as X }                                -> ProxyDecl("A")
- export default <expr>                            -> 按初始化表达式归类
- export { A as X } from './m'                     -> ImportDecl('./m', "A")
- export * as NS from './m'                        -> NamespaceDecl('./m')
- export * from './m'                              -> 记录在 stars 中，按名称逐个尝试
"""

from typing import Dict, List, Optional

from tree_sitter import Node

from image_rewrite.scope_graph.build_scopes import (
    classify_initializer,
    demote_local_require,
    pattern_identifiers,
    property_key,
)
from image_rewrite.scope_graph.scope_resolution import (
    Declaration,
    ImportDecl,
    NamespaceDecl,
    ProxyDecl,
)
from image_rewrite.scope_graph.scope_resolution.graph import ScopeGraph
from image_rewrite.scope_graph.utils import TextRange, get_field, named_children, node_text, string_value

DEFAULT_EXPORT = "default"

# export 语句中 declaration 字段可能出现的声明节点
DECLARATION_TYPES = ("lexical_declaration", "variable_declaration")
NAMED_DECLARATION_TYPES = (
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
)


class ExportTable:
    """
    模块的导出表。

    - names：导出名 -> 声明形态（同名导出以第一次出现为准）
    - stars：export * from 的来源模块，按出现顺序保存
    """

    def __init__(self):
        self.names: Dict[str, Declaration] = {}
        self.stars: List[str] = []

    def add(self, name: str, declaration: Declaration):
        self.names.setdefault(name, declaration)

    def get(self, name: str) -> Optional[Declaration]:
        return self.names.get(name)


def _has_token(node: Node, token: str) -> bool:
    return any(child.type == token for child in node.children)


def _collect_declaration(src_bytes: bytes, table: ExportTable, declaration: Node, default: bool):
    if declaration.type in DECLARATION_TYPES:
        for declarator in named_children(declaration):
            if declarator.type != "variable_declarator":
                continue
            for ident in pattern_identifiers(get_field(declarator, "name")):
                name = node_text(src_bytes, ident)
                table.add(name, ProxyDecl(target=name))
    elif declaration.type in NAMED_DECLARATION_TYPES:
        name_node = get_field(declaration, "name")
        if name_node is None:
            return
        name = node_text(src_bytes, name_node)
        table.add(DEFAULT_EXPORT if default else name, ProxyDecl(target=name))


def _collect_clause(src_bytes: bytes, table: ExportTable, clause: Node, source: Optional[str]):
    for spec in named_children(clause):
        if spec.type != "export_specifier":
            continue
        local = property_key(src_bytes, get_field(spec, "name"))
        alias = property_key(src_bytes, get_field(spec, "alias"))
        if local is None:
            continue
        exported = alias or local
        if source is not None:
            # export { A as X } from './m'
            table.add(exported, ImportDecl(module=source, export=local))
        else:
            table.add(exported, ProxyDecl(target=local))


def collect_exports(src_bytes: bytes, root_node: Node, graph: ScopeGraph) -> ExportTable:
    """
    收集模块顶层的所有 export 语句。

    :param src_bytes: 源代码字节
    :param root_node: 语法树根节点（program）
    :param graph: 该模块的 ScopeGraph，用于判断 require 是否被本地遮蔽
    :return: ExportTable
    """
    table = ExportTable()
    for node in named_children(root_node):
        if node.type != "export_statement":
            continue

        source = string_value(src_bytes, get_field(node, "source"))
        default = _has_token(node, DEFAULT_EXPORT)

        declaration = get_field(node, "declaration")
        if declaration is not None:
            _collect_declaration(src_bytes, table, declaration, default)
            continue

        value = get_field(node, "value")
        if default and value is not None:
            table.add(DEFAULT_EXPORT, demote_local_require(
                graph,
                classify_initializer(src_bytes, value),
                TextRange.from_node(value),
            ))
            continue

        for child in named_children(node):
            if child.type == "export_clause":
                _collect_clause(src_bytes, table, child, source)
            elif child.type == "namespace_export" and source is not None:
                # export * as NS from './m'
                for ident in named_children(child):
                    name = property_key(src_bytes, ident)
                    if name is not None:
                        table.add(name, NamespaceDecl(module=source))

        if source is not None and _has_token(node, "*"):
            # export * from './m'
            table.stars.append(source)

    return table
