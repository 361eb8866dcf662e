# ============================================================
# ScopeGraph 构建器（基于 Tree-sitter）
# ------------------------------------------------------------
# 本模块负责：
#   - 使用 tree-sitter 对 JavaScript / JSX 源代码进行语法解析
#   - 遍历语法树，收集作用域、声明、导入、属性路径等语义节点
#   - 在收集阶段把每个声明归类为一种声明形态（Declaration）
#   - 将收集结果转换为 ScopeGraph（作用域关系图）
#
# 语法树本身只读，不会被修改。
# ============================================================

from typing import Iterator, List, Optional, Tuple

from tree_sitter import Node

from image_rewrite.scope_graph.scope_resolution import (
    Declaration,
    LocalDef,
    LocalImportStmt,
    LocalScope,
    NamespaceDecl,
    OpaqueDecl,
    PathDecl,
    ProxyDecl,
    RequireDestructureDecl,
    RequireMemberDecl,
    Scoping,
    WrapperCallDecl,
)
from image_rewrite.scope_graph.scope_resolution.graph import ScopeGraph
from image_rewrite.scope_graph.scope_resolution.imports import NAMESPACE_IMPORT
from image_rewrite.scope_graph.ts.capture_types import LocalDefCapture, LocalPathCapture
from image_rewrite.scope_graph.ts.parser import parse_source
from image_rewrite.scope_graph.utils import (
    TextRange,
    get_field,
    member_chain,
    named_children,
    node_text,
    string_value,
)

# 会引入新词法作用域的语法节点，值表示是否为函数作用域
SCOPE_TYPES = {
    "statement_block": False,
    "function_declaration": True,
    "generator_function_declaration": True,
    "function_expression": True,
    "function": True,
    "generator_function": True,
    "arrow_function": True,
    "method_definition": True,
    "class_body": False,
    "for_statement": False,
    "for_in_statement": False,
    "catch_clause": False,
    "switch_body": False,
}

REQUIRE = "require"

# 被 var 声明的父节点类型
VAR_DECLARATION = "variable_declaration"


def unwrap_parens(node: Optional[Node]) -> Optional[Node]:
    # 去掉括号表达式：(x) -> x
    while node is not None and node.type == "parenthesized_expression":
        children = named_children(node)
        node = children[0] if children else None
    return node


def is_require_call(src_bytes: bytes, node: Optional[Node]) -> bool:
    """
    判断节点是否为 require(...) 调用（不检查 require 是否被本地声明遮蔽）。
    """
    if node is None or node.type != "call_expression":
        return False
    function = get_field(node, "function")
    return function is not None and function.type == "identifier" and node_text(src_bytes, function) == REQUIRE


def call_arguments(node: Node) -> List[Node]:
    arguments = get_field(node, "arguments")
    if arguments is None or arguments.type != "arguments":
        return []
    return named_children(arguments)


def require_module(src_bytes: bytes, node: Node) -> Optional[str]:
    """
    读取 require 调用第一个参数的字符串字面量；参数不是字面量时返回 None。
    """
    args = call_arguments(node)
    if not args:
        return None
    return string_value(src_bytes, args[0])


def peel_wrapper_call(node: Node) -> Optional[Node]:
    """
    剥离配置调用层，找到包装函数的直接调用 w(T)。

    支持：
    - w(T)`...`
    - w(T)({...})
    - w(T).withConfig({...})([...])
    - w(T).attrs(...).withConfig(...)`...`

    :param node: 最外层的 call_expression
    :return: 函数为标识符的内层 call_expression，不匹配时返回 None
    """
    cur = get_field(node, "function")
    while cur is not None:
        cur = unwrap_parens(cur)
        if cur.type == "member_expression":
            cur = get_field(cur, "object")
        elif cur.type == "call_expression":
            function = get_field(cur, "function")
            if function is not None and function.type == "identifier":
                return cur
            cur = function
        else:
            return None
    return None


def classify_initializer(src_bytes: bytes, value: Optional[Node]) -> Declaration:
    """
    将变量的初始化表达式归类为一种声明形态。

    :param src_bytes: 源代码字节
    :param value: 初始化表达式节点（可能为空，例如 let x;）
    :return: Declaration
    """
    value = unwrap_parens(value)
    if value is None:
        return OpaqueDecl(reason="uninitialized")

    if value.type == "identifier":
        return ProxyDecl(target=node_text(src_bytes, value))

    if value.type == "member_expression":
        obj = unwrap_parens(get_field(value, "object"))
        prop = get_field(value, "property")
        if is_require_call(src_bytes, obj):
            if prop is None or prop.type != "property_identifier":
                return OpaqueDecl(reason="computed require member")
            return RequireMemberDecl(
                module=require_module(src_bytes, obj),
                export=node_text(src_bytes, prop),
            )
        chain = member_chain(src_bytes, value)
        if chain is not None:
            return PathDecl(chain=chain)
        return OpaqueDecl(reason="member_expression")

    if value.type == "call_expression":
        if is_require_call(src_bytes, value):
            module = require_module(src_bytes, value)
            if module is None:
                return OpaqueDecl(reason="dynamic require")
            return NamespaceDecl(module=module)

        callee = peel_wrapper_call(value)
        if callee is not None:
            args = call_arguments(callee)
            target = None
            if args and args[0].type == "identifier":
                target = node_text(src_bytes, args[0])
            return WrapperCallDecl(
                wrapper=node_text(src_bytes, get_field(callee, "function")),
                target=target,
            )

    return OpaqueDecl(reason=value.type)


def uses_require(declaration: Declaration) -> bool:
    # 由 require(...) 派生的声明形态（import 不经过 LocalDef，不会出现在这里）
    return isinstance(declaration, (NamespaceDecl, RequireMemberDecl, RequireDestructureDecl))


def demote_local_require(graph: ScopeGraph, declaration: Declaration, range: TextRange) -> Declaration:
    """
    require 被本地声明遮蔽时，由 require 派生的声明不再可追踪。
    """
    if not uses_require(declaration):
        return declaration
    scope = graph.scope_by_range(range, graph.root_idx)
    if scope is not None and graph.find_binding(REQUIRE, scope) is not None:
        return OpaqueDecl(reason="local require")
    return declaration


def pattern_identifiers(node: Optional[Node]) -> Iterator[Node]:
    """
    遍历解构模式，返回其中所有被绑定的标识符节点。
    """
    if node is None:
        return
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
        yield node
    elif node.type == "pair_pattern":
        yield from pattern_identifiers(get_field(node, "value"))
    elif node.type in ("object_assignment_pattern", "assignment_pattern"):
        yield from pattern_identifiers(get_field(node, "left"))
    elif node.type in ("object_pattern", "array_pattern", "rest_pattern"):
        for child in named_children(node):
            yield from pattern_identifiers(child)


def property_key(src_bytes: bytes, node: Optional[Node]) -> Optional[str]:
    # 对象属性 / 解构模式中的静态键名
    if node is None:
        return None
    if node.type in ("property_identifier", "identifier", "number", "default"):
        return node_text(src_bytes, node)
    return string_value(src_bytes, node)


def destructured_property(src_bytes: bytes, node: Node) -> Tuple[Optional[str], Optional[Node]]:
    """
    解析对象解构模式中的单个属性，返回 (键名, 本地标识符节点)。

    - { E }         -> ("E", E)
    - { E = d }     -> ("E", E)
    - { E: X }      -> ("E", X)
    - { E: X = d }  -> ("E", X)
    其他形式（嵌套模式、rest、计算属性）返回 (None, None)。
    """
    if node.type == "shorthand_property_identifier_pattern":
        return node_text(src_bytes, node), node
    if node.type == "object_assignment_pattern":
        left = get_field(node, "left")
        if left is not None and left.type == "shorthand_property_identifier_pattern":
            return node_text(src_bytes, left), left
    if node.type == "pair_pattern":
        key = property_key(src_bytes, get_field(node, "key"))
        value = get_field(node, "value")
        if value is not None and value.type == "assignment_pattern":
            value = get_field(value, "left")
        if key is not None and value is not None and value.type == "identifier":
            return key, value
    return None, None


class ScopeBuilder:
    """
    遍历语法树并收集构建 ScopeGraph 所需的全部捕获结果。

    所有结果按文档顺序（先序遍历）收集。
    """

    def __init__(self, src_bytes: bytes):
        self.src_bytes = src_bytes
        self.scopes: List[LocalScope] = []
        self.imports: List[LocalImportStmt] = []
        self.defs: List[LocalDefCapture] = []
        self.paths: List[LocalPathCapture] = []

    def visit(self, node: Node):
        if node.type in SCOPE_TYPES:
            self.scopes.append(LocalScope(TextRange.from_node(node), function=SCOPE_TYPES[node.type]))

        handler = getattr(self, f"visit_{node.type}", None)
        if handler is not None:
            handler(node)

        for child in node.named_children:
            self.visit(child)

    def add_def(self, node: Node, declaration: Declaration, scoping: Scoping = Scoping.LOCAL):
        self.defs.append(LocalDefCapture(range=TextRange.from_node(node), declaration=declaration, scoping=scoping))

    def add_opaque(self, pattern: Optional[Node], reason: str, scoping: Scoping = Scoping.LOCAL):
        for ident in pattern_identifiers(pattern):
            self.add_def(ident, OpaqueDecl(reason=reason), scoping)

    def add_object_paths(self, prefix: List[str], obj: Node):
        """
        记录嵌套对象字面量中每个静态键对应的属性路径。
        """
        for child in named_children(obj):
            if child.type == "pair":
                key = property_key(self.src_bytes, get_field(child, "key"))
                value = unwrap_parens(get_field(child, "value"))
                if key is None or value is None:
                    continue
                chain = prefix + [key]
                self.paths.append(LocalPathCapture(
                    chain=chain,
                    declaration=classify_initializer(self.src_bytes, value),
                    range=TextRange.from_node(value),
                ))
                if value.type == "object":
                    self.add_object_paths(chain, value)
            elif child.type == "shorthand_property_identifier":
                name = node_text(self.src_bytes, child)
                self.paths.append(LocalPathCapture(
                    chain=prefix + [name],
                    declaration=ProxyDecl(target=name),
                    range=TextRange.from_node(child),
                ))

    # ---------------- import ----------------

    def visit_import_statement(self, node: Node):
        from_name = string_value(self.src_bytes, get_field(node, "source"))
        if from_name is None:
            return

        specifiers = {}
        for clause in named_children(node):
            if clause.type != "import_clause":
                continue
            for part in named_children(clause):
                if part.type == "identifier":
                    # import X from 'm'
                    specifiers[node_text(self.src_bytes, part)] = "default"
                elif part.type == "namespace_import":
                    # import * as X from 'm'
                    for ident in named_children(part):
                        specifiers[node_text(self.src_bytes, ident)] = NAMESPACE_IMPORT
                elif part.type == "named_imports":
                    # import { A, B as C } from 'm'
                    for spec in named_children(part):
                        if spec.type != "import_specifier":
                            continue
                        imported = property_key(self.src_bytes, get_field(spec, "name"))
                        alias = get_field(spec, "alias")
                        local = node_text(self.src_bytes, alias) if alias is not None else imported
                        if imported is not None:
                            specifiers[local] = imported

        self.imports.append(LocalImportStmt(TextRange.from_node(node), from_name, specifiers))

    # ---------------- 变量声明 ----------------

    def visit_variable_declarator(self, node: Node):
        scoping = Scoping.VAR if node.parent is not None and node.parent.type == VAR_DECLARATION else Scoping.LOCAL
        name = get_field(node, "name")
        value = get_field(node, "value")
        if name is None:
            return

        if name.type == "identifier":
            self.add_def(name, classify_initializer(self.src_bytes, value), scoping)
            obj = unwrap_parens(value)
            if obj is not None and obj.type == "object":
                self.add_object_paths([node_text(self.src_bytes, name)], obj)
        elif name.type == "object_pattern":
            self.destructure(name, value, scoping)
        else:
            self.add_opaque(name, "destructure", scoping)

    def destructure(self, pattern: Node, value: Optional[Node], scoping: Scoping):
        source = unwrap_parens(value)
        if not is_require_call(self.src_bytes, source):
            self.add_opaque(pattern, "destructure", scoping)
            return

        module = require_module(self.src_bytes, source)
        for child in named_children(pattern):
            key, local = destructured_property(self.src_bytes, child)
            if key is not None:
                self.add_def(local, RequireDestructureDecl(module=module, export=key), scoping)
            else:
                self.add_opaque(child, "destructure", scoping)

    # ---------------- 函数 / 类 / 参数 ----------------

    def visit_function_declaration(self, node: Node):
        # 函数名提升到函数自身作用域的父作用域
        self.add_opaque(get_field(node, "name"), "function", Scoping.HOISTED)

    visit_generator_function_declaration = visit_function_declaration

    def visit_function_expression(self, node: Node):
        # 具名函数表达式的名称只在函数内部可见
        self.add_opaque(get_field(node, "name"), "function")

    visit_function = visit_function_expression
    visit_generator_function = visit_function_expression

    def visit_class_declaration(self, node: Node):
        self.add_opaque(get_field(node, "name"), "class")

    def visit_formal_parameters(self, node: Node):
        for param in named_children(node):
            self.add_opaque(param, "parameter")

    def visit_arrow_function(self, node: Node):
        # 不带括号的单参数箭头函数：x => ...
        param = get_field(node, "parameter")
        if param is not None:
            self.add_opaque(param, "parameter")

    def visit_catch_clause(self, node: Node):
        self.add_opaque(get_field(node, "parameter"), "catch parameter")

    def visit_for_in_statement(self, node: Node):
        kind = get_field(node, "kind")
        if kind is None:
            # for (x of y)：对已有变量赋值，不产生新声明
            return
        scoping = Scoping.VAR if node_text(self.src_bytes, kind) == "var" else Scoping.LOCAL
        self.add_opaque(get_field(node, "left"), "loop variable", scoping)

    # ---------------- 属性路径赋值 ----------------

    def visit_assignment_expression(self, node: Node):
        left = get_field(node, "left")
        if left is None or left.type != "member_expression":
            return
        chain = member_chain(self.src_bytes, left)
        if chain is None:
            return
        value = unwrap_parens(get_field(node, "right"))
        self.paths.append(LocalPathCapture(
            chain=chain,
            declaration=classify_initializer(self.src_bytes, value),
            range=TextRange.from_node(node),
        ))
        if value is not None and value.type == "object":
            self.add_object_paths(chain, value)


def build_scope_graph(src_bytes: bytes, root_node: Optional[Node] = None) -> ScopeGraph:
    """
    从源代码字节流构建 ScopeGraph。

    构建流程概览：
    1. 解析源代码（或使用调用方已解析好的根节点）
    2. 遍历语法树，收集作用域、导入、声明、属性路径
    3. 按顺序向 ScopeGraph 中插入：作用域 -> 导入 -> 声明 -> 属性路径

    :param src_bytes: 源代码字节
    :param root_node: 可选的语法树根节点
    :return: ScopeGraph
    """
    if root_node is None:
        root_node = parse_source(src_bytes).root_node

    builder = ScopeBuilder(src_bytes)
    builder.visit(root_node)

    scope_graph = ScopeGraph(TextRange.from_node(root_node), src_bytes=src_bytes)

    # 插入所有局部作用域（program 本身即根作用域）
    for scope in builder.scopes:
        scope_graph.insert_local_scope(scope)

    # 插入 import 语句
    for import_stmt in builder.imports:
        scope_graph.insert_local_import(import_stmt)

    # 先插入名为 require 的本地声明，其余由 require 派生的声明据此判断是否被遮蔽
    def_captures = [
        (capture, LocalDef(capture.range, src_bytes, capture.declaration, capture.scoping))
        for capture in builder.defs
    ]
    for _, local_def in def_captures:
        if local_def.name == REQUIRE:
            insert_def(scope_graph, local_def)

    for capture, local_def in def_captures:
        if local_def.name == REQUIRE:
            continue
        local_def.declaration = demote_local_require(scope_graph, local_def.declaration, capture.range)
        insert_def(scope_graph, local_def)

    # 插入属性路径声明（同一路径以文档顺序中的第一次为准）
    for path in builder.paths:
        declaration = demote_local_require(scope_graph, path.declaration, path.range)
        scope_graph.insert_path(path.chain, declaration, path.range)

    return scope_graph


def insert_def(scope_graph: ScopeGraph, local_def: LocalDef):
    # 按挂载方式插入声明
    match local_def.scoping:
        case Scoping.HOISTED:
            scope_graph.insert_hoisted_def(local_def)
        case Scoping.VAR:
            scope_graph.insert_var_def(local_def)
        case Scoping.LOCAL:
            scope_graph.insert_local_def(local_def)
