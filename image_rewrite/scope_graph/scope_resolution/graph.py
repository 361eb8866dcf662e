# ============================================================
# ScopeGraph 模块
# ------------------------------------------------------------
# 本模块基于有向图（networkx.DiGraph）构建“作用域图（Scope Graph）”，
# 用于表示一个 JavaScript 文件中的：
#   - 词法作用域（Scope）
#   - 声明（Definition）
#   - 导入（Import）
#   - 属性路径声明（Path）
# 以及它们之间的关系（边类型由 EdgeKind 描述）。
#
# 图本身就是节点的 arena：每个节点以自增整数 ID 寻址，
# 所有查询都只读，不会修改语法树。
# ============================================================

from networkx import DiGraph
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from image_rewrite.scope_graph.utils import TextRange
from .imports import LocalImportStmt
from .definition import Declaration, LocalDef
from .scope import LocalScope, ScopeStack
from .graph_types import NodeKind, EdgeKind, ScopeNode, ScopeID


class Binding(NamedTuple):
    """
    作用域查找的结果：命中的声明及其所在作用域。

    后续对声明右侧标识符的查找都从 scope 出发。
    """
    node_id: int
    name: str
    declaration: Declaration
    scope: ScopeID


class ScopeGraph:
    """
    ScopeGraph 表示整个文件级别的作用域关系图。

    核心设计思想：
    - 每一个作用域、声明、导入语句、属性路径都作为一个节点（ScopeNode）
    - 不同语义关系通过不同类型的边（EdgeKind）连接
    - 通过 TextRange 判断节点之间的层级（父子作用域）
    """

    def __init__(self, range: TextRange, src_bytes: bytes = None):
        # 有向图，用于存储所有节点及其关系
        self._graph = DiGraph()
        # 节点自增 ID 计数器
        self._node_counter = 0

        # 创建根作用域节点（对应整个文件）
        root_scope = ScopeNode(range=range, type=NodeKind.SCOPE, data={"function": True})
        self.root_idx = self.add_node(root_scope)

        # 原始源代码字节
        self.src_bytes = src_bytes
        # 属性路径 -> PATH 节点 ID
        self._paths: Dict[Tuple[str, ...], int] = {}

    def insert_local_scope(self, new: LocalScope):
        # 根据文本范围查找父作用域
        parent_scope = self.scope_by_range(new.range, self.root_idx)
        if parent_scope is not None:
            new_node = ScopeNode(range=new.range, type=NodeKind.SCOPE, data={"function": new.function})
            new_id = self.add_node(new_node)
            # 子作用域 -> 父作用域
            self._graph.add_edge(new_id, parent_scope, type=EdgeKind.ScopeToScope)

    def insert_local_import(self, new: LocalImportStmt):
        # import 只允许出现在模块顶层，但仍按范围定位所属作用域
        parent_scope = self.scope_by_range(new.range, self.root_idx)
        if parent_scope is not None:
            new_node = ScopeNode(
                range=new.range,
                name=new.from_name,
                type=NodeKind.IMPORT,
                data={"statement": new},
            )
            new_id = self.add_node(new_node)
            self._graph.add_edge(new_id, parent_scope, type=EdgeKind.ImportToScope)

    def insert_local_def(self, new: LocalDef) -> None:
        # 声明所在的最内层作用域
        defining_scope = self.scope_by_range(new.range, self.root_idx)
        if defining_scope is not None:
            self._add_def(new, defining_scope, defining_scope)

    def insert_hoisted_def(self, new: LocalDef) -> None:
        # 函数声明：名称范围位于函数自身作用域内，需提升至父作用域
        defining_scope = self.scope_by_range(new.range, self.root_idx)
        if defining_scope is not None:
            parent_scope = self.parent_scope(defining_scope)
            target_scope = parent_scope if parent_scope is not None else defining_scope
            self._add_def(new, target_scope, defining_scope)

    def insert_var_def(self, new: LocalDef) -> None:
        # var 声明：提升至最近的函数作用域（或 program）
        defining_scope = self.scope_by_range(new.range, self.root_idx)
        if defining_scope is not None:
            target_scope = defining_scope
            for scope in self.parent_scope_stack(defining_scope):
                target_scope = scope
                if self.get_node(scope).data.get("function"):
                    break
            self._add_def(new, target_scope, defining_scope)

    def insert_path(self, chain: Sequence[str], declaration: Declaration, range: TextRange) -> None:
        """
        记录属性路径声明（styles.imgs.StyledSvg = ... 或嵌套对象字面量）。

        同一路径只保留文档顺序中的第一次声明。
        """
        key = tuple(chain)
        if key in self._paths:
            return
        scope = self.scope_by_range(range, self.root_idx)
        if scope is None:
            return
        new_node = ScopeNode(
            range=range,
            name=".".join(chain),
            type=NodeKind.PATH,
            data={"declaration": declaration},
        )
        new_id = self.add_node(new_node)
        self._graph.add_edge(new_id, scope, type=EdgeKind.PathToScope)
        self._paths[key] = new_id

    def _add_def(self, new: LocalDef, scope: ScopeID, origin: ScopeID) -> int:
        # origin 为声明实际所在的最内层作用域，右侧表达式从这里开始解析
        new_def = ScopeNode(
            range=new.range,
            name=new.name,
            type=NodeKind.DEFINITION,
            data={"declaration": new.declaration, "scoping": new.scoping, "origin": origin},
        )
        new_idx = self.add_node(new_def)
        # Definition -> Scope
        self._graph.add_edge(new_idx, scope, type=EdgeKind.DefToScope)
        return new_idx

    def imports(self, start: int) -> List[int]:
        # 返回某作用域下的所有导入节点
        return [
            u
            for u, v, attrs in self._graph.in_edges(start, data=True)
            if attrs["type"] == EdgeKind.ImportToScope
        ]

    def definitions(self, start: int) -> List[int]:
        # 获取某作用域内的声明节点（按插入顺序）
        return [
            u
            for u, v, attrs in self._graph.in_edges(start, data=True)
            if attrs["type"] == EdgeKind.DefToScope
        ]

    def child_scopes(self, start: ScopeID) -> List[ScopeID]:
        # 返回某作用域的直接子作用域
        return [
            u
            for u, v, attrs in self._graph.in_edges(start, data=True)
            if attrs["type"] == EdgeKind.ScopeToScope
        ]

    def parent_scope(self, start: ScopeID) -> Optional[ScopeID]:
        # 返回某作用域的直接父作用域
        if self.get_node(start).type == NodeKind.SCOPE:
            for src, dst, attrs in self._graph.out_edges(start, data=True):
                if attrs["type"] == EdgeKind.ScopeToScope:
                    return dst
        return None

    def scope_by_range(self, range: TextRange, start: ScopeID = None) -> Optional[ScopeID]:
        # 根据文本范围递归定位最内层作用域
        if start is None:
            start = self.root_idx
        node = self.get_node(start)
        if node.range.contains(range):
            for child_id in self.child_scopes(start):
                if child := self.scope_by_range(range, child_id):
                    return child
            return start

        return None

    def parent_scope_stack(self, start: ScopeID):
        # 构造一个向上遍历的作用域栈
        return ScopeStack(self._graph, start)

    def find_binding(self, name: str, start: ScopeID) -> Optional[Binding]:
        """
        沿作用域链由内向外查找名称对应的声明（最内层声明优先）。

        同一作用域内声明优先于 import，同名声明取文档顺序中的第一个。

        :param name: 标识符名称
        :param start: 起始作用域
        :return: 命中的 Binding，找不到时为 None
        """
        for scope in self.parent_scope_stack(start):
            for local_def in self.definitions(scope):
                def_node = self.get_node(local_def)
                if def_node.name == name:
                    return Binding(local_def, name, def_node.data["declaration"], def_node.data["origin"])

            for local_import in self.imports(scope):
                statement: LocalImportStmt = self.get_node(local_import).data["statement"]
                declaration = statement.declaration_for(name)
                if declaration is not None:
                    return Binding(local_import, name, declaration, scope)

        return None

    def find_path(self, chain: Sequence[str]) -> Optional[Binding]:
        """
        查找属性路径声明，返回以路径节点所在作用域为起点的 Binding。
        """
        node_id = self._paths.get(tuple(chain))
        if node_id is None:
            return None
        node = self.get_node(node_id)
        scope = next(
            dst
            for _, dst, attrs in self._graph.out_edges(node_id, data=True)
            if attrs["type"] == EdgeKind.PathToScope
        )
        return Binding(node_id, node.name, node.data["declaration"], scope)

    def add_node(self, node: ScopeNode) -> int:
        # 向图中添加节点并返回其 ID
        id = self._node_counter
        self._graph.add_node(id, type=node.type, node=node)

        self._node_counter += 1

        return id

    def get_node(self, idx: int) -> ScopeNode:
        return self._graph.nodes[idx]["node"]

    def to_str(self):
        # 生成整个作用域图的可读字符串表示
        repr = "\n"

        for u, v, attrs in self._graph.edges(data=True):
            u_data = self.get_node(u)
            v_data = self.get_node(v)
            repr += (
                f"Edge: {u}:{u_data.name}({u_data.range.start_point}) "
                f"--{attrs['type'].value}-> {v}:{v_data.name}({v_data.range.start_point})\n"
            )

        return repr
