"""
本模块定义了作用域分析与源码改写共用的基础数据结构与工具函数。

主要内容包括：
1. 文本位置与范围建模（Point / TextRange）
2. tree-sitter 节点文本、字段与字符串字面量的读取辅助函数
3. 成员访问链（a.b.C）的拆解

该模块通常作为语法树分析、符号解析与属性读取等功能的基础组件。
"""

from typing import List, NamedTuple, Optional, Tuple

from pydantic import BaseModel
from tree_sitter import Node

# 不参与语义的节点类型
TRIVIA_TYPES = {"comment", "html_comment"}


class Point(NamedTuple):
    """
    表示源码中的一个二维坐标点（行号 + 列号，均从 0 开始）。
    """
    row: int
    column: int


class TextRange(BaseModel):
    """
    表示源码中的一个连续文本区间。

    同时支持：
    - 字节级范围（start_byte / end_byte）
    - 行列级范围（start_point / end_point）
    """

    start_byte: int
    end_byte: int
    start_point: Point
    end_point: Point

    def __init__(
        self,
        *,
        start_byte: int,
        end_byte: int,
        start_point: Tuple[int, int],
        end_point: Tuple[int, int],
    ):
        """
        注意：
        - start_point / end_point 使用 (row, column) 元组传入
        - 实际存储时由 Pydantic 自动转换为 Point 类型
        """
        super().__init__(
            start_byte=start_byte,
            end_byte=end_byte,
            start_point=tuple(start_point),
            end_point=tuple(end_point),
        )

    @classmethod
    def from_node(cls, node: Node) -> "TextRange":
        return cls(
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            start_point=node.start_point,
            end_point=node.end_point,
        )

    def contains(self, range: "TextRange"):
        """
        判断当前范围是否在字节级别完全包含另一个范围。

        :param range: 待判断的 TextRange
        :return: True 表示完全包含
        """
        return range.start_byte >= self.start_byte and range.end_byte <= self.end_byte


def node_text(src_bytes: bytes, node: Node) -> str:
    # 按字节范围从源码中截取节点文本
    return src_bytes[node.start_byte : node.end_byte].decode("utf-8")


def get_field(node: Optional[Node], name: str) -> Optional[Node]:
    if node is None:
        return None
    return node.child_by_field_name(name)


def named_children(node: Node) -> List[Node]:
    """
    返回去除注释后的具名子节点。
    """
    return [child for child in node.named_children if child.type not in TRIVIA_TYPES]


def string_value(src_bytes: bytes, node: Optional[Node]) -> Optional[str]:
    """
    读取字符串字面量的原始内容（去掉两侧引号，不做转义还原）。

    :return: 非字符串节点时返回 None
    """
    if node is None or node.type != "string":
        return None
    return node_text(src_bytes, node)[1:-1]


def member_chain(src_bytes: bytes, node: Optional[Node]) -> Optional[List[str]]:
    """
    将 a.b.C 形式的成员访问表达式拆解为 ["a", "b", "C"]。

    计算属性（a[b]）、可选链以及非标识符根节点都返回 None。
    """
    if node is None:
        return None
    if node.type == "identifier":
        return [node_text(src_bytes, node)]
    if node.type == "member_expression":
        obj = get_field(node, "object")
        prop = get_field(node, "property")
        if prop is None or prop.type != "property_identifier":
            return None
        chain = member_chain(src_bytes, obj)
        if chain is None:
            return None
        return chain + [node_text(src_bytes, prop)]
    return None
