"""
本模块定义了作用域（Scope）相关的基础数据结构与遍历工具。

主要用途：
- 描述词法作用域的文本范围及其是否为函数作用域
- 定义声明的挂载方式（局部、提升、var）
- 基于作用域图（scope graph）模拟变量查找时的作用域链回溯过程
"""

from dataclasses import dataclass
from typing import Optional, Iterator
from networkx import DiGraph
from enum import Enum

from image_rewrite.scope_graph.utils import TextRange

from .graph_types import EdgeKind


@dataclass
class LocalScope:
    """
    表示一个词法作用域。

    - range：该作用域在源码中的文本范围
    - function：是否为函数作用域（var 声明会提升到最近的函数作用域）
    """
    range: TextRange
    function: bool = False


class Scoping(str, Enum):
    """
    声明挂载到作用域的方式。

    - LOCAL：挂载到包含它的最内层作用域（let / const / class / 参数）
    - HOISTED：挂载到声明节点自身作用域的父作用域（函数声明名）
    - VAR：挂载到最近的函数作用域或 program（var 声明）
    """
    LOCAL = "local"
    HOISTED = "hoist"
    VAR = "var"


class ScopeStack(Iterator):
    """
    作用域栈（Scope Stack）迭代器。

    每次迭代：
    - 返回当前作用域节点
    - 将内部指针移动到父作用域
    """

    def __init__(self, scope_graph: DiGraph, start: Optional[int]):
        """
        :param scope_graph: 表示作用域关系的有向图
        :param start: 起始作用域节点 ID（None 表示空栈）
        """
        self.scope_graph = scope_graph
        self.start = start

    def __iter__(self) -> "ScopeStack":
        return self

    def __next__(self) -> int:
        """
        返回当前作用域节点，并推进到其父作用域。

        :raises StopIteration: 当作用域链遍历结束时
        """
        if self.start is not None:
            original = self.start
            parent = None
            for _, target, attrs in self.scope_graph.out_edges(self.start, data=True):
                if attrs.get("type") == EdgeKind.ScopeToScope:
                    parent = target
                    break
            # 将起始节点推进到父作用域，供下一次迭代使用
            self.start = parent
            return original
        else:
            raise StopIteration
