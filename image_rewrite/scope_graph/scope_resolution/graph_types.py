"""
本模块定义了作用域图（Scope Graph）中使用的核心类型与枚举。

主要内容包括：
1. 节点类型（NodeKind）的枚举定义
2. 边类型（EdgeKind）的枚举定义
3. 作用域节点（ScopeNode）的结构描述
4. 作用域节点 ID 的类型别名（ScopeID）
"""

from typing import Dict, NewType, Optional
from enum import Enum

from pydantic import BaseModel

from image_rewrite.scope_graph.utils import TextRange


class NodeKind(str, Enum):
    """
    Scope Graph 中节点类型的枚举定义。

    - SCOPE：词法作用域节点（program / 函数 / 块）
    - DEFINITION：变量、参数、函数名等声明节点
    - IMPORT：import 语句节点
    - PATH：属性路径声明节点（a.b.C = ... 或嵌套对象字面量）
    """
    SCOPE = "LocalScope"
    DEFINITION = "LocalDef"
    IMPORT = "Import"
    PATH = "Path"


class EdgeKind(str, Enum):
    """
    Scope Graph 中边类型的枚举定义。

    - ScopeToScope：子作用域 -> 父作用域
    - DefToScope：声明 -> 所属作用域
    - ImportToScope：import 语句 -> 所属作用域
    - PathToScope：属性路径声明 -> 声明所在作用域
    """
    ScopeToScope = "ScopeToScope"
    DefToScope = "DefToScope"
    ImportToScope = "ImportToScope"
    PathToScope = "PathToScope"


class ScopeNode(BaseModel):
    """
    作用域图中的节点。

    - range：该节点在源码中的文本范围
    - type：节点类型（NodeKind）
    - name：节点名称（声明名、路径等，可选）
    - data：附加的结构化元数据（声明种类、import 明细等）
    """
    range: TextRange
    type: NodeKind
    name: Optional[str] = ""
    data: Optional[Dict] = {}


# 作用域节点 ID 的强类型别名
ScopeID = NewType("ScopeID", int)
