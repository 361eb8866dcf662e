"""
本模块定义了源码中“声明（Declaration）”的结构。

每个声明在构建作用域图时被归类为且仅被归类为下列一种形态（带 kind 标签的联合类型），
绑定解析器对其做穷举匹配：

- ImportDecl：import X from 'm' / import { A as X } from 'm'
- NamespaceDecl：import * as X from 'm' / const X = require('m')
- RequireMemberDecl：const X = require('m').E
- RequireDestructureDecl：const { E: X } = require('m')
- ProxyDecl：const X = Y
- WrapperCallDecl：const X = styled(Y)`...` 及其各种调用形态
- PathDecl：<a.b.C /> 这类成员访问标签名对应的合成声明
- OpaqueDecl：参数、循环变量、函数、任意调用结果等无法静态追踪的声明
"""

from dataclasses import dataclass
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from image_rewrite.scope_graph.utils import TextRange

from .scope import Scoping


class ImportDecl(BaseModel):
    kind: Literal["import"] = "import"
    module: str
    # 默认导入为 "default"
    export: str


class NamespaceDecl(BaseModel):
    kind: Literal["namespace"] = "namespace"
    module: str


class RequireMemberDecl(BaseModel):
    kind: Literal["require_member"] = "require_member"
    # require 的参数不是字符串字面量时为 None
    module: Optional[str]
    export: str


class RequireDestructureDecl(BaseModel):
    kind: Literal["require_destructure"] = "require_destructure"
    module: Optional[str]
    # 解构模式中的键名（而不是本地重命名）
    export: str


class ProxyDecl(BaseModel):
    kind: Literal["proxy"] = "proxy"
    target: str


class WrapperCallDecl(BaseModel):
    kind: Literal["wrapper_call"] = "wrapper_call"
    wrapper: str
    # 被包装组件；第一个参数不是标识符时为 None
    target: Optional[str] = None


class PathDecl(BaseModel):
    kind: Literal["path"] = "path"
    chain: List[str]


class OpaqueDecl(BaseModel):
    kind: Literal["opaque"] = "opaque"
    reason: str = ""


Declaration = Annotated[
    Union[
        ImportDecl,
        NamespaceDecl,
        RequireMemberDecl,
        RequireDestructureDecl,
        ProxyDecl,
        WrapperCallDecl,
        PathDecl,
        OpaqueDecl,
    ],
    Field(discriminator="kind"),
]


@dataclass
class LocalDef:
    """
    表示一次局部声明。

    属性说明：
    - range：声明名称在源码中的文本范围
    - declaration：声明形态
    - scoping：挂载方式
    - name：从源码中解析得到的声明名称
    """

    range: TextRange
    declaration: Declaration
    scoping: Scoping
    name: str

    def __init__(
        self,
        range: TextRange,
        buffer: bytes,
        declaration: Declaration,
        scoping: Scoping = Scoping.LOCAL,
    ):
        self.range = range
        self.declaration = declaration
        self.scoping = scoping
        # 从源码 buffer 中根据字节范围提取声明名称
        self.name = buffer[self.range.start_byte : self.range.end_byte].decode("utf-8")
