"""
资源路径表达式（ResourceLocation）与查询参数合并。

支持三种形态，查询参数只会写入最后一个字面量片段：
- 字符串字面量：require('./a.png')
- 二元拼接，右操作数为字面量：require('./img/' + name + '.png')
- 模板字符串，最后一个固定片段为字面量：require(`./${name}.png`)
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional
from urllib.parse import parse_qsl, quote

from tree_sitter import Node

from image_rewrite.common.enum_types import LocationKind
from image_rewrite.scope_graph.build_scopes import REQUIRE, call_arguments, is_require_call
from image_rewrite.scope_graph.scope_resolution import NodeKind
from image_rewrite.scope_graph.utils import get_field, named_children, node_text

from .attributes import expression_value
from .jsx import JsxTag


def add_query_to_string(value: str, query: Dict[str, str]) -> str:
    """
    把查询参数合并进路径字符串。

    - 已有参数保留原位置，新参数同名时覆盖其值
    - 空值参数序列化为不带 = 的标志位
    - 合并后没有参数时返回不带 ? 的路径

    >>> add_query_to_string("./a.png?width=100", {"webp": "", "width": "400"})
    './a.png?width=400&webp'
    """
    path, _, existing = value.partition("?")
    params = dict(parse_qsl(existing, keep_blank_values=True))
    params.update(query)
    if not params:
        return path

    parts = []
    for key, val in params.items():
        key = quote(str(key), safe="")
        parts.append(key if val == "" else f"{key}={quote(str(val), safe='')}")
    return path + "?" + "&".join(parts)


@dataclass(frozen=True)
class ResourceLocation:
    """
    资源路径表达式。

    - head：最后一个字面量片段之前的原始源码（含开头的引号 / 反引号）
    - literal：最后一个字面量片段的原始文本
    - tail：结尾的引号 / 反引号
    - extra_args：require 的其余参数（原样保留）
    """

    kind: LocationKind
    head: str
    literal: str
    tail: str
    extra_args: str = ""

    def with_query(self, query: Dict[str, str]) -> "ResourceLocation":
        # 返回新的对象，原对象保持不变
        return replace(self, literal=add_query_to_string(self.literal, query))

    def to_expression(self) -> str:
        return f"{self.head}{self.literal}{self.tail}"

    def to_require(self) -> str:
        args = self.to_expression()
        if self.extra_args:
            args += ", " + self.extra_args
        return f"{REQUIRE}({args})"

    def __str__(self):
        return self.to_require()


def location_from_expression(src_bytes: bytes, node: Optional[Node]) -> Optional[ResourceLocation]:
    """
    从 require 的第一个参数构造 ResourceLocation；形态不支持时返回 None。
    """
    if node is None:
        return None

    if node.type == "string":
        text = node_text(src_bytes, node)
        return ResourceLocation(LocationKind.LITERAL, text[0], text[1:-1], text[-1])

    if node.type == "binary_expression":
        operator = get_field(node, "operator")
        right = get_field(node, "right")
        if operator is None or node_text(src_bytes, operator) != "+" or right is None or right.type != "string":
            return None
        head = src_bytes[node.start_byte : right.start_byte + 1].decode("utf-8")
        text = node_text(src_bytes, right)
        return ResourceLocation(LocationKind.CONCAT, head, text[1:-1], text[-1])

    if node.type == "template_string":
        substitutions = [child for child in named_children(node) if child.type == "template_substitution"]
        # 最后一个替换之后到结尾反引号之间的固定片段
        literal_start = substitutions[-1].end_byte if substitutions else node.start_byte + 1
        head = src_bytes[node.start_byte : literal_start].decode("utf-8")
        literal = src_bytes[literal_start : node.end_byte - 1].decode("utf-8")
        return ResourceLocation(LocationKind.TEMPLATE, head, literal, "`")

    return None


def get_resource_location(tag: JsxTag, attribute: Optional[Node]) -> Optional[ResourceLocation]:
    """
    读取 src 属性中的资源路径。

    接受两种写法：
    - src={require(...)}（require 未被本地声明遮蔽）
    - src={Image}，其中 Image 由 import 语句引入

    其他写法返回 None，标签保持不变。
    """
    if attribute is None:
        return None

    expression = expression_value(tag.attribute_value(attribute))
    if expression is None:
        return None

    graph = tag.module.graph
    src_bytes = tag.src_bytes

    if is_require_call(src_bytes, expression):
        if graph.find_binding(REQUIRE, tag.scope) is not None:
            return None
        args = call_arguments(expression)
        if not args:
            return None
        location = location_from_expression(src_bytes, args[0])
        if location is not None and len(args) > 1:
            extra = src_bytes[args[1].start_byte : args[-1].end_byte].decode("utf-8")
            location = replace(location, extra_args=extra)
        return location

    if expression.type == "identifier":
        binding = graph.find_binding(tag.text(expression), tag.scope)
        if binding is None or graph.get_node(binding.node_id).type != NodeKind.IMPORT:
            return None
        statement = graph.get_node(binding.node_id).data["statement"]
        return ResourceLocation(LocationKind.LITERAL, "'", statement.from_name, "'")

    return None
