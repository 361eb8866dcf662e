"""
JSX 属性读取。

每个读取函数只接受静态字面量：
- 属性不存在时返回 None（区别于 False / 空列表）
- 属性值形态不合法时抛出带源码位置的 StaticValueError
"""

from typing import Iterable, List, Optional

from tree_sitter import Node

from image_rewrite.config import GLOBAL_CONFIG_FILENAME, TYPE_ATTRIBUTE
from image_rewrite.errors import StaticValueError, UnknownTypeError
from image_rewrite.scope_graph.build_scopes import unwrap_parens
from image_rewrite.scope_graph.utils import named_children, string_value

from .jsx import JsxTag


def expression_value(value: Optional[Node]) -> Optional[Node]:
    """
    取出 {expr} 中的表达式；值不是表达式容器时返回 None。
    """
    if value is None or value.type != "jsx_expression":
        return None
    children = named_children(value)
    return unwrap_parens(children[0]) if children else None


def get_boolean_attribute(tag: JsxTag, name: str) -> Optional[bool]:
    attribute = tag.get_attribute(name)
    if attribute is None:
        return None

    value = tag.attribute_value(attribute)
    # <Img webp />
    if value is None:
        return True

    expression = expression_value(value)
    if expression is not None and expression.type in ("true", "false"):
        return expression.type == "true"

    raise tag.error(value, "Only static boolean values are allowed", StaticValueError)


def _positive_int(tag: JsxTag, node: Node) -> Optional[int]:
    if node.type != "number":
        return None
    text = tag.text(node)
    if not text.isdigit():
        return None
    number = int(text)
    return number if number > 0 else None


def get_number_array_attribute(tag: JsxTag, name: str) -> Optional[List[int]]:
    """
    读取形如 sizes={[400, 800]} 的数值数组属性。

    :raises StaticValueError: 值不是数组字面量，或某个元素不是正整数字面量
    """
    attribute = tag.get_attribute(name)
    if attribute is None:
        return None

    value = tag.attribute_value(attribute)
    expression = expression_value(value)
    if expression is None or expression.type != "array":
        raise tag.error(
            value if value is not None else attribute,
            "Only static array with number values is allowed",
            StaticValueError,
        )

    numbers = []
    for index, element in enumerate(named_children(expression)):
        number = _positive_int(tag, element)
        if number is None:
            raise tag.error(
                element,
                f"Only static number values are allowed (element {index} of '{name}')",
                StaticValueError,
            )
        numbers.append(number)
    return numbers


def get_type_attribute(tag: JsxTag, types: Iterable[str]) -> Optional[str]:
    """
    读取 type 属性，并校验其值是全局配置 types 中的一个键。

    :raises StaticValueError: 值不是字符串字面量
    :raises UnknownTypeError: 值不在 types 中
    """
    attribute = tag.get_attribute(TYPE_ATTRIBUTE)
    if attribute is None:
        return None

    value = tag.attribute_value(attribute)
    literal = string_value(tag.src_bytes, value)
    if literal is None:
        literal = string_value(tag.src_bytes, expression_value(value))
    if literal is None:
        raise tag.error(
            value if value is not None else attribute,
            "Only static string values are allowed",
            StaticValueError,
        )

    if literal not in set(types):
        raise tag.error(value, f"Type {literal} not found in {GLOBAL_CONFIG_FILENAME}", UnknownTypeError)
    return literal
