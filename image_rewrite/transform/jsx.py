# ============================================================
# JSX 标签访问与源码编辑
# ------------------------------------------------------------
# 语法树只读；对标签的修改（追加 / 替换 / 删除属性）
# 记录为原始源码上的字节区间编辑，在整个文件处理完成后统一应用。
# ============================================================

from typing import List, NamedTuple, Optional, Type

from tree_sitter import Node

from image_rewrite.errors import TransformError, build_code_frame
from image_rewrite.scope_graph.repo_resolution import ParsedModule
from image_rewrite.scope_graph.scope_resolution import ScopeID
from image_rewrite.scope_graph.utils import Point, TextRange, get_field, named_children, node_text

# 开始标签中可以出现的属性节点：普通属性与 {...spread}
ATTRIBUTE_TYPES = ("jsx_attribute", "jsx_expression")


class SourceEdit(NamedTuple):
    start: int
    end: int
    text: str
    # 同一位置的多次插入按记录顺序输出
    seq: int


class SourceEdits:
    """
    源码编辑列表。

    所有区间都基于原始源码；apply 时从后往前应用，保证区间不因前面的编辑而偏移。
    """

    def __init__(self, src_bytes: bytes):
        self.src_bytes = src_bytes
        self._edits: List[SourceEdit] = []

    def replace(self, start: int, end: int, text: str):
        self._edits.append(SourceEdit(start, end, text, len(self._edits)))

    def insert(self, position: int, text: str):
        self.replace(position, position, text)

    def remove(self, start: int, end: int):
        self.replace(start, end, "")

    def apply(self) -> bytes:
        result = self.src_bytes
        for edit in sorted(self._edits, key=lambda e: (e.start, e.seq), reverse=True):
            result = result[: edit.start] + edit.text.encode("utf-8") + result[edit.end :]
        return result


class JsxTag:
    """
    一个 JSX 开始标签（jsx_opening_element / jsx_self_closing_element）。

    :param module: 标签所在的模块
    :param node: 开始标签节点
    :param edits: 当前文件的编辑列表
    :param filename: 用于错误信息的文件名
    """

    def __init__(self, module: ParsedModule, node: Node, edits: SourceEdits, filename: Optional[str] = None):
        self.module = module
        self.node = node
        self.edits = edits
        self.filename = filename
        self.name_node = get_field(node, "name")
        self.attributes: List[Node] = [child for child in named_children(node) if child.type in ATTRIBUTE_TYPES]

    @property
    def src_bytes(self) -> bytes:
        return self.module.src_bytes

    @property
    def name(self) -> str:
        if self.name_node is None:
            return ""
        return self.text(self.name_node)

    @property
    def name_chain(self) -> List[str]:
        # <styles.imgs.Svg> -> ["styles", "imgs", "Svg"]
        return [part.strip() for part in self.name.split(".")]

    @property
    def scope(self) -> ScopeID:
        graph = self.module.graph
        return graph.scope_by_range(TextRange.from_node(self.node), graph.root_idx)

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1

    def text(self, node: Node) -> str:
        return node_text(self.src_bytes, node)

    def attribute_name(self, attribute: Node) -> Optional[str]:
        if attribute.type != "jsx_attribute":
            return None
        children = named_children(attribute)
        return self.text(children[0]) if children else None

    def attribute_value(self, attribute: Node) -> Optional[Node]:
        # 无值属性（<Img webp />）返回 None
        children = named_children(attribute)
        return children[1] if len(children) > 1 else None

    def get_attribute(self, name: str) -> Optional[Node]:
        # 同名属性以文档顺序中的第一个为准
        for attribute in self.attributes:
            if self.attribute_name(attribute) == name:
                return attribute
        return None

    def has_attribute(self, name: str) -> bool:
        return self.get_attribute(name) is not None

    def append_attribute(self, name: str, expression: Optional[str] = None):
        """
        在最后一个属性之后追加属性（不会插入到已有属性之间）。

        :param name: 属性名
        :param expression: 属性值表达式；为 None 时追加无值属性
        """
        anchor = self.attributes[-1] if self.attributes else self.name_node
        text = f" {name}" if expression is None else f" {name}={{{expression}}}"
        self.edits.insert(anchor.end_byte, text)

    def replace_attribute_value(self, attribute: Node, expression: str):
        value = self.attribute_value(attribute)
        if value is None:
            self.edits.insert(attribute.end_byte, f"={{{expression}}}")
        else:
            self.edits.replace(value.start_byte, value.end_byte, f"{{{expression}}}")

    def remove_attribute(self, attribute: Node):
        # 连同属性前的空白一起删除
        previous = attribute.prev_sibling
        start = previous.end_byte if previous is not None else attribute.start_byte
        self.edits.remove(start, attribute.end_byte)

    def error(self, node: Node, message: str, error_cls: Type[TransformError] = TransformError) -> TransformError:
        point = Point(*node.start_point)
        return error_cls(
            message,
            filename=self.filename,
            point=point,
            code_frame=build_code_frame(self.src_bytes, point),
        )
