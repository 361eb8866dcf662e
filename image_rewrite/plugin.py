# ============================================================
# 改写入口
# ------------------------------------------------------------
# 按文档顺序（先序）遍历文件中的所有 JSX 开始标签：
#   1. 预检查 src 是否为图片资源引用
#   2. 解析标签名绑定并分类为 Img / Svg / None
#   3. 应用对应的改写规则，记录源码编辑
# 全部标签处理完成后一次性应用编辑，得到改写后的源码。
# ============================================================

from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional, Union

from tree_sitter import Node

from image_rewrite import logger
from image_rewrite.common.enum_types import ComponentKind, UrlPolicy
from image_rewrite.config import FORCE_URL_POLICY, IMAGE_EXTENSION_PATTERN, SOURCE_ATTRIBUTE
from image_rewrite.resolver import BindingResolver, classify
from image_rewrite.scope_graph.repo_resolution import ModuleLoader, ParsedModule
from image_rewrite.transform.image_config import GlobalConfig
from image_rewrite.transform.img import transform_img
from image_rewrite.transform.jsx import JsxTag, SourceEdits
from image_rewrite.transform.location import get_resource_location
from image_rewrite.transform.svg import transform_svg
from image_rewrite.utils.data_processor import load_file

TAG_TYPES = ("jsx_opening_element", "jsx_self_closing_element")


class TransformedComponent(NamedTuple):
    name: str
    kind: ComponentKind
    line: int


class TransformResult(NamedTuple):
    code: str
    components: List[TransformedComponent]


def iter_tags(root: Node) -> Iterator[Node]:
    # 先序遍历，返回所有带名称的开始标签（片段 <> 没有名称）
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in TAG_TYPES and node.child_by_field_name("name") is not None:
            yield node
        stack.extend(reversed(node.named_children))


def is_image_reference(tag: JsxTag) -> bool:
    """
    src 是否引用图片文件：最后一个字面量片段为空（模板以替换结尾），或带图片扩展名。
    """
    location = get_resource_location(tag, tag.get_attribute(SOURCE_ATTRIBUTE))
    if location is None:
        return False
    return location.literal == "" or IMAGE_EXTENSION_PATTERN.search(location.literal) is not None


class ImageTransformer:
    """
    图片组件改写器。

    :param global_config: 全局图片配置；为 None 时使用空配置
    :param loader: 跨文件解析使用的模块加载器
    :param url_policy: fallback 分支强制 url 的阈值策略
    """

    def __init__(
        self,
        global_config: Optional[GlobalConfig] = None,
        loader: Optional[ModuleLoader] = None,
        url_policy: UrlPolicy = FORCE_URL_POLICY,
    ):
        self.global_config = global_config if global_config is not None else GlobalConfig()
        self.loader = loader or ModuleLoader()
        self.resolver = BindingResolver(self.loader)
        self.url_policy = url_policy

    def classify_tag(self, tag: JsxTag) -> ComponentKind:
        export = self.resolver.resolve_path(tag.module, tag.name_chain, tag.scope)
        kind = classify(export)
        logger.debug(f"<{tag.name}> at line {tag.line} resolved to {export} ({kind.value})")
        return kind

    def transform(self, source: Union[str, bytes], filename: Optional[str] = None) -> TransformResult:
        """
        改写一个文件的源码。

        :param source: 源代码
        :param filename: 文件路径，用于跨文件解析与错误信息
        :return: TransformResult(改写后的源码, 被改写的组件列表)
        :raises TransformError: 属性值不是静态字面量或 type 未知
        """
        src_bytes = source.encode("utf-8") if isinstance(source, str) else source
        path = Path(filename).resolve() if filename else None

        module = ParsedModule.from_source(src_bytes, path)
        self.loader.register(module)

        edits = SourceEdits(src_bytes)
        components: List[TransformedComponent] = []
        for node in iter_tags(module.root_node):
            tag = JsxTag(module, node, edits, filename)
            if not is_image_reference(tag):
                continue

            kind = self.classify_tag(tag)
            if kind == ComponentKind.IMG:
                applied = transform_img(tag, self.global_config, self.url_policy) is not None
            elif kind == ComponentKind.SVG:
                applied = transform_svg(tag) is not None
            else:
                continue

            if applied:
                logger.info(f"Rewrote <{tag.name}> as {kind.value} at {filename or '<memory>'}:{tag.line}")
                components.append(TransformedComponent(tag.name, kind, tag.line))

        return TransformResult(edits.apply().decode("utf-8"), components)

    def transform_file(self, path: Union[str, Path]) -> TransformResult:
        return self.transform(load_file(str(path)), filename=str(path))


def transform_source(
    source: Union[str, bytes],
    filename: Optional[str] = None,
    global_config: Optional[GlobalConfig] = None,
) -> str:
    return ImageTransformer(global_config=global_config).transform(source, filename).code
