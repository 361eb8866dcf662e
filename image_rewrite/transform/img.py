"""
Img 组件改写规则。

1. 已带 rawSrc 的标签直接跳过
2. 读取 src 中的资源路径；无法识别时标签保持不变
3. 合并配置：包内默认值 -> 全局 default -> 全局 types[type] -> 标签属性
4. inline / url / original 为 true 时作为基础查询参数写回 src
5. 生成 fallback / webp × 尺寸 × 密度 的资源映射并追加为 rawSrc 属性
"""

from typing import Dict, List, Optional, Union

from image_rewrite import logger
from image_rewrite.common.enum_types import UrlPolicy, VariantType
from image_rewrite.config import (
    BOOLEAN_ATTRIBUTES,
    FORCE_URL_POLICY,
    MARKER_ATTRIBUTE,
    NUMBER_ARRAY_ATTRIBUTES,
    QUERY_ATTRIBUTES,
    SOURCE_ATTRIBUTE,
)

from .attributes import get_boolean_attribute, get_number_array_attribute, get_type_attribute
from .image_config import PACKAGE_DEFAULTS, GlobalConfig, ImageConfig
from .jsx import JsxTag
from .location import ResourceLocation, get_resource_location

# 未配置尺寸时的唯一尺寸键
ORIGINAL_SIZE = "original"

SizeKey = Union[int, str]
VariantMap = Dict[VariantType, Dict[SizeKey, Dict[int, ResourceLocation]]]


def read_tag_config(tag: JsxTag) -> ImageConfig:
    # 只包含标签上显式写出的属性
    values = {}
    for name in BOOLEAN_ATTRIBUTES:
        value = get_boolean_attribute(tag, name)
        if value is not None:
            values[name] = value
    for name in NUMBER_ARRAY_ATTRIBUTES:
        value = get_number_array_attribute(tag, name)
        if value is not None:
            values[name] = value
    return ImageConfig(**values)


def should_force_url(config: ImageConfig, policy: UrlPolicy = FORCE_URL_POLICY) -> bool:
    """
    是否在 fallback 分支强制追加 url 参数（仅单一变体时才保留内联）。
    """
    sizes = config.sizes or []
    if policy == UrlPolicy.MULTIPLE_SIZES:
        return len(sizes) > 1
    combinations = max(len(sizes), 1) * max(len(config.densities or []), 1)
    return bool(config.webp) or combinations > 1


def build_variant_map(
    location: ResourceLocation,
    config: ImageConfig,
    base_query: Dict[str, str],
    policy: UrlPolicy = FORCE_URL_POLICY,
) -> VariantMap:
    """
    构建 variantType -> sizeKey -> density -> ResourceLocation 映射。

    :param location: src 中原始的资源路径（不含基础查询参数）
    :param config: 合并后的配置
    :param base_query: 基础查询参数
    :param policy: 强制 url 的阈值策略
    """
    variant_types = [VariantType.FALLBACK] + ([VariantType.WEBP] if config.webp else [])
    sizes: List[SizeKey] = list(config.sizes) if config.sizes else [ORIGINAL_SIZE]
    densities = list(config.densities) if config.densities else [1]
    force_url = should_force_url(config, policy)

    variants: VariantMap = {}
    for variant_type in variant_types:
        query = dict(base_query)
        if variant_type == VariantType.WEBP:
            query["webp"] = ""
        elif force_url:
            query["url"] = ""

        branch = variants.setdefault(variant_type, {})
        for size in sizes:
            by_density = branch.setdefault(size, {})
            for density in densities:
                size_query = dict(query)
                if isinstance(size, int):
                    size_query["width"] = str(size * density)
                by_density[density] = location.with_query(size_query)
    return variants


def serialize_variant_map(variants: VariantMap) -> str:
    """
    序列化为单行对象字面量：
    {fallback: {400: {1: require('./a.png?url&width=400')}}, webp: {...}}
    """
    branches = []
    for variant_type, sizes in variants.items():
        size_parts = []
        for size, densities in sizes.items():
            density_parts = ", ".join(f"{density}: {location.to_require()}" for density, location in densities.items())
            size_parts.append(f"{size}: {{{density_parts}}}")
        branches.append(f"{variant_type.value}: {{{', '.join(size_parts)}}}")
    return "{" + ", ".join(branches) + "}"


def format_attribute_value(value) -> Optional[str]:
    # 全局配置值物化为 JSX 属性：true -> 无值属性，其余写成表达式
    if value is True:
        return None
    if value is False:
        return "false"
    return "[" + ", ".join(str(v) for v in value) + "]"


def transform_img(
    tag: JsxTag,
    global_config: GlobalConfig,
    url_policy: UrlPolicy = FORCE_URL_POLICY,
) -> Optional[VariantMap]:
    """
    改写一个 Img 标签。

    :param tag: 开始标签
    :param global_config: 全局图片配置（由调用方注入）
    :param url_policy: 强制 url 的阈值策略
    :return: 生成的资源映射；标签被跳过时返回 None
    :raises StaticValueError: 属性值不是静态字面量
    :raises UnknownTypeError: type 不在全局配置中
    """
    if tag.has_attribute(MARKER_ATTRIBUTE):
        logger.debug(f"Skipping <{tag.name}> at line {tag.line}: already has {MARKER_ATTRIBUTE}")
        return None

    src = tag.get_attribute(SOURCE_ATTRIBUTE)
    location = get_resource_location(tag, src)
    if location is None:
        logger.debug(f"Skipping <{tag.name}> at line {tag.line}: {SOURCE_ATTRIBUTE} is not a static resource")
        return None

    type_name = get_type_attribute(tag, global_config.types.keys())
    tag_config = read_tag_config(tag)

    global_layer = global_config.default
    if type_name is not None:
        global_layer = global_layer.merge(global_config.types[type_name])
    config = PACKAGE_DEFAULTS.merge(global_layer).merge(tag_config)

    base_query = {name: "" for name in QUERY_ATTRIBUTES if getattr(config, name) is True}
    if base_query:
        tag.replace_attribute_value(src, location.with_query(base_query).to_require())

    variants = build_variant_map(location, config, base_query, url_policy)

    # 全局配置带来的值物化为标签属性
    explicit = tag_config.specified()
    for name, value in global_layer.specified().items():
        if name not in explicit:
            tag.append_attribute(name, format_attribute_value(value))

    tag.append_attribute(MARKER_ATTRIBUTE, serialize_variant_map(variants))
    return variants
