"""
Svg 组件改写规则：src 追加 include 参数后移到 rawSrc 属性中。
"""

from typing import Optional

from image_rewrite import logger
from image_rewrite.config import MARKER_ATTRIBUTE, SOURCE_ATTRIBUTE, SVG_QUERY

from .jsx import JsxTag
from .location import ResourceLocation, get_resource_location


def transform_svg(tag: JsxTag) -> Optional[ResourceLocation]:
    """
    <Svg src={require('./a.svg')} /> -> <Svg rawSrc={require('./a.svg?include')} />

    :return: 改写后的资源路径；标签被跳过时返回 None
    """
    if tag.has_attribute(MARKER_ATTRIBUTE):
        logger.debug(f"Skipping <{tag.name}> at line {tag.line}: already has {MARKER_ATTRIBUTE}")
        return None

    src = tag.get_attribute(SOURCE_ATTRIBUTE)
    location = get_resource_location(tag, src)
    if location is None:
        return None

    location = location.with_query(SVG_QUERY)
    tag.remove_attribute(src)
    tag.append_attribute(MARKER_ATTRIBUTE, location.to_require())
    return location
