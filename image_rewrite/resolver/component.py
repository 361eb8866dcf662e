"""
组件分类：根据解析得到的 (模块名, 导出名) 判断是否为被跟踪的 Img / Svg 组件。
"""

from typing import Optional

from image_rewrite.common.enum_types import ComponentKind
from image_rewrite.config import COMPONENTS_SUBPATH, PACKAGE_NAME

from .binding_resolver import ResolvedExport


def is_tracked_module(module_name: str) -> bool:
    return module_name == PACKAGE_NAME or module_name.startswith(PACKAGE_NAME + "/")


def classify(export: Optional[ResolvedExport]) -> ComponentKind:
    """
    :param export: 绑定解析结果；None 表示无法解析
    :return: ComponentKind
    """
    if export is None or not is_tracked_module(export.module_name):
        return ComponentKind.NONE

    name = export.export_name
    # 按组件路径导入，如 react-optimized-image/lib/components/Svg
    if name == "default" and export.module_name.startswith(COMPONENTS_SUBPATH):
        name = export.module_name[len(COMPONENTS_SUBPATH):]

    if name in ("default", ComponentKind.IMG.value):
        return ComponentKind.IMG
    if name == ComponentKind.SVG.value:
        return ComponentKind.SVG
    return ComponentKind.NONE
