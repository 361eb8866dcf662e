"""
image_rewrite：JSX 图片组件的编译期改写工具。

对源码中的 Img / Svg 组件进行静态解析（别名、解构、代理变量、styled 包装、
跨文件导出），读取其静态属性，并把 src 改写为带查询参数的资源请求，
同时生成多尺寸 / 多密度 / webp 的 rawSrc 资源映射。
"""

import logging

# 包级 logger，其余模块通过 `from image_rewrite import logger` 复用
logger = logging.getLogger(__name__)

from image_rewrite.common.enum_types import ComponentKind, UrlPolicy  # noqa: E402
from image_rewrite.errors import (  # noqa: E402
    ConfigError,
    StaticValueError,
    TransformError,
    UnknownTypeError,
)
from image_rewrite.transform.image_config import (  # noqa: E402
    GlobalConfig,
    ImageConfig,
    get_global_config,
    load_global_config,
)
from image_rewrite.plugin import ImageTransformer, TransformResult, transform_source  # noqa: E402

__all__ = [
    "logger",
    "ComponentKind",
    "UrlPolicy",
    "ConfigError",
    "StaticValueError",
    "TransformError",
    "UnknownTypeError",
    "GlobalConfig",
    "ImageConfig",
    "get_global_config",
    "load_global_config",
    "ImageTransformer",
    "TransformResult",
    "transform_source",
]
