# ============================================================
# 全局配置
# ------------------------------------------------------------
# 被跟踪的组件库、styled 包装库、输出属性名、模块解析规则等常量。
# 运行环境相关的项目根目录与日志级别从 .env / 环境变量读取。
# ============================================================
import os
import re

from dotenv import load_dotenv

from image_rewrite.common.enum_types import UrlPolicy

# 加载 .env 文件中的环境变量
load_dotenv()

# 项目根目录，用于定位 images.config.json
PROJECT_ROOT = os.getenv("IMAGE_REWRITE_ROOT", os.getcwd())
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

"""Tracked component library"""
PACKAGE_NAME = "react-optimized-image"
# 形如 react-optimized-image/lib/components/Svg 的按组件导入路径
COMPONENTS_SUBPATH = PACKAGE_NAME + "/lib/components/"

# 透明转发组件身份的 styled 包装库
STYLING_PACKAGES = ("styled-components", "@emotion/styled")

"""JSX attributes"""
SOURCE_ATTRIBUTE = "src"
MARKER_ATTRIBUTE = "rawSrc"
TYPE_ATTRIBUTE = "type"
BOOLEAN_ATTRIBUTES = ("webp", "inline", "url", "original")
NUMBER_ARRAY_ATTRIBUTES = ("sizes", "densities", "breakpoints")
# 直接映射为基础查询参数的布尔属性
QUERY_ATTRIBUTES = ("inline", "url", "original")

SVG_QUERY = {"include": ""}

"""Global image config"""
GLOBAL_CONFIG_FILENAME = "images.config.json"

"""Module resolution"""
MODULE_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs")
IMAGE_EXTENSION_PATTERN = re.compile(r"\.(jpe?g|png|svg|gif|webp)($|\?)", re.IGNORECASE)

# 绑定解析的最大递归深度（环检测之外的兜底）
MAX_RESOLVE_DEPTH = 64

FORCE_URL_POLICY = UrlPolicy.MULTIPLE_VARIANTS
