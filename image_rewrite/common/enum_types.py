# ============================================================
# 模块说明：
# 本模块定义组件识别与资源映射过程中使用的枚举类型。
# ============================================================
from enum import Enum


class ComponentKind(str, Enum):
    """
    被跟踪组件的种类。

    - IMG：react-optimized-image 的 Img 组件（包括 default 导出）
    - SVG：react-optimized-image 的 Svg 组件
    - NONE：无关组件
    """
    IMG = "Img"
    SVG = "Svg"
    NONE = "None"


class VariantType(str, Enum):
    FALLBACK = "fallback"   # 原始格式
    WEBP = "webp"           # webp 编码


class LocationKind(str, Enum):
    """
    资源路径表达式的三种语法形态。
    """
    LITERAL = "literal"     # 'a.png'
    CONCAT = "concat"       # './' + name + '.png'
    TEMPLATE = "template"   # `./${name}.png`


class UrlPolicy(str, Enum):
    """
    fallback 分支强制追加 url 参数的阈值策略。

    - MULTIPLE_VARIANTS：整个映射中存在多于一个变体（开启 webp，或尺寸 × 密度组合多于一个）
    - MULTIPLE_SIZES：仅当配置了多于一个尺寸
    """
    MULTIPLE_VARIANTS = "multiple_variants"
    MULTIPLE_SIZES = "multiple_sizes"
