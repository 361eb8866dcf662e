# ============================================================
# 语法树捕获结果数据模型
# ------------------------------------------------------------
# 本模块定义了一组用于承载语法树遍历结果的
# 轻量级数据结构（基于 pydantic.BaseModel）。
#
# 这些 Capture 对象作为“语法层 → 语义层”的中间表示，
# 被用于后续 ScopeGraph 的构建过程。
# ============================================================

from typing import List

from pydantic import BaseModel

from image_rewrite.scope_graph.scope_resolution.definition import Declaration
from image_rewrite.scope_graph.scope_resolution.scope import Scoping
from image_rewrite.scope_graph.utils import TextRange


class LocalDefCapture(BaseModel):
    """
    声明的捕获结果。

    range 为声明名称（标识符）的文本范围。
    """

    range: TextRange

    # 声明形态（已在遍历时分类）
    declaration: Declaration

    # 挂载方式（LOCAL / HOISTED / VAR）
    scoping: Scoping = Scoping.LOCAL


class LocalPathCapture(BaseModel):
    """
    属性路径声明的捕获结果。

    例如 styles.imgs.StyledSvg = styled(Svg)`...`
    或 const styles = { imgs: { StyledSvg } }。
    """

    chain: List[str]

    declaration: Declaration

    # 赋值或对象属性值所在的文本范围
    range: TextRange
