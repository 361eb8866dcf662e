"""
本模块定义改写过程中的异常类型。

- TransformError：所有带源码位置信息的致命错误的基类
- StaticValueError：要求静态字面量的属性值不是字面量
- UnknownTypeError：type 属性的值不在全局配置的 types 中
- ConfigError：全局配置文件无法读取或格式不合法
"""

from typing import Optional

from image_rewrite.scope_graph.utils import Point


class TransformError(Exception):
    """
    带文件位置的改写错误。

    :param message: 错误描述
    :param filename: 出错文件（可能为空，例如直接改写字符串）
    :param point: 出错节点的起始位置（0 起始的行列）
    :param code_frame: 出错行与指示符组成的代码片段
    """

    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        point: Optional[Point] = None,
        code_frame: str = "",
    ):
        self.message = message
        self.filename = filename
        self.point = point
        self.code_frame = code_frame
        super().__init__(message)

    @property
    def line(self) -> Optional[int]:
        return self.point.row + 1 if self.point else None

    @property
    def column(self) -> Optional[int]:
        return self.point.column + 1 if self.point else None

    def __str__(self):
        location = self.filename or "<unknown>"
        if self.point is not None:
            location += f":{self.line}:{self.column}"
        text = f"{location}: {self.message}"
        if self.code_frame:
            text += "\n" + self.code_frame
        return text


class StaticValueError(TransformError):
    pass


class UnknownTypeError(TransformError):
    pass


class ConfigError(Exception):
    pass


def build_code_frame(src_bytes: bytes, point: Point) -> str:
    """
    生成出错行及其下方的 ^ 指示符。
    """
    lines = src_bytes.decode("utf-8", errors="replace").splitlines()
    if point.row >= len(lines):
        return ""
    line = lines[point.row]
    prefix = f"> {point.row + 1} | "
    caret = " " * (len(prefix) + point.column) + "^"
    return prefix + line + "\n" + caret
