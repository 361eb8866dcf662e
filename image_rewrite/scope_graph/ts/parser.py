# ============================================================
# Tree-sitter 解析入口
# ------------------------------------------------------------
# 加载 JavaScript（含 JSX）语法并缓存解析器实例。
# ============================================================

from functools import lru_cache

import tree_sitter_javascript
from tree_sitter import Language, Parser, Tree


@lru_cache(maxsize=None)
def get_language() -> Language:
    return Language(tree_sitter_javascript.language())


@lru_cache(maxsize=None)
def get_parser() -> Parser:
    return Parser(get_language())


def parse_source(src_bytes: bytes) -> Tree:
    """
    解析源代码并返回语法树。

    tree-sitter 具备容错能力，存在语法错误时依然返回完整的树，
    调用方可通过 root_node.has_error 判断。
    """
    return get_parser().parse(src_bytes)
