# ============================================================
# 模块加载器
# ------------------------------------------------------------
# 跨文件解析时，按相对路径定位被引用的本地模块，
# 解析为语法树并构建 ScopeGraph 与导出表。
# 已加载的模块按绝对路径缓存在加载器实例中。
# ============================================================

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence

from tree_sitter import Node, Tree

from image_rewrite.config import MODULE_EXTENSIONS
from image_rewrite.scope_graph.build_scopes import build_scope_graph
from image_rewrite.scope_graph.scope_resolution.graph import ScopeGraph
from image_rewrite.scope_graph.ts.parser import parse_source

from .exports import ExportTable, collect_exports

logger = logging.getLogger(__name__)


def is_relative_specifier(specifier: str) -> bool:
    return specifier in (".", "..") or specifier.startswith("./") or specifier.startswith("../")


@dataclass
class ParsedModule:
    """
    一个已解析的 JavaScript 模块。

    - src_bytes：源代码字节
    - tree：tree-sitter 语法树（只读）
    - graph：作用域图
    - exports：导出表
    - path：文件路径；直接改写字符串时为 None
    """

    src_bytes: bytes
    tree: Tree
    graph: ScopeGraph
    exports: ExportTable
    path: Optional[Path] = None

    @property
    def root_node(self) -> Node:
        return self.tree.root_node

    @property
    def key(self) -> str:
        # 用于解析过程中的环检测
        if self.path is not None:
            return str(self.path)
        return f"<memory:{id(self)}>"

    @classmethod
    def from_source(cls, src_bytes: bytes, path: Optional[Path] = None) -> "ParsedModule":
        tree = parse_source(src_bytes)
        if tree.root_node.has_error:
            logger.warning(f"Syntax errors found in {path or '<memory>'}, continuing with partial tree")

        graph = build_scope_graph(src_bytes, tree.root_node)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Scope graph for {path or '<memory>'}:{graph.to_str()}")
        exports = collect_exports(src_bytes, tree.root_node, graph)
        return cls(src_bytes=src_bytes, tree=tree, graph=graph, exports=exports, path=path)


class ModuleLoader:
    """
    按需加载相对路径引用的本地模块。

    路径解析顺序：
    1. 原始路径（扩展名属于 MODULE_EXTENSIONS 时）
    2. 依次追加 .js / .jsx / .mjs / .cjs
    3. 目录下的 index.<ext>
    """

    def __init__(self, extensions: Sequence[str] = MODULE_EXTENSIONS):
        self.extensions = tuple(extensions)
        self._cache: Dict[Path, Optional[ParsedModule]] = {}

    def register(self, module: ParsedModule):
        # 正在改写的文件以内存中的源码为准，避免循环引用时重新从磁盘读取
        if module.path is not None:
            self._cache[Path(module.path).resolve()] = module

    def resolve_path(self, importer: Optional[Path], specifier: str) -> Optional[Path]:
        if importer is None or not is_relative_specifier(specifier):
            return None

        base = Path(importer).parent / specifier
        candidates = []
        if base.suffix in self.extensions:
            candidates.append(base)
        candidates.extend(base.with_name(base.name + ext) for ext in self.extensions)
        candidates.extend(base / f"index{ext}" for ext in self.extensions)

        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
        return None

    def load(self, path: Path) -> Optional[ParsedModule]:
        path = Path(path).resolve()
        if path in self._cache:
            return self._cache[path]

        try:
            src_bytes = path.read_bytes()
        except OSError as e:
            logger.warning(f"Unable to read module {path}: {e}")
            self._cache[path] = None
            return None

        logger.debug(f"Loaded module {path}")
        module = ParsedModule.from_source(src_bytes, path)
        self._cache[path] = module
        return module

    def resolve_module(self, importer: ParsedModule, specifier: str) -> Optional[ParsedModule]:
        """
        加载 importer 中相对引用的模块。

        :param importer: 发起引用的模块
        :param specifier: 模块说明符（如 './styles'）
        :return: ParsedModule；无法定位或读取时返回 None
        """
        path = self.resolve_path(importer.path, specifier)
        if path is None:
            logger.debug(f"Cannot resolve module '{specifier}' from {importer.key}")
            return None
        return self.load(path)
