"""
本模块实现标识符到 (模块名, 导出名) 的静态绑定解析。

解析沿声明（而不是使用点）逐步推进，对每种声明形态做穷举匹配：

1. ImportDecl：直接得到 (module, export)
2. RequireMemberDecl / RequireDestructureDecl：require 参数为字面量时得到 (module, export)
3. WrapperCallDecl：包装函数来自 styled 库时，透传被包装组件的解析结果
4. ProxyDecl / PathDecl：继续解析右侧标识符或属性路径
5. 其他（参数、循环变量、任意调用结果等）：无法解析

相对路径模块会被加载并继续在目标文件的根作用域中解析其导出。
解析过程中维护一个“进行中”集合（栈语义）与最大深度，用于在自引用 / 互相引用时终止。
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Set, Tuple

from image_rewrite.config import MAX_RESOLVE_DEPTH, STYLING_PACKAGES
from image_rewrite.scope_graph.repo_resolution import ModuleLoader, ParsedModule, is_relative_specifier
from image_rewrite.scope_graph.scope_resolution import (
    Binding,
    Declaration,
    ImportDecl,
    NamespaceDecl,
    OpaqueDecl,
    PathDecl,
    ProxyDecl,
    RequireDestructureDecl,
    RequireMemberDecl,
    ScopeID,
    WrapperCallDecl,
)

logger = logging.getLogger(__name__)


class ResolvedExport(NamedTuple):
    module_name: str
    export_name: str


def is_styling_module(module_name: str) -> bool:
    # 包括 styled-components/native、@emotion/styled/base 等子路径
    return any(module_name == package or module_name.startswith(package + "/") for package in STYLING_PACKAGES)


class _ResolveGuard:
    """
    单次解析的环检测状态。

    只记录当前递归路径上的节点，同一声明在不同分支上被再次访问（例如嵌套包装都引用 styled）不算环。
    """

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self.in_progress: Set[Tuple] = set()

    def enter(self, key: Tuple) -> bool:
        if key in self.in_progress:
            logger.debug(f"Resolution cycle detected at {key}")
            return False
        if len(self.in_progress) >= self.max_depth:
            logger.debug(f"Resolution depth limit {self.max_depth} reached at {key}")
            return False
        self.in_progress.add(key)
        return True

    def leave(self, key: Tuple):
        self.in_progress.discard(key)


class BindingResolver:
    """
    绑定解析器。

    :param loader: 跨文件解析使用的模块加载器（缓存跨多次解析共享）
    :param max_depth: 单次解析的最大递归深度
    """

    def __init__(self, loader: Optional[ModuleLoader] = None, max_depth: int = MAX_RESOLVE_DEPTH):
        self.loader = loader or ModuleLoader()
        self.max_depth = max_depth

    def resolve_identifier(
        self, module: ParsedModule, name: str, scope: Optional[ScopeID] = None
    ) -> Optional[ResolvedExport]:
        """
        解析在 scope 中可见的标识符 name。

        :return: ResolvedExport；无法解析时返回 None
        """
        return self.resolve_path(module, [name], scope)

    def resolve_path(
        self, module: ParsedModule, chain: Sequence[str], scope: Optional[ScopeID] = None
    ) -> Optional[ResolvedExport]:
        """
        解析标识符或属性访问链（如 <styles.imgs.StyledSvg />、<ROI.Svg />）。
        """
        guard = _ResolveGuard(self.max_depth)
        return self._resolve_chain(module, list(chain), scope, guard)

    def _resolve_chain(
        self, module: ParsedModule, chain: List[str], scope: Optional[ScopeID], guard: _ResolveGuard
    ) -> Optional[ResolvedExport]:
        graph = module.graph
        if scope is None:
            scope = graph.root_idx

        binding = graph.find_binding(chain[0], scope)
        if binding is None:
            logger.debug(f"No declaration found for '{chain[0]}' in {module.key}")
            return None

        if len(chain) == 1:
            return self._resolve_binding(module, binding, guard)

        # <NS.Svg />：命名空间导入 / 整体 require 的成员
        if isinstance(binding.declaration, NamespaceDecl) and len(chain) == 2:
            return self._follow(module, ResolvedExport(binding.declaration.module, chain[1]), guard)

        path_binding = graph.find_path(chain)
        if path_binding is None:
            logger.debug(f"No path declaration found for '{'.'.join(chain)}' in {module.key}")
            return None
        return self._resolve_binding(module, path_binding, guard)

    def _resolve_binding(
        self, module: ParsedModule, binding: Binding, guard: _ResolveGuard
    ) -> Optional[ResolvedExport]:
        key = (module.key, binding.node_id)
        if not guard.enter(key):
            return None
        try:
            return self._resolve_declaration(module, binding.declaration, binding.scope, guard)
        finally:
            guard.leave(key)

    def _resolve_declaration(
        self, module: ParsedModule, declaration: Declaration, scope: ScopeID, guard: _ResolveGuard
    ) -> Optional[ResolvedExport]:
        match declaration:
            case ImportDecl(module=source, export=export):
                return self._follow(module, ResolvedExport(source, export), guard)

            case NamespaceDecl():
                # 命名空间对象本身不对应某个导出
                return None

            case RequireMemberDecl(module=None) | RequireDestructureDecl(module=None):
                return None

            case RequireMemberDecl(module=source, export=export) | RequireDestructureDecl(
                module=source, export=export
            ):
                return self._follow(module, ResolvedExport(source, export), guard)

            case WrapperCallDecl(wrapper=wrapper, target=target):
                wrapper_export = self._resolve_chain(module, [wrapper], scope, guard)
                if wrapper_export is None or not is_styling_module(wrapper_export.module_name):
                    return None
                if target is None:
                    return None
                return self._resolve_chain(module, [target], scope, guard)

            case ProxyDecl(target=target):
                return self._resolve_chain(module, [target], scope, guard)

            case PathDecl(chain=chain):
                return self._resolve_chain(module, list(chain), scope, guard)

            case OpaqueDecl(reason=reason):
                logger.debug(f"Declaration is not statically traceable ({reason})")
                return None

        return None

    def _follow(
        self, module: ParsedModule, export: ResolvedExport, guard: _ResolveGuard
    ) -> Optional[ResolvedExport]:
        """
        相对路径模块继续在目标文件中解析，其他模块直接返回。
        """
        if not is_relative_specifier(export.module_name):
            return export

        target = self.loader.resolve_module(module, export.module_name)
        if target is None:
            return None
        return self._resolve_export(target, export.export_name, guard)

    def _resolve_export(
        self, module: ParsedModule, name: str, guard: _ResolveGuard
    ) -> Optional[ResolvedExport]:
        key = (module.key, "export", name)
        if not guard.enter(key):
            return None
        try:
            declaration = module.exports.get(name)
            if declaration is not None:
                return self._resolve_declaration(module, declaration, module.graph.root_idx, guard)

            # export * 不转发 default
            if name == "default":
                return None

            # 先尝试本地模块，再把名称归到第一个外部模块
            stars = sorted(module.exports.stars, key=lambda source: not is_relative_specifier(source))
            for source in stars:
                resolved = self._follow(module, ResolvedExport(source, name), guard)
                if resolved is not None:
                    return resolved
            logger.debug(f"Export '{name}' not found in {module.key}")
            return None
        finally:
            guard.leave(key)
