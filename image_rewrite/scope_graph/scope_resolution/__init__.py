from .definition import (
    Declaration,
    ImportDecl,
    LocalDef,
    NamespaceDecl,
    OpaqueDecl,
    PathDecl,
    ProxyDecl,
    RequireDestructureDecl,
    RequireMemberDecl,
    WrapperCallDecl,
)
from .graph import Binding, ScopeGraph
from .graph_types import EdgeKind, NodeKind, ScopeID, ScopeNode
from .imports import LocalImportStmt
from .scope import LocalScope, Scoping
