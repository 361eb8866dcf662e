"""Tests for scope graph construction."""

from __future__ import annotations

from image_rewrite.scope_graph.build_scopes import build_scope_graph
from image_rewrite.scope_graph.scope_resolution import (
    ImportDecl,
    NamespaceDecl,
    OpaqueDecl,
    PathDecl,
    ProxyDecl,
    RequireDestructureDecl,
    RequireMemberDecl,
    WrapperCallDecl,
)
from image_rewrite.scope_graph.utils import TextRange


def build(source: str):
    return build_scope_graph(source.encode("utf-8"))


def scope_at(graph, source: str, marker: str):
    """Innermost scope containing the first occurrence of ``marker``."""
    offset = source.index(marker)
    range = TextRange(
        start_byte=offset,
        end_byte=offset + len(marker),
        start_point=(0, 0),
        end_point=(0, 0),
    )
    return graph.scope_by_range(range, graph.root_idx)


def declaration_of(graph, source: str, name: str, marker: str = None):
    scope = graph.root_idx if marker is None else scope_at(graph, source, marker)
    binding = graph.find_binding(name, scope)
    return binding.declaration if binding else None


class TestImports:
    """Tests for import statements."""

    def test_default_named_and_namespace_imports(self) -> None:
        source = (
            "import Img, { Svg as Icon } from 'react-optimized-image';\n"
            "import * as ROI from 'react-optimized-image';\n"
        )
        graph = build(source)

        assert declaration_of(graph, source, "Img") == ImportDecl(module="react-optimized-image", export="default")
        assert declaration_of(graph, source, "Icon") == ImportDecl(module="react-optimized-image", export="Svg")
        assert declaration_of(graph, source, "ROI") == NamespaceDecl(module="react-optimized-image")
        assert declaration_of(graph, source, "Svg") is None


class TestDeclarations:
    """Tests for the classification of declarations."""

    def test_require_forms(self) -> None:
        source = (
            "const ROI = require('react-optimized-image');\n"
            "const Img = require('react-optimized-image').default;\n"
            "const { Svg: Icon, Img: Image = null, Other } = require('react-optimized-image');\n"
            "const Dynamic = require(name).Svg;\n"
        )
        graph = build(source)

        assert declaration_of(graph, source, "ROI") == NamespaceDecl(module="react-optimized-image")
        assert declaration_of(graph, source, "Img") == RequireMemberDecl(module="react-optimized-image", export="default")
        assert declaration_of(graph, source, "Icon") == RequireDestructureDecl(module="react-optimized-image", export="Svg")
        assert declaration_of(graph, source, "Image") == RequireDestructureDecl(module="react-optimized-image", export="Img")
        assert declaration_of(graph, source, "Other") == RequireDestructureDecl(module="react-optimized-image", export="Other")
        assert declaration_of(graph, source, "Dynamic") == RequireMemberDecl(module=None, export="Svg")

    def test_proxy_and_member_initializers(self) -> None:
        source = "const A = Svg;\nconst B = (A);\nconst C = ROI.Svg;\n"
        graph = build(source)

        assert declaration_of(graph, source, "A") == ProxyDecl(target="Svg")
        assert declaration_of(graph, source, "B") == ProxyDecl(target="A")
        assert declaration_of(graph, source, "C") == PathDecl(chain=["ROI", "Svg"])

    def test_wrapper_call_forms(self) -> None:
        source = (
            "const A = styled(Svg)`color: red;`;\n"
            "const B = styled(A)({ color: 'red' });\n"
            "const C = styled(Img).withConfig({ displayName: 'C' })(['color:red;']);\n"
            "const D = styled.div`color: red;`;\n"
            "const E = memo(Img);\n"
        )
        graph = build(source)

        assert declaration_of(graph, source, "A") == WrapperCallDecl(wrapper="styled", target="Svg")
        assert declaration_of(graph, source, "B") == WrapperCallDecl(wrapper="styled", target="A")
        assert declaration_of(graph, source, "C") == WrapperCallDecl(wrapper="styled", target="Img")
        assert isinstance(declaration_of(graph, source, "D"), OpaqueDecl)
        assert isinstance(declaration_of(graph, source, "E"), OpaqueDecl)

    def test_parameters_shadow_outer_names(self) -> None:
        source = (
            "import { Svg } from 'react-optimized-image';\n"
            "function render(Svg, { Img }) {\n"
            "  return USE;\n"
            "}\n"
        )
        graph = build(source)

        assert isinstance(declaration_of(graph, source, "Svg", "USE"), OpaqueDecl)
        assert isinstance(declaration_of(graph, source, "Img", "USE"), OpaqueDecl)
        assert isinstance(declaration_of(graph, source, "Svg"), ImportDecl)

    def test_block_scoping_and_var_hoisting(self) -> None:
        source = (
            "function render() {\n"
            "  if (ok) {\n"
            "    const Inner = Svg;\n"
            "    var Hoisted = Svg;\n"
            "  }\n"
            "  return USE;\n"
            "}\n"
        )
        graph = build(source)

        assert declaration_of(graph, source, "Inner", "USE") is None
        assert declaration_of(graph, source, "Hoisted", "USE") == ProxyDecl(target="Svg")
        assert declaration_of(graph, source, "Hoisted") is None

    def test_function_declaration_is_hoisted_to_enclosing_scope(self) -> None:
        graph = build("function Svg() {}\n")

        assert isinstance(declaration_of(graph, "", "Svg"), OpaqueDecl)

    def test_local_require_is_not_global_require(self) -> None:
        source = (
            "function load(require) {\n"
            "  const { Svg } = require('react-optimized-image');\n"
            "  return USE;\n"
            "}\n"
        )
        graph = build(source)

        assert declaration_of(graph, source, "Svg", "USE") == OpaqueDecl(reason="local require")

    def test_first_declaration_wins(self) -> None:
        source = "var A = Svg;\nvar A = Img;\n"
        graph = build(source)

        assert declaration_of(graph, source, "A") == ProxyDecl(target="Svg")


class TestPaths:
    """Tests for property-path declarations."""

    def test_nested_object_literal(self) -> None:
        source = "const styles = { imgs: { StyledSvg: styled(Svg)``, Icon } };\n"
        graph = build(source)

        assert graph.find_path(["styles", "imgs", "StyledSvg"]).declaration == WrapperCallDecl(
            wrapper="styled", target="Svg"
        )
        assert graph.find_path(["styles", "imgs", "Icon"]).declaration == ProxyDecl(target="Icon")
        assert graph.find_path(["styles", "missing"]) is None

    def test_member_assignment(self) -> None:
        source = "const styles = {};\nstyles.icons = {};\nstyles.icons.Svg = Svg;\nstyles.icons.Svg = Img;\n"
        graph = build(source)

        assert graph.find_path(["styles", "icons", "Svg"]).declaration == ProxyDecl(target="Svg")
