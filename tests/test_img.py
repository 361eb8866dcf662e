"""Tests for the Img rewrite rule."""

from __future__ import annotations

import pytest

from image_rewrite.common.enum_types import LocationKind, UrlPolicy, VariantType
from image_rewrite.transform.image_config import GlobalConfig, ImageConfig
from image_rewrite.transform.img import build_variant_map, should_force_url, transform_img
from image_rewrite.transform.location import ResourceLocation

EMPTY = GlobalConfig()


def run(make_tag, source: str, global_config: GlobalConfig = EMPTY, **kwargs):
    tag = make_tag(source, "Img")
    variants = transform_img(tag, global_config, **kwargs)
    return variants, tag.edits.apply().decode("utf-8")


def queries(branch):
    return {size: {density: location.literal for density, location in by_density.items()}
            for size, by_density in branch.items()}


class TestTransformImg:
    """Tests for transform_img."""

    def test_multiple_sizes(self, make_tag) -> None:
        variants, code = run(make_tag, "<Img src={require('./a.png')} sizes={[400,800]} />;")

        assert code == (
            "<Img src={require('./a.png')} sizes={[400,800]} rawSrc={{fallback: "
            "{400: {1: require('./a.png?url&width=400')}, 800: {1: require('./a.png?url&width=800')}}}} />;"
        )
        assert list(variants) == [VariantType.FALLBACK]

    def test_no_props(self, make_tag) -> None:
        source = "import Image from './image.png';\n<Img src={Image} />;"
        variants, code = run(make_tag, source)

        assert code.endswith("<Img src={Image} rawSrc={{fallback: {original: {1: require('./image.png')}}}} />;")
        assert queries(variants[VariantType.FALLBACK]) == {"original": {1: "./image.png"}}

    def test_webp(self, make_tag) -> None:
        source = "import Image from './image.png';\n<Img src={Image} webp />;"
        variants, code = run(make_tag, source)

        assert code.endswith(
            "<Img src={Image} webp rawSrc={{fallback: {original: {1: require('./image.png?url')}}, "
            "webp: {original: {1: require('./image.png?webp')}}}} />;"
        )

    def test_sizes_and_densities(self, make_tag) -> None:
        variants, _ = run(make_tag, "<Img src={require('./a.png')} sizes={[400, 800]} densities={[1, 2]} webp />;")

        assert queries(variants[VariantType.FALLBACK]) == {
            400: {1: "./a.png?url&width=400", 2: "./a.png?url&width=800"},
            800: {1: "./a.png?url&width=800", 2: "./a.png?url&width=1600"},
        }
        assert queries(variants[VariantType.WEBP])[800] == {1: "./a.png?webp&width=800", 2: "./a.png?webp&width=1600"}

    def test_single_variant_keeps_inlining(self, make_tag) -> None:
        variants, _ = run(make_tag, "<Img src={require('./a.png')} sizes={[400]} />;")

        assert queries(variants[VariantType.FALLBACK]) == {400: {1: "./a.png?width=400"}}

    def test_base_query_rewrites_src(self, make_tag) -> None:
        variants, code = run(make_tag, "<Img src={require('./image.png')} original sizes={[400, 800]} />;")

        assert code.startswith("<Img src={require('./image.png?original')} original sizes={[400, 800]} rawSrc=")
        assert queries(variants[VariantType.FALLBACK])[400] == {1: "./image.png?original&url&width=400"}

    def test_multiple_base_flags(self, make_tag) -> None:
        _, code = run(make_tag, "<Img src={require('./image.png')} url original />;")

        assert code == (
            "<Img src={require('./image.png?url&original')} url original "
            "rawSrc={{fallback: {original: {1: require('./image.png?url&original')}}}} />;"
        )

    def test_existing_query_is_preserved(self, make_tag) -> None:
        variants, _ = run(make_tag, "<Img src={require('./a.png?inline')} sizes={[400, 800]} />;")

        assert queries(variants[VariantType.FALLBACK])[800] == {1: "./a.png?inline&url&width=800"}

    def test_marker_makes_transform_idempotent(self, make_tag) -> None:
        source = "<Img src={require('./a.png')} rawSrc={{}} />;"
        variants, code = run(make_tag, source)

        assert variants is None
        assert code == source

    def test_unsupported_src_is_left_untouched(self, make_tag) -> None:
        source = "<Img src={getSource()} sizes={[400]} />;"
        variants, code = run(make_tag, source)

        assert variants is None
        assert code == source

    def test_url_policy_multiple_sizes(self, make_tag) -> None:
        variants, _ = run(make_tag, "<Img src={require('./a.png')} webp />;", url_policy=UrlPolicy.MULTIPLE_SIZES)

        assert queries(variants[VariantType.FALLBACK]) == {"original": {1: "./a.png"}}


class TestGlobalConfig:
    """Global configuration layers."""

    CONFIG = GlobalConfig(
        default=ImageConfig(webp=True, inline=False),
        types={"hero": ImageConfig(sizes=[300])},
    )

    def test_global_values_are_materialized(self, make_tag) -> None:
        _, code = run(make_tag, "<Img src={require('./a.png')} type=\"hero\" />;", self.CONFIG)

        assert code == (
            "<Img src={require('./a.png')} type=\"hero\" webp inline={false} sizes={[300]} "
            "rawSrc={{fallback: {300: {1: require('./a.png?url&width=300')}}, "
            "webp: {300: {1: require('./a.png?webp&width=300')}}}} />;"
        )

    def test_tag_attributes_win(self, make_tag) -> None:
        variants, code = run(
            make_tag,
            "<Img src={require('./a.png')} type=\"hero\" webp={false} sizes={[100]} />;",
            self.CONFIG,
        )

        assert list(variants) == [VariantType.FALLBACK]
        assert queries(variants[VariantType.FALLBACK]) == {100: {1: "./a.png?width=100"}}
        assert " inline={false} rawSrc=" in code
        assert "sizes={[300]}" not in code

    def test_package_defaults_are_not_materialized(self, make_tag) -> None:
        _, code = run(make_tag, "<Img src={require('./a.png')} />;")

        assert "densities" not in code


class TestVariantMap:
    """Tests for build_variant_map and the url policy."""

    location = ResourceLocation(LocationKind.LITERAL, "'", "./a.png", "'")

    @pytest.mark.parametrize(
        "config,policy,expected",
        [
            (ImageConfig(densities=[1]), UrlPolicy.MULTIPLE_VARIANTS, False),
            (ImageConfig(sizes=[400], densities=[1]), UrlPolicy.MULTIPLE_VARIANTS, False),
            (ImageConfig(sizes=[400, 800]), UrlPolicy.MULTIPLE_VARIANTS, True),
            (ImageConfig(densities=[1, 2]), UrlPolicy.MULTIPLE_VARIANTS, True),
            (ImageConfig(webp=True), UrlPolicy.MULTIPLE_VARIANTS, True),
            (ImageConfig(webp=True), UrlPolicy.MULTIPLE_SIZES, False),
            (ImageConfig(sizes=[400, 800]), UrlPolicy.MULTIPLE_SIZES, True),
        ],
    )
    def test_should_force_url(self, config, policy, expected) -> None:
        assert should_force_url(config, policy) is expected

    def test_cardinality(self) -> None:
        variants = build_variant_map(self.location, ImageConfig(sizes=[400, 800], densities=[1, 2]), {})
        fallback = variants[VariantType.FALLBACK]

        assert sum(len(by_density) for by_density in fallback.values()) == 4

    def test_locations_are_independent_copies(self) -> None:
        variants = build_variant_map(self.location, ImageConfig(sizes=[400, 800]), {})
        first = variants[VariantType.FALLBACK][400][1]
        second = variants[VariantType.FALLBACK][800][1]

        assert first is not second
        assert self.location.literal == "./a.png"
