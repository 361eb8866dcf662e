"""Tests for global image configuration loading and merging."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from image_rewrite.errors import ConfigError
from image_rewrite.transform.image_config import (
    PACKAGE_DEFAULTS,
    GlobalConfig,
    ImageConfig,
    get_global_config,
    load_global_config,
)


class TestImageConfig:
    """Tests for ImageConfig merging."""

    def test_merge_overrides_specified_fields_only(self) -> None:
        base = ImageConfig(webp=True, sizes=[400])
        merged = base.merge(ImageConfig(sizes=[800], url=False))

        assert merged.specified() == {"webp": True, "url": False, "sizes": [800]}
        assert base.sizes == [400]

    def test_merge_none(self) -> None:
        config = ImageConfig(webp=True)
        assert config.merge(None) is config

    def test_package_defaults(self) -> None:
        assert PACKAGE_DEFAULTS.specified() == {"densities": [1]}


class TestLoadGlobalConfig:
    """Tests for load_global_config."""

    def test_missing_file_is_empty_config(self, tmp_path: Path) -> None:
        config = load_global_config(tmp_path)

        assert config == GlobalConfig()
        assert config.types == {}

    def test_loads_default_and_types(self, tmp_path: Path) -> None:
        (tmp_path / "images.config.json").write_text(json.dumps({
            "default": {"webp": True, "sizes": [640, 1280]},
            "types": {"thumbnail": {"sizes": [120], "densities": [1, 2]}},
            "unknown": 1,
        }))

        config = load_global_config(tmp_path)

        assert config.default.specified() == {"webp": True, "sizes": [640, 1280]}
        assert config.types["thumbnail"].densities == [1, 2]

    def test_invalid_json(self, tmp_path: Path) -> None:
        (tmp_path / "images.config.json").write_text("{ default: ")

        with pytest.raises(ConfigError):
            load_global_config(tmp_path)

    @pytest.mark.parametrize("sizes", [[0], [-100], ["large"]])
    def test_invalid_values(self, tmp_path: Path, sizes) -> None:
        (tmp_path / "images.config.json").write_text(json.dumps({"default": {"sizes": sizes}}))

        with pytest.raises(ConfigError):
            load_global_config(tmp_path)

    def test_get_global_config_is_cached_per_root(self, tmp_path: Path) -> None:
        (tmp_path / "images.config.json").write_text(json.dumps({"default": {"webp": True}}))

        first = get_global_config(tmp_path)
        (tmp_path / "images.config.json").write_text(json.dumps({"default": {"webp": False}}))

        assert get_global_config(str(tmp_path)) is first
        assert first.default.webp is True
