"""
Tests for the distribution registry.
"""

import pytest

from jdkkit.core.exceptions import DistributionRegistryError
from jdkkit.distributions.registry import DistributionConfig, DistributionRegistry


class TestDistributionRegistry:
    """Test loading the distribution catalog."""

    def test_embedded_catalog_has_graalvm(self):
        registry = DistributionRegistry()

        assert "graalvm" in registry
        assert "GraalVM" in registry
        assert registry.list_distributions() == ["graalvm"]

    def test_graalvm_rules(self):
        config = DistributionRegistry().get("graalvm")

        assert config.display_name == "GraalVM"
        assert config.min_version == 17
        assert config.architectures == ("x64", "aarch64")
        assert config.package_types == ("jdk",)
        assert config.platform_name("macos") == "macos"
        assert config.ea is not None
        assert config.ea.file_prefix == "graalvm-jdk-"

    def test_unknown_distribution(self):
        with pytest.raises(DistributionRegistryError, match="No supported distribution"):
            DistributionRegistry().get("temurin")

    def test_custom_catalog(self, tmp_path):
        catalog = tmp_path / "distributions.yaml"
        catalog.write_text(
            "mykit:\n"
            "  display_name: MyKit\n"
            "  architectures: [x64]\n"
            "  latest_url: https://example.com/{major}/{os}-{arch}.{extension}\n"
            "  archive_url: https://example.com/{version}/{os}-{arch}.{extension}\n"
        )

        config = DistributionRegistry(catalog).get("mykit")

        assert config.min_version == 0
        assert config.package_types == ("jdk",)
        assert config.ea is None

    def test_missing_catalog(self, tmp_path):
        with pytest.raises(DistributionRegistryError, match="not found"):
            DistributionRegistry(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        catalog = tmp_path / "distributions.yaml"
        catalog.write_text("graalvm: [\n")

        with pytest.raises(DistributionRegistryError, match="Invalid YAML"):
            DistributionRegistry(catalog)

    def test_missing_required_key(self, tmp_path):
        catalog = tmp_path / "distributions.yaml"
        catalog.write_text("broken:\n  display_name: Broken\n")

        with pytest.raises(DistributionRegistryError, match="Invalid configuration for distribution 'broken'"):
            DistributionRegistry(catalog)


class TestDistributionConfig:
    """Test config record helpers."""

    def test_toolcache_folder_name(self):
        config = DistributionRegistry().get("graalvm")

        assert config.toolcache_folder_name("jdk") == "Java_GraalVM_jdk"

    def test_unmapped_platform_passes_through(self):
        config = DistributionConfig.from_dict(
            "x",
            {
                "architectures": ["x64"],
                "latest_url": "a",
                "archive_url": "b",
                "platforms": {"macos": "darwin"},
            },
        )

        assert config.platform_name("macos") == "darwin"
        assert config.platform_name("linux") == "linux"

    def test_entry_must_be_mapping(self):
        with pytest.raises(DistributionRegistryError, match="must be a mapping"):
            DistributionConfig.from_dict("x", ["x64"])
