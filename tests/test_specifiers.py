"""
Tests for dependency and module specifier parsing.
"""

import os

import pytest

from forgekit.domain.errors import MalformedSpecifierError, UserConfigError
from forgekit.domain.specifiers import (
    DependencyKind,
    DependencySpecifier,
    ModuleKind,
    ModuleSpecifier,
    canonicalize_name,
)


class TestDependencySpecifier:
    """Test cases for DependencySpecifier.parse."""

    def test_plain_name(self):
        spec = DependencySpecifier.parse("requests")
        assert spec.kind is DependencyKind.PLAIN
        assert spec.name == "requests"
        assert spec.package_arg == "requests"
        assert spec.version is None
        assert not spec.matches_by_source

    def test_plain_name_is_canonicalized(self):
        spec = DependencySpecifier.parse("Forge_Standard")
        assert spec.name == "forge-standard"
        assert spec.package_arg == "Forge_Standard"

    def test_bare_version_is_pinned(self):
        spec = DependencySpecifier.parse("left-pad@1.3.0")
        assert spec.name == "left-pad"
        assert spec.version == "1.3.0"
        assert spec.package_arg == "left-pad==1.3.0"

    @pytest.mark.parametrize("raw,expected", [
        ("requests@>=2.31", "requests>=2.31"),
        ("requests@~=2.0", "requests~=2.0"),
        ("requests@!=2.1", "requests!=2.1"),
        ("requests@<3", "requests<3"),
    ])
    def test_version_range_is_appended(self, raw, expected):
        assert DependencySpecifier.parse(raw).package_arg == expected

    def test_surrounding_whitespace_is_ignored(self):
        assert DependencySpecifier.parse("  requests  ").raw == "requests"

    def test_str_is_raw(self):
        assert str(DependencySpecifier.parse("requests@>=2")) == "requests@>=2"

    def test_local_path(self):
        spec = DependencySpecifier.parse("file:../forge-aws")
        assert spec.kind is DependencyKind.LOCAL_PATH
        assert spec.name == "forge-aws"
        assert spec.package_arg == "../forge-aws"
        assert spec.matches_by_source

    def test_local_path_with_slashes(self):
        spec = DependencySpecifier.parse("file:///opt/tools/forge-aws/")
        assert spec.name == "forge-aws"
        assert spec.package_arg == "/opt/tools/forge-aws/"

    def test_local_path_expands_user(self):
        spec = DependencySpecifier.parse("file:~/src/forge-aws")
        assert spec.package_arg == os.path.expanduser("~/src/forge-aws")
        assert spec.name == "forge-aws"

    def test_git_https_with_ref(self):
        spec = DependencySpecifier.parse("git+https://github.com/acme/forge-tools.git#v1.2")
        assert spec.kind is DependencyKind.GIT
        assert spec.name == "forge-tools"
        assert spec.ref == "v1.2"
        assert spec.package_arg == "git+https://github.com/acme/forge-tools.git@v1.2"

    def test_git_ssh_without_ref(self):
        spec = DependencySpecifier.parse("git+ssh://git@github.com/acme/forge-tools.git")
        assert spec.name == "forge-tools"
        assert spec.ref is None
        assert spec.package_arg == "git+ssh://git@github.com/acme/forge-tools.git"

    def test_github_shorthand(self):
        spec = DependencySpecifier.parse("github:acme/forge-tools#main")
        assert spec.kind is DependencyKind.GIT
        assert spec.name == "forge-tools"
        assert spec.package_arg == "git+https://github.com/acme/forge-tools.git@main"

    @pytest.mark.parametrize("raw", [
        "",
        "   ",
        "./forge-aws",
        "/abs/forge-aws",
        "~/forge-aws",
        "file:",
        "file:..",
        "git+ftp://example.com/repo.git",
        "git+https://github.com/acme/tools.git#",
        "git+https://host",
        "github:acme",
        "github:acme/tools#",
        "requests@",
        "requests@ 2",
        "-requests",
        "req uests",
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedSpecifierError):
            DependencySpecifier.parse(raw)

    def test_malformed_is_user_config_error(self):
        with pytest.raises(UserConfigError) as exc_info:
            DependencySpecifier.parse("./forge-aws")
        assert "file:./forge-aws" in str(exc_info.value)


class TestModuleSpecifier:
    """Test cases for ModuleSpecifier.parse."""

    @pytest.mark.parametrize("raw", ["./greet", "../shared/tools", ".hidden"])
    def test_local(self, raw):
        spec = ModuleSpecifier.parse(raw)
        assert spec.kind is ModuleKind.LOCAL
        assert spec.is_local

    @pytest.mark.parametrize("raw", ["forge_standard", "forge_standard/hello", "@scope/pkg/sub"])
    def test_package(self, raw):
        spec = ModuleSpecifier.parse(raw)
        assert spec.kind is ModuleKind.PACKAGE
        assert not spec.is_local

    @pytest.mark.parametrize("raw", ["", "/abs/module", "pkg//sub", "pkg/../escape", "pkg/./sub", "pkg/"])
    def test_malformed(self, raw):
        with pytest.raises(MalformedSpecifierError):
            ModuleSpecifier.parse(raw)


class TestCanonicalizeName:
    """Test cases for canonicalize_name."""

    @pytest.mark.parametrize("raw", ["Forge_Standard", "forge.standard", "forge--standard", "FORGE-standard"])
    def test_equivalent_spellings(self, raw):
        assert canonicalize_name(raw) == "forge-standard"
