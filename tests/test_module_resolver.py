"""
Tests for module specifier resolution.
"""

from pathlib import Path

import pytest

from forgekit.application.module_resolver import ModuleResolver, candidate_paths, resolve_module
from forgekit.domain.errors import MalformedSpecifierError, NotFoundError


def touch(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestCandidatePaths:
    """Test cases for the probe order."""

    def test_order(self, tmp_path):
        base = tmp_path / "greet"
        assert candidate_paths(base) == [base, tmp_path / "greet.py", base / "__init__.py"]


class TestLocalResolution:
    """Test cases for ./ specifiers."""

    @pytest.fixture(autouse=True)
    def _resolver(self, home, tmp_path):
        self.resolver = ModuleResolver(home)
        self.module_root = tmp_path / "proj" / ".mods"
        self.module_root.mkdir(parents=True)

    def test_resolves_py_file(self):
        target = touch(self.module_root / "greet.py")
        assert self.resolver.resolve("./greet", self.module_root) == target

    def test_exact_file_wins(self):
        exact = touch(self.module_root / "greet")
        touch(self.module_root / "greet.py")
        assert self.resolver.resolve("./greet", self.module_root) == exact

    def test_package_directory(self):
        target = touch(self.module_root / "website" / "__init__.py")
        assert self.resolver.resolve("./website", self.module_root) == target

    def test_directory_without_init_is_not_a_match(self):
        (self.module_root / "website").mkdir()
        with pytest.raises(NotFoundError):
            self.resolver.resolve("./website", self.module_root)

    def test_parent_relative(self, tmp_path):
        target = touch(tmp_path / "proj" / "shared.py")
        assert self.resolver.resolve("../shared", self.module_root) == target

    def test_never_consults_installed_files(self, home):
        touch(home.installed_files_path / "greet.py")
        with pytest.raises(NotFoundError):
            self.resolver.resolve("./greet", self.module_root)

    def test_not_found_message_lists_root_and_candidates(self):
        with pytest.raises(NotFoundError) as exc_info:
            self.resolver.resolve("./nope", self.module_root)

        message = str(exc_info.value)
        assert "Local module not found: ./nope" in message
        assert str(self.module_root) in message
        for candidate in candidate_paths(self.module_root / "nope"):
            assert str(candidate) in message
        assert exc_info.value.searched == [self.module_root]
        assert len(exc_info.value.attempted) == 3


class TestPackageResolution:
    """Test cases for package specifiers."""

    @pytest.fixture(autouse=True)
    def _resolver(self, home, tmp_path):
        self.home = home
        self.resolver = ModuleResolver(home)
        self.module_root = tmp_path / "proj" / ".mods"
        self.module_root.mkdir(parents=True)

    def test_resolves_nested_path(self):
        target = touch(self.home.installed_files_path / "@scope" / "pkg" / "sub.py")
        assert self.resolver.resolve("@scope/pkg/sub", self.module_root) == target

    def test_resolves_package_init(self):
        target = touch(self.home.installed_files_path / "forge_standard" / "__init__.py")
        assert self.resolver.resolve("forge_standard", self.module_root) == target

    def test_never_consults_local_root(self):
        touch(self.module_root / "greet.py")
        with pytest.raises(NotFoundError):
            self.resolver.resolve("greet", self.module_root)

    def test_not_found_lists_both_locations(self):
        touch(self.home.installed_files_path / "@scope" / "pkg" / "other.py")

        with pytest.raises(NotFoundError) as exc_info:
            self.resolver.resolve("@scope/pkg/sub", self.module_root)

        message = str(exc_info.value)
        base = self.home.installed_files_path / "@scope" / "pkg" / "sub"
        assert f"Local: {self.module_root}" in message
        assert f"Package: {base}" in message
        assert str(Path(f"{base}.py")) in message
        assert "forge module install" in message
        assert exc_info.value.searched == [self.module_root, self.home.installed_files_path]

    def test_malformed_specifier(self):
        with pytest.raises(MalformedSpecifierError):
            self.resolver.resolve("/abs/greet", self.module_root)


class TestResolveModule:
    """Test cases for the resolve_module function."""

    def test_uses_given_home(self, home, tmp_path):
        target = touch(home.installed_files_path / "tools.py")
        assert resolve_module("tools", tmp_path, home) == target
