"""
Specifier models.

Two kinds of strings flow through the core:

- Dependency specifiers name something to install into the shared home
  (``requests``, ``requests@>=2.31``, ``file:~/src/forge-aws``,
  ``git+https://github.com/acme/forge-tools.git#v1.2``).
- Module specifiers name a command module to load (``./website``,
  ``forge_standard/hello``, ``@acme/tools/deploy``).

Parsing is by prefix and unambiguous: exactly one variant matches any
given string, everything else is a ``MalformedSpecifierError``.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

from forgekit.domain.errors import MalformedSpecifierError

_NAME_RE = re.compile(r"^(?P<name>[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)(?:@(?P<version>.*))?$")
_VERSION_RE = re.compile(r"^[A-Za-z0-9.*+!_-]+$")
_GITHUB_RE = re.compile(r"^(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+)$")

_VERSION_OPERATORS = ("=", "<", ">", "!", "~")
_GIT_PREFIXES = ("git+ssh://", "git+https://")


class DependencyKind(Enum):
    """Variant of a dependency specifier."""
    PLAIN = "plain"
    LOCAL_PATH = "local_path"
    GIT = "git"


class ModuleKind(Enum):
    """Variant of a module specifier."""
    LOCAL = "local"
    PACKAGE = "package"


def canonicalize_name(name: str) -> str:
    """Normalize a distribution name (PEP 503)."""
    return re.sub(r"[-_.]+", "-", name).lower()


@dataclass(frozen=True)
class DependencySpecifier:
    """
    A parsed dependency declaration.

    Attributes:
        raw: The specifier exactly as declared
        kind: Which variant matched
        name: Canonical package name, or the directory or repo basename
        package_arg: Argument handed to the external package manager
        version: Version range (plain packages only)
        ref: Branch / tag / commit (git references only)
    """
    raw: str
    kind: DependencyKind
    name: str
    package_arg: str
    version: str | None = None
    ref: str | None = None

    def __str__(self) -> str:
        return self.raw

    @property
    def matches_by_source(self) -> bool:
        """Local paths and git URLs are recognised by their source, not their name."""
        return self.kind is not DependencyKind.PLAIN

    @property
    def manifest_key(self) -> str:
        """
        Key under which the manifest records this dependency.

        Plain packages use their canonical name. Local paths and git
        references use the declared string, which always contains a colon
        and so never equals a package name or another source.
        """
        return self.raw if self.matches_by_source else self.name

    @classmethod
    def parse(cls, raw: str) -> DependencySpecifier:
        """
        Parse a dependency specifier.

        Raises:
            MalformedSpecifierError: If no variant matches
        """
        text = (raw or "").strip()
        if not text:
            raise MalformedSpecifierError(raw, "empty dependency specifier")

        if text.startswith("file:"):
            return cls._parse_local(text)
        if text.startswith("github:"):
            return cls._parse_github(text)
        if text.startswith("git+"):
            return cls._parse_git(text)
        return cls._parse_plain(text)

    @classmethod
    def _parse_local(cls, text: str) -> DependencySpecifier:
        path = text[len("file:"):]
        if path.startswith("//"):
            # file:///abs/dir
            path = path[2:]
        if not path:
            raise MalformedSpecifierError(text, "file: reference has no path")

        expanded = os.path.expanduser(path)
        name = PurePosixPath(os.path.normpath(expanded).replace(os.sep, "/")).name
        if name in ("", ".", ".."):
            raise MalformedSpecifierError(text, "file: reference must name a directory")

        return cls(raw=text, kind=DependencyKind.LOCAL_PATH, name=name, package_arg=expanded)

    @classmethod
    def _parse_git(cls, text: str) -> DependencySpecifier:
        if not text.startswith(_GIT_PREFIXES):
            raise MalformedSpecifierError(
                text, f"unsupported git transport (expected one of: {', '.join(_GIT_PREFIXES)})"
            )

        url, sep, ref = text.partition("#")
        if sep and not ref:
            raise MalformedSpecifierError(text, "empty git ref after '#'")

        location = url.split("://", 1)[1].rstrip("/")
        repo = re.split(r"[/:]", location)[-1]
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        if not repo or "/" not in location:
            raise MalformedSpecifierError(text, "git URL has no repository path")

        package_arg = f"{url}@{ref}" if ref else url
        return cls(raw=text, kind=DependencyKind.GIT, name=repo, package_arg=package_arg, ref=ref or None)

    @classmethod
    def _parse_github(cls, text: str) -> DependencySpecifier:
        target, sep, ref = text[len("github:"):].partition("#")
        match = _GITHUB_RE.match(target)
        if not match:
            raise MalformedSpecifierError(text, "expected github:<owner>/<repo>[#ref]")
        if sep and not ref:
            raise MalformedSpecifierError(text, "empty git ref after '#'")

        repo = match.group("repo")
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        url = f"git+https://github.com/{match.group('owner')}/{repo}.git"
        package_arg = f"{url}@{ref}" if ref else url
        return cls(raw=text, kind=DependencyKind.GIT, name=repo, package_arg=package_arg, ref=ref or None)

    @classmethod
    def _parse_plain(cls, text: str) -> DependencySpecifier:
        if text.startswith((".", "/", "~")):
            raise MalformedSpecifierError(
                text, f"local directories must be declared as file:{text}"
            )

        match = _NAME_RE.match(text)
        if not match:
            raise MalformedSpecifierError(text, "not a valid package name")

        name = match.group("name")
        version = match.group("version")
        if version is None:
            requirement = name
        elif not version:
            raise MalformedSpecifierError(text, "empty version after '@'")
        elif version.startswith(_VERSION_OPERATORS):
            requirement = f"{name}{version}"
        elif _VERSION_RE.match(version):
            requirement = f"{name}=={version}"
        else:
            raise MalformedSpecifierError(text, f"invalid version range '{version}'")

        return cls(
            raw=text,
            kind=DependencyKind.PLAIN,
            name=canonicalize_name(name),
            package_arg=requirement,
            version=version,
        )


@dataclass(frozen=True)
class ModuleSpecifier:
    """
    A parsed module reference from the ``modules`` config list.

    Local specifiers resolve against the project's module directory only,
    package specifiers against the shared installed-files tree only.
    """
    raw: str
    kind: ModuleKind

    def __str__(self) -> str:
        return self.raw

    @property
    def is_local(self) -> bool:
        return self.kind is ModuleKind.LOCAL

    @classmethod
    def parse(cls, raw: str) -> ModuleSpecifier:
        """
        Parse a module specifier.

        Raises:
            MalformedSpecifierError: For empty, absolute, or escaping package paths
        """
        text = (raw or "").strip()
        if not text:
            raise MalformedSpecifierError(raw, "empty module specifier")

        if text.startswith("."):
            return cls(raw=text, kind=ModuleKind.LOCAL)

        if text.startswith("/") or os.path.isabs(text):
            raise MalformedSpecifierError(
                text, "absolute paths are not module specifiers (use a ./relative path)"
            )

        parts = text.split("/")
        if any(part in ("", ".", "..") for part in parts):
            raise MalformedSpecifierError(text, "package specifiers may not contain empty, '.' or '..' segments")

        return cls(raw=text, kind=ModuleKind.PACKAGE)
