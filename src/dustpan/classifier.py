"""Directory and file classification for build artifacts.

Classification is a pure function of the filesystem: it never writes, and
every check treats an unreadable or missing location as "no match" instead
of raising.

Several ecosystems reuse the same bare directory name (``target``,
``vendor``, ``build``, ``bin``). Those names are disambiguated by looking
for project marker files in the parent directory, and the rules are
evaluated top to bottom so that a specific match (a Composer ``vendor``)
is never shadowed by a broader one (a generic ``build`` folder).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from dustpan.models import Category

# Global package-manager caches. Matched by substring as a last resort.
GLOBAL_CACHE_MARKERS = (
    "/.npm/_cacache",
    "/.cache/pip",
    "/.cache/yarn",
    "/.m2/repository",
)

OS_JUNK_FILES = frozenset({".DS_Store", "Thumbs.db", "desktop.ini", ".localized"})

DOTNET_PROJECT_SUFFIXES = (".csproj", ".vbproj", ".fsproj")


# =============================================================================
# Filesystem checks
# =============================================================================


def _exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        return False


def _is_real_dir(path: Path) -> bool:
    """True for a directory that is not a symlink."""
    try:
        return path.is_dir() and not path.is_symlink()
    except OSError:
        return False


def _parent(path: Path) -> Optional[Path]:
    parent = path.parent
    if parent == path:
        return None
    return parent


def parent_has_file(path: Path, *names: str) -> bool:
    """Check whether any of ``names`` exists next to ``path``."""
    parent = _parent(path)
    if parent is None:
        return False
    return any(_exists(parent / name) for name in names)


def dir_has_suffix(directory: Optional[Path], suffixes: tuple[str, ...]) -> bool:
    """Check whether ``directory`` contains an entry ending with any suffix."""
    if directory is None:
        return False
    try:
        with os.scandir(directory) as entries:
            return any(entry.name.endswith(suffixes) for entry in entries)
    except (PermissionError, OSError):
        return False


# =============================================================================
# Disambiguators
# =============================================================================


def is_cargo_target(path: Path) -> bool:
    return parent_has_file(path, "Cargo.toml")


def is_maven_target(path: Path) -> bool:
    return parent_has_file(path, "pom.xml")


def is_gradle_build(path: Path) -> bool:
    return parent_has_file(path, "build.gradle", "build.gradle.kts")


def is_composer_vendor(path: Path) -> bool:
    return parent_has_file(path, "composer.json")


def is_go_vendor(path: Path) -> bool:
    return parent_has_file(path, "go.mod", "go.sum")


def is_ruby_bundler(path: Path) -> bool:
    return parent_has_file(path, "Gemfile", "Gemfile.lock")


def is_swift_build(path: Path) -> bool:
    return parent_has_file(path, "Package.swift")


def is_dotnet_build(path: Path) -> bool:
    """Check for a .NET ``bin``/``obj`` directory.

    The parent must hold a project file, and the counterpart directory must
    exist alongside. A lone ``bin`` next to a ``.csproj`` is not enough, which
    keeps ordinary ``bin`` folders (scripts, tools) out of the results.
    """
    parent = _parent(path)
    if parent is None or not dir_has_suffix(parent, DOTNET_PROJECT_SUFFIXES):
        return False

    counterpart = {"bin": "obj", "obj": "bin"}.get(path.name)
    if counterpart is None:
        return False
    return _exists(parent / counterpart)


def is_dotnet_packages(path: Path) -> bool:
    """``packages/`` sits in a solution root; the solution file is one level up."""
    parent = _parent(path)
    grandparent = _parent(parent) if parent is not None else None
    return dir_has_suffix(grandparent, (".sln",))


# =============================================================================
# Rules
# =============================================================================


@dataclass(frozen=True)
class Rule:
    """One name-based classification rule."""

    names: frozenset[str]
    category: Category
    predicate: Optional[Callable[[Path], bool]] = None
    directory_only: bool = True

    def matches(self, path: Path, name: str, is_dir: bool) -> bool:
        if name not in self.names:
            return False
        if self.directory_only and not is_dir:
            return False
        return self.predicate is None or self.predicate(path)


def _rule(
    names: str | tuple[str, ...],
    category: Category,
    predicate: Optional[Callable[[Path], bool]] = None,
    directory_only: bool = True,
) -> Rule:
    if isinstance(names, str):
        names = (names,)
    return Rule(frozenset(names), category, predicate, directory_only)


# Order matters: first match wins.
RULES: tuple[Rule, ...] = (
    _rule("target", Category.RUST_TARGET, is_cargo_target),
    _rule("node_modules", Category.NODE_MODULES),
    _rule(("__pycache__", ".pytest_cache", ".tox", "venv", ".venv"), Category.PYTHON_CACHE),
    _rule("target", Category.MAVEN_TARGET, is_maven_target),
    _rule("build", Category.GRADLE_BUILD, is_gradle_build),
    _rule(".gradle", Category.GRADLE_BUILD),
    # Composer before Go: a PHP project may also vendor Go tooling.
    _rule("vendor", Category.PHP_VENDOR, is_composer_vendor),
    _rule("vendor", Category.GO_VENDOR, is_go_vendor),
    _rule("CMakeFiles", Category.C_CACHE),
    _rule(("bin", "obj"), Category.DOTNET_BUILD, is_dotnet_build),
    _rule("packages", Category.DOTNET_BUILD, is_dotnet_packages),
    _rule(".build", Category.SWIFT_BUILD, is_swift_build),
    _rule("DerivedData", Category.SWIFT_BUILD),
    _rule((".idea", ".vscode", ".vs"), Category.IDE_CACHE),
    _rule("vendor", Category.RUBY_GEMS, is_ruby_bundler),
    _rule(".bundle", Category.RUBY_GEMS),
    _rule(tuple(OS_JUNK_FILES), Category.OS_JUNK, directory_only=False),
    _rule((".sass-cache", ".parcel-cache", ".cache"), Category.TEMP_FILES),
    # Generic build output, lowest priority.
    _rule(("build", "dist", "out"), Category.BUILD_CACHE),
)


def classify_by_extension(name: str) -> Optional[Category]:
    """Classify single-file junk by extension or fixed filename."""
    if name.endswith((".pyc", ".pyo")):
        return Category.PYTHON_CACHE
    if name.endswith((".o", ".a")) or name == "a.out":
        return Category.C_CACHE
    if name.endswith((".log", ".tmp", ".temp")):
        return Category.TEMP_FILES
    return None


def classify_global_cache(path: Path) -> Optional[Category]:
    """Match well-known global package caches anywhere in the path."""
    path_str = path.as_posix()
    if any(marker in path_str for marker in GLOBAL_CACHE_MARKERS):
        return Category.PACKAGE_CACHE
    return None


def is_deletable(path: Path) -> Optional[Category]:
    """
    Determine whether a path is a deletable artifact.

    Args:
        path: File or directory to classify

    Returns:
        The matching Category, or None if the path is not deletable
    """
    path = Path(path)
    name = path.name
    if not name:
        return None

    is_dir = _is_real_dir(path)

    for rule in RULES:
        if rule.matches(path, name, is_dir):
            return rule.category

    category = classify_by_extension(name)
    if category is not None:
        return category

    return classify_global_cache(path)
