"""Tests for classifier module."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from dustpan.classifier import (
    RULES,
    classify_by_extension,
    classify_global_cache,
    dir_has_suffix,
    is_deletable,
    is_dotnet_build,
    parent_has_file,
)
from dustpan.models import Category


def make_dir(base: Path, name: str, *markers: str) -> Path:
    """Create ``base/name`` with marker files placed next to it."""
    base.mkdir(parents=True, exist_ok=True)
    for marker in markers:
        (base / marker).touch()
    target = base / name
    target.mkdir()
    return target


class TestProbes:
    def test_parent_has_file(self, tmp_path):
        (tmp_path / "Cargo.toml").touch()
        assert parent_has_file(tmp_path / "target", "Cargo.toml")
        assert not parent_has_file(tmp_path / "target", "pom.xml")

    def test_parent_has_file_any_of(self, tmp_path):
        (tmp_path / "go.sum").touch()
        assert parent_has_file(tmp_path / "vendor", "go.mod", "go.sum")

    def test_dir_has_suffix(self, tmp_path):
        (tmp_path / "App.csproj").touch()
        assert dir_has_suffix(tmp_path, (".csproj",))
        assert not dir_has_suffix(tmp_path, (".sln",))

    def test_dir_has_suffix_none(self):
        assert not dir_has_suffix(None, (".sln",))

    def test_dir_has_suffix_unreadable(self, tmp_path):
        with patch("dustpan.classifier.os.scandir", side_effect=PermissionError("denied")):
            assert not dir_has_suffix(tmp_path, (".csproj",))


class TestRustAndMaven:
    def test_cargo_target(self, tmp_path):
        target = make_dir(tmp_path / "proj", "target", "Cargo.toml")
        assert is_deletable(target) == Category.RUST_TARGET

    def test_maven_target(self, tmp_path):
        target = make_dir(tmp_path / "proj", "target", "pom.xml")
        assert is_deletable(target) == Category.MAVEN_TARGET

    def test_cargo_wins_over_maven(self, tmp_path):
        target = make_dir(tmp_path / "proj", "target", "Cargo.toml", "pom.xml")
        assert is_deletable(target) == Category.RUST_TARGET

    def test_bare_target_is_not_deletable(self, tmp_path):
        target = make_dir(tmp_path / "proj", "target")
        assert is_deletable(target) is None

    def test_target_file_is_not_deletable(self, tmp_path):
        (tmp_path / "Cargo.toml").touch()
        (tmp_path / "target").touch()
        assert is_deletable(tmp_path / "target") is None


class TestNodeAndPython:
    def test_node_modules(self, tmp_path):
        assert is_deletable(make_dir(tmp_path, "node_modules")) == Category.NODE_MODULES

    @pytest.mark.parametrize("name", ["__pycache__", ".pytest_cache", ".tox", "venv", ".venv"])
    def test_python_dirs(self, tmp_path, name):
        assert is_deletable(make_dir(tmp_path, name)) == Category.PYTHON_CACHE

    def test_symlinked_node_modules_is_ignored(self, tmp_path):
        real = make_dir(tmp_path, "real")
        link = tmp_path / "node_modules"
        os.symlink(real, link)
        assert is_deletable(link) is None


class TestGradleAndBuild:
    def test_gradle_build(self, tmp_path):
        build = make_dir(tmp_path / "app", "build", "build.gradle")
        assert is_deletable(build) == Category.GRADLE_BUILD

    def test_gradle_kts_build(self, tmp_path):
        build = make_dir(tmp_path / "app", "build", "build.gradle.kts")
        assert is_deletable(build) == Category.GRADLE_BUILD

    def test_dot_gradle(self, tmp_path):
        assert is_deletable(make_dir(tmp_path, ".gradle")) == Category.GRADLE_BUILD

    @pytest.mark.parametrize("name", ["build", "dist", "out"])
    def test_generic_build_output(self, tmp_path, name):
        assert is_deletable(make_dir(tmp_path / "web", name)) == Category.BUILD_CACHE


class TestVendor:
    def test_composer_vendor(self, tmp_path):
        vendor = make_dir(tmp_path / "site", "vendor", "composer.json")
        assert is_deletable(vendor) == Category.PHP_VENDOR

    def test_go_vendor(self, tmp_path):
        vendor = make_dir(tmp_path / "svc", "vendor", "go.mod")
        assert is_deletable(vendor) == Category.GO_VENDOR

    def test_ruby_vendor(self, tmp_path):
        vendor = make_dir(tmp_path / "app", "vendor", "Gemfile")
        assert is_deletable(vendor) == Category.RUBY_GEMS

    def test_composer_wins_over_go_and_ruby(self, tmp_path):
        vendor = make_dir(tmp_path / "mixed", "vendor", "composer.json", "go.mod", "Gemfile")
        assert is_deletable(vendor) == Category.PHP_VENDOR

    def test_go_wins_over_ruby(self, tmp_path):
        vendor = make_dir(tmp_path / "mixed", "vendor", "go.sum", "Gemfile.lock")
        assert is_deletable(vendor) == Category.GO_VENDOR

    def test_bare_vendor_is_not_deletable(self, tmp_path):
        assert is_deletable(make_dir(tmp_path / "lib", "vendor")) is None

    def test_dot_bundle(self, tmp_path):
        assert is_deletable(make_dir(tmp_path, ".bundle")) == Category.RUBY_GEMS


class TestDotnet:
    def test_bin_and_obj_with_project(self, tmp_path):
        project = tmp_path / "App"
        bin_dir = make_dir(project, "bin", "App.csproj")
        obj_dir = make_dir(project, "obj")
        assert is_deletable(bin_dir) == Category.DOTNET_BUILD
        assert is_deletable(obj_dir) == Category.DOTNET_BUILD

    @pytest.mark.parametrize("project_file", ["Lib.vbproj", "Lib.fsproj"])
    def test_other_project_files(self, tmp_path, project_file):
        project = tmp_path / "Lib"
        obj_dir = make_dir(project, "obj", project_file)
        make_dir(project, "bin")
        assert is_deletable(obj_dir) == Category.DOTNET_BUILD

    def test_lone_bin_is_not_dotnet(self, tmp_path):
        bin_dir = make_dir(tmp_path / "App", "bin", "App.csproj")
        assert not is_dotnet_build(bin_dir)
        assert is_deletable(bin_dir) is None

    def test_bin_obj_without_project_file(self, tmp_path):
        project = tmp_path / "scripts"
        bin_dir = make_dir(project, "bin")
        make_dir(project, "obj")
        assert is_deletable(bin_dir) is None

    def test_packages_next_to_solution(self, tmp_path):
        (tmp_path / "App.sln").touch()
        packages = make_dir(tmp_path / "src", "packages")
        assert is_deletable(packages) == Category.DOTNET_BUILD

    def test_packages_without_solution(self, tmp_path):
        assert is_deletable(make_dir(tmp_path / "src", "packages")) is None

    def test_unreadable_parent_is_no_match(self, tmp_path):
        project = tmp_path / "App"
        bin_dir = make_dir(project, "bin", "App.csproj")
        make_dir(project, "obj")
        with patch("dustpan.classifier.os.scandir", side_effect=PermissionError("denied")):
            assert is_deletable(bin_dir) is None


class TestOtherDirectories:
    def test_cmake_files(self, tmp_path):
        assert is_deletable(make_dir(tmp_path, "CMakeFiles")) == Category.C_CACHE

    def test_swift_build(self, tmp_path):
        build = make_dir(tmp_path / "pkg", ".build", "Package.swift")
        assert is_deletable(build) == Category.SWIFT_BUILD

    def test_dot_build_without_package(self, tmp_path):
        assert is_deletable(make_dir(tmp_path / "pkg", ".build")) is None

    def test_derived_data(self, tmp_path):
        assert is_deletable(make_dir(tmp_path, "DerivedData")) == Category.SWIFT_BUILD

    @pytest.mark.parametrize("name", [".idea", ".vscode", ".vs"])
    def test_ide_dirs(self, tmp_path, name):
        assert is_deletable(make_dir(tmp_path, name)) == Category.IDE_CACHE

    @pytest.mark.parametrize("name", [".sass-cache", ".parcel-cache", ".cache"])
    def test_tool_caches(self, tmp_path, name):
        assert is_deletable(make_dir(tmp_path, name)) == Category.TEMP_FILES


class TestFiles:
    @pytest.mark.parametrize("name", [".DS_Store", "Thumbs.db", "desktop.ini", ".localized"])
    def test_os_junk(self, tmp_path, name):
        (tmp_path / name).touch()
        assert is_deletable(tmp_path / name) == Category.OS_JUNK

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("module.pyc", Category.PYTHON_CACHE),
            ("module.pyo", Category.PYTHON_CACHE),
            ("main.o", Category.C_CACHE),
            ("libfoo.a", Category.C_CACHE),
            ("a.out", Category.C_CACHE),
            ("server.log", Category.TEMP_FILES),
            ("upload.tmp", Category.TEMP_FILES),
            ("draft.temp", Category.TEMP_FILES),
        ],
    )
    def test_extension_fallback(self, tmp_path, name, expected):
        (tmp_path / name).touch()
        assert is_deletable(tmp_path / name) == expected

    def test_regular_file(self, tmp_path):
        (tmp_path / "main.py").touch()
        assert is_deletable(tmp_path / "main.py") is None

    def test_classify_by_extension(self):
        assert classify_by_extension("notes.txt") is None
        assert classify_by_extension("x.pyc") == Category.PYTHON_CACHE


class TestGlobalCaches:
    @pytest.mark.parametrize(
        "relative",
        [".npm/_cacache/index-v5", ".cache/pip/wheels", ".cache/yarn/v6", ".m2/repository/org"],
    )
    def test_global_cache_paths(self, tmp_path, relative):
        path = tmp_path / relative
        path.mkdir(parents=True)
        assert is_deletable(path) == Category.PACKAGE_CACHE

    def test_classify_global_cache_unrelated(self):
        assert classify_global_cache(Path("/home/user/projects/app")) is None


class TestGeneral:
    def test_missing_path(self, tmp_path):
        assert is_deletable(tmp_path / "nope" / "target") is None

    def test_root_path(self):
        assert is_deletable(Path("/")) is None

    def test_idempotent(self, tmp_path):
        target = make_dir(tmp_path / "proj", "target", "Cargo.toml")
        assert is_deletable(target) == is_deletable(target) == Category.RUST_TARGET

    def test_does_not_modify_filesystem(self, tmp_path):
        make_dir(tmp_path / "proj", "node_modules", "package.json")
        before = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*"))
        for path in tmp_path.rglob("*"):
            is_deletable(path)
        after = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*"))
        assert before == after

    def test_specific_rules_precede_generic_build(self):
        categories = [rule.category for rule in RULES]
        assert categories[-1] == Category.BUILD_CACHE
        assert categories.index(Category.PHP_VENDOR) < categories.index(Category.GO_VENDOR)
        assert categories.index(Category.GO_VENDOR) < categories.index(Category.RUBY_GEMS)
        assert categories.index(Category.GRADLE_BUILD) < categories.index(Category.BUILD_CACHE)
