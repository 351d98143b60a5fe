"""Static metadata for every artifact category."""

from pydantic import BaseModel, Field

from dustpan.models import Category


class CategoryInfo(BaseModel):
    """Display metadata for a category."""

    category: Category
    name: str = Field(..., description="Human-readable name")
    alias: str = Field(..., description="Short name accepted on the command line")
    emoji: str = Field(..., description="Icon shown next to the category")
    description: str = Field(..., description="What this category contains")
    dangerous: bool = Field(
        default=False,
        description="Deleting affects shared state outside the scanned tree",
    )


CATEGORIES: dict[Category, CategoryInfo] = {
    Category.RUST_TARGET: CategoryInfo(
        category=Category.RUST_TARGET,
        name="Rust target",
        alias="rust",
        emoji="🦀",
        description="Cargo target directories next to a Cargo.toml",
    ),
    Category.NODE_MODULES: CategoryInfo(
        category=Category.NODE_MODULES,
        name="Node modules",
        alias="node",
        emoji="📦",
        description="Installed npm/yarn/pnpm dependencies",
    ),
    Category.PYTHON_CACHE: CategoryInfo(
        category=Category.PYTHON_CACHE,
        name="Python cache",
        alias="python",
        emoji="🐍",
        description="__pycache__, .pytest_cache, .tox, virtualenvs and bytecode",
    ),
    Category.PHP_VENDOR: CategoryInfo(
        category=Category.PHP_VENDOR,
        name="PHP vendor",
        alias="php",
        emoji="🐘",
        description="Composer vendor directories next to a composer.json",
    ),
    Category.RUBY_GEMS: CategoryInfo(
        category=Category.RUBY_GEMS,
        name="Ruby gems",
        alias="ruby",
        emoji="💎",
        description="Bundler vendor and .bundle directories",
    ),
    Category.MAVEN_TARGET: CategoryInfo(
        category=Category.MAVEN_TARGET,
        name="Maven target",
        alias="java-maven",
        emoji="☕",
        description="Maven target directories next to a pom.xml",
    ),
    Category.GRADLE_BUILD: CategoryInfo(
        category=Category.GRADLE_BUILD,
        name="Gradle build",
        alias="java-gradle",
        emoji="☕",
        description="Gradle build output and .gradle caches",
    ),
    Category.GO_VENDOR: CategoryInfo(
        category=Category.GO_VENDOR,
        name="Go vendor",
        alias="go",
        emoji="🐹",
        description="Vendored Go modules next to a go.mod",
    ),
    Category.C_CACHE: CategoryInfo(
        category=Category.C_CACHE,
        name="C/C++ cache",
        alias="c-cache",
        emoji="⚙️",
        description="CMakeFiles directories and object files",
    ),
    Category.DOTNET_BUILD: CategoryInfo(
        category=Category.DOTNET_BUILD,
        name=".NET build",
        alias="dotnet",
        emoji="🔷",
        description="bin/obj pairs next to a project file, NuGet packages folders",
    ),
    Category.SWIFT_BUILD: CategoryInfo(
        category=Category.SWIFT_BUILD,
        name="Swift build",
        alias="swift",
        emoji="🦢",
        description="SwiftPM .build directories and Xcode DerivedData",
    ),
    Category.IDE_CACHE: CategoryInfo(
        category=Category.IDE_CACHE,
        name="IDE cache",
        alias="ide",
        emoji="💡",
        description=".idea, .vscode and .vs folders",
    ),
    Category.OS_JUNK: CategoryInfo(
        category=Category.OS_JUNK,
        name="OS junk",
        alias="os-junk",
        emoji="🗑️",
        description=".DS_Store, Thumbs.db and similar metadata files",
    ),
    Category.TEMP_FILES: CategoryInfo(
        category=Category.TEMP_FILES,
        name="Temp/log files",
        alias="temp",
        emoji="📝",
        description="Log and temp files, bundler and tool caches",
    ),
    Category.PACKAGE_CACHE: CategoryInfo(
        category=Category.PACKAGE_CACHE,
        name="Package cache",
        alias="package-cache",
        emoji="⚠️",
        description="Global npm, pip, yarn and Maven caches shared by ALL projects",
        dangerous=True,
    ),
    Category.BUILD_CACHE: CategoryInfo(
        category=Category.BUILD_CACHE,
        name="Build cache",
        alias="build",
        emoji="📁",
        description="Generic build, dist and out directories",
    ),
}


def get_category_info(category: Category) -> CategoryInfo:
    """Get display metadata for a category."""
    return CATEGORIES[category]


def get_all_categories() -> list[CategoryInfo]:
    """Get metadata for all categories."""
    return [CATEGORIES[c] for c in Category.all()]


def get_category_by_alias(alias: str) -> Category | None:
    """Resolve a command-line alias (or a tag value) to a category."""
    key = alias.strip().lower()
    for info in CATEGORIES.values():
        if key in (info.alias, info.category.value):
            return info.category
    return None


def get_dangerous_categories() -> list[Category]:
    """Get categories whose deletion affects global state."""
    return [c for c, info in CATEGORIES.items() if info.dangerous]
