"""Typed deploy configuration.

The configuration is built once from the manifest (``pyproject.toml``) and
passed explicitly into every workflow step. Nothing in the workflow reads
module-level state.

Optional overrides live in a ``[tool.pkgship]`` table:

    [tool.pkgship]
    package = "echo_sdk"
    import-name = "echo_sdk"
    index-url = "https://pypi.org/project/echo_sdk/"
    dist-dir = "dist"
    tag-prefix = "v"
    index-name = "PyPI"
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "ConfigError",
    "DeployConfig",
    "DEFAULT_MANIFEST",
    "PYPI_PROJECT_URL",
    "load_config",
]

DEFAULT_MANIFEST = "pyproject.toml"
PYPI_PROJECT_URL = "https://pypi.org/project/{package}/"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the manifest cannot be read as TOML."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class DeployConfig:
    """Immutable settings for one deploy run."""

    package: str
    import_name: str
    manifest: str = DEFAULT_MANIFEST
    build_tool: str = "poetry"
    vcs_tool: str = "git"
    dist_dir: str = "dist"
    clean_dirs: tuple[str, ...] = ("build", "dist")
    clean_globs: tuple[str, ...] = ("*.egg-info",)
    index_url: str | None = None
    tag_prefix: str = "v"
    index_name: str = "PyPI"

    @property
    def project_url(self) -> str:
        return self.index_url or PYPI_PROJECT_URL.format(package=self.package)

    def tag_name(self, version: str) -> str:
        return f"{self.tag_prefix}{version}"

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, object],
        *,
        fallback_name: str,
        manifest: str = DEFAULT_MANIFEST,
    ) -> DeployConfig:
        """Create a DeployConfig from a parsed manifest."""
        tool: StrDict = get_table(data, "tool") or {}
        poetry: StrDict = get_table(tool, "poetry") or {}
        project: StrDict = get_table(data, "project") or {}
        ours: StrDict = get_table(tool, "pkgship") or {}

        package = (
            get_str(ours, "package")
            or get_str(poetry, "name")
            or get_str(project, "name")
            or fallback_name
        )
        import_name = get_str(ours, "import-name") or package.replace("-", "_").replace(".", "_")

        return cls(
            package=package,
            import_name=import_name,
            manifest=manifest,
            dist_dir=get_str(ours, "dist-dir") or "dist",
            index_url=get_str(ours, "index-url"),
            tag_prefix=get_str(ours, "tag-prefix") or "v",
            index_name=get_str(ours, "index-name") or "PyPI",
        )


def load_config(root: Path, manifest: str = DEFAULT_MANIFEST) -> Result[DeployConfig, ConfigError]:
    """Load the deploy configuration for a project root.

    A missing manifest is not a config error: the precondition step reports
    it. Defaults derived from the directory name are returned instead.
    """
    path = root / manifest
    if not path.is_file():
        return Ok(DeployConfig.from_dict({}, fallback_name=root.name, manifest=manifest))

    try:
        with path.open("rb") as f:
            data_obj: object = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        return Err(ConfigError(message=f"failed to parse {manifest}: {e}", path=path))

    data = as_str_dict(data_obj) or {}
    return Ok(DeployConfig.from_dict(data, fallback_name=root.name, manifest=manifest))
