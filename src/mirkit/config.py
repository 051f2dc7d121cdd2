"""
mirkit configuration.

Configuration is loaded from mirkit.toml, or from the [tool.mirkit]
table of pyproject.toml when no mirkit.toml exists.

    [codegen]
    component_name = "Card"
    dependency_strategy = "esm-sh"
    export_type = "component"

    [codegen.package_versions]
    antd = "5.21.0"

    [render]
    render_mode = "tolerant"

    [resolver]
    max_depth = 12
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mirkit.adapters.packages import DEFAULT_ESM_SH_BASE_URL, DependencyStrategy
from mirkit.codegen.react_compiler import CompileOptions
from mirkit.core.errors import ConfigError, ErrorContext
from mirkit.core.resolver import DEFAULT_MAX_DEPTH
from mirkit.runtime.renderer import RenderMode
from mirkit.specs.bundle import BundleType

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "mirkit.toml"
PYPROJECT_FILENAME = "pyproject.toml"


class CodegenConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    component_name: str | None = Field(default=None, description="Generated component name")
    dependency_strategy: DependencyStrategy = Field(
        default=DependencyStrategy.WORKSPACE, description="How bare imports are resolved"
    )
    esm_sh_base_url: str = Field(default=DEFAULT_ESM_SH_BASE_URL, description="CDN base for esm-sh")
    package_versions: dict[str, str] = Field(default_factory=dict, description="Pinned versions")
    export_type: BundleType = Field(default=BundleType.PROJECT, description="Default bundle type")


class RenderConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    render_mode: RenderMode = Field(default=RenderMode.TOLERANT)
    require_selection_before_events: bool = Field(default=False)
    allow_external_props: bool = Field(default=True)


class ResolverConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, description="Reference recursion cap")


class MirkitConfig(BaseModel):
    """Complete mirkit configuration."""

    model_config = ConfigDict(extra="forbid")

    codegen: CodegenConfig = Field(default_factory=CodegenConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    def compile_options(self, **overrides: Any) -> CompileOptions:
        """CompileOptions from the [codegen] section; keyword overrides win."""
        values: dict[str, Any] = {
            "component_name": self.codegen.component_name,
            "dependency_strategy": self.codegen.dependency_strategy,
            "esm_sh_base_url": self.codegen.esm_sh_base_url,
            "package_versions": dict(self.codegen.package_versions),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return CompileOptions(**values)

    def render_options(self) -> dict[str, Any]:
        """Keyword options for LiveRenderer from the [render] and [resolver] sections."""
        return {
            "render_mode": self.render.render_mode,
            "require_selection_before_events": self.render.require_selection_before_events,
            "allow_external_props": self.render.allow_external_props,
            "max_depth": self.resolver.max_depth,
        }


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}", ErrorContext(source=str(path))) from e
    except OSError as e:
        raise ConfigError(f"Cannot read config: {e}", ErrorContext(source=str(path))) from e


def find_config(start: Path | None = None) -> Path | None:
    """Return mirkit.toml, or a pyproject.toml with a [tool.mirkit] table, in `start`."""
    directory = Path(start) if start is not None else Path.cwd()
    candidate = directory / CONFIG_FILENAME
    if candidate.exists():
        return candidate
    pyproject = directory / PYPROJECT_FILENAME
    if pyproject.exists() and "mirkit" in _read_toml(pyproject).get("tool", {}):
        return pyproject
    return None


def load_config(path: Path | None = None) -> MirkitConfig:
    """
    Load mirkit configuration.

    Args:
        path: mirkit.toml or pyproject.toml; when omitted the current
            directory is searched

    Returns:
        MirkitConfig with values from the file, or defaults when there is none

    Raises:
        ConfigError: If the file is not valid TOML or has invalid values
    """
    if path is None:
        path = find_config()
        if path is None:
            return MirkitConfig()
    path = Path(path)
    if not path.exists():
        logger.debug("Config %s not found; using defaults", path)
        return MirkitConfig()

    data = _read_toml(path)
    if path.name == PYPROJECT_FILENAME:
        data = data.get("tool", {}).get("mirkit", {})

    try:
        config = MirkitConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(str(e), ErrorContext(source=str(path))) from e
    logger.debug("Loaded config from %s", path)
    return config
