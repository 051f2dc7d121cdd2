"""
Package import resolution.

Decides, per import specifier, what the generated code imports from and
whether the generated package.json must declare a dependency for it.
"""

import re
from dataclasses import dataclass
from enum import Enum


class DependencyStrategy(str, Enum):
    WORKSPACE = "workspace"
    NPM = "npm"
    ESM_SH = "esm-sh"


DEFAULT_ESM_SH_BASE_URL = "https://esm.sh"

_URL_PATTERN = re.compile(r"^https?://")


@dataclass(frozen=True)
class PackageResolution:
    import_source: str
    package_name: str | None
    package_version: str | None
    declare_dependency: bool


def is_bare_import(source: str) -> bool:
    return not (source.startswith(".") or source.startswith("/") or _URL_PATTERN.match(source))


def get_package_name(source: str) -> str | None:
    """
    Package name of a bare specifier.

    Example:
        get_package_name("@mui/material/Button")  # "@mui/material"
        get_package_name("antd/es/button")        # "antd"
        get_package_name("./Local")               # None
    """
    if not is_bare_import(source):
        return None
    segments = source.split("/")
    if source.startswith("@"):
        return "/".join(segments[:2]) if len(segments) >= 2 else source
    return segments[0]


def resolve_package_import(
    source: str,
    strategy: DependencyStrategy = DependencyStrategy.WORKSPACE,
    esm_sh_base_url: str = DEFAULT_ESM_SH_BASE_URL,
    package_versions: dict[str, str] | None = None,
) -> PackageResolution:
    package_name = get_package_name(source)
    version = (package_versions or {}).get(package_name) if package_name else None

    if package_name is None:
        return PackageResolution(source, None, None, declare_dependency=False)

    if strategy == DependencyStrategy.ESM_SH:
        base = esm_sh_base_url.rstrip("/")
        subpath = source[len(package_name) :]
        pinned = f"{package_name}@{version}" if version else package_name
        return PackageResolution(
            f"{base}/{pinned}{subpath}", package_name, version, declare_dependency=False
        )

    return PackageResolution(source, package_name, version, declare_dependency=True)
