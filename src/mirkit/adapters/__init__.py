"""
Adapter resolution.

Maps canonical nodes to target elements and imports.
"""

from mirkit.adapters.antd import AntdAdapter, create_antd_adapter
from mirkit.adapters.base import (
    VOID_ELEMENTS,
    AdapterResolution,
    ImportKind,
    ImportSpec,
    TargetAdapter,
)
from mirkit.adapters.icons import (
    IconAdapter,
    IconProvider,
    IconProviderRegistry,
    IconProviderStatus,
    IconRef,
    create_default_icon_registry,
    create_lucide_provider,
)
from mirkit.adapters.packages import DependencyStrategy, resolve_package_import
from mirkit.adapters.react import ReactAdapter, react_adapter
from mirkit.adapters.registry import ComponentDescriptor, ComponentRegistry, RegistryGroup

__all__ = [
    "AdapterResolution",
    "ImportKind",
    "ImportSpec",
    "TargetAdapter",
    "VOID_ELEMENTS",
    "ReactAdapter",
    "react_adapter",
    "AntdAdapter",
    "create_antd_adapter",
    "ComponentDescriptor",
    "ComponentRegistry",
    "RegistryGroup",
    "IconRef",
    "IconProvider",
    "IconProviderRegistry",
    "IconProviderStatus",
    "IconAdapter",
    "create_default_icon_registry",
    "create_lucide_provider",
    "DependencyStrategy",
    "resolve_package_import",
]
