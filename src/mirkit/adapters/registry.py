"""
Component registry.

Resolution consults registry groups in a fixed order: project custom
components, then library-specific adapters, then the native fallback.
Within a group, explicit type entries are checked before adapters. The
first definite resolution wins; if nothing is definite the node renders
as a passthrough element with a warning.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from mirkit.adapters.antd import AntdAdapter
from mirkit.adapters.base import AdapterResolution, ImportSpec, TargetAdapter
from mirkit.adapters.icons import IconAdapter, IconProviderRegistry, create_default_icon_registry
from mirkit.adapters.react import FALLBACK_ELEMENT, react_adapter
from mirkit.specs.canonical import CanonicalNode
from mirkit.specs.diagnostics import Diagnostic, DiagnosticSeverity, DiagnosticSource

logger = logging.getLogger(__name__)

UNRESOLVED_COMPONENT = "ADAPTER_COMPONENT_UNRESOLVED"


class RegistryGroup(str, Enum):
    CUSTOM = "custom"
    LIBRARY = "library"
    NATIVE = "native"


GROUP_ORDER: tuple[RegistryGroup, ...] = (
    RegistryGroup.CUSTOM,
    RegistryGroup.LIBRARY,
    RegistryGroup.NATIVE,
)


@dataclass(frozen=True)
class ComponentDescriptor:
    """
    Explicit mapping for one node type.

    Example:
        ComponentDescriptor(
            type="PricingCard",
            element="PricingCard",
            imports=(ImportSpec(kind=ImportKind.DEFAULT, source="./components/PricingCard",
                                local="PricingCard"),),
        )
    """

    type: str
    element: str
    imports: tuple[ImportSpec, ...] = ()
    omit_props: tuple[str, ...] = ()
    label: str | None = None


@dataclass
class _Group:
    descriptors: dict[str, ComponentDescriptor] = field(default_factory=dict)
    adapters: list[TargetAdapter] = field(default_factory=list)


class ComponentRegistry:
    """
    Ordered component resolution.

    Example:
        registry = ComponentRegistry.default()
        registry.register(ComponentDescriptor(type="Hero", element="Hero", imports=(...)))
        registry.resolve(node).element
    """

    def __init__(self) -> None:
        self._groups: dict[RegistryGroup, _Group] = {group: _Group() for group in GROUP_ORDER}

    @classmethod
    def default(cls, icons: IconProviderRegistry | None = None) -> "ComponentRegistry":
        """Registry with the icon and Ant Design adapters plus the native React fallback."""
        registry = cls()
        registry.add_adapter(IconAdapter(icons or create_default_icon_registry()), RegistryGroup.LIBRARY)
        registry.add_adapter(AntdAdapter(), RegistryGroup.LIBRARY)
        registry.add_adapter(react_adapter, RegistryGroup.NATIVE)
        return registry

    def register(
        self, descriptor: ComponentDescriptor, group: RegistryGroup = RegistryGroup.CUSTOM
    ) -> None:
        self._groups[group].descriptors[descriptor.type] = descriptor

    def register_many(
        self, descriptors: Iterable[ComponentDescriptor], group: RegistryGroup = RegistryGroup.CUSTOM
    ) -> None:
        for descriptor in descriptors:
            self.register(descriptor, group)

    def add_adapter(self, adapter: TargetAdapter, group: RegistryGroup = RegistryGroup.LIBRARY) -> None:
        self._groups[group].adapters.append(adapter)

    def get_descriptor(self, node_type: str) -> ComponentDescriptor | None:
        for group in GROUP_ORDER:
            descriptor = self._groups[group].descriptors.get(node_type)
            if descriptor is not None:
                return descriptor
        return None

    @property
    def icon_registry(self) -> IconProviderRegistry | None:
        for group in GROUP_ORDER:
            for adapter in self._groups[group].adapters:
                if isinstance(adapter, IconAdapter):
                    return adapter.registry
        return None

    def resolve(self, node: CanonicalNode) -> AdapterResolution:
        for group in GROUP_ORDER:
            entry = self._groups[group]
            descriptor = entry.descriptors.get(node.type)
            if descriptor is not None:
                return AdapterResolution(
                    element=descriptor.element,
                    imports=list(descriptor.imports),
                    omit_props=descriptor.omit_props,
                    adapter_id=f"registry-{group.value}",
                )
            for adapter in entry.adapters:
                resolution = adapter.resolve_node(node)
                if resolution is not None:
                    return resolution

        logger.debug("No adapter resolved %s (%s)", node.id, node.type)
        return AdapterResolution(
            element=FALLBACK_ELEMENT,
            fallback=True,
            diagnostics=[
                Diagnostic(
                    code=UNRESOLVED_COMPONENT,
                    severity=DiagnosticSeverity.WARNING,
                    source=DiagnosticSource.ADAPTER,
                    message=f'No adapter resolved component type "{node.type}".',
                    path=node.path,
                    suggestion="Register a component descriptor or adapter for this type.",
                )
            ],
        )
