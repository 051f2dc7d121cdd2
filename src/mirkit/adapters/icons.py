"""
Icon provider registry and icon adapter.

Providers are either registered ready (with a resolver) or registered as
an async loader that is run on the first `ensure_ready` call. Concurrent
`ensure_ready` calls for the same provider share one load. Observers are
notified on every state transition so a renderer can re-render once a
deferred provider becomes ready.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mirkit.adapters.base import AdapterResolution, ImportKind, ImportSpec
from mirkit.core.errors import IconProviderError
from mirkit.specs.canonical import CanonicalNode
from mirkit.specs.diagnostics import Diagnostic, DiagnosticSeverity, DiagnosticSource

logger = logging.getLogger(__name__)

ICON_NODE_TYPES = frozenset({"MdrIcon", "Icon"})
DEFERRED_ICON_ELEMENT = "span"

ICON_PROVIDER_PENDING = "ICON_PROVIDER_PENDING"
ICON_PROVIDER_UNKNOWN = "ICON_PROVIDER_UNKNOWN"
ICON_PROVIDER_FAILED = "ICON_PROVIDER_FAILED"
ICON_NOT_FOUND = "ICON_NOT_FOUND"

IconResolver = Callable[[str, str | None], str | None]


class IconRef(BaseModel):
    """
    Reference to an icon by provider and name.

    Example:
        IconRef(provider="lucide", name="arrow-right")
    """

    model_config = ConfigDict(frozen=True)

    provider: str = Field(description="Provider id")
    name: str = Field(description="Icon name within the provider")
    variant: str | None = Field(default=None, description="Optional style variant")


def parse_icon_ref(value: Any) -> IconRef | None:
    if not isinstance(value, Mapping):
        return None
    provider = value.get("provider")
    name = value.get("name")
    if not isinstance(provider, str) or not provider.strip():
        return None
    if not isinstance(name, str) or not name.strip():
        return None
    variant = value.get("variant")
    return IconRef(
        provider=provider, name=name, variant=variant if isinstance(variant, str) else None
    )


def normalize_provider_id(provider: str) -> str:
    return provider.strip().lower()


def to_pascal_case(value: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_\s]+", value) if part)


# =============================================================================
# Providers
# =============================================================================


class IconProviderStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass
class IconProvider:
    """A ready provider: resolves icon names to element names."""

    resolve: IconResolver
    label: str | None = None
    import_source: str | None = None
    list_icons: Callable[[], list[str]] | None = None


IconLoader = Callable[[], Awaitable[IconProvider]]


@dataclass
class _ProviderRecord:
    id: str
    label: str
    status: IconProviderStatus
    provider: IconProvider | None = None
    loader: IconLoader | None = None
    error: str | None = None


@dataclass(frozen=True)
class IconProviderState:
    id: str
    label: str
    status: IconProviderStatus
    error: str | None = None


@dataclass(frozen=True)
class IconResolution:
    status: IconProviderStatus | None
    element: str | None = None
    import_source: str | None = None

    @property
    def deferred(self) -> bool:
        return self.status in (IconProviderStatus.IDLE, IconProviderStatus.LOADING)


IconListener = Callable[[IconProviderState], None]


class IconProviderRegistry:
    """
    Registry of icon providers with async loading.

    Example:
        registry = IconProviderRegistry()
        registry.register_loader("phosphor", load_phosphor)
        registry.resolve(IconRef(provider="phosphor", name="house")).deferred  # True
        await registry.ensure_ready("phosphor")
    """

    def __init__(self) -> None:
        self._records: dict[str, _ProviderRecord] = {}
        self._inflight: dict[str, asyncio.Future[None]] = {}
        self._listeners: list[IconListener] = []

    def register(self, provider_id: str, provider: IconProvider) -> None:
        pid = normalize_provider_id(provider_id)
        if not pid:
            return
        self._records[pid] = _ProviderRecord(
            id=pid,
            label=provider.label or provider_id.strip(),
            status=IconProviderStatus.READY,
            provider=provider,
        )
        self._notify(pid)

    def register_loader(
        self, provider_id: str, loader: IconLoader, label: str | None = None
    ) -> None:
        pid = normalize_provider_id(provider_id)
        if not pid:
            return
        self._records[pid] = _ProviderRecord(
            id=pid,
            label=label or provider_id.strip(),
            status=IconProviderStatus.IDLE,
            loader=loader,
        )
        self._notify(pid)

    def get_state(self, provider_id: str) -> IconProviderState | None:
        record = self._records.get(normalize_provider_id(provider_id))
        if record is None:
            return None
        return IconProviderState(record.id, record.label, record.status, record.error)

    def list_providers(self) -> list[IconProviderState]:
        states = [IconProviderState(r.id, r.label, r.status, r.error) for r in self._records.values()]
        return sorted(states, key=lambda state: state.label.lower())

    def list_icons(self, provider_id: str) -> list[str]:
        record = self._records.get(normalize_provider_id(provider_id))
        if record is None or record.provider is None:
            return []
        if record.provider.list_icons is None:
            return []
        return list(record.provider.list_icons())

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: IconListener) -> Callable[[], None]:
        """Register a state-change listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, provider_id: str) -> None:
        state = self.get_state(provider_id)
        if state is None:
            return
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Icon provider listener failed for %s", provider_id)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def ensure_ready(self, provider_id: str) -> None:
        """
        Make a provider ready, loading it if needed.

        Concurrent callers await the same load. A failed load leaves the
        provider in the error state; a later call retries it.

        Raises:
            IconProviderError: If the provider is unknown or its loader fails
        """
        pid = normalize_provider_id(provider_id)
        record = self._records.get(pid)
        if record is None:
            raise IconProviderError(f"Unknown icon provider '{provider_id}'")
        if record.status == IconProviderStatus.READY:
            return
        inflight = self._inflight.get(pid)
        if inflight is None:
            inflight = asyncio.ensure_future(self._load(record))
            self._inflight[pid] = inflight
        await inflight

    async def _load(self, record: _ProviderRecord) -> None:
        if record.loader is None:
            raise IconProviderError(f"Icon provider '{record.id}' has no loader")
        record.status = IconProviderStatus.LOADING
        record.error = None
        self._notify(record.id)
        logger.debug("Loading icon provider %s", record.id)
        try:
            provider = await record.loader()
        except Exception as e:
            record.status = IconProviderStatus.ERROR
            record.error = str(e)
            logger.warning("Icon provider %s failed to load: %s", record.id, e)
            self._notify(record.id)
            raise IconProviderError(f"Icon provider '{record.id}' failed to load: {e}") from e
        finally:
            self._inflight.pop(record.id, None)
        record.provider = provider
        if provider.label:
            record.label = provider.label
        record.status = IconProviderStatus.READY
        logger.debug("Icon provider %s ready", record.id)
        self._notify(record.id)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve(self, ref: IconRef) -> IconResolution:
        """Resolve without blocking; not-ready providers yield a deferred resolution."""
        record = self._records.get(normalize_provider_id(ref.provider))
        if record is None:
            return IconResolution(status=None)
        if record.status != IconProviderStatus.READY or record.provider is None:
            return IconResolution(status=record.status)
        element = record.provider.resolve(ref.name, ref.variant)
        return IconResolution(
            status=IconProviderStatus.READY,
            element=element,
            import_source=record.provider.import_source,
        )


def _resolve_lucide(name: str, variant: str | None) -> str | None:
    candidate = to_pascal_case(name.strip())
    return candidate or None


def create_lucide_provider() -> IconProvider:
    """Lucide icons, imported by PascalCase name from lucide-react."""
    return IconProvider(resolve=_resolve_lucide, label="Lucide", import_source="lucide-react")


def create_default_icon_registry() -> IconProviderRegistry:
    registry = IconProviderRegistry()
    registry.register("lucide", create_lucide_provider())
    return registry


# =============================================================================
# Adapter
# =============================================================================


def _icon_diagnostic(
    node: CanonicalNode, code: str, severity: DiagnosticSeverity, message: str
) -> Diagnostic:
    return Diagnostic(
        code=code,
        severity=severity,
        source=DiagnosticSource.ADAPTER,
        message=message,
        path=f"{node.path}.props.iconRef",
    )


class IconAdapter:
    """Resolves icon nodes through the provider registry."""

    id = "react-icon"

    def __init__(self, registry: IconProviderRegistry):
        self.registry = registry

    def resolve_node(self, node: CanonicalNode) -> AdapterResolution | None:
        if node.type not in ICON_NODE_TYPES:
            return None
        ref = parse_icon_ref(node.props.get("iconRef"))
        if ref is None:
            return None
        resolution = self.registry.resolve(ref)

        if resolution.status is None:
            return self._placeholder(
                node,
                ICON_PROVIDER_UNKNOWN,
                DiagnosticSeverity.WARNING,
                f"Icon provider '{ref.provider}' is not registered.",
            )
        if resolution.status == IconProviderStatus.ERROR:
            state = self.registry.get_state(ref.provider)
            reason = state.error if state else None
            return self._placeholder(
                node,
                ICON_PROVIDER_FAILED,
                DiagnosticSeverity.WARNING,
                f"Icon provider '{ref.provider}' failed to load: {reason}",
            )
        if resolution.deferred:
            return self._placeholder(
                node,
                ICON_PROVIDER_PENDING,
                DiagnosticSeverity.INFO,
                f"Icon provider '{ref.provider}' is not ready yet; rendering a placeholder.",
            )
        if not resolution.element:
            return self._placeholder(
                node,
                ICON_NOT_FOUND,
                DiagnosticSeverity.WARNING,
                f"Icon '{ref.name}' was not found in provider '{ref.provider}'.",
            )

        imports = []
        if resolution.import_source:
            imports.append(
                ImportSpec(
                    kind=ImportKind.NAMED,
                    source=resolution.import_source,
                    imported=resolution.element,
                )
            )
        return AdapterResolution(
            element=resolution.element,
            imports=imports,
            omit_props=("iconRef",),
            adapter_id=self.id,
        )

    def _placeholder(
        self, node: CanonicalNode, code: str, severity: DiagnosticSeverity, message: str
    ) -> AdapterResolution:
        return AdapterResolution(
            element=DEFERRED_ICON_ELEMENT,
            diagnostics=[_icon_diagnostic(node, code, severity, message)],
            omit_props=("iconRef",),
            adapter_id=self.id,
            fallback=True,
        )


def pending_icon_provider(node: CanonicalNode, registry: IconProviderRegistry) -> str | None:
    """Provider id an icon node is waiting on, if any."""
    if node.type not in ICON_NODE_TYPES:
        return None
    ref = parse_icon_ref(node.props.get("iconRef"))
    if ref is None:
        return None
    state = registry.get_state(ref.provider)
    if state and state.status in (IconProviderStatus.IDLE, IconProviderStatus.LOADING):
        return state.id
    return None
