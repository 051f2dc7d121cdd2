"""
Default React adapter.

Maps the built-in component families onto React elements: MIR UI
components from @mdr/ui, Radix, Ant Design and MUI components, and plain
HTML tags. Anything else resolves to a passthrough element with a
warning.
"""

from mirkit.adapters.base import AdapterResolution, ImportKind, ImportSpec, is_html_tag
from mirkit.specs.canonical import CanonicalNode
from mirkit.specs.diagnostics import Diagnostic, DiagnosticSeverity, DiagnosticSource

MDR_UI_PACKAGE = "@mdr/ui"
FALLBACK_ELEMENT = "div"

UNKNOWN_COMPONENT = "REACT_ADAPTER_UNKNOWN_COMPONENT"
UNKNOWN_RADIX_COMPONENT = "REACT_ADAPTER_UNKNOWN_RADIX_COMPONENT"

# Explicit Radix mappings: type -> (element, namespace, package)
RADIX_COMPONENTS: dict[str, tuple[str, str, str]] = {
    "RadixLabel": ("Label.Root", "Label", "@radix-ui/react-label"),
    "RadixSeparator": ("Separator.Root", "Separator", "@radix-ui/react-separator"),
}


def unknown_component(
    node: CanonicalNode, code: str, message: str, suggestion: str, adapter_id: str
) -> AdapterResolution:
    return AdapterResolution(
        element=FALLBACK_ELEMENT,
        adapter_id=adapter_id,
        fallback=True,
        diagnostics=[
            Diagnostic(
                code=code,
                severity=DiagnosticSeverity.WARNING,
                source=DiagnosticSource.ADAPTER,
                message=message,
                path=node.path,
                suggestion=suggestion,
            )
        ],
    )


class ReactAdapter:
    """Native fallback adapter: always returns a definite resolution."""

    id = "react-default"

    def resolve_node(self, node: CanonicalNode) -> AdapterResolution:
        node_type = node.type
        if node_type == "container":
            return AdapterResolution(element="div", adapter_id=self.id)

        if node_type.startswith("Mdr"):
            return AdapterResolution(
                element=node_type,
                imports=[ImportSpec(kind=ImportKind.NAMED, source=MDR_UI_PACKAGE, imported=node_type)],
                adapter_id=self.id,
            )

        if node_type in RADIX_COMPONENTS:
            element, namespace, package = RADIX_COMPONENTS[node_type]
            return AdapterResolution(
                element=element,
                imports=[ImportSpec(kind=ImportKind.NAMESPACE, source=package, local=namespace)],
                adapter_id=self.id,
            )
        if node_type.startswith("Radix"):
            return unknown_component(
                node,
                UNKNOWN_RADIX_COMPONENT,
                f'No React adapter mapping found for "{node_type}".',
                "Add a mapping in the React adapter or register a custom component.",
                self.id,
            )

        if node_type.startswith("Antd"):
            bare = node_type[len("Antd") :]
            if bare == "FormItem":
                return AdapterResolution(
                    element="Form.Item",
                    imports=[ImportSpec(kind=ImportKind.NAMED, source="antd", imported="Form")],
                    adapter_id=self.id,
                )
            if bare:
                return AdapterResolution(
                    element=bare,
                    imports=[ImportSpec(kind=ImportKind.NAMED, source="antd", imported=bare)],
                    adapter_id=self.id,
                )

        if node_type.startswith("Mui"):
            bare = node_type[len("Mui") :]
            if bare:
                return AdapterResolution(
                    element=bare,
                    imports=[
                        ImportSpec(
                            kind=ImportKind.DEFAULT,
                            source=f"@mui/material/{bare}",
                            local=bare,
                        )
                    ],
                    adapter_id=self.id,
                )

        if is_html_tag(node_type):
            return AdapterResolution(element=node_type, adapter_id=self.id)

        return unknown_component(
            node,
            UNKNOWN_COMPONENT,
            f'No React adapter mapping found for "{node_type}".',
            "Register a custom component for this type.",
            self.id,
        )


react_adapter = ReactAdapter()
