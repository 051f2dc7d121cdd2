"""
Ant Design adapter.

Resolves prefixed node types (AntdButton, AntdFormItem, ...) through an
explicit table. Unprefixed types are not definite and fall through to
the next adapter.
"""

from mirkit.adapters.base import AdapterResolution, ImportKind, ImportSpec
from mirkit.adapters.react import unknown_component
from mirkit.specs.canonical import CanonicalNode

ANTD_PACKAGE = "antd"
UNKNOWN_ANTD_COMPONENT = "REACT_ADAPTER_UNKNOWN_ANTD_COMPONENT"

# bare type -> (element, imported name)
ANTD_COMPONENTS: dict[str, tuple[str, str]] = {
    "Button": ("Button", "Button"),
    "Input": ("Input", "Input"),
    "Modal": ("Modal", "Modal"),
    "FormItem": ("Form.Item", "Form"),
}


class AntdAdapter:
    def __init__(
        self,
        type_prefix: str = "Antd",
        components: dict[str, tuple[str, str]] | None = None,
    ):
        self.type_prefix = type_prefix
        self.components = dict(ANTD_COMPONENTS if components is None else components)
        self.id = f"react-antd-{type_prefix.lower()}"

    def resolve_node(self, node: CanonicalNode) -> AdapterResolution | None:
        if not node.type.startswith(self.type_prefix):
            return None
        bare = node.type[len(self.type_prefix) :]
        if bare in self.components:
            element, imported = self.components[bare]
            return AdapterResolution(
                element=element,
                imports=[ImportSpec(kind=ImportKind.NAMED, source=ANTD_PACKAGE, imported=imported)],
                adapter_id=self.id,
            )
        known = ", ".join(f"{self.type_prefix}{name}" for name in self.components)
        return unknown_component(
            node,
            UNKNOWN_ANTD_COMPONENT,
            f'No Ant Design mapping found for "{node.type}".',
            f"Use one of {known} or extend the Ant Design adapter table.",
            self.id,
        )


def create_antd_adapter(type_prefix: str = "Antd") -> AntdAdapter:
    return AntdAdapter(type_prefix=type_prefix)
