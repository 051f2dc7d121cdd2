"""
Vite project scaffold for compiled components.

Wraps a compiled React component in a minimal Vite + TypeScript project:
package manifest, HTML entry, tsconfig, Vite config, bootstrap module
and the component itself as `src/App.tsx`.
"""

from __future__ import annotations

import json
import re

from mirkit.codegen.react_compiler import CompiledComponent

# =============================================================================
# Templates
# =============================================================================

REACT_VERSION = "^18.3.1"

DEV_DEPENDENCIES = {
    "@types/react": "^18.3.12",
    "@types/react-dom": "^18.3.1",
    "@vitejs/plugin-react": "^4.3.3",
    "typescript": "^5.6.3",
    "vite": "^5.4.10",
}

INDEX_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{title}</title>
  </head>
  <body>
    <div id="root"></div>
    <script type="module" src="/src/main.tsx"></script>
  </body>
</html>
"""

TSCONFIG = {
    "compilerOptions": {
        "target": "ES2020",
        "useDefineForClassFields": True,
        "lib": ["ES2020", "DOM", "DOM.Iterable"],
        "module": "ESNext",
        "skipLibCheck": True,
        "moduleResolution": "Bundler",
        "allowImportingTsExtensions": True,
        "resolveJsonModule": True,
        "isolatedModules": True,
        "noEmit": True,
        "jsx": "react-jsx",
        "strict": False,
    },
    "include": ["src"],
}

VITE_CONFIG_TS = """import { defineConfig } from 'vite';
import react from '@vitejs/plugin-react';

export default defineConfig({
  plugins: [react()],
});
"""

MAIN_TSX = """import React from 'react';
import ReactDOM from 'react-dom/client';
import App from './App';

ReactDOM.createRoot(document.getElementById('root')!).render(
  <React.StrictMode>
    <App />
  </React.StrictMode>
);
"""


def package_name(component_name: str) -> str:
    """npm-safe package name for a component: 'MyCard' -> 'mycard'."""
    name = re.sub(r"[^a-z0-9._-]+", "-", component_name.lower()).strip("-._")
    return name or "mdr-app"


class ViteProjectGenerator:
    """
    Generates a Vite project around one compiled component.

    Example:
        generator = ViteProjectGenerator(compiled)
        files = generator.generate_files()   # {"package.json": "...", "src/App.tsx": "..."}
    """

    def __init__(self, compiled: CompiledComponent):
        self.compiled = compiled

    def generate_package_json(self) -> str:
        """Generate package.json with the component's declared dependencies."""
        dependencies = {"react": REACT_VERSION, "react-dom": REACT_VERSION}
        for name, version in sorted(self.compiled.dependencies.items()):
            dependencies.setdefault(name, version)
        manifest = {
            "name": package_name(self.compiled.component_name),
            "private": True,
            "version": "0.1.0",
            "type": "module",
            "scripts": {"dev": "vite", "build": "tsc && vite build", "preview": "vite preview"},
            "dependencies": dependencies,
            "devDependencies": DEV_DEPENDENCIES,
        }
        return json.dumps(manifest, indent=2) + "\n"

    def generate_index_html(self) -> str:
        return INDEX_HTML_TEMPLATE.format(title=self.compiled.component_name)

    def generate_tsconfig(self) -> str:
        return json.dumps(TSCONFIG, indent=2) + "\n"

    def generate_vite_config(self) -> str:
        return VITE_CONFIG_TS

    def generate_main_tsx(self) -> str:
        return MAIN_TSX

    def generate_files(self) -> dict[str, str]:
        """All project files keyed by bundle-relative path, in bundle order."""
        files = {
            "package.json": self.generate_package_json(),
            "index.html": self.generate_index_html(),
            "tsconfig.json": self.generate_tsconfig(),
            "vite.config.ts": self.generate_vite_config(),
            "src/main.tsx": self.generate_main_tsx(),
            "src/App.tsx": self.compiled.code,
        }
        for css in self.compiled.mounted_css_files:
            files[f"src/{css.path}"] = css.content
        return files
