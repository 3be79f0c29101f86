"""Descriptive architecture inventory of a Laravel project.

Nothing here is graded: the inventory counts and lists what exists and
renders it as Markdown.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..models import CodebaseFacts, SourceUnit
from ..scanning import FileWalker
from .laravel import (
    ComposerInfo,
    MigrationInfo,
    RouteDefinition,
    discover_routes,
    inspect_migration,
    project_name,
    read_composer,
    top_level_array_keys,
)

# layer -> component -> glob; "Routes" is counted from parsed route definitions
LAYERS = {
    "Presentation": {
        "Controllers": "app/Http/Controllers/**/*.php",
        "Views": "resources/views/**/*.blade.php",
        "Routes": None,
        "Middleware": "app/Http/Middleware/*.php",
    },
    "Business Logic": {
        "Services": "app/Services/**/*.php",
        "Repositories": "app/Repositories/**/*.php",
        "Traits": "app/Traits/**/*.php",
        "Interfaces": "app/Interfaces/**/*.php",
    },
    "Data Access": {
        "Models": "app/Models/**/*.php",
        "Migrations": "database/migrations/*.php",
        "Seeders": "database/seeders/*.php",
        "Factories": "database/factories/*.php",
    },
    "Infrastructure": {
        "Commands": "app/Console/Commands/**/*.php",
        "Providers": "app/Providers/*.php",
        "Events": "app/Events/*.php",
        "Listeners": "app/Listeners/*.php",
    },
}

MODULE_COMPONENTS = {
    "controllers": "Http/Controllers/*.php",
    "models": "Models/*.php",
    "services": "Services/*.php",
    "routes": "Routes/*.php",
    "views": "Views/*.blade.php",
    "migrations": "Database/Migrations/*.php",
    "providers": "Providers/*.php",
}

_SKIP = ["vendor/*", "node_modules/*"]


@dataclass(frozen=True)
class ComponentInfo:
    """A service, controller, model or middleware class."""

    name: str
    namespace: str
    file: str
    methods: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    interfaces: tuple[str, ...] = ()
    traits: tuple[str, ...] = ()

    @classmethod
    def from_unit(cls, unit: SourceUnit) -> "ComponentInfo":
        ctor = unit.constructor
        return cls(
            name=unit.name,
            namespace=unit.namespace,
            file=unit.file,
            methods=tuple(m.name for m in unit.public_methods),
            dependencies=tuple(p.type_hint or p.name for p in ctor.parameters) if ctor else (),
            interfaces=unit.interfaces,
            traits=unit.traits,
        )


@dataclass
class ArchitectureInventory:
    name: str
    timestamp: str
    composer: Optional[ComposerInfo] = None
    layers: dict[str, dict[str, int]] = field(default_factory=dict)
    modules: dict[str, dict[str, int]] = field(default_factory=dict)
    services: list[ComponentInfo] = field(default_factory=list)
    controllers: list[ComponentInfo] = field(default_factory=list)
    models: list[ComponentInfo] = field(default_factory=list)
    middleware: list[ComponentInfo] = field(default_factory=list)
    routes: list[RouteDefinition] = field(default_factory=list)
    migrations: list[MigrationInfo] = field(default_factory=list)
    configuration: dict[str, list[str]] = field(default_factory=dict)

    @property
    def tables(self) -> list[str]:
        seen: list[str] = []
        for migration in self.migrations:
            for table in migration.tables:
                if table not in seen:
                    seen.append(table)
        return seen


def _components(facts: CodebaseFacts, directory: str) -> list[ComponentInfo]:
    return [
        ComponentInfo.from_unit(unit)
        for unit in facts.classes
        if unit.file.startswith(directory)
    ]


def build_inventory(root: Path, facts: CodebaseFacts) -> ArchitectureInventory:
    """Collect the inventory for the project at ``root``.

    ``facts`` supplies parsed classes; everything else is read directly from
    Laravel's conventional directories.
    """
    root = Path(root)
    walker = FileWalker(root, _SKIP)
    composer = read_composer(root)
    routes = discover_routes(root)

    layers = {}
    for layer, components in LAYERS.items():
        layers[layer] = {
            component: len(routes) if pattern is None else len(walker.walk([pattern]))
            for component, pattern in components.items()
        }

    modules = {}
    modules_dir = root / "app" / "Modules"
    if modules_dir.is_dir():
        for module in sorted(p for p in modules_dir.iterdir() if p.is_dir()):
            prefix = f"app/Modules/{module.name}/"
            modules[module.name] = {
                label: len(walker.walk([prefix + pattern]))
                for label, pattern in MODULE_COMPONENTS.items()
            }

    migrations = [
        inspect_migration(walker.read(path), walker.relative(path))
        for path in walker.walk(["database/migrations/*.php"])
    ]
    configuration = {
        path.stem: top_level_array_keys(walker.read(path))
        for path in walker.walk(["config/*.php"])
    }

    return ArchitectureInventory(
        name=project_name(root, composer),
        timestamp=datetime.now().isoformat(timespec="seconds"),
        composer=composer,
        layers=layers,
        modules=modules,
        services=_components(facts, "app/Services/"),
        controllers=_components(facts, "app/Http/Controllers/"),
        models=_components(facts, "app/Models/"),
        middleware=_components(facts, "app/Http/Middleware/"),
        routes=routes,
        migrations=migrations,
        configuration=configuration,
    )


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------


def _component_section(title: str, components: list[ComponentInfo], detailed: bool) -> list[str]:
    lines = [f"## {title}", "", f"**Total {title}**: {len(components)}", ""]
    if not components:
        return lines
    if not detailed:
        lines.extend(f"- `{c.name}`" for c in components)
        lines.append("")
        return lines
    for component in components:
        lines.extend([f"### {component.name}", ""])
        if component.namespace:
            lines.append(f"- **Namespace**: `{component.namespace}`")
        lines.append(f"- **File**: `{component.file}`")
        if component.dependencies:
            lines.append(f"- **Dependencies**: {', '.join(component.dependencies)}")
        if component.interfaces:
            lines.append(f"- **Implements**: {', '.join(component.interfaces)}")
        if component.traits:
            lines.append(f"- **Traits**: {', '.join(component.traits)}")
        if component.methods:
            lines.append(f"- **Public methods**: {', '.join(f'`{m}`' for m in component.methods)}")
        lines.append("")
    return lines


def render_architecture(inventory: ArchitectureInventory, detailed: bool = False) -> str:
    """Markdown architecture document; ``detailed`` adds per-component listings."""
    composer = inventory.composer
    lines = [
        f"# {inventory.name} - Architecture Documentation",
        "",
        f"**Generated**: {inventory.timestamp}",
        "",
        "## Overview",
        "",
        f"- **Name**: {inventory.name}",
    ]
    if composer:
        if composer.description:
            lines.append(f"- **Description**: {composer.description}")
        if composer.php_version:
            lines.append(f"- **PHP Version**: {composer.php_version}")
        if composer.laravel_version:
            lines.append(f"- **Framework**: Laravel {composer.laravel_version}")
    lines.append("")

    lines.extend(["## Architecture Layers", ""])
    for layer, components in inventory.layers.items():
        lines.extend([f"### {layer}", "", "| Component | Count |", "|-----------|-------|"])
        lines.extend(f"| {component} | {count} |" for component, count in components.items())
        lines.append("")

    lines.extend(["## Modules", "", f"**Total Modules**: {len(inventory.modules)}", ""])
    if inventory.modules:
        labels = list(MODULE_COMPONENTS)
        lines.append("| Module | " + " | ".join(label.title() for label in labels) + " |")
        lines.append("|--------|" + "|".join("---" for _ in labels) + "|")
        for module, counts in inventory.modules.items():
            lines.append(f"| {module} | " + " | ".join(str(counts[label]) for label in labels) + " |")
        lines.append("")

    lines.extend(_component_section("Services", inventory.services, detailed))
    lines.extend(_component_section("Controllers", inventory.controllers, detailed))
    lines.extend(_component_section("Models", inventory.models, detailed))

    lines.extend(["## Routes", "", f"**Total Routes**: {len(inventory.routes)}", ""])
    if inventory.routes:
        if detailed:
            lines.extend(["| Method | URI | Action | Name |", "|--------|-----|--------|------|"])
            for route in inventory.routes:
                lines.append(f"| {route.method} | `/{route.uri}` | {route.action} | {route.name or '-'} |")
        else:
            by_method: dict[str, int] = {}
            for route in inventory.routes:
                by_method[route.method] = by_method.get(route.method, 0) + 1
            lines.extend(f"- {method}: {count}" for method, count in sorted(by_method.items()))
        lines.append("")

    lines.extend(_component_section("Middleware", inventory.middleware, detailed))

    lines.extend(["## Database", "", f"**Total Migrations**: {len(inventory.migrations)}", ""])
    if inventory.tables:
        lines.append(f"**Tables**: {', '.join(f'`{t}`' for t in inventory.tables)}")
        lines.append("")
    if detailed and inventory.migrations:
        lines.extend(["| Migration | Operations |", "|-----------|------------|"])
        for migration in inventory.migrations:
            ops = ", ".join(f"{op} `{table}`" for op, table in migration.operations) or "-"
            lines.append(f"| {migration.name} | {ops} |")
        lines.append("")

    lines.extend(["## Configuration", "", f"**Total Config Files**: {len(inventory.configuration)}", ""])
    for name, keys in inventory.configuration.items():
        if detailed and keys:
            lines.append(f"- `{name}`: {', '.join(keys)}")
        else:
            lines.append(f"- `{name}`")
    if inventory.configuration:
        lines.append("")

    lines.extend(["## Dependencies", ""])
    if composer is None:
        lines.extend(["No composer.json found.", ""])
    else:
        for title, packages in (("Production", composer.require), ("Development", composer.require_dev)):
            if not packages:
                continue
            lines.extend([f"### {title}", "", "| Package | Version |", "|---------|---------|"])
            lines.extend(f"| {package} | {version} |" for package, version in packages.items())
            lines.append("")

    return "\n".join(lines).rstrip() + "\n"
