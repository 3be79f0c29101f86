"""API reference generated from routes, controllers and Eloquent models."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path

from ..formatters import html_page
from ..logging_config import get_logger
from ..models import CodebaseFacts, SourceUnit
from .laravel import (
    ModelInfo,
    RouteDefinition,
    discover_routes,
    inspect_model,
    is_model,
    project_name,
    read_composer,
)

logger = get_logger(__name__)

API_FORMATS = ("markdown", "json", "html")

ERROR_CODES = (
    (200, "Success"),
    (201, "Created"),
    (400, "Bad Request"),
    (401, "Unauthorized"),
    (403, "Forbidden"),
    (404, "Not Found"),
    (422, "Validation Error"),
    (429, "Too Many Requests"),
    (500, "Internal Server Error"),
)


@dataclass(frozen=True)
class ParameterDoc:
    name: str
    type: str
    required: bool


@dataclass(frozen=True)
class MethodDoc:
    name: str
    parameters: tuple[ParameterDoc, ...] = ()
    return_type: str = ""
    summary: str = ""
    routes: tuple[str, ...] = ()  # "GET api/users" for each route bound to the method


@dataclass(frozen=True)
class ControllerDoc:
    name: str
    namespace: str
    file: str
    summary: str = ""
    methods: tuple[MethodDoc, ...] = ()


@dataclass
class ApiDocumentation:
    title: str
    generated: str
    routes: list[RouteDefinition] = field(default_factory=list)
    controllers: list[ControllerDoc] = field(default_factory=list)
    models: list[ModelInfo] = field(default_factory=list)


def _is_controller(unit: SourceUnit) -> bool:
    return unit.is_class and (
        unit.file.startswith("app/Http/Controllers/") or unit.name.endswith("Controller")
    )


def _controller_doc(unit: SourceUnit, routes: list[RouteDefinition]) -> ControllerDoc:
    methods = []
    for method in unit.methods:
        if method.visibility != "public" or method.is_constructor:
            continue
        if method.is_magic and method.name != "__invoke":
            continue
        bound = tuple(
            f"{route.method} {route.uri}"
            for route in routes
            if route.controller == unit.name and route.handler == method.name
        )
        methods.append(
            MethodDoc(
                name=method.name,
                parameters=tuple(
                    ParameterDoc(p.name, p.type_hint or "mixed", not p.has_default)
                    for p in method.parameters
                ),
                return_type=method.return_type,
                summary=method.doc_summary,
                routes=bound,
            )
        )
    return ControllerDoc(unit.name, unit.namespace, unit.file, unit.doc_summary, tuple(methods))


def collect_api_documentation(root: Path, facts: CodebaseFacts) -> ApiDocumentation:
    """API routes, controllers and models of the project at ``root``.

    A route is part of the API when it lives in ``routes/api.php`` or its
    URI starts with ``api/``.
    """
    root = Path(root)
    routes = [route for route in discover_routes(root) if route.is_api]
    texts = {file_facts.path: file_facts.text for file_facts in facts.source_files}

    controllers = [_controller_doc(unit, routes) for unit in facts.classes if _is_controller(unit)]
    models = [inspect_model(unit, texts.get(unit.file, "")) for unit in facts.classes if is_model(unit)]
    logger.debug(
        f"API docs: {len(routes)} routes, {len(controllers)} controllers, {len(models)} models"
    )
    return ApiDocumentation(
        title=f"{project_name(root, read_composer(root))} API Documentation",
        generated=datetime.now().isoformat(timespec="seconds"),
        routes=routes,
        controllers=controllers,
        models=models,
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _route_section(route: RouteDefinition) -> list[str]:
    lines = [f"### {route.method} /{route.uri}", ""]
    if route.name:
        lines.extend([f"**Route Name**: `{route.name}`", ""])
    lines.extend([f"**Action**: `{route.action}`", ""])
    if route.middleware:
        lines.extend([f"**Middleware**: {', '.join(route.middleware)}", ""])

    lines.extend(["#### Parameters", ""])
    if route.parameters:
        lines.extend(
            [
                "| Parameter | Type | Required | Description |",
                "|-----------|------|----------|-------------|",
            ]
        )
        for name, required in route.parameters:
            lines.append(f"| {name} | string | {'Yes' if required else 'No'} | Route parameter |")
    else:
        lines.append("None")
    lines.append("")

    lines.extend(
        [
            "#### Example Request",
            "",
            "```bash",
            f"curl -X {route.method} \\",
            f"  'http://localhost/{route.uri}' \\",
            "  -H 'Authorization: Bearer {your-token}' \\",
            "  -H 'Accept: application/json'",
            "```",
            "",
            "#### Example Response",
            "",
            "```json",
            "{",
            '  "success": true,',
            '  "data": {},',
            '  "message": "Success"',
            "}",
            "```",
            "",
        ]
    )
    return lines


def _controller_section(controller: ControllerDoc) -> list[str]:
    lines = [f"### {controller.name}", ""]
    if controller.summary:
        lines.extend([controller.summary, ""])
    for method in controller.methods:
        params = ", ".join(f"{p.type} ${p.name}" for p in method.parameters)
        returns = f": {method.return_type}" if method.return_type else ""
        line = f"- `{method.name}({params}){returns}`"
        if method.summary:
            line += f" {method.summary}"
        if method.routes:
            line += f" ({'; '.join(method.routes)})"
        lines.append(line)
    if controller.methods:
        lines.append("")
    return lines


def _model_section(model: ModelInfo) -> list[str]:
    lines = [f"### {model.name}", ""]
    if model.doc_summary:
        lines.extend([model.doc_summary, ""])
    lines.extend([f"**Table**: `{model.table}`", ""])
    if model.fillable:
        lines.extend(["#### Fillable Fields", "", "| Field | Type |", "|-------|------|"])
        lines.extend(f"| {name} | {model.casts.get(name, 'string')} |" for name in model.fillable)
        lines.append("")
    if model.hidden:
        lines.extend([f"**Hidden**: {', '.join(model.hidden)}", ""])
    if model.relationships:
        lines.extend(
            [
                "#### Relationships",
                "",
                "| Relationship | Type | Related Model |",
                "|--------------|------|---------------|",
            ]
        )
        lines.extend(f"| {r.name} | {r.type} | {r.model or '-'} |" for r in model.relationships)
        lines.append("")
    if model.scopes:
        lines.extend([f"**Scopes**: {', '.join(model.scopes)}", ""])
    return lines


def render_api_markdown(doc: ApiDocumentation) -> str:
    lines = [
        f"# {doc.title}",
        "",
        f"Generated: {doc.generated}",
        "",
        "## Overview",
        "",
        f"This document describes {len(doc.routes)} API endpoints, "
        f"{len(doc.controllers)} controllers and {len(doc.models)} data models.",
        "",
        "## Authentication",
        "",
        "Authenticated endpoints expect a bearer token:",
        "",
        "```",
        "Authorization: Bearer {your-token}",
        "```",
        "",
        "## Rate Limiting",
        "",
        "API requests are rate limited to prevent abuse:",
        "",
        "- **Authenticated requests**: 60 requests per minute",
        "- **Unauthenticated requests**: 30 requests per minute",
        "",
        "## Endpoints",
        "",
    ]
    if not doc.routes:
        lines.extend(["No API routes found.", ""])
    for route in doc.routes:
        lines.extend(_route_section(route))

    if doc.controllers:
        lines.extend(["## Controllers", ""])
        for controller in doc.controllers:
            lines.extend(_controller_section(controller))

    lines.extend(["## Data Models", ""])
    if not doc.models:
        lines.extend(["No models found.", ""])
    for model in doc.models:
        lines.extend(_model_section(model))

    lines.extend(["## Error Codes", "", "| Code | Description |", "|------|-------------|"])
    lines.extend(f"| {code} | {description} |" for code, description in ERROR_CODES)
    return "\n".join(lines) + "\n"


def render_api_documentation(doc: ApiDocumentation, output_format: str = "markdown") -> str:
    """Render ``doc`` as markdown, json or html.

    Raises:
        ValueError: If output_format is not recognized
    """
    if output_format == "markdown":
        return render_api_markdown(doc)
    if output_format == "json":
        return json.dumps(asdict(doc), indent=2)
    if output_format == "html":
        return html_page(doc.title, render_api_markdown(doc))
    raise ValueError(f"Unknown format: {output_format!r}. Choose from: {', '.join(API_FORMATS)}")
