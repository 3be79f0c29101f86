"""Regex-level introspection of Laravel project conventions.

Routes, Eloquent models, migrations, config files and composer metadata are
all recovered from source text. Nothing is executed, so dynamic route
registration or computed model attributes are invisible here.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..logging_config import get_logger
from ..models import SourceUnit
from ..scanning.lexer import LineIndex, mask_source, match_brace, match_paren

logger = get_logger(__name__)

HTTP_VERBS = ("get", "post", "put", "patch", "delete", "options", "any")

# Simple chained calls between Route:: and the verb, e.g. middleware('auth')->
_CHAIN = r"((?:\w+\s*\([^()]*\)\s*->\s*)*)"
_ROUTE = re.compile(r"\bRoute::" + _CHAIN + r"(" + "|".join(HTTP_VERBS) + r")\s*\(")
_RESOURCE = re.compile(
    r"\bRoute::" + _CHAIN + r"(apiResource|resource)\s*\(\s*(['\"])([^'\"]+)\3\s*,\s*([\w\\]+)::class"
)
_GROUP = re.compile(r"\bRoute::" + _CHAIN + r"group\s*\(")
_FIRST_STRING = re.compile(r"\s*(['\"])([^'\"]*)\1")
_ARRAY_ACTION = re.compile(r"\[\s*([\w\\]+)::class\s*,\s*['\"](\w+)['\"]\s*\]")
_STRING_ACTION = re.compile(r"['\"]([\w\\]+)@(\w+)['\"]")
_INVOKABLE_ACTION = re.compile(r"^\s*([\w\\]+)::class\s*$")
_ROUTE_NAME = re.compile(r"->\s*name\s*\(\s*['\"]([^'\"]+)['\"]")
_CHAIN_CALL = re.compile(r"(\w+)\s*\(([^()]*)\)")
_QUOTED = re.compile(r"['\"]([^'\"]+)['\"]")
_ARRAY_PREFIX = re.compile(r"['\"]prefix['\"]\s*=>\s*['\"]([^'\"]*)['\"]")
_ARRAY_MIDDLEWARE = re.compile(r"['\"]middleware['\"]\s*=>\s*(\[[^\]]*\]|['\"][^'\"]*['\"])")
_ROUTE_PARAMETER = re.compile(r"\{([^}]+)\}")

# action -> (verb, suffix); "{}" is replaced by the resource parameter
RESOURCE_ACTIONS = (
    ("index", "GET", ""),
    ("create", "GET", "/create"),
    ("store", "POST", ""),
    ("show", "GET", "/{}"),
    ("edit", "GET", "/{}/edit"),
    ("update", "PUT", "/{}"),
    ("destroy", "DELETE", "/{}"),
)
API_RESOURCE_SKIPS = ("create", "edit")

RELATION_TYPES = (
    "hasOne",
    "hasMany",
    "belongsTo",
    "belongsToMany",
    "hasOneThrough",
    "hasManyThrough",
    "morphTo",
    "morphOne",
    "morphMany",
    "morphToMany",
    "morphedByMany",
)
_RELATION = re.compile(
    r"function\s+(\w+)\s*\([^)]*\)[^{;]*\{\s*return\s+\$this\s*->\s*("
    + "|".join(RELATION_TYPES)
    + r")\s*\(\s*(?:([\w\\]+)::class)?"
)
_SCOPE = re.compile(r"function\s+scope([A-Z]\w*)\s*\(")
_TABLE = re.compile(r"(?:protected|public)\s+\$table\s*=\s*['\"]([^'\"]+)['\"]")
_ARRAY_PROPERTY = r"(?:protected|public)\s+\${name}\s*=\s*\[(.*?)\]\s*;"
_CASTS_METHOD = re.compile(r"function\s+casts\s*\([^)]*\)[^{]*\{\s*return\s*\[(.*?)\]\s*;", re.DOTALL)
_PAIR = re.compile(r"['\"]([^'\"]+)['\"]\s*=>\s*(?:['\"]([^'\"]+)['\"]|([\w\\]+)::class)")
_SCHEMA = re.compile(r"Schema::(create|table|drop|dropIfExists|rename)\s*\(\s*['\"]([^'\"]+)['\"]")
_ARRAY_KEY = re.compile(r"(['\"])([^'\"]+)\1\s*=>")

MODEL_BASES = ("Model", "Authenticatable", "Pivot")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RouteDefinition:
    method: str
    uri: str
    action: str  # "Controller@method" or "Closure"
    file: str
    line: int
    controller: str = ""
    handler: str = ""
    name: str = ""
    middleware: tuple[str, ...] = ()

    @property
    def parameters(self) -> list[tuple[str, bool]]:
        """Route parameters as (name, required)."""
        return [
            (raw.rstrip("?"), not raw.endswith("?"))
            for raw in _ROUTE_PARAMETER.findall(self.uri)
        ]

    @property
    def is_api(self) -> bool:
        return self.uri == "api" or self.uri.startswith("api/")


def join_uri(*parts: str) -> str:
    segments = [part.strip("/") for part in parts if part and part.strip("/")]
    return "/".join(segments)


def _short_name(name: str) -> str:
    return name.rsplit("\\", 1)[-1]


def _singular(word: str) -> str:
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("ses") or word.endswith("xes"):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def _chain_attributes(chain: str) -> tuple[str, list[str]]:
    """Prefix and middleware declared in a ``prefix(..)->middleware(..)->`` chain."""
    prefix = ""
    middleware: list[str] = []
    for call, args in _CHAIN_CALL.findall(chain):
        if call == "prefix":
            match = _QUOTED.search(args)
            if match:
                prefix = join_uri(prefix, match.group(1))
        elif call == "middleware":
            middleware.extend(_QUOTED.findall(args))
    return prefix, middleware


def _parse_action(raw: str) -> tuple[str, str]:
    for pattern in (_ARRAY_ACTION, _STRING_ACTION):
        match = pattern.search(raw)
        if match:
            return _short_name(match.group(1)), match.group(2)
    match = _INVOKABLE_ACTION.match(raw)
    if match:
        return _short_name(match.group(1)), "__invoke"
    return "", ""


@dataclass
class _Group:
    start: int
    end: int
    prefix: str
    middleware: list[str] = field(default_factory=list)


class RouteFileParser:
    """Extract route definitions from one ``routes/*.php`` file."""

    def __init__(self, text: str, path: str, base_prefix: str = ""):
        self.text = text
        self.path = path
        self.base_prefix = base_prefix
        self.masked = mask_source(text).masked
        self.lines = LineIndex(text)
        self.groups = self._find_groups()

    def _find_groups(self) -> list[_Group]:
        groups = []
        for match in _GROUP.finditer(self.text):
            if self.masked[match.start()] == " ":
                continue  # inside a comment or string
            open_paren = match.end() - 1
            close_paren = match_paren(self.masked, open_paren)
            if close_paren < 0:
                continue
            prefix, middleware = _chain_attributes(match.group(1))
            args = self.text[open_paren + 1 : close_paren]
            brace = self.masked.find("{", open_paren, close_paren)
            head = args if brace < 0 else self.text[open_paren + 1 : brace]
            array_prefix = _ARRAY_PREFIX.search(head)
            if array_prefix:
                prefix = join_uri(prefix, array_prefix.group(1))
            array_middleware = _ARRAY_MIDDLEWARE.search(head)
            if array_middleware:
                middleware.extend(_QUOTED.findall(array_middleware.group(1)))
            end = match_brace(self.masked, brace) if brace >= 0 else close_paren
            groups.append(_Group(brace if brace >= 0 else open_paren, end, prefix, middleware))
        return groups

    def _context(self, offset: int) -> tuple[str, list[str]]:
        prefix = self.base_prefix
        middleware: list[str] = []
        for group in self.groups:
            if group.start < offset < group.end:
                prefix = join_uri(prefix, group.prefix)
                middleware.extend(group.middleware)
        return prefix, middleware

    def _tail(self, close_paren: int) -> str:
        end = self.masked.find(";", close_paren)
        return self.text[close_paren + 1 : end if end >= 0 else len(self.text)]

    def parse(self) -> list[RouteDefinition]:
        routes = []
        for match in _ROUTE.finditer(self.text):
            if self.masked[match.start()] == " ":
                continue
            uri_match = _FIRST_STRING.match(self.text, match.end())
            close_paren = match_paren(self.masked, match.end() - 1)
            if uri_match is None or close_paren < 0:
                continue
            prefix, middleware = self._context(match.start())
            chain_prefix, chain_middleware = _chain_attributes(match.group(1))
            tail = self._tail(close_paren)
            name = _ROUTE_NAME.search(tail)
            for call, args in _CHAIN_CALL.findall(tail):
                if call == "middleware":
                    chain_middleware.extend(_QUOTED.findall(args))

            raw_action = self.text[uri_match.end() : close_paren].lstrip().lstrip(",")
            controller, handler = _parse_action(raw_action)
            routes.append(
                RouteDefinition(
                    method=match.group(2).upper(),
                    uri=join_uri(prefix, chain_prefix, uri_match.group(2)),
                    action=f"{controller}@{handler}" if controller else "Closure",
                    file=self.path,
                    line=self.lines.line_at(match.start()),
                    controller=controller,
                    handler=handler,
                    name=name.group(1) if name else "",
                    middleware=tuple(middleware + chain_middleware),
                )
            )

        for match in _RESOURCE.finditer(self.text):
            if self.masked[match.start()] == " ":
                continue
            routes.extend(self._expand_resource(match))

        routes.sort(key=lambda route: route.line)
        return routes

    def _expand_resource(self, match: re.Match) -> list[RouteDefinition]:
        prefix, middleware = self._context(match.start())
        chain_prefix, chain_middleware = _chain_attributes(match.group(1))
        resource = match.group(4)
        controller = _short_name(match.group(5))
        parameter = "{" + _singular(resource.rsplit(".", 1)[-1].rsplit("/", 1)[-1]) + "}"
        base = join_uri(prefix, chain_prefix, resource.replace(".", "/"))
        line = self.lines.line_at(match.start())
        routes = []
        for action, verb, suffix in RESOURCE_ACTIONS:
            if match.group(2) == "apiResource" and action in API_RESOURCE_SKIPS:
                continue
            routes.append(
                RouteDefinition(
                    method=verb,
                    uri=join_uri(base, suffix.format(parameter)),
                    action=f"{controller}@{action}",
                    file=self.path,
                    line=line,
                    controller=controller,
                    handler=action,
                    name=f"{resource}.{action}",
                    middleware=tuple(middleware + chain_middleware),
                )
            )
        return routes


def parse_routes(text: str, path: str, base_prefix: str = "") -> list[RouteDefinition]:
    return RouteFileParser(text, path, base_prefix).parse()


def discover_routes(root: Path) -> list[RouteDefinition]:
    """Every route declared under ``routes/``; ``routes/api.php`` gets the api prefix."""
    routes_dir = root / "routes"
    if not routes_dir.is_dir():
        return []
    routes = []
    for path in sorted(routes_dir.glob("*.php")):
        prefix = "api" if path.name == "api.php" else ""
        text = path.read_text(encoding="utf-8", errors="replace")
        routes.extend(parse_routes(text, path.relative_to(root).as_posix(), prefix))
    return routes


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Relationship:
    name: str
    type: str
    model: str = ""


@dataclass(frozen=True)
class ModelInfo:
    name: str
    namespace: str
    file: str
    table: str
    fillable: tuple[str, ...] = ()
    hidden: tuple[str, ...] = ()
    casts: dict = field(default_factory=dict)
    relationships: tuple[Relationship, ...] = ()
    scopes: tuple[str, ...] = ()
    traits: tuple[str, ...] = ()
    doc_summary: str = ""


def snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def pluralize(word: str) -> str:
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


def default_table(class_name: str) -> str:
    """Eloquent's conventional table name: snake case, last word pluralized."""
    snake = snake_case(class_name)
    head, _, last = snake.rpartition("_")
    return f"{head}_{pluralize(last)}" if head else pluralize(last)


def is_model(unit: SourceUnit) -> bool:
    return unit.is_class and unit.parent is not None and _short_name(unit.parent) in MODEL_BASES


def _string_list(text: str, name: str) -> tuple[str, ...]:
    match = re.search(_ARRAY_PROPERTY.format(name=name), text, re.DOTALL)
    return tuple(_QUOTED.findall(match.group(1))) if match else ()


def _casts(text: str) -> dict:
    match = re.search(_ARRAY_PROPERTY.format(name="casts"), text, re.DOTALL) or _CASTS_METHOD.search(text)
    if not match:
        return {}
    return {key: value or _short_name(cls) for key, value, cls in _PAIR.findall(match.group(1))}


def inspect_model(unit: SourceUnit, text: str) -> ModelInfo:
    """Eloquent attributes of ``unit``, read from its file text."""
    table = _TABLE.search(text)
    return ModelInfo(
        name=unit.name,
        namespace=unit.namespace,
        file=unit.file,
        table=table.group(1) if table else default_table(unit.name),
        fillable=_string_list(text, "fillable"),
        hidden=_string_list(text, "hidden"),
        casts=_casts(text),
        relationships=tuple(
            Relationship(name, kind, _short_name(model) if model else "")
            for name, kind, model in _RELATION.findall(text)
        ),
        scopes=tuple(name[:1].lower() + name[1:] for name in _SCOPE.findall(text)),
        traits=unit.traits,
        doc_summary=unit.doc_summary,
    )


# ---------------------------------------------------------------------------
# Migrations, config files, composer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MigrationInfo:
    name: str
    file: str
    operations: tuple[tuple[str, str], ...] = ()  # (operation, table)

    @property
    def tables(self) -> list[str]:
        seen = []
        for _, table in self.operations:
            if table not in seen:
                seen.append(table)
        return seen


def inspect_migration(text: str, path: str) -> MigrationInfo:
    return MigrationInfo(
        name=Path(path).stem,
        file=path,
        operations=tuple(_SCHEMA.findall(text)),
    )


def top_level_array_keys(text: str) -> list[str]:
    """Keys of the array a config file returns, outermost level only."""
    masked = mask_source(text).masked
    start = re.search(r"\breturn\s*\[", masked)
    if start is None:
        return []
    keys = []
    depth = 0
    cursor = start.end() - 1
    for match in _ARRAY_KEY.finditer(text, start.end()):
        for ch in masked[cursor : match.start()]:
            if ch in "[({":
                depth += 1
            elif ch in "])}":
                depth -= 1
        cursor = match.start()
        if depth < 1:
            break
        if masked[match.start()] == " ":
            continue  # commented out
        if depth == 1 and match.group(2) not in keys:
            keys.append(match.group(2))
    return keys


@dataclass(frozen=True)
class ComposerInfo:
    name: str = ""
    description: str = ""
    require: dict = field(default_factory=dict)
    require_dev: dict = field(default_factory=dict)

    @property
    def php_version(self) -> str:
        return self.require.get("php", "")

    @property
    def laravel_version(self) -> str:
        return self.require.get("laravel/framework", "")


def read_composer(root: Path) -> Optional[ComposerInfo]:
    """Parsed ``composer.json``, or None when absent or unreadable."""
    path = root / "composer.json"
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Cannot read {path}: {e}")
        return None
    if not isinstance(data, dict):
        return None
    return ComposerInfo(
        name=data.get("name", ""),
        description=data.get("description", ""),
        require=dict(data.get("require") or {}),
        require_dev=dict(data.get("require-dev") or {}),
    )


def project_name(root: Path, composer: Optional[ComposerInfo] = None) -> str:
    """Human readable project name from composer.json, else the directory name."""
    raw = composer.name if composer and composer.name else root.resolve().name
    raw = raw.rsplit("/", 1)[-1]
    return " ".join(part.capitalize() for part in re.split(r"[-_\s]+", raw) if part) or "Project"
