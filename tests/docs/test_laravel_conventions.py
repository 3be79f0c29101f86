"""Tests for docs/laravel.py - routes, models, migrations and config keys."""

import textwrap

import pytest

from php_insight.docs.laravel import (
    default_table,
    discover_routes,
    inspect_migration,
    inspect_model,
    is_model,
    parse_routes,
    project_name,
    read_composer,
    snake_case,
    top_level_array_keys,
)
from php_insight.scanning import parse_php


class TestRouteDiscovery:
    """Routes from the sample application's routes/ directory."""

    def test_all_routes(self, laravel_app):
        routes = discover_routes(laravel_app)
        assert len(routes) == 11
        assert [r.uri for r in routes if r.is_api] == ["api/users", "api/users/{id}", "api/users"]

    def test_api_route_details(self, laravel_app):
        index = discover_routes(laravel_app)[0]
        assert index.method == "GET"
        assert index.action == "UserController@index"
        assert index.name == "users.index"
        assert index.middleware == ("auth:sanctum",)
        assert index.file == "routes/api.php"
        assert index.line == 7

    def test_commented_route_ignored(self, laravel_app):
        assert all(route.method != "DELETE" or route.uri.startswith("posts") for route in discover_routes(laravel_app))

    def test_closure_route(self, laravel_app):
        web = [r for r in discover_routes(laravel_app) if r.file == "routes/web.php"]
        assert web[0].action == "Closure"
        assert web[0].method == "GET"

    def test_resource_expansion(self, laravel_app):
        web = [r for r in discover_routes(laravel_app) if r.controller == "PostController"]
        assert [(r.method, r.uri, r.handler) for r in web] == [
            ("GET", "posts", "index"),
            ("GET", "posts/create", "create"),
            ("POST", "posts", "store"),
            ("GET", "posts/{post}", "show"),
            ("GET", "posts/{post}/edit", "edit"),
            ("PUT", "posts/{post}", "update"),
            ("DELETE", "posts/{post}", "destroy"),
        ]
        assert web[3].name == "posts.show"

    def test_route_parameters(self):
        route = parse_routes("<?php\nRoute::get('/a/{id}/{slug?}', 'A@b');\n", "routes/web.php")[0]
        assert route.parameters == [("id", True), ("slug", False)]
        assert route.action == "A@b"

    def test_prefix_group_and_api_resource(self):
        text = textwrap.dedent(
            """\
            <?php
            Route::prefix('v1')->middleware('auth')->group(function () {
                Route::apiResource('photos', PhotoController::class);
            });
            Route::group(['prefix' => 'admin', 'middleware' => ['web', 'admin']], function () {
                Route::get('stats', StatsController::class);
            });
            """
        )
        routes = parse_routes(text, "routes/web.php")
        photos = [r for r in routes if r.controller == "PhotoController"]
        assert [r.handler for r in photos] == ["index", "store", "show", "update", "destroy"]
        assert photos[0].uri == "v1/photos"
        assert photos[0].middleware == ("auth",)
        stats = next(r for r in routes if r.controller == "StatsController")
        assert stats.uri == "admin/stats"
        assert stats.handler == "__invoke"
        assert stats.middleware == ("web", "admin")

    def test_no_routes_directory(self, tmp_path):
        assert discover_routes(tmp_path) == []


class TestModels:
    def _model(self, laravel_app, name):
        path = laravel_app / "app" / "Models" / f"{name}.php"
        text = path.read_text()
        unit = parse_php(text, f"app/Models/{name}.php")[0]
        return unit, inspect_model(unit, text)

    def test_user_model(self, laravel_app):
        unit, model = self._model(laravel_app, "User")
        assert is_model(unit)
        assert model.table == "users"
        assert model.fillable == ("name", "email", "password")
        assert model.hidden == ("password",)
        assert model.casts == {"email_verified_at": "datetime"}
        assert [(r.name, r.type, r.model) for r in model.relationships] == [("posts", "hasMany", "Post")]
        assert model.scopes == ("active",)
        assert model.traits == ("HasFactory",)
        assert model.doc_summary == "A registered user."

    def test_explicit_table(self, laravel_app):
        _, model = self._model(laravel_app, "Post")
        assert model.table == "blog_posts"
        assert [(r.name, r.type, r.model) for r in model.relationships] == [("author", "belongsTo", "User")]

    def test_service_is_not_a_model(self, laravel_app):
        text = (laravel_app / "app" / "Services" / "UserService.php").read_text()
        assert not is_model(parse_php(text)[0])

    @pytest.mark.parametrize(
        "name,table",
        [("User", "users"), ("BlogPost", "blog_posts"), ("Category", "categories"), ("Box", "boxes")],
    )
    def test_default_table(self, name, table):
        assert default_table(name) == table

    def test_snake_case(self):
        assert snake_case("UserProfile") == "user_profile"


class TestProjectFiles:
    """Migrations, config keys and composer metadata."""

    def test_migration(self, laravel_app):
        path = "database/migrations/2024_01_01_000000_create_users_table.php"
        migration = inspect_migration((laravel_app / path).read_text(), path)
        assert migration.name == "2024_01_01_000000_create_users_table"
        assert migration.operations == (("create", "users"), ("dropIfExists", "users"))
        assert migration.tables == ["users"]

    def test_config_keys(self, laravel_app):
        text = (laravel_app / "config" / "app.php").read_text()
        assert top_level_array_keys(text) == ["name", "env", "providers"]

    def test_config_without_return(self):
        assert top_level_array_keys("<?php\n$x = ['a' => 1];\n") == []

    def test_composer(self, laravel_app):
        composer = read_composer(laravel_app)
        assert composer.name == "acme/course-portal"
        assert composer.php_version == "^8.1"
        assert composer.laravel_version == "^10.0"
        assert composer.require_dev == {"phpunit/phpunit": "^10.0"}

    def test_invalid_composer(self, tmp_path):
        (tmp_path / "composer.json").write_text("{ not json")
        assert read_composer(tmp_path) is None

    def test_project_name(self, laravel_app):
        assert project_name(laravel_app, read_composer(laravel_app)) == "Course Portal"
        assert project_name(laravel_app) == "Laravel App"
