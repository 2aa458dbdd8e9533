"""
Unit tests for the template loader fallback chain.
"""

import pytest

from truthgen.templates import FALLBACK_TEMPLATES, TemplateContext, TemplateLoader


@pytest.fixture
def dirs(tmp_path):
    templates = tmp_path / "templates"
    static = tmp_path / "static"
    templates.mkdir()
    static.mkdir()
    return templates, static


@pytest.fixture
def context(task_app):
    return TemplateContext(
        view_name="TaskList",
        view=task_app.views["TaskList"],
        entity=task_app.entities["Task"],
        app=task_app,
    )


class TestResolutionOrder:
    """Test that the first matching tier wins."""

    def test_core_skeleton_is_raw_token_text(self, loader, context):
        text = loader.load_template("list", context)
        assert "__COLUMNS_CONFIG__" in text
        assert "export default function __VIEW_NAME__()" in text

    def test_app_template_overrides_skeleton(self, dirs, context):
        templates, static = dirs
        (templates / "list.template.js").write_text(
            "// {{ view_name }} for {{ entity.name | plural }}\n__COLUMNS_CONFIG__\n"
        )
        loader = TemplateLoader(templates, static)
        assert loader.load_template("list", context) == "// TaskList for Tasks\n__COLUMNS_CONFIG__\n"

    def test_broken_app_template_falls_through(self, dirs, context):
        templates, static = dirs
        (templates / "list.template.js").write_text("{% if %}")
        loader = TemplateLoader(templates, static)
        assert "__COLUMNS_CONFIG__" in loader.load_template("list", context)

    def test_app_template_runtime_error_falls_through(self, dirs, context):
        templates, static = dirs
        (templates / "list.template.js").write_text("{{ 1 + view.title }}")
        loader = TemplateLoader(templates, static)
        assert "__COLUMNS_CONFIG__" in loader.load_template("list", context)

    def test_static_markup_substitutes_variables(self, dirs, context):
        templates, static = dirs
        (static / "welcome.html").write_text(
            "<h1>{{name}}</h1><p>{{viewName}} at {{route}}</p><p>{{unknown}}</p>"
        )
        loader = TemplateLoader(templates, static)
        text = loader.load_template("welcome", context)
        assert text == "<h1>TaskApp</h1><p>TaskList at /tasks</p><p>{{unknown}}</p>"

    def test_context_values_win_over_view_and_app(self, dirs, task_app):
        templates, static = dirs
        (static / "page.html").write_text("{{name}}")
        ctx = TemplateContext(view_name="Page", app=task_app, values={"name": "Override"})
        assert TemplateLoader(templates, static).load_template("page", ctx) == "Override"

    def test_app_template_beats_static_markup(self, dirs, context):
        templates, static = dirs
        (templates / "page.template.js").write_text("app")
        (static / "page.html").write_text("static")
        assert TemplateLoader(templates, static).load_template("page", context) == "app"


class TestFallbacks:
    """Test built-in fallbacks when nothing else matches."""

    def test_about_fallback(self, loader, task_app):
        ctx = TemplateContext(view_name="About", app=task_app)
        text = loader.load_template("about", ctx)
        assert "export default function About()" in text
        assert "About TaskApp" in text
        assert "Track tasks" in text

    def test_help_fallback_lists_entity_routes(self, loader, task_app):
        ctx = TemplateContext(view_name="Help", app=task_app)
        text = loader.load_template("help", ctx)
        assert "Tasks: /tasks" in text
        assert "Users: /users" in text

    def test_generic_placeholder_uses_view_title(self, loader, task_app):
        view = task_app.views["TaskList"].model_copy(update={"title": "Reports"})
        ctx = TemplateContext(view_name="Reports", view=view, app=task_app)
        text = loader.load_template("does-not-exist", ctx)
        assert "<h1>Reports</h1>" in text
        assert "from '/runtime/ui.js'" in text

    def test_missing_directories_never_raise(self, tmp_path, context):
        loader = TemplateLoader(tmp_path / "nope", tmp_path / "nada")
        assert "__COLUMNS_CONFIG__" in loader.load_template("list", context)
        assert "export default function TaskList()" in loader.load_template("unknown-kind", context)

    def test_failing_fallback_uses_generic_placeholder(self, loader, task_app, monkeypatch):
        monkeypatch.setitem(FALLBACK_TEMPLATES, "about", "{{ 1 + view_name }}")
        ctx = TemplateContext(view_name="About", app=task_app)
        text = loader.load_template("about", ctx)
        assert "export default function About()" in text
        assert "This view has no template yet." in text


class TestDiscovery:
    """Test listing available templates."""

    def test_list_available_templates(self, dirs):
        templates, static = dirs
        (templates / "list.template.js").write_text("")
        (static / "landing.html").write_text("")
        available = TemplateLoader(templates, static).list_available_templates()
        assert available["app"] == ["list"]
        assert available["static"] == ["landing"]
        assert available["core"] == ["calendar", "dashboard", "detail", "form", "kanban", "list"]

    def test_from_resolver(self, resolver, project_dir):
        loader = TemplateLoader.from_resolver(resolver)
        assert loader.templates_dir == project_dir.resolve() / "app" / "templates"
        assert loader.static_dir == project_dir.resolve() / "app" / "static"
