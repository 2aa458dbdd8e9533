"""
Integration tests for batch generation and writing view modules.
"""

import pytest

from truthgen.config import RenderContext
from truthgen.errors import UnknownViewError, ViewConfigError
from truthgen.generator import ViewGeneratorRegistry, generate_view, generate_views, write_generated
from truthgen.spec import FieldType, ViewType
from truthgen.templates import TemplateLoader


class TestGenerateView:
    """Test generating a single view from an app schema."""

    def test_generate_view(self, task_app):
        text = generate_view(task_app, "TaskList")
        assert "export default function TaskList()" in text
        assert "useTasks()" in text

    def test_unknown_view(self, task_app):
        with pytest.raises(UnknownViewError):
            generate_view(task_app, "Ghost")

    def test_unknown_entity(self, task_app):
        task_app.views["TaskList"].entity = "Ghost"
        with pytest.raises(ViewConfigError, match="unknown entity 'Ghost'"):
            generate_view(task_app, "TaskList")

    def test_registry_shares_render_context(self, task_app):
        registry = ViewGeneratorRegistry(render=RenderContext(runtime_module="/x/ui.js"), app=task_app)
        assert "from '/x/ui.js'" in generate_view(task_app, "TaskBoard", registry)
        assert set(registry.kinds()) == set(ViewType)


class TestGenerateViews:
    """Test that one bad view never stops its siblings."""

    def test_all_views_generate(self, task_app):
        result = generate_views(task_app)
        assert result.success
        assert [f.view_name for f in result.files] == list(task_app.views)
        assert result.files[0].path == "TaskList.js"
        assert result.files[0].template == "list"

    def test_invalid_view_isolated(self, task_app):
        task_app.views["TaskCalendar"].date_field = "title"
        task_app.views["TaskBoard"].group_by = "priority"
        task_app.entities["Task"].fields["priority"].type = FieldType.STRING

        result = generate_views(task_app)

        assert not result.success
        assert len(result.files) == 5
        assert "TaskCalendar: Calendar dateField 'title' must be a date field" in result.errors
        assert "TaskBoard: Kanban groupBy field 'priority' must be an enum field" in result.errors

    def test_only(self, task_app):
        result = generate_views(task_app, only=["TaskDetail", "Ghost"])
        assert [f.view_name for f in result.files] == ["TaskDetail"]
        assert result.errors == ["View 'Ghost' not found in schema"]

    def test_internal_errors_propagate(self, task_app):
        class ExplodingLoader(TemplateLoader):
            def load_template(self, name, context):
                raise RuntimeError("boom")

        registry = ViewGeneratorRegistry(loader=ExplodingLoader(), app=task_app)
        with pytest.raises(RuntimeError, match="boom"):
            generate_views(task_app, registry=registry)

    def test_missing_generator_is_not_a_config_error(self, task_app):
        registry = ViewGeneratorRegistry(app=task_app)
        registry._generators.pop(ViewType.KANBAN)
        with pytest.raises(LookupError, match="kanban") as exc_info:
            generate_views(task_app, registry=registry)
        assert not isinstance(exc_info.value, ViewConfigError)


class TestWriteGenerated:
    """Test materializing modules without clobbering edits."""

    def test_writes_modules(self, task_app, resolver):
        result = write_generated(generate_views(task_app, only=["TaskList"]), resolver)
        target = resolver.get_view_output_path("TaskList")
        assert result.written == [str(target)]
        assert target.read_text(encoding="utf-8").startswith("// Generated TaskList Component")

    def test_existing_file_is_kept(self, task_app, resolver):
        target = resolver.get_view_output_path("TaskList")
        target.parent.mkdir(parents=True)
        target.write_text("// hand edited\n")

        result = write_generated(generate_views(task_app, only=["TaskList"]), resolver)

        assert result.skipped == [str(target)]
        assert result.written == []
        assert target.read_text() == "// hand edited\n"

    def test_overwrite(self, task_app, resolver):
        target = resolver.get_view_output_path("TaskList")
        target.parent.mkdir(parents=True)
        target.write_text("// hand edited\n")

        result = write_generated(generate_views(task_app, only=["TaskList"]), resolver, overwrite=True)

        assert result.written == [str(target)]
        assert "export default function TaskList()" in target.read_text()


class TestAppTemplateOverrides:
    """Test project templates flowing through generation."""

    def test_app_template_used_for_kind(self, task_app, resolver, project_dir):
        (project_dir / "app" / "templates" / "list.template.js").write_text(
            "// {{ app.name }} custom list\nexport default function __VIEW_NAME__() {}\n"
        )
        registry = ViewGeneratorRegistry(TemplateLoader.from_resolver(resolver), app=task_app)
        text = generate_view(task_app, "TaskList", registry)
        assert text == "// TaskApp custom list\nexport default function TaskList() {}\n"

    def test_static_custom_view(self, task_app, resolver, project_dir):
        (project_dir / "app" / "static" / "landing.html").write_text("<h1>{{name}} {{version}}</h1>\n")
        task_app.views["Landing"] = task_app.views["TaskList"].model_copy(
            update={"type": ViewType.CUSTOM, "entity": None, "template": "landing"}
        )
        registry = ViewGeneratorRegistry(TemplateLoader.from_resolver(resolver), app=task_app)
        assert generate_view(task_app, "Landing", registry) == "<h1>TaskApp 1.0.0</h1>\n"

    def test_failing_app_template_does_not_stop_batch(self, task_app, resolver, project_dir):
        (project_dir / "app" / "templates" / "kanban.template.js").write_text("{{ 1 + view.title }}\n")
        registry = ViewGeneratorRegistry(TemplateLoader.from_resolver(resolver), app=task_app)

        result = generate_views(task_app, registry=registry)

        assert result.success
        assert len(result.files) == len(task_app.views)
        board = next(f for f in result.files if f.view_name == "TaskBoard")
        assert "export default function TaskBoard()" in board.content
