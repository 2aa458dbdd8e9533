"""
Unit tests for naming helpers, literal encoding and codegen fragments.
"""

import json

from truthgen import fragments as frag
from truthgen.spec import MetricDefinition


class TestNaming:
    """Test case conversion and label helpers."""

    def test_camel_case(self):
        assert frag.camel_case("status-in-progress") == "statusInProgress"
        assert frag.camel_case("TaskList") == "taskList"
        assert frag.camel_case("due_date") == "dueDate"

    def test_plural(self):
        assert frag.plural("task") == "tasks"
        assert frag.plural("category") == "categories"
        assert frag.plural("status") == "statuses"
        assert frag.plural("day") == "days"

    def test_collection_route(self):
        assert frag.collection_route("Task") == "/tasks"
        assert frag.collection_route("TodoItem") == "/todo-items"

    def test_field_label_capitalizes_first_character_only(self):
        assert frag.field_label("title") == "Title"
        assert frag.field_label("dueDate") == "DueDate"

    def test_option_label_strips_hyphens(self):
        assert frag.option_label("in-progress") == "In progress"
        assert frag.option_label("low") == "Low"

    def test_find_title_field(self, task_app):
        assert frag.find_title_field(task_app.entities["Task"]) == "title"
        assert frag.find_title_field(task_app.entities["User"]) == "name"

    def test_js_identifier(self):
        assert frag.js_identifier("priority-high") == "priorityHigh"
        assert frag.js_identifier("total") == "total"


class TestLiteralEncoding:
    """Test encoding values for the literal context they land in."""

    def test_js_string_escapes(self):
        assert frag.js_string("it's") == "'it\\'s'"
        assert frag.js_string("a\nb") == "'a\\nb'"
        assert frag.js_string("back\\slash") == "'back\\\\slash'"

    def test_js_literal(self):
        assert frag.js_literal(None) == "''"
        assert frag.js_literal(True) == "true"
        assert frag.js_literal(False) == "false"
        assert frag.js_literal(3) == "3"
        assert frag.js_literal("todo") == "'todo'"
        assert frag.js_literal(["a"]) == '["a"]'

    def test_html_text_escapes_markup_and_template_syntax(self):
        assert frag.html_text("<b>") == "&lt;b&gt;"
        assert frag.html_text("a`b") == "a\\`b"
        assert frag.html_text("${x}") == "\\${x}"

    def test_js_access(self):
        assert frag.js_access("item", "title") == "item.title"
        assert frag.js_access("item", "due-date") == "item['due-date']"

    def test_js_key(self):
        assert frag.js_key("status") == "status"
        assert frag.js_key("task-state") == "'task-state'"

    def test_query_key(self):
        assert frag.query_key("dueDate") == "dueDate"
        assert frag.query_key("due on&x") == "due%20on%26x"


class TestSubstituteTokens:
    """Test single-pass token substitution."""

    def test_replaces_every_occurrence(self):
        assert frag.substitute_tokens("__A__ and __A__", {"__A__": "x"}) == "x and x"

    def test_inserted_values_are_not_rescanned(self):
        text = "__TITLE__ / __ENTITY__"
        result = frag.substitute_tokens(text, {"__TITLE__": "About __ENTITY__", "__ENTITY__": "Task"})
        assert result == "About __ENTITY__ / Task"

    def test_longest_token_wins(self):
        text = "__ENTITY__ __ENTITY_LOWER__"
        result = frag.substitute_tokens(text, {"__ENTITY__": "Task", "__ENTITY_LOWER__": "task"})
        assert result == "Task task"

    def test_tokens_embedded_in_identifiers(self):
        assert frag.substitute_tokens("use__ENTITY__s()", {"__ENTITY__": "Task"}) == "useTasks()"

    def test_unknown_tokens_left_verbatim(self):
        assert frag.substitute_tokens("__A__ __B__", {"__A__": "a"}) == "a __B__"

    def test_empty_mapping(self):
        assert frag.substitute_tokens("__A__", {}) == "__A__"


class TestListFragments:
    """Test list view fragments."""

    def test_columns_config(self, scenario_task):
        config = json.loads(frag.columns_config(["title", "status"], scenario_task))
        assert config == [{"key": "title", "label": "Title"}, {"key": "status", "label": "Status"}]

    def test_filter_bar_empty_without_filters(self, scenario_task):
        assert frag.filter_bar([], scenario_task) == ""

    def test_filter_bar_lists_enum_options(self, scenario_task):
        block = frag.filter_bar(["status"], scenario_task)
        assert block.startswith("        <${FilterBar}")
        assert '{"value": "in-progress", "label": "In progress"}' in block

    def test_table_actions(self):
        block = frag.table_actions(["create", "edit", "delete"], "/tasks")
        lines = block.split("\n")
        assert len(lines) == 2
        assert "`/tasks/${item.id}/edit`" in lines[0]
        assert "handleDelete" in lines[1]
        assert all(line.startswith("    ") and line.endswith(",") for line in lines)

    def test_create_button_only_with_create_action(self):
        assert frag.create_button(["edit"], "/tasks", "Task") == ""
        assert "'/tasks/new'" in frag.create_button(["create"], "/tasks", "Task")


class TestFormFragments:
    """Test form view fragments."""

    def test_validation_rules_cover_required_fields_only(self, scenario_task):
        rules = frag.validation_rules(["title", "status", "priority"], scenario_task)
        assert "if (!formData.title) {" in rules
        assert "newErrors.status = 'Status is required'" in rules
        assert "priority" not in rules

    def test_component_per_field_type(self, task_entity):
        block = frag.form_field_components(["title", "status", "dueDate", "assignee"], task_entity)
        assert "<${Select}" in block
        assert '"label": "In progress"' in block
        assert "<${ReferenceSelect}" in block
        assert 'entityType="User"' in block
        assert 'type="date"' in block
        assert 'type="text"' in block

    def test_initial_form_state(self, task_entity):
        task_entity.fields["status"].default = "todo"
        state = frag.initial_form_state(["title", "status"], task_entity)
        assert state == "    title: '',\n    status: 'todo'"

    def test_submit_logic(self):
        assert frag.submit_logic("Task", False).strip() == "await createTask(processedData)"
        assert frag.submit_logic("Task", True).strip() == "await updateTask(id, processedData)"


class TestDashboardFragments:
    """Test dashboard metric fragments."""

    def test_metric_calculations(self):
        metrics = [
            MetricDefinition(key="total", title="Total"),
            MetricDefinition(key="status-done", title="Done", field="status", value="done"),
            MetricDefinition(key="overdue", title="Overdue", calculation="data.filter(isOverdue).length"),
            MetricDefinition(key="mystery", title="Mystery"),
        ]
        block = frag.metric_calculations(metrics)
        assert "const total" not in block
        assert "const statusDone = data.filter(item => item.status === 'done').length" in block
        assert "const overdue = data.filter(isOverdue).length" in block
        assert "const mystery = 0" in block

    def test_custom_metrics_skip_builtins(self):
        metrics = [MetricDefinition(key="total", title="T"), MetricDefinition(key="priority-high", title="H")]
        assert frag.custom_metrics(metrics) == "    priorityHigh,"

    def test_colliding_metric_keys_get_distinct_variables(self):
        metrics = [
            MetricDefinition(key="status-in-progress", title="A", field="status", value="in-progress"),
            MetricDefinition(key="status-in_progress", title="B", field="status", value="in_progress"),
        ]
        block = frag.metric_calculations(metrics)
        assert block.count("const statusInProgress ") == 1
        assert "const statusInProgress2 = data.filter(item => item.status === 'in_progress').length" in block
        assert frag.custom_metrics(metrics) == "    statusInProgress,\n    statusInProgress2,"
        assert "metrics.statusInProgress2 ?? 0" in frag.metric_widgets(metrics)

    def test_metric_keys_avoid_skeleton_locals_and_keywords(self):
        metrics = [
            MetricDefinition(key="data", title="Data", calculation="1"),
            MetricDefinition(key="last-week", title="Last week", calculation="2"),
            MetricDefinition(key="new", title="New", calculation="3"),
        ]
        assert [var for _, var in frag.metric_variables(metrics)] == ["data2", "lastWeek2", "new2"]
        block = frag.metric_calculations(metrics)
        assert "const data =" not in block
        assert "const data2 = 1" in block

    def test_builtin_metrics_keep_skeleton_variables(self):
        metrics = [MetricDefinition(key="total", title="T"), MetricDefinition(key="recent", title="R")]
        assert [var for _, var in frag.metric_variables(metrics)] == ["total", "recent"]
        assert "metrics.total ?? 0" in frag.metric_widgets(metrics)
