"""
Codegen Fragments - literal source blocks for generated view modules

Each fragment is a pure function of (fields, entity) or similarly small
inputs and returns one concern's worth of JavaScript text, already
indented for the skeleton position it is spliced into. Fragments encode
values for the literal context they land in but do no validation; the
view generators validate before calling them.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from urllib.parse import quote

from markupsafe import escape

from truthgen.spec import EntityDefinition, FieldDefinition, FieldType, MetricDefinition, WidgetDefinition


# ═══════════════════════════════════════════════════════════════════════════
# NAMING HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def camel_case(s: str) -> str:
    """Convert to camelCase. Handles PascalCase and kebab-case input."""
    s = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s)
    parts = [p for p in re.split(r"[^A-Za-z0-9]+", s.replace("_", " ")) if p]
    if not parts:
        return ""
    return parts[0].lower() + "".join(p.capitalize() for p in parts[1:])


def pascal_case(s: str) -> str:
    """Convert to PascalCase."""
    parts = re.split(r"[-_\s]+", s)
    return "".join(p[0].upper() + p[1:] if p else "" for p in parts)


def kebab_case(s: str) -> str:
    """Convert to kebab-case."""
    s = re.sub(r"[\s_]+", "-", s)
    s = re.sub(r"([a-z])([A-Z])", r"\1-\2", s).lower()
    s = re.sub(r"-+", "-", s)
    return s.strip("-")


def plural(s: str) -> str:
    """Simple English pluralization."""
    if s.endswith("y") and not s.endswith(("ay", "ey", "iy", "oy", "uy")):
        return s[:-1] + "ies"
    if s.endswith(("s", "x", "ch", "sh")):
        return s + "es"
    return s + "s"


def field_label(name: str) -> str:
    """Default field label: first character upper-cased, rest untouched."""
    return name[:1].upper() + name[1:]


def option_label(value: str) -> str:
    """Default enum option label: hyphens become spaces, then capitalized."""
    label = value.replace("-", " ")
    return label[:1].upper() + label[1:]


def collection_route(entity_name: str) -> str:
    """Conventional collection route for an entity, e.g. Task -> /tasks."""
    return "/" + plural(kebab_case(entity_name))


TITLE_FIELD_CANDIDATES = ("title", "name", "subject", "description")


def find_title_field(entity: EntityDefinition) -> str:
    """First title-like field the entity declares, falling back to id."""
    for candidate in TITLE_FIELD_CANDIDATES:
        if candidate in entity.fields:
            return candidate
    return "id"


def is_title_like(name: str) -> bool:
    return name in ("title", "name")


# ═══════════════════════════════════════════════════════════════════════════
# LITERAL ENCODING
# ═══════════════════════════════════════════════════════════════════════════

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def js_string(value: object) -> str:
    """Single-quoted JavaScript string literal."""
    text = str(value)
    text = (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )
    return f"'{text}'"


def js_literal(value: object) -> str:
    """JavaScript literal for a schema default; None becomes an empty string."""
    if value is None:
        return "''"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return js_string(value)
    return json.dumps(value, sort_keys=True)


def js_json(value: object) -> str:
    """JSON literal usable as a JavaScript expression."""
    return json.dumps(value)


def js_access(obj: str, name: str) -> str:
    """Property access, bracketed when `name` is not an identifier."""
    if _IDENTIFIER.match(name):
        return f"{obj}.{name}"
    return f"{obj}[{js_string(name)}]"


def js_key(name: str) -> str:
    """Object-literal key, quoted when `name` is not an identifier."""
    if _IDENTIFIER.match(name):
        return name
    return js_string(name)


def query_key(name: str) -> str:
    """URL query parameter name, percent-encoded."""
    return quote(name, safe="")


def js_identifier(key: str) -> str:
    """Variable name for a free-form key, e.g. 'high-priority' -> highPriority."""
    name = camel_case(key)
    if not name or not _IDENTIFIER.match(name):
        name = "_" + re.sub(r"[^A-Za-z0-9_$]", "_", key)
    return name


def template_text(value: object) -> str:
    """Text safe inside a JS template literal (outside any ${} expression)."""
    return str(value).replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def html_text(value: object) -> str:
    """Markup text inside an html`` template literal."""
    return template_text(escape(str(value)))


# ═══════════════════════════════════════════════════════════════════════════
# TOKEN SUBSTITUTION
# ═══════════════════════════════════════════════════════════════════════════


def substitute_tokens(text: str, replacements: Mapping[str, str]) -> str:
    """
    Replace every token in one left-to-right pass.

    Inserted values are never rescanned, so a value containing another
    token's literal name stays as written. Longer tokens win when one is a
    prefix of another. Unknown tokens are left verbatim.
    """
    if not replacements:
        return text
    tokens = sorted(replacements, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(t) for t in tokens))
    return pattern.sub(lambda m: replacements[m.group(0)], text)


def _indent(block: str, spaces: int) -> str:
    pad = " " * spaces
    return "\n".join(pad + line if line else line for line in block.split("\n"))


def _field(entity: EntityDefinition, name: str) -> FieldDefinition:
    return entity.fields.get(name) or FieldDefinition()


# ═══════════════════════════════════════════════════════════════════════════
# LIST
# ═══════════════════════════════════════════════════════════════════════════


def columns_config(columns: Iterable[str], entity: EntityDefinition) -> str:
    """JSON array of table-column descriptors"""
    return js_json([{"key": col, "label": field_label(col)} for col in columns])


def table_actions(actions: Iterable[str], route: str) -> str:
    """Row actions: edit navigates to the edit route, delete confirms then deletes"""
    items = []
    if "edit" in actions:
        items.append(
            "{ label: 'Edit', onClick: (item) => window.location.href = "
            f"`{template_text(route.rstrip('/'))}/${{item.id}}/edit` }},"
        )
    if "delete" in actions:
        items.append("{ label: 'Delete', onClick: handleDelete },")
    return "\n".join(_indent(item, 4) for item in items)


def create_button(actions: Iterable[str], route: str, entity_name: str) -> str:
    if "create" not in actions:
        return ""
    return _indent(
        f"<${{Button}} onClick=${{() => window.location.href = {js_string(route.rstrip('/') + '/new')}}}>\n"
        f"  Add {html_text(entity_name)}\n"
        "</${Button}>",
        10,
    )


def filter_bar(filters: list[str], entity: EntityDefinition) -> str:
    """FilterBar element; empty when no filters are configured"""
    if not filters:
        return ""
    config = []
    for name in filters:
        field = _field(entity, name)
        options = []
        if field.type == FieldType.ENUM:
            options = [{"value": opt, "label": option_label(opt)} for opt in field.choices]
        config.append({"field": name, "label": field_label(name), "options": options})
    return _indent(
        "<${FilterBar}\n"
        f"  filters=${{{js_json(config)}}}\n"
        "  values=${filters}\n"
        "  onChange=${setFilters}\n"
        "  onClear=${() => setFilters({})}\n"
        '  className="mb-4"\n'
        "/>",
        8,
    )


# ═══════════════════════════════════════════════════════════════════════════
# DETAIL
# ═══════════════════════════════════════════════════════════════════════════


def detail_action_buttons(actions: Iterable[str], route: str) -> str:
    buttons = []
    if "edit" in actions:
        base = template_text(route.rstrip("/"))
        if ":id" in base:
            base = base.replace(":id", "${item.id}")
        else:
            base = base + "/${item.id}"
        buttons.append(
            f"<${{Button}} onClick=${{() => window.location.href = `{base}/edit`}}>\n"
            "  Edit\n"
            "</${Button}>"
        )
    if "delete" in actions:
        buttons.append(
            '<${Button} variant="danger" onClick=${handleDelete}>\n'
            "  Delete\n"
            "</${Button}>"
        )
    return "\n".join(_indent(b, 12) for b in buttons)


def field_displays(fields: Iterable[str], entity: EntityDefinition) -> str:
    """One labelled value per field, formatted by type at runtime"""
    blocks = []
    for name in fields:
        field_type = _field(entity, name).type.value
        blocks.append(
            '<div class="field-group">\n'
            '  <label class="form-label">\n'
            f"    {html_text(field_label(name))}\n"
            "  </label>\n"
            "  <div>\n"
            f"    ${{formatFieldValue({js_access('processedItem', name)}, {js_string(field_type)})}}\n"
            "  </div>\n"
            "</div>"
        )
    return "\n".join(_indent(b, 10) for b in blocks)


# ═══════════════════════════════════════════════════════════════════════════
# FORM
# ═══════════════════════════════════════════════════════════════════════════

_INPUT_TYPES = {
    FieldType.DATE: "date",
    FieldType.DATETIME: "datetime-local",
    FieldType.NUMBER: "number",
    FieldType.INTEGER: "number",
    FieldType.EMAIL: "email",
    FieldType.URL: "url",
}


def initial_form_state(fields: Iterable[str], entity: EntityDefinition) -> str:
    lines = [f"{js_string(name) if not _IDENTIFIER.match(name) else name}: "
             f"{js_literal(_field(entity, name).default)}" for name in fields]
    return ",\n".join(_indent(line, 4) for line in lines)


def validation_rules(fields: Iterable[str], entity: EntityDefinition) -> str:
    """Inline required checks, one per required field"""
    rules = []
    for name in fields:
        field = _field(entity, name)
        if not field.required:
            continue
        value = js_access("formData", name)
        if field.type in (FieldType.NUMBER, FieldType.INTEGER, FieldType.BOOLEAN):
            check = f"{value} === '' || {value} === null || {value} === undefined"
        else:
            check = f"!{value}"
        rules.append(
            f"if ({check}) {{\n"
            f"  {js_access('newErrors', name)} = {js_string(field_label(name) + ' is required')}\n"
            "}"
        )
    return "\n".join(_indent(rule, 4) for rule in rules)


def form_field_components(fields: Iterable[str], entity: EntityDefinition) -> str:
    """One input component per field, chosen by field type"""
    components = []
    for name in fields:
        field = _field(entity, name)
        common = (
            f'  label="{html_text(field_label(name))}"\n'
            f"  value=${{{js_access('formData', name)}}}\n"
            f"  onChange=${{(value) => updateField({js_string(name)}, value)}}\n"
            f"  required=${{{'true' if field.required else 'false'}}}\n"
            f"  error=${{{js_access('errors', name)}}}\n"
        )
        if field.type == FieldType.ENUM:
            options = [{"value": opt, "label": option_label(opt)} for opt in field.choices]
            components.append(
                "<${Select}\n"
                + common
                + f"  options=${{{js_json(options)}}}\n"
                "/>"
            )
        elif field.type == FieldType.RELATION:
            components.append(
                "<${ReferenceSelect}\n"
                + common
                + f'  entityType="{html_text(field.to or "")}"\n'
                + ("  multiple=${true}\n" if field.many else "")
                + "/>"
            )
        elif field.type == FieldType.BOOLEAN:
            components.append(
                "<${Input}\n"
                + common
                + '  type="checkbox"\n'
                "/>"
            )
        else:
            input_type = _INPUT_TYPES.get(field.type, "text")
            components.append(
                "<${Input}\n"
                + common
                + f'  type="{input_type}"\n'
                "/>"
            )
    return "\n".join(_indent(c, 12) for c in components)


def edit_mode_setup(entity_name: str) -> str:
    """Locate the record being edited from an /<collection>/:id/edit URL"""
    return _indent(
        "const pathParts = window.location.pathname.split('/')\n"
        "const id = pathParts[pathParts.length - 2]\n"
        "\n"
        f"const {{ data, loading: loadingData, error: loadError }} = use{entity_name}s()\n"
        "const existingItem = (data || []).find(d => d.id === id)",
        2,
    )


def edit_mode_effect(fields: Iterable[str], entity: EntityDefinition) -> str:
    """Pre-populate form state from the existing record"""
    assignments = ",\n".join(
        f"{js_string(name) if not _IDENTIFIER.match(name) else name}: "
        f"{js_access('existingItem', name)} ?? {js_literal(_field(entity, name).default)}"
        for name in fields
    )
    return _indent(
        "useEffect(() => {\n"
        "  if (existingItem) {\n"
        "    setFormData({\n"
        f"{_indent(assignments, 6)}\n"
        "    })\n"
        "  }\n"
        "}, [existingItem])\n"
        "\n"
        "if (loadingData) return html`<div class=\"loading\">Loading...</div>`\n"
        "if (loadError) return html`<div class=\"text-red\">Error: ${loadError.message}</div>`\n"
        f"if (!existingItem) return html`<div class=\"text-center\">{html_text(entity.name or 'Item')} not found</div>`",
        2,
    )


def submit_logic(entity_name: str, is_edit: bool) -> str:
    if is_edit:
        return _indent(f"await update{entity_name}(id, processedData)", 6)
    return _indent(f"await create{entity_name}(processedData)", 6)


# ═══════════════════════════════════════════════════════════════════════════
# KANBAN
# ═══════════════════════════════════════════════════════════════════════════


def kanban_columns(columns: Iterable[Mapping[str, str]]) -> str:
    return js_json([{"id": c["id"], "title": c["title"]} for c in columns])


def card_content(fields: Iterable[str], entity: EntityDefinition) -> str:
    """Card body: title-like fields get the prominent slot, others a labelled row"""
    blocks = []
    for name in fields:
        field = _field(entity, name)
        value = js_access("item", name)
        label = html_text(field_label(name))
        if is_title_like(name):
            blocks.append(f'<div class="card-title">${{{value}}}</div>')
            continue
        if field.type == FieldType.ENUM:
            rendered = f'<span class="field-value badge badge-${{{value}}}">${{{value}}}</span>'
        elif field.type in (FieldType.DATE, FieldType.DATETIME):
            rendered = f"<span class=\"field-value\">${{{value} ? new Date({value}).toLocaleDateString() : '-'}}</span>"
        else:
            rendered = f"<span class=\"field-value\">${{{value} ?? '-'}}</span>"
        blocks.append(
            '<div class="card-field">\n'
            f'  <span class="field-label">{label}:</span>\n'
            f"  {rendered}\n"
            "</div>"
        )
    return "\n".join(_indent(b, 18) for b in blocks)


# ═══════════════════════════════════════════════════════════════════════════
# CALENDAR
# ═══════════════════════════════════════════════════════════════════════════


def event_class(color_field: str | None) -> str:
    if not color_field:
        return "event-default"
    return f"event-${{{js_access('event', color_field)}}}"


def event_content(title_field: str) -> str:
    return _indent(
        f"<span class=\"event-title\">${{{js_access('event', title_field)} || 'Untitled'}}</span>",
        22,
    )


def modal_content(fields: Iterable[str], entity: EntityDefinition) -> str:
    """Event detail rows for the selected event"""
    blocks = []
    for name in fields:
        field = _field(entity, name)
        value = js_access("selectedEvent", name)
        if field.type == FieldType.ENUM:
            rendered = f'<span class="badge badge-${{{value}}}">${{{value}}}</span>'
        elif field.type in (FieldType.DATE, FieldType.DATETIME):
            rendered = f"<span>${{{value} ? new Date({value}).toLocaleDateString() : '-'}}</span>"
        elif field.type == FieldType.RELATION:
            rendered = f"<span>${{{value}?.name || {value} || '-'}}</span>"
        elif field.type == FieldType.BOOLEAN:
            rendered = f"<span>${{{value} ? '✓ Yes' : '✗ No'}}</span>"
        else:
            rendered = f"<span>${{{value} ?? '-'}}</span>"
        blocks.append(
            '<div class="detail-field">\n'
            f"  <label>{html_text(field_label(name))}:</label>\n"
            f"  {rendered}\n"
            "</div>"
        )
    return "\n".join(_indent(b, 14) for b in blocks)


# ═══════════════════════════════════════════════════════════════════════════
# DASHBOARD
# ═══════════════════════════════════════════════════════════════════════════

# Computed by the dashboard skeleton itself
BUILTIN_METRICS = frozenset({"total", "recent", "trend"})

# Names already bound inside calculateMetrics, plus keywords a metric key could camel-case into
RESERVED_METRIC_NAMES = BUILTIN_METRICS | frozenset({
    "data", "lastWeek", "item",
    "break", "case", "catch", "class", "const", "continue", "debugger", "default",
    "delete", "do", "else", "export", "extends", "false", "finally", "for",
    "function", "if", "import", "in", "instanceof", "let", "new", "null",
    "return", "super", "switch", "this", "throw", "true", "try", "typeof",
    "var", "void", "while", "with", "yield", "await",
})


def metric_variables(metrics: Iterable[MetricDefinition]) -> list[tuple[MetricDefinition, str]]:
    """
    Pair each metric with the variable holding its value.

    Built-in keys map to the skeleton's own variables. Every other key gets
    a unique identifier: 'in-progress' and 'in_progress' become
    statusInProgress and statusInProgress2, and a key such as 'data' is
    moved off the skeleton's parameter to data2.
    """
    taken = set(RESERVED_METRIC_NAMES)
    pairs = []
    for metric in metrics:
        if metric.key in BUILTIN_METRICS:
            pairs.append((metric, metric.key))
            continue
        base = js_identifier(metric.key)
        name, n = base, 2
        while name in taken:
            name, n = f"{base}{n}", n + 1
        taken.add(name)
        pairs.append((metric, name))
    return pairs


def metric_calculations(metrics: Iterable[MetricDefinition]) -> str:
    lines = []
    for metric, var in metric_variables(metrics):
        if metric.key in BUILTIN_METRICS:
            continue
        if metric.calculation:
            lines.append(f"const {var} = {metric.calculation}")
        elif metric.field and metric.value is not None:
            lines.append(
                f"const {var} = data.filter(item => {js_access('item', metric.field)} === "
                f"{js_string(metric.value)}).length"
            )
        else:
            lines.append(f"const {var} = 0 // no calculation configured for {js_string(metric.key)}")
    return "\n".join(_indent(line, 2) for line in lines)


def custom_metrics(metrics: Iterable[MetricDefinition]) -> str:
    names = [f"{var}," for metric, var in metric_variables(metrics) if metric.key not in BUILTIN_METRICS]
    return "\n".join(_indent(name, 4) for name in names)


def metric_widgets(metrics: Iterable[MetricDefinition]) -> str:
    widgets = []
    for metric, var in metric_variables(metrics):
        widgets.append(
            "<${MetricCard}\n"
            f'  title="{html_text(metric.title)}"\n'
            f"  value=${{metrics.{var} ?? 0}}\n"
            f'  icon="{html_text(metric.icon or "📊")}"\n'
            f'  color="{html_text(metric.color or "blue")}"\n'
            "/>"
        )
    return "\n".join(_indent(w, 8) for w in widgets)


def dashboard_widgets(
    widgets: Iterable[WidgetDefinition],
    entity: EntityDefinition,
    route: str,
) -> str:
    """Widget cards below the metric row; unknown widget types get a placeholder card"""
    blocks = []
    for widget in widgets:
        if widget.type == "recent-list":
            blocks.append(_recent_list_widget(widget, entity, route))
        elif widget.type == "status-chart":
            blocks.append(_status_chart_widget(widget, entity))
        elif widget.type == "timeline":
            blocks.append(_timeline_widget(widget, entity))
        else:
            blocks.append(_custom_widget(widget))
    return "\n\n".join(_indent(b, 8) for b in blocks)


def _recent_list_widget(widget: WidgetDefinition, entity: EntityDefinition, route: str) -> str:
    limit = widget.limit or 5
    title = js_access("item", find_title_field(entity))
    base = template_text(route.rstrip("/"))
    return (
        '<${Card} className="dashboard-widget">\n'
        '  <div class="widget-header">\n'
        f"    <h3>{html_text(widget.title)}</h3>\n"
        f"    <${{Button}} variant=\"ghost\" onClick=${{() => window.location.href = {js_string(route)}}}>\n"
        "      View All\n"
        "    </${Button}>\n"
        "  </div>\n"
        '  <div class="widget-content">\n'
        f"    ${{processedData.slice(0, {limit}).map(item => html`\n"
        "      <div\n"
        "        key=${item.id}\n"
        '        class="recent-item"\n'
        f"        onClick=${{() => window.location.href = `{base}/${{item.id}}`}}\n"
        "      >\n"
        f'        <div class="item-title">${{{title} || item.id}}</div>\n'
        "        <div class=\"item-meta\">${item.createdAt ? new Date(item.createdAt).toLocaleDateString() : ''}</div>\n"
        "      </div>\n"
        "    `)}\n"
        "  </div>\n"
        "</${Card}>"
    )


def _status_chart_widget(widget: WidgetDefinition, entity: EntityDefinition) -> str:
    group_field = widget.field or "status"
    field = entity.fields.get(group_field)
    if field is None or field.type != FieldType.ENUM:
        return (
            '<${Card} className="dashboard-widget">\n'
            f"  <h3>{html_text(widget.title)}</h3>\n"
            f"  <p>{html_text(field_label(group_field))} field not available for charting</p>\n"
            "</${Card}>"
        )
    value = js_access("item", group_field)
    return (
        '<${Card} className="dashboard-widget">\n'
        '  <div class="widget-header">\n'
        f"    <h3>{html_text(widget.title)}</h3>\n"
        "  </div>\n"
        '  <div class="widget-content">\n'
        '    <div class="status-chart">\n'
        "      ${Object.entries(\n"
        "        processedData.reduce((acc, item) => {\n"
        f"          const key = {value} || 'unknown'\n"
        "          acc[key] = (acc[key] || 0) + 1\n"
        "          return acc\n"
        "        }, {})\n"
        "      ).map(([status, count]) => html`\n"
        '        <div key=${status} class="status-bar">\n'
        '          <div class="status-label">${status}</div>\n'
        '          <div class="status-count">${count}</div>\n'
        '          <div class="status-progress">\n'
        "            <div\n"
        '              class="status-fill status-fill-${status}"\n'
        '              style="width: ${(count / processedData.length) * 100}%"\n'
        "            ></div>\n"
        "          </div>\n"
        "        </div>\n"
        "      `)}\n"
        "    </div>\n"
        "  </div>\n"
        "</${Card}>"
    )


def _timeline_widget(widget: WidgetDefinition, entity: EntityDefinition) -> str:
    limit = widget.limit or 10
    title = js_access("item", find_title_field(entity))
    return (
        '<${Card} className="dashboard-widget">\n'
        '  <div class="widget-header">\n'
        f"    <h3>{html_text(widget.title)}</h3>\n"
        "  </div>\n"
        '  <div class="widget-content">\n'
        '    <div class="timeline">\n'
        "      ${[...processedData]\n"
        "        .sort((a, b) => new Date(b.createdAt) - new Date(a.createdAt))\n"
        f"        .slice(0, {limit})\n"
        "        .map(item => html`\n"
        '          <div key=${item.id} class="timeline-item">\n'
        '            <div class="timeline-date">\n'
        "              ${item.createdAt ? new Date(item.createdAt).toLocaleDateString() : ''}\n"
        "            </div>\n"
        '            <div class="timeline-content">\n'
        f'              <div class="timeline-title">${{{title} || item.id}}</div>\n'
        "            </div>\n"
        "          </div>\n"
        "        `)}\n"
        "    </div>\n"
        "  </div>\n"
        "</${Card}>"
    )


def _custom_widget(widget: WidgetDefinition) -> str:
    return (
        '<${Card} className="dashboard-widget">\n'
        '  <div class="widget-header">\n'
        f"    <h3>{html_text(widget.title)}</h3>\n"
        "  </div>\n"
        '  <div class="widget-content">\n'
        f"    <p>Custom widget: {html_text(widget.type)}</p>\n"
        "    <p>Configure in hooks or extend the skeleton</p>\n"
        "  </div>\n"
        "</${Card}>"
    )
