"""
Truthgen Generator - view module generation from an application schema

Each view kind has a generator that first resolves a complete, validated
view configuration and only then renders text: skeleton from the template
loader, simple tokens and fragment blocks substituted in a single pass.

Generators are pure. Persisting output (and the rule that an existing,
possibly hand-edited module is never clobbered) lives in the batch layer
at the bottom of this module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

from truthgen import fragments as frag
from truthgen.config import RenderContext
from truthgen.errors import UnknownViewError, ViewConfigError
from truthgen.fragments import (
    collection_route,
    html_text,
    js_access,
    js_key,
    js_string,
    option_label,
    plural,
    query_key,
)
from truthgen.gen_logging import get_logger
from truthgen.paths import PathResolver
from truthgen.spec import (
    AppDefinition,
    EntityDefinition,
    FieldType,
    KanbanColumn,
    MetricDefinition,
    ViewDefinition,
    ViewType,
    WidgetDefinition,
)
from truthgen.templates import TemplateContext, TemplateLoader

logger = get_logger(__name__)

CARD_FIELD_LIMIT = 3
EVENT_FIELD_LIMIT = 4
FORM_MODES = ("create", "edit")

DEFAULT_LIST_ACTIONS = ("create", "edit", "delete")
DEFAULT_DETAIL_ACTIONS = ("edit", "delete")

# icon, color
STATUS_STYLES = {
    "todo": ("📋", "gray"),
    "in-progress": ("⏳", "blue"),
    "done": ("✅", "green"),
    "completed": ("✅", "green"),
    "active": ("🟢", "green"),
    "inactive": ("⚪", "gray"),
    "pending": ("🟡", "yellow"),
    "cancelled": ("❌", "red"),
    "archived": ("📦", "gray"),
}
PRIORITY_STYLES = {
    "low": ("🟢", "green"),
    "medium": ("🟡", "yellow"),
    "high": ("🔴", "red"),
    "urgent": ("🚨", "red"),
    "critical": ("🚨", "red"),
}
DEFAULT_METRIC_STYLE = ("📊", "blue")


# ═══════════════════════════════════════════════════════════════════════════
# GENERATED FILE TRACKING
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class GeneratedFile:
    """Represents one generated view module."""

    view_name: str
    path: str  # Relative to the views output directory
    content: str
    template: str | None = None  # Template name the module was built from


@dataclass
class GenerationResult:
    """Result of generating a batch of views."""

    files: list[GeneratedFile] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # Existing files left alone

    @property
    def success(self) -> bool:
        return len(self.errors) == 0


# ═══════════════════════════════════════════════════════════════════════════
# RESOLVED VIEW CONFIGURATIONS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ListViewConfig:
    view_name: str
    entity_name: str
    title: str
    route: str
    columns: tuple[str, ...]
    filters: tuple[str, ...]
    actions: tuple[str, ...]

    @property
    def first_column(self) -> str:
        return self.columns[0] if self.columns else "id"


@dataclass(frozen=True)
class DetailViewConfig:
    view_name: str
    entity_name: str
    title: str
    route: str  # Contains :id
    list_route: str
    title_field: str
    fields: tuple[str, ...]
    actions: tuple[str, ...]


@dataclass(frozen=True)
class FormViewConfig:
    view_name: str
    entity_name: str
    mode: str
    title: str
    collection_route: str
    fields: tuple[str, ...]
    submit_text: str
    cancel_text: str

    @property
    def is_edit(self) -> bool:
        return self.mode == "edit"


@dataclass(frozen=True)
class KanbanViewConfig:
    view_name: str
    entity_name: str
    title: str
    group_by: str
    columns: tuple[tuple[str, str], ...]  # (id, title)
    card_fields: tuple[str, ...]
    detail_route: str
    create_route: str


@dataclass(frozen=True)
class CalendarViewConfig:
    view_name: str
    entity_name: str
    title: str
    date_field: str
    title_field: str
    color_field: str | None
    event_fields: tuple[str, ...]
    max_events_per_day: int
    collection_route: str
    create_route: str


@dataclass(frozen=True)
class DashboardViewConfig:
    view_name: str
    entity_name: str
    title: str
    subtitle: str
    collection_route: str
    metrics: tuple[MetricDefinition, ...]
    widgets: tuple[WidgetDefinition, ...]


@dataclass(frozen=True)
class CustomViewConfig:
    view_name: str
    template_name: str


# ═══════════════════════════════════════════════════════════════════════════
# BASE GENERATOR
# ═══════════════════════════════════════════════════════════════════════════


class ViewGenerator:
    """
    Base class for per-kind view generators.

    Subclasses implement `resolve` (defaults + validation, raising
    ViewConfigError) and `tokens` (block fragments for the resolved config).
    """

    kind: ClassVar[ViewType]

    def __init__(
        self,
        loader: TemplateLoader | None = None,
        render: RenderContext | None = None,
        app: AppDefinition | None = None,
    ):
        self.loader = loader or TemplateLoader()
        self.render = render or RenderContext()
        self.app = app

    def template_name(self, view_name: str, view: ViewDefinition) -> str:
        return view.template or self.kind.value

    def resolve(self, view_name: str, view: ViewDefinition, entity: EntityDefinition | None) -> Any:
        raise NotImplementedError

    def tokens(self, config: Any, entity: EntityDefinition | None) -> dict[str, str]:
        raise NotImplementedError

    def generate_component(
        self,
        view_name: str,
        view: ViewDefinition,
        entity: EntityDefinition | None,
    ) -> str:
        """Generate module source text for one view"""
        config = self.resolve(view_name, view, entity)
        template_name = self.template_name(view_name, view)
        context = TemplateContext(
            view_name=view_name,
            view=view,
            entity=entity,
            app=self.app,
            render=self.render,
        )
        template = self.loader.load_template(template_name, context)

        replacements = self.common_tokens(view_name, entity)
        replacements.update(self.tokens(config, entity))
        logger.debug(f"Generating {view_name} ({self.kind.value}) from template '{template_name}'")
        return frag.substitute_tokens(template, replacements)

    def common_tokens(self, view_name: str, entity: EntityDefinition | None) -> dict[str, str]:
        tokens = {
            "__VIEW_NAME__": view_name,
            "__RUNTIME_MODULE__": self.render.runtime_module,
            "__COMPONENTS_MODULE__": self.render.components_module,
        }
        if entity is not None and entity.name:
            tokens["__ENTITY__"] = entity.name
            tokens["__ENTITY_LOWER__"] = entity.name.lower()
            tokens["__MODELS_MODULE__"] = self.render.models_module(entity.name)
        return tokens

    # ─── shared validation ───────────────────────────────────────────────

    @staticmethod
    def require_entity(view_name: str, entity: EntityDefinition | None) -> EntityDefinition:
        if entity is None:
            raise ViewConfigError("View requires an entity", view_name=view_name)
        return entity

    @staticmethod
    def check_fields_exist(
        view_name: str,
        entity: EntityDefinition,
        names: list[str] | tuple[str, ...],
        option: str,
    ) -> None:
        for name in names:
            if name not in entity.fields:
                raise ViewConfigError(
                    f"{option} field '{name}' does not exist on {entity.name}",
                    view_name=view_name,
                    field=name,
                )

    @staticmethod
    def check_enum_options(
        view_name: str,
        entity: EntityDefinition,
        names: list[str] | tuple[str, ...],
    ) -> None:
        """Enum fields rendered as select/badge need declared options"""
        for name in names:
            field_def = entity.fields.get(name)
            if field_def is not None and field_def.type == FieldType.ENUM and not field_def.choices:
                raise ViewConfigError(
                    f"Enum field '{name}' must declare options",
                    view_name=view_name,
                    field=name,
                    expected="enum with options",
                )

    @staticmethod
    def default_fields(entity: EntityDefinition) -> list[str]:
        """All fields except id, in declaration order"""
        return [name for name in entity.fields if name != "id"]


def _collection_from_route(route: str, entity_name: str) -> str:
    """'/tasks/:id/edit' -> '/tasks'; falls back to the entity's collection route"""
    parts = [p for p in route.split("/") if p]
    while parts and (parts[-1].startswith(":") or parts[-1] in ("new", "edit")):
        parts.pop()
    if not parts:
        return collection_route(entity_name)
    return "/" + "/".join(parts)


def _string_columns(view_name: str, columns: list[str | KanbanColumn]) -> list[str]:
    names = []
    for column in columns:
        if isinstance(column, KanbanColumn):
            raise ViewConfigError(
                f"Column '{column.id}' must be a field name", view_name=view_name, field=column.id
            )
        names.append(column)
    return names


# ═══════════════════════════════════════════════════════════════════════════
# LIST
# ═══════════════════════════════════════════════════════════════════════════


class ListViewGenerator(ViewGenerator):
    """Sortable table with row actions and an optional filter bar"""

    kind = ViewType.LIST

    def resolve(self, view_name, view, entity) -> ListViewConfig:
        entity = self.require_entity(view_name, entity)
        list_ui = entity.ui.list_ if entity.ui else None

        if view.columns:
            columns = _string_columns(view_name, view.columns)
        elif list_ui and list_ui.columns:
            columns = list(list_ui.columns)
        else:
            columns = self.default_fields(entity)
        self.check_fields_exist(view_name, entity, columns, "Column")

        if view.filters is not None:
            filters = list(view.filters)
        elif list_ui and isinstance(list_ui.filterable, list):
            filters = list(list_ui.filterable)
        else:
            filters = []
        self.check_fields_exist(view_name, entity, filters, "Filter")
        self.check_enum_options(view_name, entity, filters)

        if view.actions is not None:
            actions = list(view.actions)
        elif list_ui and list_ui.actions is not None:
            actions = list(list_ui.actions)
        else:
            actions = list(DEFAULT_LIST_ACTIONS)

        return ListViewConfig(
            view_name=view_name,
            entity_name=entity.name,
            title=view.title or plural(entity.name),
            route=_collection_from_route(view.route, entity.name),
            columns=tuple(columns),
            filters=tuple(filters),
            actions=tuple(actions),
        )

    def tokens(self, config: ListViewConfig, entity) -> dict[str, str]:
        return {
            "__FIRST_COLUMN__": js_string(config.first_column),
            "__LIST_TITLE__": html_text(config.title),
            "__ENTITY_PLURAL__": html_text(plural(config.entity_name.lower())),
            "__TABLE_ACTIONS__": frag.table_actions(config.actions, config.route),
            "__CREATE_BUTTON__": frag.create_button(config.actions, config.route, config.entity_name),
            "__FILTER_BAR__": frag.filter_bar(list(config.filters), entity),
            "__COLUMNS_CONFIG__": frag.columns_config(config.columns, entity),
        }


# ═══════════════════════════════════════════════════════════════════════════
# DETAIL
# ═══════════════════════════════════════════════════════════════════════════


class DetailViewGenerator(ViewGenerator):
    """Single record page with per-type field formatting"""

    kind = ViewType.DETAIL

    def resolve(self, view_name, view, entity) -> DetailViewConfig:
        entity = self.require_entity(view_name, entity)

        fields = list(view.fields) if view.fields else self.default_fields(entity)
        self.check_fields_exist(view_name, entity, fields, "Detail")
        self.check_enum_options(view_name, entity, fields)

        if view.title_field:
            self.check_fields_exist(view_name, entity, [view.title_field], "Title")
            title_field = view.title_field
        else:
            title_field = frag.find_title_field(entity)

        list_route = _collection_from_route(view.route, entity.name)
        route = view.route if ":id" in view.route else f"{list_route}/:id"

        return DetailViewConfig(
            view_name=view_name,
            entity_name=entity.name,
            title=view.title or entity.name,
            route=route,
            list_route=list_route,
            title_field=title_field,
            fields=tuple(fields),
            actions=tuple(view.actions if view.actions is not None else DEFAULT_DETAIL_ACTIONS),
        )

    def tokens(self, config: DetailViewConfig, entity) -> dict[str, str]:
        return {
            "__LIST_ROUTE__": config.list_route,
            "__TITLE_VALUE__": js_access("processedItem", config.title_field),
            "__DETAIL_TITLE__": js_string(config.title),
            "__ACTION_BUTTONS__": frag.detail_action_buttons(config.actions, config.route),
            "__FIELD_DISPLAYS__": frag.field_displays(config.fields, entity),
        }


# ═══════════════════════════════════════════════════════════════════════════
# FORM
# ═══════════════════════════════════════════════════════════════════════════


class FormViewGenerator(ViewGenerator):
    """Create/edit form with typed inputs and required-field validation"""

    kind = ViewType.FORM

    def resolve(self, view_name, view, entity) -> FormViewConfig:
        entity = self.require_entity(view_name, entity)
        form_ui = entity.ui.form if entity.ui else None

        mode = view.mode or "create"
        if mode not in FORM_MODES:
            raise ViewConfigError(
                f"Form mode '{mode}' must be one of: {', '.join(FORM_MODES)}",
                view_name=view_name,
                expected="create|edit",
            )

        if view.fields:
            fields = list(view.fields)
        elif form_ui and form_ui.fields:
            fields = list(form_ui.fields)
        else:
            fields = entity.user_fields()
        self.check_fields_exist(view_name, entity, fields, "Form")
        self.check_enum_options(view_name, entity, fields)

        for name in fields:
            field_def = entity.fields[name]
            if field_def.type == FieldType.RELATION and not field_def.to:
                raise ViewConfigError(
                    f"Relation field '{name}' has no target entity",
                    view_name=view_name,
                    field=name,
                    expected="relation with 'to'",
                )

        is_edit = mode == "edit"
        default_title = f"{'Edit' if is_edit else 'Create'} {entity.name}"
        default_submit = f"{'Update' if is_edit else 'Create'} {entity.name}"

        return FormViewConfig(
            view_name=view_name,
            entity_name=entity.name,
            mode=mode,
            title=view.title or default_title,
            collection_route=_collection_from_route(view.route, entity.name),
            fields=tuple(fields),
            submit_text=(form_ui.submit_text if form_ui else None) or default_submit,
            cancel_text=(form_ui.cancel_text if form_ui else None) or "Cancel",
        )

    def tokens(self, config: FormViewConfig, entity) -> dict[str, str]:
        mutation = f"{'update' if config.is_edit else 'create'}{config.entity_name}"
        return {
            "__MUTATION_FUNCTION__": mutation,
            "__EDIT_MODE_SETUP__": frag.edit_mode_setup(config.entity_name) if config.is_edit else "",
            "__EDIT_MODE_EFFECT__": frag.edit_mode_effect(config.fields, entity) if config.is_edit else "",
            "__INITIAL_FORM_STATE__": frag.initial_form_state(config.fields, entity),
            "__VALIDATION_RULES__": frag.validation_rules(config.fields, entity),
            "__SUBMIT_LOGIC__": frag.submit_logic(config.entity_name, config.is_edit),
            "__COLLECTION_ROUTE__": config.collection_route,
            "__FORM_TITLE__": html_text(config.title),
            "__FIELD_COMPONENTS__": frag.form_field_components(config.fields, entity),
            "__CANCEL_BUTTON_TEXT__": html_text(config.cancel_text),
            "__SUBMIT_BUTTON_TEXT__": html_text(config.submit_text),
        }


# ═══════════════════════════════════════════════════════════════════════════
# KANBAN
# ═══════════════════════════════════════════════════════════════════════════


class KanbanViewGenerator(ViewGenerator):
    """Board grouped by an enum field; drag-and-drop updates that field"""

    kind = ViewType.KANBAN

    def resolve(self, view_name, view, entity) -> KanbanViewConfig:
        entity = self.require_entity(view_name, entity)

        group_by = view.group_by or "status"
        group_field = entity.fields.get(group_by)
        if group_field is None or group_field.type != FieldType.ENUM:
            raise ViewConfigError(
                f"Kanban groupBy field '{group_by}' must be an enum field",
                view_name=view_name,
                field=group_by,
                expected="enum",
            )

        if view.columns:
            columns = [
                (c.id, c.title) if isinstance(c, KanbanColumn) else (c, option_label(c))
                for c in view.columns
            ]
        else:
            self.check_enum_options(view_name, entity, [group_by])
            columns = [(opt, option_label(opt)) for opt in group_field.choices]

        if view.card_fields:
            card_fields = list(view.card_fields)
            self.check_fields_exist(view_name, entity, card_fields, "Card")
        else:
            card_fields = [name for name in entity.user_fields() if name != group_by]
            # Title-like field takes the card heading
            card_fields.sort(key=lambda name: 0 if frag.is_title_like(name) else 1)
        card_fields = card_fields[:CARD_FIELD_LIMIT]
        self.check_enum_options(view_name, entity, card_fields)

        route = collection_route(entity.name)
        return KanbanViewConfig(
            view_name=view_name,
            entity_name=entity.name,
            title=view.title or f"{entity.name} Board",
            group_by=group_by,
            columns=tuple(columns),
            card_fields=tuple(card_fields),
            detail_route=f"{route}/:id",
            create_route=f"{route}/new",
        )

    def tokens(self, config: KanbanViewConfig, entity) -> dict[str, str]:
        return {
            "__KANBAN_COLUMNS__": frag.kanban_columns({"id": i, "title": t} for i, t in config.columns),
            "__ITEM_GROUP__": js_access("item", config.group_by),
            "__DRAGGED_GROUP__": js_access("draggedItem", config.group_by),
            "__GROUP_BY_KEY__": js_key(config.group_by),
            "__DETAIL_ROUTE__": config.detail_route,
            "__CREATE_ROUTE__": config.create_route,
            "__BOARD_TITLE__": html_text(config.title),
            "__CARD_CONTENT__": frag.card_content(config.card_fields, entity),
        }


# ═══════════════════════════════════════════════════════════════════════════
# CALENDAR
# ═══════════════════════════════════════════════════════════════════════════


class CalendarViewGenerator(ViewGenerator):
    """Month grid placing records on their date field"""

    kind = ViewType.CALENDAR

    def resolve(self, view_name, view, entity) -> CalendarViewConfig:
        entity = self.require_entity(view_name, entity)

        date_field = view.date_field
        if not date_field:
            raise ViewConfigError("Calendar view requires a dateField", view_name=view_name, expected="date")
        field_def = entity.fields.get(date_field)
        if field_def is None or field_def.type != FieldType.DATE:
            raise ViewConfigError(
                f"Calendar dateField '{date_field}' must be a date field",
                view_name=view_name,
                field=date_field,
                expected="date",
            )

        if view.title_field:
            self.check_fields_exist(view_name, entity, [view.title_field], "Title")
            title_field = view.title_field
        else:
            title_field = frag.find_title_field(entity)

        if view.color_field:
            self.check_fields_exist(view_name, entity, [view.color_field], "Color")

        if view.event_fields:
            event_fields = list(view.event_fields)
            self.check_fields_exist(view_name, entity, event_fields, "Event")
        else:
            event_fields = [name for name in entity.user_fields() if name != date_field][:EVENT_FIELD_LIMIT]
        self.check_enum_options(view_name, entity, event_fields)

        route = collection_route(entity.name)
        return CalendarViewConfig(
            view_name=view_name,
            entity_name=entity.name,
            title=view.title or f"{entity.name} Calendar",
            date_field=date_field,
            title_field=title_field,
            color_field=view.color_field,
            event_fields=tuple(event_fields),
            max_events_per_day=view.max_events_per_day,
            collection_route=route,
            create_route=f"{route}/new",
        )

    def tokens(self, config: CalendarViewConfig, entity) -> dict[str, str]:
        return {
            "__MAX_EVENTS_PER_DAY__": str(config.max_events_per_day),
            "__ITEM_DATE__": js_access("item", config.date_field),
            "__DATE_QUERY_KEY__": query_key(config.date_field),
            "__EVENT_TITLE__": js_access("event", config.title_field),
            "__SELECTED_TITLE__": js_access("selectedEvent", config.title_field),
            "__CREATE_ROUTE__": config.create_route,
            "__COLLECTION_ROUTE__": config.collection_route,
            "__CALENDAR_TITLE__": html_text(config.title),
            "__EVENT_CLASS__": frag.event_class(config.color_field),
            "__EVENT_CONTENT__": frag.event_content(config.title_field),
            "__MODAL_CONTENT__": frag.modal_content(config.event_fields, entity),
        }


# ═══════════════════════════════════════════════════════════════════════════
# DASHBOARD
# ═══════════════════════════════════════════════════════════════════════════


def default_metrics(entity: EntityDefinition) -> list[MetricDefinition]:
    """`total` plus one metric per status option and per priority option"""
    icon, color = DEFAULT_METRIC_STYLE
    metrics = [MetricDefinition(key="total", title=f"Total {plural(entity.name)}", icon=icon, color=color)]

    for field_name, styles, suffix in (("status", STATUS_STYLES, ""), ("priority", PRIORITY_STYLES, " Priority")):
        field_def = entity.fields.get(field_name)
        if field_def is None or field_def.type != FieldType.ENUM:
            continue
        for option in field_def.choices:
            icon, color = styles.get(option, DEFAULT_METRIC_STYLE)
            metrics.append(
                MetricDefinition(
                    key=f"{field_name}-{option}",
                    title=f"{option_label(option)}{suffix}",
                    icon=icon,
                    color=color,
                    field=field_name,
                    value=option,
                )
            )
    return metrics


def default_widgets(entity: EntityDefinition) -> list[WidgetDefinition]:
    return [
        WidgetDefinition(type="recent-list", title=f"Recent {plural(entity.name)}", limit=5),
        WidgetDefinition(type="status-chart", title="Status Distribution"),
    ]


class DashboardViewGenerator(ViewGenerator):
    """Metric cards and widgets summarising one entity"""

    kind = ViewType.DASHBOARD

    def resolve(self, view_name, view, entity) -> DashboardViewConfig:
        entity = self.require_entity(view_name, entity)

        metrics = list(view.metrics) if view.metrics else default_metrics(entity)
        metric_fields = [m.field for m in metrics if m.field]
        self.check_fields_exist(view_name, entity, metric_fields, "Metric")

        widgets = list(view.widgets) if view.widgets else default_widgets(entity)

        return DashboardViewConfig(
            view_name=view_name,
            entity_name=entity.name,
            title=view.title or f"{entity.name} Dashboard",
            subtitle=view.subtitle or f"Overview of {entity.name.lower()} data and analytics",
            collection_route=collection_route(entity.name),
            metrics=tuple(metrics),
            widgets=tuple(widgets),
        )

    def tokens(self, config: DashboardViewConfig, entity) -> dict[str, str]:
        return {
            "__DASHBOARD_TITLE__": html_text(config.title),
            "__DASHBOARD_SUBTITLE__": html_text(config.subtitle),
            "__METRIC_CALCULATIONS__": frag.metric_calculations(config.metrics),
            "__CUSTOM_METRICS__": frag.custom_metrics(config.metrics),
            "__METRIC_WIDGETS__": frag.metric_widgets(config.metrics),
            "__DASHBOARD_WIDGETS__": frag.dashboard_widgets(config.widgets, entity, config.collection_route),
        }


# ═══════════════════════════════════════════════════════════════════════════
# CUSTOM
# ═══════════════════════════════════════════════════════════════════════════


class CustomViewGenerator(ViewGenerator):
    """Views with no built-in skeleton: whatever the template chain yields"""

    kind = ViewType.CUSTOM

    def template_name(self, view_name: str, view: ViewDefinition) -> str:
        return view.template or view_name

    def resolve(self, view_name, view, entity) -> CustomViewConfig:
        return CustomViewConfig(view_name=view_name, template_name=self.template_name(view_name, view))

    def tokens(self, config: CustomViewConfig, entity) -> dict[str, str]:
        return {}


DEFAULT_GENERATORS: tuple[type[ViewGenerator], ...] = (
    ListViewGenerator,
    DetailViewGenerator,
    FormViewGenerator,
    KanbanViewGenerator,
    CalendarViewGenerator,
    DashboardViewGenerator,
    CustomViewGenerator,
)


# ═══════════════════════════════════════════════════════════════════════════
# REGISTRY
# ═══════════════════════════════════════════════════════════════════════════


class ViewGeneratorRegistry:
    """Maps view types to generator instances sharing one loader and render context."""

    def __init__(
        self,
        loader: TemplateLoader | None = None,
        render: RenderContext | None = None,
        app: AppDefinition | None = None,
    ):
        self.loader = loader or TemplateLoader()
        self.render = render or RenderContext()
        self._generators: dict[ViewType, ViewGenerator] = {}
        for generator_cls in DEFAULT_GENERATORS:
            self.register(generator_cls(self.loader, self.render, app))

    def register(self, generator: ViewGenerator) -> None:
        self._generators[generator.kind] = generator

    def get(self, view_type: ViewType) -> ViewGenerator:
        try:
            return self._generators[view_type]
        except KeyError:
            raise LookupError(f"No generator registered for view type '{view_type.value}'") from None

    def kinds(self) -> list[ViewType]:
        return list(self._generators)


# ═══════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════


def generate_view(
    app: AppDefinition,
    view_name: str,
    registry: ViewGeneratorRegistry | None = None,
) -> str:
    """
    Generate the module text for one view of `app`.

    Raises:
        UnknownViewError: the schema has no such view
        ViewConfigError: the view's configuration is invalid
    """
    view = app.get_view(view_name)
    if view is None:
        raise UnknownViewError(view_name)

    entity = None
    if view.type != ViewType.CUSTOM or view.entity:
        entity = app.get_entity(view.entity)
        if entity is None:
            raise ViewConfigError(
                f"View references unknown entity '{view.entity}'",
                view_name=view_name,
            )

    registry = registry or ViewGeneratorRegistry(app=app)
    return registry.get(view.type).generate_component(view_name, view, entity)


def generate_views(
    app: AppDefinition,
    only: list[str] | None = None,
    registry: ViewGeneratorRegistry | None = None,
) -> GenerationResult:
    """
    Generate every view (or just `only`).

    A ViewConfigError fails that view alone; it is recorded in `errors`
    and the remaining views still generate. Anything else propagates.
    """
    registry = registry or ViewGeneratorRegistry(app=app)
    result = GenerationResult()

    for view_name in only or list(app.views):
        view = app.get_view(view_name)
        if view is None:
            result.errors.append(str(UnknownViewError(view_name)))
            logger.warning(f"View '{view_name}' not found in schema")
            continue
        try:
            content = generate_view(app, view_name, registry)
        except ViewConfigError as e:
            result.errors.append(str(e))
            logger.warning(f"Skipped {view_name}: {e}")
            continue

        generator = registry.get(view.type)
        result.files.append(GeneratedFile(
            view_name=view_name,
            path=f"{view_name}.js",
            content=content,
            template=generator.template_name(view_name, view),
        ))
        logger.info(f"Generated {view_name} ({view.type.value})")

    return result


def write_generated(
    result: GenerationResult,
    resolver: PathResolver,
    overwrite: bool = False,
) -> GenerationResult:
    """
    Materialize generated modules under the views output directory.

    An existing file may have been hand-edited, so it is left untouched
    (and recorded in `skipped`) unless `overwrite` is set.
    """
    for generated in result.files:
        full_path: Path = resolver.get_view_output_path(generated.view_name)
        if full_path.exists() and not overwrite:
            result.skipped.append(str(full_path))
            logger.info(f"Kept existing {full_path}")
            continue
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(generated.content, encoding="utf-8")
        result.written.append(str(full_path))
        logger.debug(f"Wrote {full_path}")

    return result
