"""
Truthgen Spec Models - Pydantic models for application schema files

Defines entities, fields, views and workflows: the input to generation.
Pydantic handles validation, defaults, and camelCase aliases.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from truthgen.errors import SchemaError


# ═══════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════


class FieldType(str, Enum):
    STRING = "string"
    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    JSON = "json"
    UUID = "uuid"
    ENUM = "enum"
    RELATION = "relation"
    EMAIL = "email"
    URL = "url"


class ViewType(str, Enum):
    LIST = "list"
    DETAIL = "detail"
    FORM = "form"
    KANBAN = "kanban"
    CALENDAR = "calendar"
    DASHBOARD = "dashboard"
    CUSTOM = "custom"


SYSTEM_FIELD_NAMES = frozenset({"id", "createdAt", "updatedAt", "created_at", "updated_at"})


# ═══════════════════════════════════════════════════════════════════════════
# FIELD MODELS
# ═══════════════════════════════════════════════════════════════════════════


class FieldDefinition(BaseModel):
    """Entity field definition"""

    type: FieldType = FieldType.STRING
    required: bool = False
    unique: bool = False
    default: Any | None = None
    description: str | None = None
    auto: bool = False

    # enum
    options: list[str] | None = None
    values: list[str] | None = None

    # relation
    to: str | None = None
    many: bool = False

    # validation
    min_length: int | None = Field(None, alias="minLength")
    max_length: int | None = Field(None, alias="maxLength")
    pattern: str | None = None
    min: float | None = None
    max: float | None = None

    model_config = {"populate_by_name": True}

    @property
    def choices(self) -> list[str]:
        """Enum options, whichever of `options`/`values` the schema used."""
        return list(self.options or self.values or [])


def is_system_field(name: str, field: FieldDefinition | None) -> bool:
    """A field is system iff it is auto-generated or a well-known bookkeeping name."""
    if field is not None and field.auto:
        return True
    return name in SYSTEM_FIELD_NAMES


# ═══════════════════════════════════════════════════════════════════════════
# ENTITY UI CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════


class ColorMapping(BaseModel):
    """Color coding based on a field value"""

    field: str
    map: dict[str, str] = {}


class EntityDisplayConfig(BaseModel):
    """How an entity is summarised in cards and lists"""

    primary: str | None = None
    secondary: str | None = None
    badge: str | None = None
    color: ColorMapping | None = None
    avatar: str | None = None
    subtitle: str | None = None
    metadata: list[str] = []


class EntityListConfig(BaseModel):
    """Entity list configuration"""

    columns: list[str] = []
    sortable: bool | list[str] | None = None
    filterable: bool | list[str] | None = None
    searchable: list[str] = []
    pagination: dict[str, Any] | None = None
    actions: list[str] | None = None


class FormSection(BaseModel):
    title: str
    fields: list[str] = []


class EntityFormConfig(BaseModel):
    """Entity form configuration"""

    fields: list[str] = []
    layout: Literal["single-column", "two-column", "sections"] = "single-column"
    sections: list[FormSection] = []
    validation: dict[str, Any] | None = None
    submit_text: str | None = Field(None, alias="submitText")
    cancel_text: str | None = Field(None, alias="cancelText")

    model_config = {"populate_by_name": True}


class DetailSection(BaseModel):
    title: str
    fields: list[str] = []


class EntityDetailConfig(BaseModel):
    sections: list[DetailSection] = []
    actions: list[str] = []


class EntityUIConfig(BaseModel):
    """UI configuration attached to an entity"""

    display: EntityDisplayConfig | None = None
    list_: EntityListConfig | None = Field(None, alias="list")
    form: EntityFormConfig | None = None
    detail: EntityDetailConfig | None = None

    model_config = {"populate_by_name": True}


# ═══════════════════════════════════════════════════════════════════════════
# ENTITY
# ═══════════════════════════════════════════════════════════════════════════


class BehaviorDefinition(BaseModel):
    """Named entity action, e.g. `complete` setting status to done"""

    type: str | None = None
    fields: dict[str, Any] | None = None
    modifies: dict[str, Any] | None = None
    emits: str | list[str] | None = None
    requires: str | None = None


class PermissionDefinition(BaseModel):
    """Permission expressions per operation"""

    create: str | None = None
    read: str | None = None
    update: str | None = None
    delete: str | None = None


class EntityDefinition(BaseModel):
    """Domain entity definition. Field order is the default display order."""

    name: str | None = None
    fields: dict[str, FieldDefinition]
    behaviors: dict[str, BehaviorDefinition] = {}
    permissions: PermissionDefinition | None = None
    indexes: list[list[str]] = []
    computed: dict[str, str] = {}
    ui: EntityUIConfig | None = None

    def get_field(self, name: str) -> FieldDefinition | None:
        return self.fields.get(name)

    def user_fields(self) -> list[str]:
        """Field names minus system fields, in declaration order."""
        return [name for name, f in self.fields.items() if not is_system_field(name, f)]


# ═══════════════════════════════════════════════════════════════════════════
# VIEWS
# ═══════════════════════════════════════════════════════════════════════════


class KanbanColumn(BaseModel):
    id: str
    title: str


class MetricDefinition(BaseModel):
    """Dashboard metric. `field`/`value` count matching items; `calculation` is a raw expression."""

    key: str
    title: str
    icon: str | None = None
    color: str | None = None
    field: str | None = None
    value: str | None = None
    calculation: str | None = None


class WidgetDefinition(BaseModel):
    type: str
    title: str
    limit: int | None = None
    field: str | None = None  # status-chart grouping field


class ViewDefinition(BaseModel):
    """Declared page/component bound (usually) to one entity"""

    type: ViewType
    route: str = "/"
    entity: str | None = None
    title: str | None = None
    layout: str | None = None
    mode: str | None = None
    actions: list[str] | None = None

    # list
    columns: list[str | KanbanColumn] | None = None
    filters: list[str] | None = None

    # form
    fields: list[str] | None = None

    # kanban
    group_by: str | None = Field(None, alias="groupBy")
    card_fields: list[str] | None = Field(None, alias="cardFields")

    # calendar
    date_field: str | None = Field(None, alias="dateField")
    title_field: str | None = Field(None, alias="titleField")
    color_field: str | None = Field(None, alias="colorField")
    event_fields: list[str] | None = Field(None, alias="eventFields")
    max_events_per_day: int = Field(3, alias="maxEventsPerDay", ge=1)

    # dashboard
    subtitle: str | None = None
    metrics: list[MetricDefinition] | None = None
    widgets: list[WidgetDefinition] | None = None

    # custom
    template: str | None = None
    content: str | None = None

    model_config = {"populate_by_name": True}


# ═══════════════════════════════════════════════════════════════════════════
# WORKFLOWS
# ═══════════════════════════════════════════════════════════════════════════


class WorkflowAction(BaseModel):
    type: str
    params: dict[str, Any] | None = None


class WorkflowDefinition(BaseModel):
    trigger: str
    condition: str | None = None
    actions: list[str | WorkflowAction] = []
    is_async: bool = Field(False, alias="async")

    model_config = {"populate_by_name": True}


# ═══════════════════════════════════════════════════════════════════════════
# COMPLETE SCHEMA
# ═══════════════════════════════════════════════════════════════════════════


class AppDefinition(BaseModel):
    """Complete application schema"""

    name: str
    version: str | None = None
    description: str | None = None
    entities: dict[str, EntityDefinition] = {}
    views: dict[str, ViewDefinition] = {}
    workflows: dict[str, WorkflowDefinition] = {}
    settings: dict[str, Any] | None = None

    def model_post_init(self, __context: Any) -> None:
        """Name each entity after its map key if not given"""
        for key, entity in self.entities.items():
            if entity.name is None:
                entity.name = key

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "AppDefinition":
        """Parse YAML (or JSON) content into an AppDefinition"""
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise SchemaError(f"Invalid schema syntax: {e}") from e
        if not isinstance(data, dict):
            raise SchemaError("Schema must be a mapping at the top level")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise SchemaError(f"Invalid schema: {e}") from e

    @classmethod
    def from_file(cls, path: str | Path) -> "AppDefinition":
        """Load schema from a YAML or JSON file"""
        try:
            content = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaError(f"Cannot read schema file {path}: {e}") from e
        return cls.from_yaml(content)

    def to_yaml(self) -> str:
        """Export schema to YAML"""
        return yaml.dump(
            self.model_dump(mode="json", by_alias=True, exclude_none=True),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )

    def get_entity(self, name: str | None) -> EntityDefinition | None:
        """Get entity by name"""
        if name is None:
            return None
        return self.entities.get(name)

    def get_view(self, name: str) -> ViewDefinition | None:
        return self.views.get(name)

    def check_references(self) -> list[str]:
        """
        List structural problems without raising.

        Covers the cross-references generation relies on: view entities,
        relation targets, enum options, kanban groupBy and calendar dateField.
        """
        problems: list[str] = []

        for entity_name, entity in self.entities.items():
            for field_name, field in entity.fields.items():
                if field.type == FieldType.ENUM and not field.choices:
                    problems.append(f"{entity_name}.{field_name}: enum field declares no options")
                if field.type == FieldType.RELATION:
                    if not field.to:
                        problems.append(f"{entity_name}.{field_name}: relation field has no target")
                    elif field.to not in self.entities:
                        problems.append(
                            f"{entity_name}.{field_name}: relation target '{field.to}' is not an entity"
                        )

        for view_name, view in self.views.items():
            if view.type == ViewType.CUSTOM:
                continue
            if not view.entity:
                problems.append(f"{view_name}: {view.type.value} view has no entity")
                continue
            entity = self.entities.get(view.entity)
            if entity is None:
                problems.append(f"{view_name}: unknown entity '{view.entity}'")
                continue
            if view.type == ViewType.KANBAN:
                group_by = view.group_by or "status"
                field = entity.get_field(group_by)
                if field is None or field.type != FieldType.ENUM:
                    problems.append(f"{view_name}: groupBy field '{group_by}' must be an enum field")
            if view.type == ViewType.CALENDAR:
                field = entity.get_field(view.date_field) if view.date_field else None
                if field is None or field.type != FieldType.DATE:
                    problems.append(f"{view_name}: dateField '{view.date_field}' must be a date field")

        return problems
