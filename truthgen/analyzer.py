"""
Truth Analyzer - schema-level diagnostics

Tracks where each entity field is referenced in the UI configuration and
behaviors, then derives warnings, suggestions, a dependency graph and
aggregate health/complexity scores. Findings are data: nothing here raises
or blocks generation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from truthgen.spec import AppDefinition, EntityDefinition, FieldType, is_system_field

ImpactLevel = Literal["low", "medium", "high"]

HIGH_IMPACT_USAGE = 5
MEDIUM_IMPACT_USAGE = 3

WARNING_PENALTY = 5
UNUSED_FIELD_PENALTY = 10

ENTITY_NODE_COLOR = "#0066cc"
SYSTEM_FIELD_COLOR = "#6b7280"
USER_FIELD_COLOR = "#10b981"
IMPACT_COLORS: dict[str, str] = {
    "high": "#ef4444",
    "medium": "#f59e0b",
    "low": "#10b981",
}


# ═══════════════════════════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class UsagePoint:
    location: str
    context: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"location": self.location, "context": self.context, "description": self.description}


@dataclass
class FieldUsage:
    field: str
    usage_points: list[UsagePoint] = field(default_factory=list)

    @property
    def impact_level(self) -> ImpactLevel:
        return impact_level(len(self.usage_points))

    @property
    def is_unused(self) -> bool:
        return not self.usage_points

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "usagePoints": [p.to_dict() for p in self.usage_points],
            "impactLevel": self.impact_level,
        }


@dataclass
class EntityAnalysis:
    name: str
    field_count: int
    system_fields: list[str]
    user_fields: list[str]
    behavior_count: int
    ui_config_points: int
    field_usages: list[FieldUsage]
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def unused_fields(self) -> list[str]:
        """Non-system fields with no usage points"""
        return [u.field for u in self.field_usages if u.is_unused and u.field in self.user_fields]

    @property
    def health_score(self) -> int:
        return health_score([self])

    def get_usage(self, field_name: str) -> FieldUsage | None:
        for usage in self.field_usages:
            if usage.field == field_name:
                return usage
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "fieldCount": self.field_count,
            "systemFields": list(self.system_fields),
            "userFields": list(self.user_fields),
            "behaviorCount": self.behavior_count,
            "uiConfigPoints": self.ui_config_points,
            "fieldUsages": [u.to_dict() for u in self.field_usages],
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "healthScore": self.health_score,
        }


@dataclass
class SystemAnalysis:
    entities: list[EntityAnalysis]
    views: list[dict[str, Any]]
    workflows: list[dict[str, Any]]
    total_complexity: int
    health_score: int

    def get_entity(self, name: str) -> EntityAnalysis | None:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "entities": [e.to_dict() for e in self.entities],
            "views": self.views,
            "workflows": self.workflows,
            "totalComplexity": self.total_complexity,
            "healthScore": self.health_score,
        }


@dataclass
class DependencyGraph:
    nodes: list[dict[str, str]] = field(default_factory=list)
    edges: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"nodes": self.nodes, "edges": self.edges}


def impact_level(usage_count: int) -> ImpactLevel:
    if usage_count >= HIGH_IMPACT_USAGE:
        return "high"
    if usage_count >= MEDIUM_IMPACT_USAGE:
        return "medium"
    return "low"


def health_score(entities: list[EntityAnalysis]) -> int:
    """100 minus penalties for warnings and unused fields, never below 0"""
    score = 100
    for entity in entities:
        score -= len(entity.warnings) * WARNING_PENALTY
        score -= len(entity.unused_fields) * UNUSED_FIELD_PENALTY
    return max(0, score)


# ═══════════════════════════════════════════════════════════════════════════
# ANALYZER
# ═══════════════════════════════════════════════════════════════════════════


class TruthAnalyzer:
    """Analyze an application schema for field usage and configuration hygiene."""

    def __init__(self, app: AppDefinition):
        self.app = app

    def analyze_system(self) -> SystemAnalysis:
        entities = [self.analyze_entity(name, entity) for name, entity in self.app.entities.items()]

        views = []
        for name, view in self.app.views.items():
            summary: dict[str, Any] = {"name": name, "type": view.type.value, "route": view.route}
            if view.entity:
                summary["entity"] = view.entity
            views.append(summary)

        workflows = [
            {
                "name": name,
                "trigger": workflow.trigger,
                "hasCondition": bool(workflow.condition),
                "actionCount": len(workflow.actions),
            }
            for name, workflow in self.app.workflows.items()
        ]

        return SystemAnalysis(
            entities=entities,
            views=views,
            workflows=workflows,
            total_complexity=self.calculate_complexity(),
            health_score=health_score(entities),
        )

    def analyze_entity(self, name: str, entity: EntityDefinition) -> EntityAnalysis:
        fields = list(entity.fields)
        system_fields = [f for f in fields if is_system_field(f, entity.fields[f])]
        user_fields = [f for f in fields if f not in system_fields]
        usages = [self.analyze_field_usage(f, entity) for f in fields]

        analysis = EntityAnalysis(
            name=name,
            field_count=len(fields),
            system_fields=system_fields,
            user_fields=user_fields,
            behavior_count=len(entity.behaviors),
            ui_config_points=self.count_ui_config_points(entity),
            field_usages=usages,
        )
        analysis.warnings = self._warnings(entity, analysis)
        analysis.suggestions = self._suggestions(entity, usages)
        return analysis

    def analyze_field_usage(self, field_name: str, entity: EntityDefinition) -> FieldUsage:
        """Every configuration location that references `field_name`, in a fixed order"""
        usage = FieldUsage(field=field_name)
        points = usage.usage_points
        ui = entity.ui

        display = ui.display if ui else None
        if display is not None:
            if display.primary == field_name:
                points.append(UsagePoint(
                    "ui.display.primary", "Display Configuration", "Main identifier text in cards and lists"
                ))
            if display.secondary == field_name:
                points.append(UsagePoint(
                    "ui.display.secondary", "Display Configuration", "Secondary text shown below primary"
                ))
            if display.badge == field_name:
                points.append(UsagePoint("ui.display.badge", "Display Configuration", "Colored badge indicator"))
            if display.color is not None and display.color.field == field_name:
                points.append(UsagePoint(
                    "ui.display.color.field", "Display Configuration", "Field used for color coding"
                ))
            if field_name in display.metadata:
                points.append(UsagePoint(
                    "ui.display.metadata", "Display Configuration", "Metadata text shown at bottom"
                ))

        list_ui = ui.list_ if ui else None
        if list_ui is not None:
            if field_name in list_ui.columns:
                points.append(UsagePoint("ui.list.columns", "List View", "Table column in list view"))
            if isinstance(list_ui.filterable, list) and field_name in list_ui.filterable:
                points.append(UsagePoint("ui.list.filterable", "List View", "Filter dropdown option"))
            if field_name in list_ui.searchable:
                points.append(UsagePoint("ui.list.searchable", "List View", "Searchable field"))

        if ui is not None and ui.form is not None and field_name in ui.form.fields:
            points.append(UsagePoint("ui.form.fields", "Form View", "Form input field"))

        if ui is not None and ui.detail is not None:
            for index, section in enumerate(ui.detail.sections):
                if field_name in section.fields:
                    points.append(UsagePoint(
                        f"ui.detail.sections[{index}]",
                        f"Detail Section: {section.title}",
                        "Field shown in detail view section",
                    ))

        for behavior_name, behavior in entity.behaviors.items():
            if behavior.fields and field_name in behavior.fields:
                points.append(UsagePoint(
                    f"behaviors.{behavior_name}", "Behavior Action", f'Updated by "{behavior_name}" action'
                ))

        return usage

    def generate_dependency_graph(self) -> DependencyGraph:
        """Entity and field nodes, one edge per usage point colored by impact"""
        graph = DependencyGraph()

        for entity_name, entity in self.app.entities.items():
            graph.nodes.append({
                "id": entity_name,
                "type": "entity",
                "label": entity_name,
                "color": ENTITY_NODE_COLOR,
            })
            for field_name, field_def in entity.fields.items():
                field_id = f"{entity_name}.{field_name}"
                graph.nodes.append({
                    "id": field_id,
                    "type": "field",
                    "label": field_name,
                    "parent": entity_name,
                    "color": SYSTEM_FIELD_COLOR if is_system_field(field_name, field_def) else USER_FIELD_COLOR,
                })

                usage = self.analyze_field_usage(field_name, entity)
                for point in usage.usage_points:
                    graph.edges.append({
                        "from": field_id,
                        "to": point.location,
                        "label": point.context,
                        "color": IMPACT_COLORS[usage.impact_level],
                    })

        return graph

    def calculate_complexity(self) -> int:
        return len(self.app.entities) * 10 + len(self.app.views) * 5 + len(self.app.workflows) * 3

    @staticmethod
    def count_ui_config_points(entity: EntityDefinition) -> int:
        ui = entity.ui
        if ui is None:
            return 0
        count = 0
        for section in (ui.display, ui.list_, ui.form):
            if section is not None:
                count += len(section.model_dump(exclude_unset=True))
        if ui.detail is not None:
            count += len(ui.detail.sections) + len(ui.detail.actions)
        return count

    # ─── findings ────────────────────────────────────────────────────────

    def _warnings(self, entity: EntityDefinition, analysis: EntityAnalysis) -> list[str]:
        warnings: list[str] = []

        unused = analysis.unused_fields
        if unused:
            warnings.append(f"Unused fields: {', '.join(unused)}")

        display = entity.ui.display if entity.ui else None
        if display is None or not display.primary:
            warnings.append("No primary display field configured")

        if display is not None:
            display_fields = [f for f in (display.primary, display.secondary, display.badge) if f]
            form_fields = entity.ui.form.fields if entity.ui.form else []
            missing = [f for f in display_fields if f not in form_fields]
            if missing:
                warnings.append(f"Display fields not in form: {', '.join(missing)}")

        return warnings

    def _suggestions(self, entity: EntityDefinition, usages: list[FieldUsage]) -> list[str]:
        suggestions: list[str] = []

        list_ui = entity.ui.list_ if entity.ui else None
        searchable = list_ui.searchable if list_ui else []
        promote = [u.field for u in usages if u.impact_level == "high" and u.field != "id" and u.field not in searchable]
        if promote:
            suggestions.append(f"Consider adding to searchable: {', '.join(promote)}")

        display = entity.ui.display if entity.ui else None
        has_color = display is not None and display.color is not None and bool(display.color.field)
        if not has_color:
            enum_fields = [name for name, f in entity.fields.items() if f.type == FieldType.ENUM]
            if enum_fields:
                suggestions.append(f"Consider color coding enum field: {enum_fields[0]}")

        return suggestions


def analyze_app(app: AppDefinition) -> SystemAnalysis:
    """Analyze every entity, view and workflow of `app`."""
    return TruthAnalyzer(app).analyze_system()
