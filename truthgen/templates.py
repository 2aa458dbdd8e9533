"""
Template Loader - resolve a named view template through a fallback chain

Resolution order, first match wins:

1. App override      <sources.templates>/<name>.template.js (rendered with Jinja2)
2. Package skeleton  truthgen/skeletons/<name>.template.js (raw token text)
3. Static markup     <sources.static>/<name>.html ({{variable}} lookup)
4. Built-in fallback about/help, else a generic placeholder view

Loading never fails: a tier that cannot be read or rendered is logged and
skipped, so the only errors generation surfaces come from view validation.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from truthgen.config import RenderContext
from truthgen.fragments import (
    camel_case,
    field_label,
    html_text,
    js_string,
    kebab_case,
    option_label,
    pascal_case,
    plural,
)
from truthgen.gen_logging import get_logger
from truthgen.paths import PathResolver
from truthgen.spec import AppDefinition, EntityDefinition, ViewDefinition

logger = get_logger(__name__)

SKELETONS_DIR = Path(__file__).parent / "skeletons"
TEMPLATE_SUFFIX = ".template.js"
STATIC_SUFFIX = ".html"

_STATIC_VARIABLE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_.]*)\s*\}\}")


# ═══════════════════════════════════════════════════════════════════════════
# JINJA ENVIRONMENT SETUP
# ═══════════════════════════════════════════════════════════════════════════


def create_jinja_env(templates_dir: Path) -> Environment:
    """Create Jinja2 environment with custom filters for view templates."""

    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html", "xml"], default_for_string=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )

    # String transformation filters
    env.filters["camel_case"] = camel_case
    env.filters["pascal_case"] = pascal_case
    env.filters["kebab_case"] = kebab_case
    env.filters["plural"] = plural
    env.filters["field_label"] = field_label
    env.filters["option_label"] = option_label

    # Literal encoding filters
    env.filters["js_string"] = js_string
    env.filters["html_text"] = html_text
    env.filters["to_json"] = lambda x: json.dumps(x, indent=2)
    env.filters["to_yaml"] = lambda x: yaml.dump(x, default_flow_style=False)

    return env


# ═══════════════════════════════════════════════════════════════════════════
# TEMPLATE CONTEXT
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class TemplateContext:
    """Values a template may draw on while being loaded."""

    view_name: str
    view: ViewDefinition | None = None
    entity: EntityDefinition | None = None
    app: AppDefinition | None = None
    render: RenderContext = field(default_factory=RenderContext)
    values: dict[str, Any] = field(default_factory=dict)

    def top_level(self) -> dict[str, Any]:
        data: dict[str, Any] = {"viewName": self.view_name, "view_name": self.view_name}
        if self.entity is not None and self.entity.name:
            data["entity"] = self.entity.name
            data["entityLower"] = self.entity.name.lower()
        data.update(self.values)
        return data

    def lookup(self, key: str) -> Any | None:
        """First match in the context itself, then the view, then the app."""
        top = self.top_level()
        if key in top:
            return top[key]
        if self.view is not None:
            view_data = self.view.model_dump(mode="json", by_alias=True, exclude_none=True)
            if key in view_data:
                return view_data[key]
        if self.app is not None:
            app_data = self.app.model_dump(
                mode="json", include={"name", "version", "description"}, exclude_none=True
            )
            if key in app_data:
                return app_data[key]
        return None

    def as_jinja(self) -> dict[str, Any]:
        return {
            **self.top_level(),
            "view_name": self.view_name,
            "view": self.view,
            "entity": self.entity,
            "app": self.app,
            "render": self.render,
        }


# ═══════════════════════════════════════════════════════════════════════════
# BUILT-IN FALLBACKS
# ═══════════════════════════════════════════════════════════════════════════

_MODULE_HEADER = """\
// Generated {{ view_name }} Component
import { html } from {{ render.runtime_module | js_string }}
import { Card } from {{ render.components_module | js_string }}

"""

FALLBACK_TEMPLATES: dict[str, str] = {
    "about": _MODULE_HEADER + """\
export default function {{ view_name }}() {
  return html`
    <${Card}>
      <h1>About {{ (app.name if app else view_name) | html_text }}</h1>
{% if app and app.description %}
      <p>{{ app.description | html_text }}</p>
{% endif %}
{% if app and app.version %}
      <p class="text-muted">Version {{ app.version | html_text }}</p>
{% endif %}
    </${Card}>
  `
}
""",
    "help": _MODULE_HEADER + """\
export default function {{ view_name }}() {
  return html`
    <${Card}>
      <h1>Help</h1>
      <p>Use the navigation to browse {{ (app.name if app else "the application") | html_text }}.</p>
{% if app %}
      <ul>
{% for entity_name in app.entities %}
        <li>{{ entity_name | plural | html_text }}: {{ ("/" ~ (entity_name | kebab_case | plural)) | html_text }}</li>
{% endfor %}
      </ul>
{% endif %}
    </${Card}>
  `
}
""",
}

GENERIC_FALLBACK = _MODULE_HEADER + """\
export default function {{ view_name }}() {
  return html`
    <${Card}>
      <h1>{{ ((view.title if view and view.title) or view_name) | html_text }}</h1>
      <p>This view has no template yet.</p>
    </${Card}>
  `
}
"""


# ═══════════════════════════════════════════════════════════════════════════
# LOADER
# ═══════════════════════════════════════════════════════════════════════════


class TemplateLoader:
    """
    Resolve view templates for generation.

    App overrides are Jinja2 templates. Package skeletons are returned as
    raw text: their `__TOKEN__` placeholders are filled by the generators.
    """

    def __init__(
        self,
        templates_dir: Path | None = None,
        static_dir: Path | None = None,
        skeletons_dir: Path | None = None,
    ):
        self.templates_dir = templates_dir
        self.static_dir = static_dir
        self.skeletons_dir = skeletons_dir or SKELETONS_DIR
        self.env = create_jinja_env(templates_dir or self.skeletons_dir)

    @classmethod
    def from_resolver(cls, resolver: PathResolver) -> "TemplateLoader":
        return cls(resolver.get_templates_path(), resolver.get_static_path())

    def load_template(self, name: str, context: TemplateContext) -> str:
        """Return template text for `name`. Never raises."""
        for tier in (self._load_app_template, self._load_core_template, self._load_static_template):
            text = tier(name, context)
            if text is not None:
                return text
        return self._load_fallback_template(name, context)

    # ─── tiers ───────────────────────────────────────────────────────────

    def _load_app_template(self, name: str, context: TemplateContext) -> str | None:
        if self.templates_dir is None:
            return None
        path = self.templates_dir / f"{name}{TEMPLATE_SUFFIX}"
        if not path.is_file():
            return None
        try:
            template = self.env.get_template(f"{name}{TEMPLATE_SUFFIX}")
            text = template.render(**context.as_jinja())
        except (OSError, TemplateError) as e:
            logger.debug(f"App template {path} unusable, falling back: {e}")
            return None
        except Exception as e:
            # Runtime errors inside the template itself, e.g. bad arithmetic on context values
            logger.warning(f"App template {path} failed to render, falling back: {e!r}")
            return None
        logger.debug(f"Using app template for '{name}': {path}")
        return text

    def _load_core_template(self, name: str, context: TemplateContext) -> str | None:
        path = self.skeletons_dir / f"{name}{TEMPLATE_SUFFIX}"
        if not path.is_file():
            return None
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.debug(f"Skeleton {path} unreadable, falling back: {e}")
            return None
        logger.debug(f"Using core skeleton for '{name}'")
        return text

    def _load_static_template(self, name: str, context: TemplateContext) -> str | None:
        if self.static_dir is None:
            return None
        path = self.static_dir / f"{name}{STATIC_SUFFIX}"
        if not path.is_file():
            return None
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.debug(f"Static template {path} unreadable, falling back: {e}")
            return None
        logger.debug(f"Using static template for '{name}': {path}")
        return substitute_static_variables(text, context)

    def _load_fallback_template(self, name: str, context: TemplateContext) -> str:
        source = FALLBACK_TEMPLATES.get(name, GENERIC_FALLBACK)
        logger.debug(f"No template found for '{name}', using built-in fallback")
        try:
            return self.env.from_string(source).render(**context.as_jinja())
        except Exception as e:
            logger.debug(f"Fallback for '{name}' failed to render, using the generic placeholder: {e!r}")
        minimal = TemplateContext(view_name=context.view_name, render=context.render)
        return self.env.from_string(GENERIC_FALLBACK).render(**minimal.as_jinja())

    # ─── discovery ───────────────────────────────────────────────────────

    def list_available_templates(self) -> dict[str, list[str]]:
        """Template names per tier: app overrides, core skeletons, static markup."""
        return {
            "app": _names_in(self.templates_dir, TEMPLATE_SUFFIX),
            "core": _names_in(self.skeletons_dir, TEMPLATE_SUFFIX),
            "static": _names_in(self.static_dir, STATIC_SUFFIX),
        }


def substitute_static_variables(text: str, context: TemplateContext) -> str:
    """Replace `{{variable}}` tokens from the context; unknown tokens stay verbatim."""

    def replace(match: re.Match[str]) -> str:
        value = context.lookup(match.group(1))
        if value is None:
            return match.group(0)
        return str(value)

    return _STATIC_VARIABLE.sub(replace, text)


def _names_in(directory: Path | None, suffix: str) -> list[str]:
    if directory is None or not directory.is_dir():
        return []
    return sorted(p.name[: -len(suffix)] for p in directory.iterdir() if p.name.endswith(suffix))
