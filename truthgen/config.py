"""
Truthgen Project Config - Pydantic models for truthgen.yaml

Where sources live, where generated modules go, and which modules the
generated code imports its rendering primitives from.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from truthgen.errors import SchemaError

DEFAULT_CONFIG_FILE = "truthgen.yaml"


class SourcePaths(BaseModel):
    """Logical source locations, relative to the project root"""

    schema_file: str = Field("app/app.truth.yaml", alias="schemaFile")
    entities: str = "app/entities"
    templates: str = "app/templates"
    static: str = "app/static"
    extensions: str = "app/extensions"
    views: str = "app/views"
    components: str = "app/components"
    shared: str = "app/shared"

    model_config = {"populate_by_name": True}


class OutputPaths(BaseModel):
    """Generated-output locations"""

    root: str = "generated"
    views: str = "views"


class RenderContext(BaseModel):
    """
    Modules the generated code imports its primitives from.

    Generated modules never reach for ambient globals; every skeleton
    imports `html`/`useState`/`useEffect` from `runtime_module` and the
    component primitives from `components_module`.
    """

    runtime_module: str = Field("/runtime/ui.js", alias="runtimeModule")
    components_module: str = Field("/app/components/system/index.js", alias="componentsModule")
    models_root: str = Field("/runtime/generated/models", alias="modelsRoot")

    model_config = {"populate_by_name": True}

    def models_module(self, entity_name: str) -> str:
        """Module exporting the data hooks for one entity"""
        return f"{self.models_root.rstrip('/')}/{entity_name.lower()}.js"


class ProjectConfig(BaseModel):
    """Complete truthgen project configuration"""

    sources: SourcePaths = SourcePaths()
    output: OutputPaths = OutputPaths()
    render: RenderContext = RenderContext()

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "ProjectConfig":
        try:
            data = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as e:
            raise SchemaError(f"Invalid config syntax: {e}") from e
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise SchemaError(f"Invalid config: {e}") from e

    def to_yaml(self) -> str:
        return yaml.dump(
            self.model_dump(by_alias=True),
            default_flow_style=False,
            sort_keys=False,
        )


def load_config(path: str | Path | None = None) -> ProjectConfig:
    """
    Load project config.

    Without a path, `truthgen.yaml` in the working directory is used if it
    exists. A missing file yields the defaults; an explicitly named file
    that is missing or invalid raises SchemaError.
    """
    if path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_FILE
        if not candidate.exists():
            return ProjectConfig()
        path = candidate

    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaError(f"Cannot read config file {path}: {e}") from e
    return ProjectConfig.from_yaml(content)
