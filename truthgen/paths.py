"""
Path resolution for truthgen projects.

Maps the logical source/output categories from ProjectConfig onto absolute
locations. Holds no generation logic.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from truthgen.config import OutputPaths, ProjectConfig, SourcePaths

SourceKind = Literal[
    "schema_file",
    "entities",
    "templates",
    "static",
    "extensions",
    "views",
    "components",
    "shared",
]


class PathResolver:
    """Resolve configured source and output locations against a project root."""

    def __init__(
        self,
        sources: SourcePaths | None = None,
        output: OutputPaths | None = None,
        base_dir: str | Path | None = None,
    ):
        self.sources = sources or SourcePaths()
        self.output = output or OutputPaths()
        self.base_dir = Path(base_dir).resolve() if base_dir else Path.cwd().resolve()

    @classmethod
    def from_config(cls, config: ProjectConfig, base_dir: str | Path | None = None) -> "PathResolver":
        return cls(config.sources, config.output, base_dir)

    def _resolve(self, path: str | Path, relative_path: str = "") -> Path:
        base = Path(path)
        if not base.is_absolute():
            base = self.base_dir / base
        if relative_path:
            base = base / relative_path
        return base.resolve()

    # ─── sources ─────────────────────────────────────────────────────────

    def get_schema_file(self) -> Path:
        return self._resolve(self.sources.schema_file)

    def get_source_path(self, kind: SourceKind, relative_path: str = "") -> Path:
        if kind == "schema_file":
            return self.get_schema_file()
        return self._resolve(getattr(self.sources, kind), relative_path)

    def get_entities_path(self, relative_path: str = "") -> Path:
        return self.get_source_path("entities", relative_path)

    def get_templates_path(self, relative_path: str = "") -> Path:
        return self.get_source_path("templates", relative_path)

    def get_static_path(self, relative_path: str = "") -> Path:
        return self.get_source_path("static", relative_path)

    def get_extensions_path(self, relative_path: str = "") -> Path:
        return self.get_source_path("extensions", relative_path)

    def get_views_path(self, relative_path: str = "") -> Path:
        return self.get_source_path("views", relative_path)

    def get_components_path(self, relative_path: str = "") -> Path:
        return self.get_source_path("components", relative_path)

    def get_shared_path(self, relative_path: str = "") -> Path:
        return self.get_source_path("shared", relative_path)

    # ─── output ──────────────────────────────────────────────────────────

    def get_output_path(self, relative_path: str = "") -> Path:
        return self._resolve(self.output.root, relative_path)

    def get_view_output_path(self, view_name: str) -> Path:
        """Where the module for `view_name` is materialized"""
        return self.get_output_path(f"{self.output.views}/{view_name}.js")

    # ─── enumeration ─────────────────────────────────────────────────────

    def get_all_source_paths(self) -> list[Path]:
        return [
            self.get_schema_file(),
            self.get_entities_path(),
            self.get_templates_path(),
            self.get_static_path(),
            self.get_extensions_path(),
            self.get_views_path(),
            self.get_components_path(),
            self.get_shared_path(),
        ]

    def get_watchable_paths(self) -> list[Path]:
        """Locations whose changes should trigger regeneration"""
        return [
            self.get_schema_file(),
            self.get_templates_path(),
            self.get_extensions_path(),
            self.get_views_path(),
            self.get_components_path(),
            self.get_shared_path(),
        ]

    def resolve_relative_to(self, base_path: str | Path, relative_path: str) -> Path:
        return (Path(base_path) / relative_path).resolve()

    def get_source_directory(self, kind: SourceKind) -> Path:
        """Directory for a source kind; the schema file maps to its parent."""
        if kind == "schema_file":
            return self.get_schema_file().parent
        return self.get_source_path(kind)
