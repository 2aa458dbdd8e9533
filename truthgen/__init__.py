"""
Truthgen - declarative schema to UI view module generator

Entities and views described in one YAML schema become plain,
human-editable view modules, plus schema diagnostics from the analyzer.
"""

__version__ = "0.1.0"

from truthgen.spec import AppDefinition, EntityDefinition, FieldDefinition, ViewDefinition
from truthgen.errors import SchemaError, TruthgenError, UnknownViewError, ViewConfigError
from truthgen.generator import (
    GenerationResult,
    ViewGeneratorRegistry,
    generate_view,
    generate_views,
    write_generated,
)
from truthgen.analyzer import TruthAnalyzer, analyze_app

__all__ = [
    "AppDefinition",
    "EntityDefinition",
    "FieldDefinition",
    "ViewDefinition",
    "TruthgenError",
    "SchemaError",
    "UnknownViewError",
    "ViewConfigError",
    "GenerationResult",
    "ViewGeneratorRegistry",
    "generate_view",
    "generate_views",
    "write_generated",
    "TruthAnalyzer",
    "analyze_app",
]
