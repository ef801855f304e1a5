"""
BlockGov Resolution Templates

Built-in resolution templates, placeholder filling, and loading of
template packs from YAML or JSON files.

Usage:
    from blockgov.templates import TemplateCatalog, apply_template, load_template_pack

    catalog = TemplateCatalog()
    text = apply_template(catalog.get("TPL-007"), {"office": "Works Bureau"})

    # Built-ins plus the templates of a pack
    catalog = load_template_pack("packs/templates.yaml")
"""
from __future__ import annotations

from .catalog import (
    BUILTIN_TEMPLATES,
    ResolutionTemplate,
    TemplateCatalog,
    apply_template,
    missing_variables,
    placeholders,
)
from .loader import load_template_pack, load_template_pack_from_string
from .schema import (
    SCHEMA_VERSION,
    TemplatePackSchema,
    TemplateSchema,
    check_schema_version,
    validate_template_pack,
)

__all__ = [
    # Templates
    "BUILTIN_TEMPLATES",
    "ResolutionTemplate",
    "TemplateCatalog",
    "apply_template",
    "missing_variables",
    "placeholders",
    # Packs
    "SCHEMA_VERSION",
    "TemplatePackSchema",
    "TemplateSchema",
    "check_schema_version",
    "validate_template_pack",
    "load_template_pack",
    "load_template_pack_from_string",
]
