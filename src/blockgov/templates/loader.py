"""
BlockGov Template Pack Loader

Loads resolution template packs from YAML or JSON files and converts the
validated schemas into ResolutionTemplate models.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from ..exceptions import TemplatePackError
from ..models import TemplateCategory
from .catalog import BUILTIN_TEMPLATES, ResolutionTemplate, TemplateCatalog
from .schema import (
    SCHEMA_VERSION,
    TemplatePackSchema,
    TemplateSchema,
    check_schema_version,
    validate_template_pack,
)


def _convert_template(schema: TemplateSchema) -> ResolutionTemplate:
    return ResolutionTemplate(
        id=schema.id,
        name=schema.name,
        category=TemplateCategory(schema.category),
        content=schema.content,
        variables=tuple(schema.variables),
        usage_count=schema.usage_count,
    )


def _load_file(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def _build(data: Any, source: str, include_builtin: bool) -> TemplateCatalog:
    if not isinstance(data, dict):
        raise TemplatePackError(
            message="Template pack must be a mapping",
            details={"path": source},
        )
    if not check_schema_version(data):
        raise TemplatePackError(
            message=(
                f"Schema version mismatch: pack has {data.get('schema_version')}, "
                f"expected {SCHEMA_VERSION}"
            ),
            details={"path": source},
        )
    try:
        pack: TemplatePackSchema = validate_template_pack(data)
    except ValidationError as e:
        raise TemplatePackError(
            message=f"Template pack validation failed: {e.error_count()} errors",
            details={"errors": e.errors(include_url=False), "path": source},
        ) from e

    templates = [_convert_template(t) for t in pack.templates]
    base = TemplateCatalog(BUILTIN_TEMPLATES if include_builtin else ())
    return base.merged(templates)


def load_template_pack(
    path: Union[str, Path],
    include_builtin: bool = True,
) -> TemplateCatalog:
    """
    Load a template pack file into a catalog.

    Args:
        path: Path to a YAML or JSON file
        include_builtin: Start from the built-in templates; pack entries
            with the same id replace them

    Raises:
        TemplatePackError: If the file cannot be read or fails validation
    """
    path = Path(path)
    try:
        data = _load_file(path)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise TemplatePackError(
            message=f"Failed to load template pack: {e}",
            details={"path": str(path), "error": str(e)},
        ) from e
    return _build(data, str(path), include_builtin)


def load_template_pack_from_string(
    content: str,
    include_builtin: bool = True,
) -> TemplateCatalog:
    """Load a template pack from a YAML (or JSON) string."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise TemplatePackError(message=f"Failed to parse template pack: {e}") from e
    return _build(data, "<string>", include_builtin)
