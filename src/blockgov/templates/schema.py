"""
BlockGov Template Pack Schemas

Pydantic models for validating resolution template packs (YAML/JSON).

A pack looks like:

    schema_version: "1.0.0"
    templates:
      - id: TPL-100
        name: Payment release
        category: financial
        content: "I release payment of {{amount}} to {{supplier}}."
        variables: [amount, supplier]

Every declared variable must appear in the content and every placeholder
in the content must be declared.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from .catalog import placeholders

SCHEMA_VERSION = "1.0.0"

TemplateCategoryValue = Literal["administrative", "technical", "financial", "legal"]


class TemplateSchema(BaseModel):
    """Schema for one resolution template."""
    id: str = Field(..., min_length=1, description="Unique template id")
    name: str = Field(..., min_length=1)
    category: TemplateCategoryValue
    content: str = Field(..., min_length=1, description="Text with {{name}} placeholders")
    variables: list[str] = Field(default_factory=list)
    usage_count: int = Field(0, ge=0)

    @model_validator(mode="after")
    def validate_placeholders(self) -> "TemplateSchema":
        found = set(placeholders(self.content))
        declared = set(self.variables)
        if found - declared:
            raise ValueError(
                f"Template {self.id}: undeclared placeholders {sorted(found - declared)}"
            )
        if declared - found:
            raise ValueError(
                f"Template {self.id}: variables not used in content {sorted(declared - found)}"
            )
        return self


class TemplatePackSchema(BaseModel):
    """Schema for a template pack file."""
    schema_version: str = SCHEMA_VERSION
    templates: list[TemplateSchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "TemplatePackSchema":
        ids = [t.id for t in self.templates]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate template ids: {duplicates}")
        return self


def validate_template_pack(data: dict[str, Any]) -> TemplatePackSchema:
    """
    Validate a template pack dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return TemplatePackSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """Compatible when the major version matches."""
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    return pack_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
