"""
BlockGov Resolution Templates

Reusable resolution texts with ``{{variable}}`` placeholders.

Key components:
- ResolutionTemplate: One template and the variables it declares
- BUILTIN_TEMPLATES: The default catalogue
- apply_template / missing_variables: Fill and check placeholders
- TemplateCatalog: Lookup by id and by category
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional, Union

from ..models import TemplateCategory

PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


@dataclass(frozen=True)
class ResolutionTemplate:
    """
    A resolution text template.

    Attributes:
        id: Template identifier (e.g. "TPL-001")
        name: Short label
        category: administrative, technical, financial or legal
        content: Text with ``{{name}}`` placeholders
        variables: Placeholder names the caller must supply
        usage_count: How often the template has been used
    """
    id: str
    name: str
    category: TemplateCategory
    content: str
    variables: tuple[str, ...] = ()
    usage_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "content": self.content,
            "variables": list(self.variables),
            "usage_count": self.usage_count,
        }


def placeholders(content: str) -> tuple[str, ...]:
    """Distinct placeholder names in order of first appearance."""
    seen: dict[str, None] = {}
    for name in PLACEHOLDER.findall(content):
        seen.setdefault(name, None)
    return tuple(seen)


def apply_template(template: ResolutionTemplate, variables: Mapping[str, str]) -> str:
    """
    Replace every ``{{name}}`` occurrence with its value.

    Placeholders without a value are left as they are.

    Example:
        >>> apply_template(tpl, {"office": "Works Bureau"})
        'Under the governance office substitution power, ... Works Bureau ...'
    """
    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name in variables and variables[name] is not None:
            return str(variables[name])
        return match.group(0)

    return PLACEHOLDER.sub(substitute, template.content)


def missing_variables(
    template: ResolutionTemplate,
    variables: Mapping[str, str],
) -> list[str]:
    """Declared variables with no value, or a blank one, in declaration order."""
    return [
        name for name in template.variables
        if not str(variables.get(name) or "").strip()
    ]


# =============================================================================
# Built-in Catalogue
# =============================================================================

BUILTIN_TEMPLATES: tuple[ResolutionTemplate, ...] = (
    ResolutionTemplate(
        id="TPL-001",
        name="Supplementary budget approval",
        category=TemplateCategory.FINANCIAL,
        content=(
            "Following review of the case, I authorize a supplementary budget of "
            "{{amount}} FCFA for {{subject}}. This decision takes effect immediately."
        ),
        variables=("amount", "subject"),
        usage_count=45,
    ),
    ResolutionTemplate(
        id="TPL-002",
        name="Alternative supplier approval",
        category=TemplateCategory.ADMINISTRATIVE,
        content=(
            "As the original supplier is unavailable, I authorize the use of supplier "
            "{{supplier}} under the following conditions: {{conditions}}."
        ),
        variables=("supplier", "conditions"),
        usage_count=32,
    ),
    ResolutionTemplate(
        id="TPL-003",
        name="Contractual deadline waiver",
        category=TemplateCategory.LEGAL,
        content=(
            "I grant a waiver of {{days}} days on the original contractual deadline "
            "for lot {{lot}}. Reason: {{reason}}."
        ),
        variables=("days", "lot", "reason"),
        usage_count=28,
    ),
    ResolutionTemplate(
        id="TPL-004",
        name="Technical arbitration",
        category=TemplateCategory.TECHNICAL,
        content=(
            "Having reviewed the technical options presented, I approve solution "
            "{{solution}} proposed by {{office}}. Implementation expected within "
            "{{deadline}} days."
        ),
        variables=("solution", "office", "deadline"),
        usage_count=21,
    ),
    ResolutionTemplate(
        id="TPL-005",
        name="Reservation lifted",
        category=TemplateCategory.TECHNICAL,
        content=(
            "Following inspection of the corrective works, I lift reservation "
            "no. {{number}} concerning {{subject}}. The release report will be issued."
        ),
        variables=("number", "subject"),
        usage_count=18,
    ),
    ResolutionTemplate(
        id="TPL-006",
        name="Works budget amendment",
        category=TemplateCategory.FINANCIAL,
        content=(
            "I approve amendment no. {{number}} for {{amount}} FCFA "
            "({{percentage}}% of the original contract) for {{works}}."
        ),
        variables=("number", "amount", "percentage", "works"),
        usage_count=15,
    ),
    ResolutionTemplate(
        id="TPL-007",
        name="Bureau validation by substitution",
        category=TemplateCategory.ADMINISTRATIVE,
        content=(
            "Under the governance office substitution power, I perform the validation "
            "that {{office}} did not complete in time. This decision is logged for audit."
        ),
        variables=("office",),
        usage_count=12,
    ),
    ResolutionTemplate(
        id="TPL-008",
        name="Suspension order",
        category=TemplateCategory.LEGAL,
        content=(
            "I order the suspension of works on lot {{lot}} from {{date}} until the "
            "dispute concerning {{subject}} is resolved."
        ),
        variables=("lot", "date", "subject"),
        usage_count=8,
    ),
)


# =============================================================================
# Catalog
# =============================================================================

class TemplateCatalog:
    """
    Lookup over a set of resolution templates.

    Usage:
        catalog = TemplateCatalog()                 # built-in templates
        tpl = catalog.get("TPL-007")
        legal = catalog.by_category("legal")
    """

    def __init__(self, templates: Iterable[ResolutionTemplate] = BUILTIN_TEMPLATES):
        self._templates: dict[str, ResolutionTemplate] = {}
        for template in templates:
            self._templates[template.id] = template

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[ResolutionTemplate]:
        return iter(self._templates.values())

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def get(self, template_id: str) -> Optional[ResolutionTemplate]:
        return self._templates.get(template_id)

    def by_category(
        self, category: Union[TemplateCategory, str]
    ) -> list[ResolutionTemplate]:
        category = TemplateCategory(category)
        return [t for t in self._templates.values() if t.category == category]

    def most_used(self, limit: Optional[int] = None) -> list[ResolutionTemplate]:
        ranked = sorted(self._templates.values(), key=lambda t: (-t.usage_count, t.id))
        return ranked if limit is None else ranked[:limit]

    def merged(self, templates: Iterable[ResolutionTemplate]) -> TemplateCatalog:
        """A new catalog with these templates added; same ids replace existing ones."""
        return TemplateCatalog([*self._templates.values(), *templates])
