"""
BlockGov Workspace Models

Tabs of the multi-view workspace.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from .enums import TabType


def make_tab_id(tab_type: Union[TabType, str], discriminator: Optional[str] = None) -> str:
    """
    Derive a tab id from its type and a discriminator.

    Opening the same view twice yields the same id, so the workspace
    activates the existing tab instead of duplicating it.

    Example:
        >>> make_tab_id(TabType.CASE_DETAIL, "BLK-001")
        'case-detail:BLK-001'
    """
    type_value = TabType(tab_type).value
    if not discriminator:
        return type_value
    return f"{type_value}:{discriminator}"


@dataclass(frozen=True)
class WorkspaceTab:
    """
    An open view.

    Attributes:
        id: Unique id, derived from type and discriminator
        type: Kind of view
        title: Label shown to the user
        payload: Opaque view parameters (queue name, case id, ...)
    """
    id: str
    type: TabType
    title: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        tab_type: Union[TabType, str],
        title: str,
        discriminator: Optional[str] = None,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> WorkspaceTab:
        """Factory method deriving the id from type and discriminator."""
        tab_type = TabType(tab_type)
        return cls(
            id=make_tab_id(tab_type, discriminator),
            type=tab_type,
            title=title,
            payload=dict(payload or {}),
        )
