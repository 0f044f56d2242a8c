"""Pydantic schemas for action item types and action items."""

from __future__ import annotations

from datetime import datetime

from sales_analyzer.api.schemas.common import CamelModel
from sales_analyzer.models.enums import ActionItemPriority, ActionItemStatus


class ActionItemTypeCreateRequest(CamelModel):
    name: str | None = None
    description: str | None = None
    prompt: str | None = None
    enabled: bool = True
    color: str | None = None
    icon: str | None = None


class ActionItemTypeUpdateRequest(CamelModel):
    """Partial update; only fields present in the body are changed."""

    id: str | None = None
    name: str | None = None
    description: str | None = None
    prompt: str | None = None
    enabled: bool | None = None
    color: str | None = None
    icon: str | None = None


class ActionItemCreateRequest(CamelModel):
    analysis_id: str | None = None
    title: str | None = None
    description: str | None = None
    priority: ActionItemPriority | None = None
    deadline: datetime | None = None
    comments: str | None = None


class ActionItemUpdateRequest(CamelModel):
    """Partial update; ``deadline: null`` clears the deadline."""

    id: str | None = None
    status: ActionItemStatus | None = None
    priority: ActionItemPriority | None = None
    deadline: datetime | None = None
    comments: str | None = None
    title: str | None = None
    description: str | None = None
