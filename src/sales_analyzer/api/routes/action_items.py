"""Action item type and action item routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, status

from sales_analyzer.api.dependencies import CurrentUser
from sales_analyzer.api.errors import Conflict, InvalidRequest, NotFound
from sales_analyzer.api.schemas.action_items import (
    ActionItemCreateRequest,
    ActionItemTypeCreateRequest,
    ActionItemTypeUpdateRequest,
    ActionItemUpdateRequest,
)
from sales_analyzer.models.enums import ActionItemPriority, ActionItemStatus
from sales_analyzer.services import action_items as service

types_router = APIRouter(prefix="/action-item-types", tags=["action-item-types"])
items_router = APIRouter(prefix="/action-items", tags=["action-items"])

TYPE_NOT_FOUND = "Action item type not found"
ITEM_NOT_FOUND = "Action item not found"


@types_router.get("")
def list_types(user: CurrentUser) -> dict[str, Any]:
    return {"success": True, "actionItemTypes": service.list_action_item_types(user["id"])}


@types_router.post("", status_code=status.HTTP_201_CREATED)
def create_type(payload: ActionItemTypeCreateRequest, user: CurrentUser) -> dict[str, Any]:
    """Create an action item type.

    Raises:
        InvalidRequest: Name or prompt missing (400).
        Conflict: Name already used by another of the caller's types (409).
    """
    if not (payload.name or "").strip() or not (payload.prompt or "").strip():
        raise InvalidRequest("Name and prompt are required")
    try:
        item_type = service.create_action_item_type(
            user["id"],
            name=payload.name,
            prompt=payload.prompt,
            description=payload.description,
            enabled=payload.enabled,
            color=payload.color,
            icon=payload.icon,
        )
    except service.DuplicateActionItemType as exc:
        raise Conflict(str(exc)) from exc
    return {"success": True, "actionItemType": item_type}


@types_router.put("")
def update_type(payload: ActionItemTypeUpdateRequest, user: CurrentUser) -> dict[str, Any]:
    if not payload.id:
        raise InvalidRequest("Action item type ID is required")
    changes = payload.model_dump(exclude_unset=True, exclude={"id"})
    try:
        item_type = service.update_action_item_type(user["id"], payload.id, changes)
    except service.DuplicateActionItemType as exc:
        raise Conflict(str(exc)) from exc
    if item_type is None:
        raise NotFound(TYPE_NOT_FOUND)
    return {"success": True, "actionItemType": item_type}


@types_router.delete("")
def delete_type(
    user: CurrentUser, type_id: str | None = Query(None, alias="id")
) -> dict[str, Any]:
    if not type_id:
        raise InvalidRequest("Action item type ID is required")
    if not service.delete_action_item_type(user["id"], type_id):
        raise NotFound(TYPE_NOT_FOUND)
    return {"success": True, "message": "Action item type deleted successfully"}


@items_router.get("")
def list_items(
    user: CurrentUser,
    analysis_id: str | None = Query(None, alias="analysisId"),
    item_status: ActionItemStatus | None = Query(None, alias="status"),
    priority: ActionItemPriority | None = Query(None),
    timeframe: str | None = Query(None, pattern="^(24h|7d|30d|all)$"),
) -> dict[str, Any]:
    """List the caller's action items.

    With ``analysisId`` the other filters are ignored.
    """
    items = service.list_action_items(
        user["id"],
        analysis_id=analysis_id,
        status=item_status.value if item_status else None,
        priority=priority.value if priority else None,
        timeframe=timeframe,
    )
    return {"success": True, "actionItems": items}


@items_router.post("", status_code=status.HTTP_201_CREATED)
def create_item(payload: ActionItemCreateRequest, user: CurrentUser) -> dict[str, Any]:
    if not payload.analysis_id or not (payload.title or "").strip():
        raise InvalidRequest("Analysis ID and title are required")
    item = service.create_action_item(
        user["id"],
        analysis_id=payload.analysis_id,
        title=payload.title,
        description=payload.description,
        priority=payload.priority.value if payload.priority else None,
        deadline=payload.deadline,
        comments=payload.comments,
    )
    if item is None:
        raise NotFound("Analysis not found or access denied")
    return {"success": True, "actionItem": item}


@items_router.put("")
def update_item(payload: ActionItemUpdateRequest, user: CurrentUser) -> dict[str, Any]:
    if not payload.id:
        raise InvalidRequest("Action item ID is required")
    changes = payload.model_dump(exclude_unset=True, exclude={"id"})
    item = service.update_action_item(user["id"], payload.id, changes)
    if item is None:
        raise NotFound(ITEM_NOT_FOUND)
    return {"success": True, "actionItem": item}


@items_router.delete("")
def delete_item(
    user: CurrentUser, item_id: str | None = Query(None, alias="id")
) -> dict[str, Any]:
    if not item_id:
        raise InvalidRequest("Action item ID is required")
    if not service.delete_action_item(user["id"], item_id):
        raise NotFound(ITEM_NOT_FOUND)
    return {"success": True, "message": "Action item deleted successfully"}
