"""Action item types (per-user extraction prompts) and action items."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from sales_analyzer.data.db import get_session
from sales_analyzer.data.models import ActionItem, ActionItemType, Analysis
from sales_analyzer.models.enums import ActionItemPriority
from sales_analyzer.services.serialization import action_item_to_dict, action_item_type_to_dict

logger = logging.getLogger(__name__)

DUPLICATE_TYPE_MESSAGE = "Action item type with this name already exists"

TIMEFRAMES: dict[str, timedelta | None] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "all": None,
}

# Non-nullable columns; a null or empty value in an update leaves them unchanged.
_REQUIRED_TYPE_FIELDS = frozenset({"name", "prompt", "enabled"})
_REQUIRED_ITEM_FIELDS = frozenset({"title", "status", "priority"})


class DuplicateActionItemType(ValueError):
    """Another type owned by the same user already has this name."""


def _strip(value: str | None) -> str | None:
    return value.strip() if isinstance(value, str) else value


def _name_taken(session, user_id: str, name: str, exclude_id: str | None = None) -> bool:
    query = session.query(ActionItemType.id).filter(
        ActionItemType.user_id == user_id,
        func.lower(ActionItemType.name) == name.strip().lower(),
    )
    if exclude_id is not None:
        query = query.filter(ActionItemType.id != exclude_id)
    return query.first() is not None


def list_action_item_types(user_id: str) -> list[dict[str, Any]]:
    with get_session() as session:
        types = (
            session.query(ActionItemType)
            .filter(ActionItemType.user_id == user_id)
            .order_by(ActionItemType.created_at.asc())
            .all()
        )
        logger.info("Retrieved %d action item types for user %s", len(types), user_id)
        return [action_item_type_to_dict(t) for t in types]


def create_action_item_type(
    user_id: str,
    name: str,
    prompt: str,
    description: str | None = None,
    enabled: bool = True,
    color: str | None = None,
    icon: str | None = None,
) -> dict[str, Any]:
    """Create a type for ``user_id``.

    Raises:
        DuplicateActionItemType: The user already has a type with this name.
    """
    with get_session() as session:
        if _name_taken(session, user_id, name):
            raise DuplicateActionItemType(DUPLICATE_TYPE_MESSAGE)
        item_type = ActionItemType(
            user_id=user_id,
            name=name.strip(),
            prompt=prompt.strip(),
            description=_strip(description),
            enabled=enabled,
            color=_strip(color),
            icon=_strip(icon),
        )
        session.add(item_type)
        session.flush()
        logger.info("Created action item type %s for user %s", item_type.id, user_id)
        return action_item_type_to_dict(item_type)


def update_action_item_type(
    user_id: str, type_id: str, changes: dict[str, Any]
) -> dict[str, Any] | None:
    """Apply ``changes`` to an owned type.

    Returns:
        The updated type, or None if it does not exist or belongs to someone else.

    Raises:
        DuplicateActionItemType: A rename collides with another of the user's types.
    """
    with get_session() as session:
        item_type = session.get(ActionItemType, type_id)
        if item_type is None or item_type.user_id != user_id:
            return None
        new_name = _strip(changes.get("name"))
        if new_name and new_name != item_type.name and _name_taken(
            session, user_id, new_name, exclude_id=type_id
        ):
            raise DuplicateActionItemType(DUPLICATE_TYPE_MESSAGE)
        for field in ("name", "description", "prompt", "enabled", "color", "icon"):
            if field not in changes:
                continue
            value = _strip(changes[field])
            if field in _REQUIRED_TYPE_FIELDS and value in (None, ""):
                continue
            setattr(item_type, field, value)
        session.flush()
        logger.info(
            "Updated action item type %s (%s)", type_id, ", ".join(sorted(changes)) or "no changes"
        )
        return action_item_type_to_dict(item_type)


def delete_action_item_type(user_id: str, type_id: str) -> bool:
    with get_session() as session:
        item_type = session.get(ActionItemType, type_id)
        if item_type is None or item_type.user_id != user_id:
            return False
        logger.info("Deleting action item type %s (%s)", type_id, item_type.name)
        session.delete(item_type)
    return True


def list_action_items(
    user_id: str,
    analysis_id: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    timeframe: str | None = None,
) -> list[dict[str, Any]]:
    """Action items on the user's analyses, newest first.

    With ``analysis_id`` only that analysis's items are returned and the other
    filters are ignored. ``timeframe`` is one of ``TIMEFRAMES``.
    """
    with get_session() as session:
        query = (
            session.query(ActionItem)
            .join(Analysis, ActionItem.analysis_id == Analysis.id)
            .options(joinedload(ActionItem.analysis).joinedload(Analysis.upload))
            .filter(Analysis.user_id == user_id)
        )
        if analysis_id:
            query = query.filter(ActionItem.analysis_id == analysis_id)
        else:
            if status:
                query = query.filter(ActionItem.status == status)
            if priority:
                query = query.filter(ActionItem.priority == priority)
            window = TIMEFRAMES.get(timeframe or "all")
            if window is not None:
                query = query.filter(ActionItem.created_at >= datetime.now(UTC) - window)
        items = query.order_by(ActionItem.created_at.desc()).all()
        logger.info("Retrieved %d action items for user %s", len(items), user_id)
        return [action_item_to_dict(i, include_analysis=True) for i in items]


def create_action_item(
    user_id: str,
    analysis_id: str,
    title: str,
    description: str | None = None,
    priority: str | None = None,
    deadline: datetime | None = None,
    comments: str | None = None,
) -> dict[str, Any] | None:
    """Attach an action item to an owned analysis.

    Returns:
        The new item, or None if the analysis is missing or belongs to someone else.
    """
    with get_session() as session:
        analysis = session.get(Analysis, analysis_id)
        if analysis is None or analysis.user_id != user_id:
            return None
        item = ActionItem(
            analysis_id=analysis_id,
            title=title.strip(),
            description=_strip(description),
            priority=priority or ActionItemPriority.MEDIUM.value,
            deadline=deadline,
            comments=_strip(comments),
        )
        session.add(item)
        session.flush()
        logger.info("Created action item %s on analysis %s", item.id, analysis_id)
        return action_item_to_dict(item)


def _owned_item(session, user_id: str, item_id: str) -> ActionItem | None:
    return (
        session.query(ActionItem)
        .join(Analysis, ActionItem.analysis_id == Analysis.id)
        .filter(ActionItem.id == item_id, Analysis.user_id == user_id)
        .first()
    )


def update_action_item(
    user_id: str, item_id: str, changes: dict[str, Any]
) -> dict[str, Any] | None:
    with get_session() as session:
        item = _owned_item(session, user_id, item_id)
        if item is None:
            return None
        for field in ("status", "priority", "deadline", "comments", "title", "description"):
            if field not in changes:
                continue
            value = _strip(changes[field])
            if field in _REQUIRED_ITEM_FIELDS and value in (None, ""):
                continue
            setattr(item, field, value)
        session.flush()
        logger.info("Updated action item %s (%s)", item_id, ", ".join(sorted(changes)))
        return action_item_to_dict(item)


def delete_action_item(user_id: str, item_id: str) -> bool:
    with get_session() as session:
        item = _owned_item(session, user_id, item_id)
        if item is None:
            return False
        session.delete(item)
    logger.info("Deleted action item %s", item_id)
    return True
