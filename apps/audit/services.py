"""Helpers that write the audit trail."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

from django.db import models  # type: ignore

from .models import AuditLog, SensitiveDataAccess

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, models.Model):
        return value.pk
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(item) for item in value]
    if hasattr(value, "name") and hasattr(value, "size"):
        return value.name
    return value


def _actor(user):
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return user


def log_action(
    user,
    action: str,
    entity: models.Model | None = None,
    changes: Mapping[str, Any] | None = None,
    *,
    entity_type: str | None = None,
    entity_id: Any = None,
) -> AuditLog:
    """Append an entry to the audit log.

    ``entity`` gives both type and id; pass ``entity_type``/``entity_id``
    explicitly for records that no longer exist.
    """
    if entity is not None:
        entity_type = entity_type or entity.__class__.__name__
        entity_id = entity_id if entity_id is not None else entity.pk
    entry = AuditLog.objects.create(
        user=_actor(user),
        action=action,
        entity_type=entity_type or "",
        entity_id=str(entity_id) if entity_id is not None else "",
        changes=_jsonable(dict(changes or {})),
    )
    logger.debug("Audit %s %s#%s", action, entry.entity_type, entry.entity_id)
    return entry


def diff_fields(instance: models.Model, data: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Return ``{field: {"from": old, "to": new}}`` for the values that change."""
    changes: dict[str, dict[str, Any]] = {}
    for field, new_value in data.items():
        old_value = getattr(instance, field, None)
        if isinstance(old_value, models.Model):
            old_value = old_value.pk
        compare_new = new_value.pk if isinstance(new_value, models.Model) else new_value
        if old_value != compare_new:
            changes[field] = {"from": _jsonable(old_value), "to": _jsonable(compare_new)}
    return changes


def log_sensitive_access(
    user,
    action: str,
    data_type: str,
    property_obj=None,
    metadata: Mapping[str, Any] | None = None,
) -> SensitiveDataAccess:
    actor = _actor(user)
    return SensitiveDataAccess.objects.create(
        user=actor,
        user_role=getattr(actor, "role", "") or "",
        action=action,
        data_type=data_type,
        property=property_obj,
        metadata=_jsonable(dict(metadata or {})),
    )
