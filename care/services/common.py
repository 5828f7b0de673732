from __future__ import annotations

import logging
from typing import Any, Optional

from rest_framework.exceptions import NotFound, PermissionDenied

from care.context import RequestContext
from care.exceptions import BadRequest

logger = logging.getLogger('care.services')


def check_body_id(path_id: int, body: Any, key: str, message: str = 'ID mismatch') -> None:
    """Reject an update whose body id is missing or differs from the path id.

    Runs before any database access.
    """
    raw = body.get(key) if hasattr(body, 'get') else None
    try:
        body_id = int(raw)
    except (TypeError, ValueError):
        body_id = None
    if body_id != path_id:
        raise BadRequest(message)


def get_or_404(repo, pk: int, label: str):
    obj = repo.get_by_id(pk)
    if obj is None:
        raise NotFound(f'{label} not found.')
    return obj


def ensure_access(ctx: RequestContext, patient, action: str, target: Optional[str] = None) -> None:
    """Employee or owner of ``patient``; anything else is a 403."""
    if ctx.can_access(patient):
        return
    logger.warning('User %s denied %s on %s', ctx.user_id, action, target or f'patient {getattr(patient, "id", None)}')
    raise PermissionDenied('You do not have access to this patient.')
