"""
Notification outbox and the self-scoped notification queries.

Appointment and medication services describe *what* should be sent as a
list of :class:`NotificationIntent` and hand it to :func:`dispatch`.  The
batch is only delivered once the surrounding transaction commits, on a
small worker pool (or inline when ``NOTIFICATIONS_ASYNC`` is off), so a
failed notification can never change the outcome of the request that
caused it.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import close_old_connections, connections, transaction
from rest_framework.exceptions import NotFound

from care.context import RequestContext
from care.exceptions import PersistenceFailed
from care.models import Notification
from care.repositories import notifications as repo

logger = logging.getLogger(__name__)

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


@dataclass(frozen=True)
class NotificationIntent:
    recipient_id: int
    title: str
    message: str
    type: str
    related_id: Optional[int] = None


def user_group(user_id: int) -> str:
    return f"notifications.user.{user_id}"


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=max(1, settings.NOTIFICATIONS_WORKERS), thread_name_prefix='notifications'
            )
        return _executor


def dispatch(intents: Iterable[NotificationIntent]) -> None:
    """Queue ``intents`` for delivery after the current transaction commits."""
    batch = list(intents)
    if not batch:
        return
    transaction.on_commit(lambda: _schedule(batch), robust=True)


def _schedule(batch: list[NotificationIntent]) -> None:
    if settings.NOTIFICATIONS_ASYNC:
        _get_executor().submit(_deliver_in_worker, batch)
    else:
        deliver(batch)


def _deliver_in_worker(batch: list[NotificationIntent]) -> None:
    # nothing waits on the future, so errors are logged here or lost
    close_old_connections()
    try:
        deliver(batch)
    except Exception:
        logger.exception('Notification batch of %s failed', len(batch))
    finally:
        connections.close_all()


def deliver(batch: Iterable[NotificationIntent]) -> list[Notification]:
    """Store one row per intent and push it to the recipient's socket group.

    Each intent is independent: a failure is logged and the rest still go out.
    """
    created: list[Notification] = []
    for intent in batch:
        try:
            with transaction.atomic():
                row = Notification.objects.create(
                    recipient_id=intent.recipient_id,
                    title=intent.title,
                    message=intent.message,
                    type=intent.type,
                    related_id=intent.related_id,
                )
        except Exception:
            logger.exception('Failed to create %s notification for user %s', intent.type, intent.recipient_id)
            continue
        logger.info('Notification %s (%s) created for user %s', row.id, row.title, row.recipient_id)
        created.append(row)
        _push(row)
    return created


def _push(row: Notification) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    payload = {
        "type": "notification.created",
        "notificationId": row.id,
        "title": row.title,
        "message": row.message,
        "kind": row.type,
        "relatedId": row.related_id,
        "createdAt": row.created_at.isoformat(),
    }
    try:
        async_to_sync(channel_layer.group_send)(user_group(row.recipient_id), payload)
    except Exception:
        # the row is stored; the client picks it up on its next poll
        logger.warning('Realtime push failed for notification %s', row.id, exc_info=True)


# ---------------------------------------------------------------------
# Caller-scoped queries
# ---------------------------------------------------------------------
def list_for(ctx: RequestContext) -> list[Notification]:
    return repo.for_recipient(ctx.user_id)


def unread_for(ctx: RequestContext) -> list[Notification]:
    return repo.unread_for(ctx.user_id)


def unread_count(ctx: RequestContext) -> int:
    return repo.unread_count(ctx.user_id)


def _owned_or_404(ctx: RequestContext, notification_id: int) -> Notification:
    row = repo.owned(notification_id, ctx.user_id)
    if row is None:
        raise NotFound('Notification not found.')
    return row


def mark_read(ctx: RequestContext, notification_id: int) -> Notification:
    row = _owned_or_404(ctx, notification_id)
    if not row.is_read:
        row.is_read = True
        if not repo.update(row):
            raise PersistenceFailed()
    return row


def mark_all_read(ctx: RequestContext) -> int:
    count = repo.mark_all_read(ctx.user_id)
    if count < 0:
        raise PersistenceFailed()
    return count


def delete(ctx: RequestContext, notification_id: int) -> None:
    row = _owned_or_404(ctx, notification_id)
    if not repo.delete(row):
        raise PersistenceFailed()
