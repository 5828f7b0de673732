"""
The notification inbox endpoints and the outbox that fills it.
"""
from datetime import timedelta
from unittest import mock

from django.db import DatabaseError, transaction
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from care.models import Notification
from care.services import notifications
from care.services.notifications import NotificationIntent
from care.tests.factories import client_for, make_user


def _intent(user, title='New Appointment', **kw):
    return NotificationIntent(recipient_id=user.id, title=title, message=f'{title} message', type='appointment', **kw)


class NotificationInboxTests(APITestCase):
    def setUp(self) -> None:
        self.alice = make_user('alice', 'Patient')
        self.bob = make_user('bob', 'Employee')
        now = timezone.now()
        self.old = Notification.objects.create(
            recipient=self.alice, title='Old', message='old', type='appointment',
            created_at=now - timedelta(hours=2), is_read=True,
        )
        self.new = Notification.objects.create(
            recipient=self.alice, title='New', message='new', type='medication', related_id=5, created_at=now,
        )
        self.bobs = Notification.objects.create(recipient=self.bob, title='Bob', message='bob', type='appointment')
        self.client = client_for(self.alice)

    def test_list_newest_first_and_only_mine(self):
        r = self.client.get(reverse('list_notifications'))
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual([n['notificationId'] for n in r.data], [self.new.id, self.old.id])
        self.assertEqual(r.data[0]['relatedId'], 5)
        self.assertEqual(r.data[0]['type'], 'medication')
        self.assertFalse(r.data[0]['isRead'])

    def test_unread_and_count(self):
        r = self.client.get(reverse('unread_notifications'))
        self.assertEqual([n['notificationId'] for n in r.data], [self.new.id])
        r = self.client.get(reverse('unread_count'))
        self.assertEqual(r.data, 1)
        self.assertEqual(r.content, b'1')

    def test_mark_read(self):
        r = self.client.put(reverse('mark_read', args=[self.new.id]))
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data['isRead'])
        self.new.refresh_from_db()
        self.assertTrue(self.new.is_read)

    def test_someone_elses_notification_is_404(self):
        self.assertEqual(self.client.put(reverse('mark_read', args=[self.bobs.id])).status_code, 404)
        self.assertEqual(self.client.delete(reverse('delete_notification', args=[self.bobs.id])).status_code, 404)
        self.bobs.refresh_from_db()
        self.assertFalse(self.bobs.is_read)

    def test_mark_all_read_leaves_other_accounts_alone(self):
        r = self.client.put(reverse('mark_all_read'))
        self.assertEqual(r.data, {'updated': 1})
        self.assertFalse(Notification.objects.filter(recipient=self.alice, is_read=False).exists())
        self.assertTrue(Notification.objects.filter(recipient=self.bob, is_read=False).exists())

    def test_delete(self):
        r = self.client.delete(reverse('delete_notification', args=[self.old.id]))
        self.assertEqual(r.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Notification.objects.filter(id=self.old.id).exists())

    def test_mixed_case_paths_resolve(self):
        r = self.client.get('/api/Notification/unread-count')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data, 1)

    def test_requires_token(self):
        self.client.credentials()
        self.assertEqual(self.client.get(reverse('list_notifications')).status_code, 401)


class OutboxTests(APITestCase):
    def setUp(self) -> None:
        self.alice = make_user('alice')
        self.bob = make_user('bob')

    def test_delivered_only_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            notifications.dispatch([_intent(self.alice), _intent(self.bob)])
            self.assertFalse(Notification.objects.exists())
        self.assertEqual(len(callbacks), 1)
        self.assertEqual(Notification.objects.count(), 2)

    def test_rolled_back_write_sends_nothing(self):
        with self.captureOnCommitCallbacks(execute=True):
            try:
                with transaction.atomic():
                    notifications.dispatch([_intent(self.alice)])
                    raise DatabaseError('primary write failed')
            except DatabaseError:
                pass
        self.assertFalse(Notification.objects.exists())

    def test_one_failure_does_not_stop_the_rest(self):
        real_create = Notification.objects.create

        def flaky(**kwargs):
            if kwargs['recipient_id'] == self.alice.id:
                raise DatabaseError('boom')
            return real_create(**kwargs)

        with mock.patch.object(Notification.objects, 'create', side_effect=flaky):
            with self.assertLogs('care.services.notifications', level='ERROR'):
                created = notifications.deliver([_intent(self.alice), _intent(self.bob)])
        self.assertEqual([n.recipient_id for n in created], [self.bob.id])
        self.assertEqual(Notification.objects.count(), 1)

    def test_unexpected_error_is_logged_and_skipped(self):
        real_create = Notification.objects.create

        def broken(**kwargs):
            if kwargs['recipient_id'] == self.alice.id:
                raise ValueError('bad payload')
            return real_create(**kwargs)

        with mock.patch.object(Notification.objects, 'create', side_effect=broken):
            with self.assertLogs('care.services.notifications', level='ERROR') as logs:
                created = notifications.deliver([_intent(self.alice), _intent(self.bob)])
        self.assertEqual([n.recipient_id for n in created], [self.bob.id])
        self.assertIs(logs.records[0].exc_info[0], ValueError)

    @mock.patch('care.services.notifications.connections')
    @mock.patch('care.services.notifications.close_old_connections')
    def test_worker_logs_a_failed_batch(self, _close_old, connections):
        with mock.patch('care.services.notifications.deliver', side_effect=RuntimeError('layer gone')):
            with self.assertLogs('care.services.notifications', level='ERROR') as logs:
                notifications._deliver_in_worker([_intent(self.alice)])
        self.assertIn('Notification batch of 1 failed', logs.output[0])
        connections.close_all.assert_called_once()

    def test_push_failure_keeps_the_row(self):
        layer = mock.Mock()
        layer.group_send = mock.AsyncMock(side_effect=RuntimeError('layer down'))
        with mock.patch('care.services.notifications.get_channel_layer', return_value=layer):
            created = notifications.deliver([_intent(self.alice)])
        self.assertEqual(len(created), 1)
        self.assertTrue(Notification.objects.filter(recipient=self.alice).exists())

    def test_push_targets_the_recipient_group(self):
        layer = mock.Mock()
        layer.group_send = mock.AsyncMock()
        with mock.patch('care.services.notifications.get_channel_layer', return_value=layer):
            row = notifications.deliver([_intent(self.alice, related_id=9)])[0]
        group, payload = layer.group_send.await_args.args
        self.assertEqual(group, f'notifications.user.{self.alice.id}')
        self.assertEqual(payload['type'], 'notification.created')
        self.assertEqual(payload['notificationId'], row.id)
        self.assertEqual(payload['relatedId'], 9)

    @override_settings(NOTIFICATIONS_ASYNC=True)
    def test_async_mode_hands_batch_to_worker_pool(self):
        pool = mock.Mock()
        with mock.patch('care.services.notifications._get_executor', return_value=pool):
            with self.captureOnCommitCallbacks(execute=True):
                notifications.dispatch([_intent(self.alice)])
        pool.submit.assert_called_once()
        fn, batch = pool.submit.call_args.args
        self.assertIs(fn, notifications._deliver_in_worker)
        self.assertEqual([i.recipient_id for i in batch], [self.alice.id])
        self.assertFalse(Notification.objects.exists())

    def test_empty_batch_registers_nothing(self):
        with self.captureOnCommitCallbacks() as callbacks:
            notifications.dispatch([])
        self.assertEqual(callbacks, [])
