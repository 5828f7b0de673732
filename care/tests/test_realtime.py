import json

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.urls import path

from care.realtime.consumers import NotificationConsumer
from care.realtime.middleware import JWTQueryAuthMiddleware
from care.services.accounts import issue_token
from care.services.notifications import user_group
from care.tests.factories import make_user

# consumers run DB lookups in another context; no wrapping transaction
pytestmark = pytest.mark.django_db(transaction=True)

application = JWTQueryAuthMiddleware(URLRouter([
    path("ws/notifications/", NotificationConsumer.as_asgi()),
]))


def test_anonymous_socket_is_refused():
    async def run():
        communicator = WebsocketCommunicator(application, "/ws/notifications/")
        connected, code = await communicator.connect()
        assert not connected
        assert code == 4001

    async_to_sync(run)()


def test_bad_token_is_refused():
    async def run():
        communicator = WebsocketCommunicator(application, "/ws/notifications/?token=garbage")
        connected, _ = await communicator.connect()
        assert not connected

    async_to_sync(run)()


def test_token_holder_receives_pushes_for_their_group():
    user = make_user('alice', 'Patient')
    token = issue_token(user)

    async def run():
        communicator = WebsocketCommunicator(application, f"/ws/notifications/?token={token}")
        connected, _ = await communicator.connect()
        assert connected
        welcome = json.loads(await communicator.receive_from())
        assert welcome["type"] == "welcome"

        await get_channel_layer().group_send(user_group(user.id), {
            "type": "notification.created", "notificationId": 1, "title": "New Appointment",
        })
        pushed = json.loads(await communicator.receive_from())
        assert pushed["notificationId"] == 1
        assert pushed["title"] == "New Appointment"
        await communicator.disconnect()

    async_to_sync(run)()
