import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _inline_notifications(settings):
    """Deliver notifications on the test thread so assertions can see them."""
    settings.NOTIFICATIONS_ASYNC = False


@pytest.fixture(autouse=True)
def _reset_throttles():
    cache.clear()
    yield
    cache.clear()
