"""
Rate limits for the anonymous auth endpoints.

Rates come from ``DEFAULT_THROTTLE_RATES`` under the ``login`` and
``register`` scopes and are counted per client address.
"""
from rest_framework.throttling import AnonRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


class RegisterRateThrottle(AnonRateThrottle):
    scope = 'register'
