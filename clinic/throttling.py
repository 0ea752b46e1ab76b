from rest_framework.throttling import AnonRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    """Per-IP limit on password attempts (``login`` rate)."""
    scope = 'login'


class HeartbeatRateThrottle(AnonRateThrottle):
    """Per-IP limit for display heartbeats (``heartbeat`` rate)."""
    scope = 'heartbeat'
