"""
Token authentication for the API.

Kept in its own module so DRF can import the authentication class during
start-up without pulling in any view module (which would import models
and cause circular imports).
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword.

    Inactive staff (``status='INACTIVE'``) are rejected even when their
    token still exists.
    """

    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        if getattr(user, 'status', 'ACTIVE') != 'ACTIVE':
            from rest_framework.exceptions import AuthenticationFailed
            raise AuthenticationFailed('User inactive or deleted.')
        return user, token
