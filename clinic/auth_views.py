"""
Authentication views.

Login issues both a DRF token (``Authorization: Token <key>``) and a JWT
pair.  Kept apart from ``clinic.authentication`` so DRF can import the
authentication class without pulling in the views.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from .serializers.auth import LoginSerializer
from .services.users import user_payload
from .throttling import LoginRateThrottle

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """
    Username/password login.  A ``role`` sent by the client is ignored;
    the role stored on the account is returned instead.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        logger.warning('Failed login for %r from %s', username, request.META.get('REMOTE_ADDR'))
        return Response({'success': False, 'error': 'Invalid username or password'}, status=400)
    if user.status != 'ACTIVE':
        logger.warning('Login refused for inactive account %r', username)
        return Response({'success': False, 'error': 'Account is inactive'}, status=400)

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    logger.info('User %s logged in', user.username)

    return Response({'success': True, 'data': {
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': user_payload(user),
    }})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({'success': True, 'data': user_payload(request.user)})


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    resp = TokenRefreshView.as_view()(request._request)
    data = dict(resp.data)
    if resp.status_code != 200:
        error = data.get('error') or data.get('detail') or 'Invalid refresh token'
        return Response({'success': False, 'error': str(error)},
                        status=resp.status_code)
    return Response({'success': True, 'data': {'jwt_access': data.get('access'), 'jwt_refresh': data.get('refresh')}})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the user."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            return Response({'success': False, 'error': str(e)}, status=400)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    return Response({'success': True, 'data': {'blacklisted': count}})
