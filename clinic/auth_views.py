"""
Authentication views.

Staff log in with username (or email) and password and receive both a
legacy DRF token and a JWT pair.  Suspended accounts are refused here
and by both authentication classes.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.models import User
from clinic.serializers.auth import LoginSerializer, LogoutSerializer
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = 'Password resets are handled by the clinic administrator. Please contact them.'


def _profile(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'name': user.display_name(),
        'role': user.role,
    }


def _resolve_username(identifier: str) -> str:
    """Accept an email in place of the username."""
    if '@' in identifier:
        match = User.objects.filter(email__iexact=identifier).only('username').first()
        if match:
            return match.username
    return identifier


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    identifier = s.validated_data['identifier']
    password = s.validated_data['password']
    ip = request.META.get('REMOTE_ADDR')

    username = _resolve_username(identifier)
    candidate = User.objects.filter(username=username).first()
    if candidate and not candidate.is_active and candidate.check_password(password):
        log_action(user=candidate, action='login', object_type='user', object_id=candidate.id,
                   detail={'result': 'suspended', 'ip': ip})
        logger.warning("login refused for suspended account %s", candidate.id)
        return Response({'ok': False, 'error': {'code': 'account_suspended',
                                                'message': 'this account has been suspended'}}, status=403)

    user = authenticate(request, username=username, password=password)
    if not user:
        log_action(user=None, action='login', object_type='user', object_id=None,
                   detail={'result': 'fail', 'username': identifier, 'ip': ip})
        logger.warning("failed login for %s from %s", identifier, ip)
        return Response({'ok': False, 'error': {'code': 'invalid_credentials',
                                                'message': 'invalid username or password'}}, status=400)

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return Response({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': _profile(user),
    })

# ScopedRateThrottle reads throttle_scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise InvalidToken(e.args[0])
    data = dict(s.validated_data)
    data['jwt_access'] = data.pop('access')
    return Response({'ok': True, **data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the given refresh token, or all of the user's, and drop the legacy token."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            return Response({'ok': False, 'error': {'code': 'token_invalid', 'message': str(e)}}, status=400)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id)
    return Response({'ok': True, 'blacklisted': count})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response(_profile(request.user))


@api_view(['POST'])
@permission_classes([AllowAny])
def forgot_password_view(request):
    return Response({'ok': True, 'message': FORGOT_PASSWORD_MESSAGE})
