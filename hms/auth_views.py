"""
Login, callback and logout endpoints for the external OIDC provider.

The login view stores a random ``state``/``nonce`` pair in the server
side session and redirects the browser to the provider.  The callback
checks the state, exchanges the code, checks the nonce in the returned
``id_token``, upserts the user from the provider's claims and starts a
normal Django session.  Everything is
kept in ``request.session``; nothing about the login lives in process
memory.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import login, logout
from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from .serializers.auth import CallbackQuerySerializer
from .services import oidc

logger = logging.getLogger(__name__)

SESSION_STATE_KEY = 'oidc_state'
SESSION_NONCE_KEY = 'oidc_nonce'


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    if not settings.OIDC_ENABLE:
        return Response({'error': 'OIDC login not enabled on server'}, status=status.HTTP_501_NOT_IMPLEMENTED)
    state, nonce = oidc.new_state(), oidc.new_state()
    try:
        url = oidc.authorization_url(state, nonce)
    except oidc.OidcError as e:
        logger.error('login redirect failed: %s', e)
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
    request.session[SESSION_STATE_KEY] = state
    request.session[SESSION_NONCE_KEY] = nonce
    return HttpResponseRedirect(url)


@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def callback_view(request):
    if not settings.OIDC_ENABLE:
        return Response({'error': 'OIDC login not enabled on server'}, status=status.HTTP_501_NOT_IMPLEMENTED)
    q = CallbackQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    if vd.get('error'):
        logger.warning('provider returned error on callback: %s %s', vd['error'], vd.get('error_description', ''))
        return Response({'error': f"login failed: {vd['error']}"}, status=status.HTTP_400_BAD_REQUEST)

    expected = request.session.pop(SESSION_STATE_KEY, None)
    nonce = request.session.pop(SESSION_NONCE_KEY, None)
    if not expected or expected != vd['state']:
        logger.warning('callback with unexpected state from %s', request.META.get('REMOTE_ADDR'))
        return Response({'error': 'invalid login state'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        tokens = oidc.exchange_code(vd['code'])
        oidc.check_nonce(tokens, nonce)
        claims = oidc.fetch_claims(tokens)
    except oidc.OidcError as e:
        logger.warning('OIDC login failed: %s', e)
        return Response({'error': f'login failed: {e}'}, status=status.HTTP_400_BAD_REQUEST)

    user, created = oidc.upsert_user(claims)
    login(request._request, user, backend='django.contrib.auth.backends.ModelBackend')
    logger.info('user %s signed in (%s)', user.pk, 'new' if created else 'existing')
    return HttpResponseRedirect(settings.LOGIN_REDIRECT_URL)


@api_view(['GET'])
@permission_classes([AllowAny])
def logout_view(request):
    user_id = getattr(request.user, 'pk', None)
    logout(request._request)
    if user_id:
        logger.info('user %s signed out', user_id)
    return HttpResponseRedirect(settings.LOGOUT_REDIRECT_URL)
