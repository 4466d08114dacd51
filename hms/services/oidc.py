"""
OpenID Connect authorization-code login against the configured provider.

The provider's endpoints come from its discovery document, which is
cached in the Django cache.  Claims are read from the userinfo endpoint
with the access token obtained in the code exchange.
"""
import base64
import json
import logging
import secrets
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import requests
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import transaction

User = get_user_model()
logger = logging.getLogger(__name__)

DISCOVERY_CACHE_KEY = 'oidc:discovery'


class OidcError(RuntimeError):
    """The identity provider refused or returned something unusable."""


@dataclass
class OidcClaims:
    subject: str
    email: Optional[str] = None
    email_verified: bool = False
    first_name: str = ''
    last_name: str = ''
    profile_image_url: str = ''


def new_state() -> str:
    return secrets.token_urlsafe(24)


def _check_enabled():
    if not settings.OIDC_ENABLE:
        raise OidcError('OIDC login not enabled on server')


def discover() -> dict:
    _check_enabled()
    doc = cache.get(DISCOVERY_CACHE_KEY)
    if doc:
        return doc
    url = settings.OIDC_ISSUER_URL.rstrip('/') + '/.well-known/openid-configuration'
    try:
        r = requests.get(url, timeout=settings.OIDC_TIMEOUT)
        r.raise_for_status()
        doc = r.json()
    except (requests.RequestException, ValueError) as e:
        raise OidcError(f'discovery failed: {e}') from e
    for key in ('authorization_endpoint', 'token_endpoint', 'userinfo_endpoint'):
        if not doc.get(key):
            raise OidcError(f'discovery document is missing {key}')
    cache.set(DISCOVERY_CACHE_KEY, doc, settings.OIDC_DISCOVERY_TTL)
    return doc


def authorization_url(state: str, nonce: str) -> str:
    params = {
        'response_type': 'code',
        'client_id': settings.OIDC_CLIENT_ID,
        'redirect_uri': settings.OIDC_REDIRECT_URI,
        'scope': settings.OIDC_SCOPES,
        'state': state,
        'nonce': nonce,
        'prompt': 'login consent',
    }
    return f"{discover()['authorization_endpoint']}?{urlencode(params)}"


def exchange_code(code: str) -> dict:
    data = {
        'grant_type': 'authorization_code',
        'code': code,
        'redirect_uri': settings.OIDC_REDIRECT_URI,
        'client_id': settings.OIDC_CLIENT_ID,
        'client_secret': settings.OIDC_CLIENT_SECRET,
    }
    try:
        r = requests.post(discover()['token_endpoint'], data=data, timeout=settings.OIDC_TIMEOUT)
        r.raise_for_status()
        tokens = r.json()
    except (requests.RequestException, ValueError) as e:
        raise OidcError(f'token exchange failed: {e}') from e
    if 'error' in tokens:
        raise OidcError(f"token exchange failed: {tokens.get('error')} {tokens.get('error_description', '')}".strip())
    if not tokens.get('access_token'):
        raise OidcError('token response has no access_token')
    return tokens


def _truthy(value) -> bool:
    # some providers send "true" as a string
    return value is True or str(value).lower() == 'true'


def id_token_claims(tokens: dict) -> dict:
    """Payload of the ``id_token`` returned by the token endpoint.

    The token came straight from the provider over TLS in the code
    exchange, so its signature is not checked here.
    """
    raw = tokens.get('id_token')
    if not raw:
        raise OidcError('token response has no id_token')
    try:
        payload = raw.split('.')[1]
        payload += '=' * (-len(payload) % 4)
        data = json.loads(base64.urlsafe_b64decode(payload))
    except (IndexError, ValueError) as e:
        raise OidcError(f'malformed id_token: {e}') from e
    if not isinstance(data, dict):
        raise OidcError('malformed id_token')
    return data


def check_nonce(tokens: dict, expected: Optional[str]) -> None:
    nonce = id_token_claims(tokens).get('nonce')
    if not expected or not nonce or not secrets.compare_digest(str(nonce).encode(), expected.encode()):
        raise OidcError('id_token nonce does not match')


def fetch_claims(tokens: dict) -> OidcClaims:
    headers = {'Authorization': f"Bearer {tokens['access_token']}"}
    try:
        r = requests.get(discover()['userinfo_endpoint'], headers=headers, timeout=settings.OIDC_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        raise OidcError(f'userinfo request failed: {e}') from e
    sub = data.get('sub')
    if not sub:
        raise OidcError('userinfo response has no sub claim')
    return OidcClaims(
        subject=str(sub),
        email=data.get('email') or None,
        email_verified=_truthy(data.get('email_verified')),
        first_name=data.get('given_name') or data.get('first_name') or '',
        last_name=data.get('family_name') or data.get('last_name') or '',
        profile_image_url=data.get('picture') or data.get('profile_image_url') or '',
    )


@transaction.atomic
def upsert_user(claims: OidcClaims):
    """Create or refresh the user for ``claims``; returns ``(user, created)``.

    A user who already has this subject is refreshed.  Otherwise an
    account pre-created with the same email and no subject yet (e.g. a
    doctor added by an administrator) is linked, but only when the
    provider says the email is verified; failing that a new
    ``patient`` user is created.  The role of an existing user is never
    touched here.
    """
    user = User.objects.select_for_update().filter(subject=claims.subject).first()
    created = False
    if user is None and claims.email and claims.email_verified:
        user = (
            User.objects.select_for_update()
            .filter(subject__isnull=True, email__iexact=claims.email)
            .first()
        )
        if user is not None:
            logger.info('linking user %s to OIDC subject %s', user.pk, claims.subject)
    if user is None:
        user = User(username=f"oidc-{claims.subject}"[:150], subject=claims.subject, role=User.ROLE_PATIENT)
        user.set_unusable_password()
        created = True

    user.subject = claims.subject
    if claims.email:
        user.email = claims.email
    if claims.first_name:
        user.first_name = claims.first_name
    if claims.last_name:
        user.last_name = claims.last_name
    if claims.profile_image_url:
        user.profile_image_url = claims.profile_image_url
    user.save()
    return user, created
