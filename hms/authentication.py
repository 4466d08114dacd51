"""
Session based authentication for the API.

Users sign in through the external OIDC provider (see
``hms.auth_views``); the resulting Django session is the only
credential the API accepts.  DRF's stock ``SessionAuthentication``
reports missing credentials as 403 because it does not provide an
``authenticate_header``; this subclass supplies one so anonymous
requests are answered with 401 instead.
"""
from __future__ import annotations

from rest_framework import authentication


class SessionAuthentication(authentication.SessionAuthentication):
    """Django session authentication that challenges with 401."""

    www_authenticate_realm = 'api'

    def authenticate_header(self, request) -> str:
        return f'Session realm="{self.www_authenticate_realm}"'
