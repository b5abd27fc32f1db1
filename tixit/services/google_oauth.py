"""Google OAuth 2.0 authorization-code flow.

The only thing the rest of the app needs from Google is a verified
``ExternalIdentity``; everything provider-specific stays in this module.
"""

import logging
import secrets
from urllib.parse import urlencode

import httpx

from tixit.core.config import settings
from tixit.core.errors import DependencyError
from tixit.core.security import create_oauth_state
from tixit.services.auth_service import ExternalIdentity

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = "openid email profile"


class GoogleOAuthError(Exception):
    """The handshake failed; the caller redirects to the login page."""


def is_configured() -> bool:
    return bool(settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET)


def authorization_url() -> str:
    if not is_configured():
        raise DependencyError("Google OAuth is not configured (GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET)")
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": settings.google_callback_url,
        "response_type": "code",
        "scope": SCOPES,
        "state": create_oauth_state(secrets.token_urlsafe(16)),
        "prompt": "select_account",
    }
    return AUTHORIZE_URL + "?" + urlencode(params)


def fetch_identity(code: str, client: httpx.Client | None = None) -> ExternalIdentity:
    """Exchange ``code`` for tokens and read the user's profile."""
    if not is_configured():
        raise GoogleOAuthError("Google OAuth is not configured")
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=settings.GOOGLE_HTTP_TIMEOUT)
    try:
        token_res = client.post(TOKEN_URL, data={
            "code": code,
            "client_id": settings.GOOGLE_CLIENT_ID,
            "client_secret": settings.GOOGLE_CLIENT_SECRET,
            "redirect_uri": settings.google_callback_url,
            "grant_type": "authorization_code",
        })
        if token_res.status_code != 200:
            raise GoogleOAuthError(f"token exchange failed with HTTP {token_res.status_code}")
        token = token_res.json()
        if not isinstance(token, dict) or not token.get("access_token"):
            raise GoogleOAuthError("token response has no access_token")
        access_token = token["access_token"]

        info_res = client.get(USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
        if info_res.status_code != 200:
            raise GoogleOAuthError(f"userinfo failed with HTTP {info_res.status_code}")
        info = info_res.json()
    except httpx.HTTPError as e:
        raise GoogleOAuthError(f"Google unreachable: {e}") from e
    except ValueError as e:
        raise GoogleOAuthError("Google returned invalid JSON") from e
    finally:
        if owns_client:
            client.close()

    if not isinstance(info, dict):
        raise GoogleOAuthError("userinfo is not a JSON object")
    sub, email = info.get("sub"), info.get("email")
    if not sub or not email:
        raise GoogleOAuthError("userinfo lacks sub or email")
    if info.get("email_verified") is not True:
        raise GoogleOAuthError("Google email is not verified")
    return ExternalIdentity(
        external_id=str(sub),
        email=str(email).strip().lower(),
        display_name=str(info.get("name") or ""),
    )
