import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tixit.api.deps import enforce_rate_limit, get_current_user, rate_limit
from tixit.core.config import settings
from tixit.core.errors import RateLimited
from tixit.core.security import verify_oauth_state
from tixit.db.session import get_db
from tixit.models.user import User
from tixit.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    PasswordChanged,
    SignupRequest,
    UserSummary,
)
from tixit.services import auth_service, google_oauth

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# every auth route shares one bucket; the Google callback counts against it by hand
auth_limited = [Depends(rate_limit("auth"))]


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        token=auth_service.issue_token(user),
        user=UserSummary(id=user.id, name=user.name, email=user.email),
    )


def _login_page(token: str | None = None) -> str:
    base = settings.CLIENT_BASE_URL.rstrip("/") + "/login"
    return f"{base}?token={token}" if token else base


@router.post("/signup", response_model=AuthResponse, status_code=201, dependencies=auth_limited)
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    user = auth_service.signup(db, body.name, body.email, body.password)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse, dependencies=auth_limited)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, body.email, body.password)
    return _auth_response(user)


@router.get("/google", dependencies=auth_limited)
def google_login():
    return RedirectResponse(url=google_oauth.authorization_url())


@router.get("/google/callback")
def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    db: Session = Depends(get_db),
):
    try:
        enforce_rate_limit(request, "auth")
    except RateLimited:
        logger.warning("Google callback rate limited")
        return RedirectResponse(url=_login_page())
    if error or not code:
        logger.info("Google login cancelled or denied: %s", error or "no code")
        return RedirectResponse(url=_login_page())
    if not verify_oauth_state(state):
        logger.warning("Google callback with invalid state")
        return RedirectResponse(url=_login_page())
    try:
        identity = google_oauth.fetch_identity(code)
    except google_oauth.GoogleOAuthError as e:
        logger.warning("Google login failed: %s", e)
        return RedirectResponse(url=_login_page())
    try:
        user = auth_service.link_external_identity(db, identity)
    except SQLAlchemyError:
        logger.exception("Could not link Google account")
        return RedirectResponse(url=_login_page())
    return RedirectResponse(url=_login_page(auth_service.issue_token(user)))


@router.post("/change-password", response_model=PasswordChanged, dependencies=auth_limited)
def change_password(
    body: ChangePasswordRequest,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    user = auth_service.change_password(db, me, body.currentPassword, body.newPassword)
    return PasswordChanged(message="Password updated successfully", token=auth_service.issue_token(user))
