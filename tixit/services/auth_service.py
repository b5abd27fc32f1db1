"""Account operations: signup, password login, password change and Google linking.

Credential transitions handled here::

    (none)        --signup-------------------> PasswordOnly
    (none)        --google, new email--------> ExternalOnly
    PasswordOnly  --google, same email-------> Both
    ExternalOnly  --set_password-------------> Both

No operation removes a credential.
"""

import html
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tixit.core.credentials import ExternalOnly, PasswordOnly
from tixit.core.errors import (
    AuthenticationError,
    ClientInputError,
    DuplicateAccount,
    InvalidCredentials,
    NotFoundError,
)
from tixit.core.security import create_access_token, hash_password, verify_access_token, verify_password
from tixit.models.user import User
from tixit.services import user_service

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MAX_NAME_LENGTH = 100  # before escaping; same bound as SignupRequest.name


@dataclass(frozen=True)
class ExternalIdentity:
    """A verified assertion from the identity provider."""

    external_id: str
    email: str
    display_name: str


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.name, user.email)


def signup(db: Session, name: str, email: str, password: str) -> User:
    name = html.escape(name.strip(), quote=True)
    email = user_service.normalize_email(email)
    if user_service.find_user_by_email(db, email):
        raise DuplicateAccount()
    try:
        user = user_service.create_user(db, name, email, PasswordOnly(hash_password(password)))
    except IntegrityError:
        # lost a race with a concurrent signup for the same email
        db.rollback()
        raise DuplicateAccount()
    logger.info("User signed up", extra={"user_id": user.id})
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = user_service.find_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Login rejected")
        raise InvalidCredentials()
    logger.info("User logged in", extra={"user_id": user.id})
    return user


def resolve_user(db: Session, token: str | None) -> User | None:
    """Caller identity for optional-auth routes; any token problem means anonymous."""
    user_id = verify_access_token(token)
    if user_id is None:
        return None
    return user_service.get_user(db, user_id)


def require_user(db: Session, token: str | None) -> User:
    user_id = verify_access_token(token)
    if user_id is None:
        raise AuthenticationError("Unauthorized")
    user = user_service.get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    if not current_password or not new_password:
        raise ClientInputError("All fields are required")
    if not user.password_hash:
        raise ClientInputError("This account uses Google Login and has no password set.")
    if not verify_password(current_password, user.password_hash):
        raise ClientInputError("Current password is incorrect")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ClientInputError("Password too short")
    user = user_service.update_user_password(db, user, hash_password(new_password))
    logger.info("Password changed", extra={"user_id": user.id})
    return user


def set_password(db: Session, user: User, new_password: str) -> User:
    """Give an account a password; Google-only accounts end up with both credentials."""
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ClientInputError("Password too short")
    return user_service.update_user_password(db, user, hash_password(new_password))


def link_external_identity(db: Session, identity: ExternalIdentity) -> User:
    """Resolve a Google identity to a local account, creating or merging as needed."""
    user = user_service.find_user_by_google_id(db, identity.external_id)
    if user:
        return user

    user = user_service.find_user_by_email(db, identity.email)
    if user:
        if not user.google_id:
            user = user_service.link_google_id(db, user, identity.external_id)
            logger.info("Linked Google account to existing user", extra={"user_id": user.id})
        return user

    name = identity.display_name.strip()[:MAX_NAME_LENGTH].strip() or identity.email.split("@")[0]
    try:
        user = user_service.create_user(db, html.escape(name, quote=True), identity.email, ExternalOnly(identity.external_id))
    except IntegrityError:
        db.rollback()
        # a concurrent first login won; use its row
        user = user_service.find_user_by_google_id(db, identity.external_id)
        if user is None:
            raise
    logger.info("Created user from Google login", extra={"user_id": user.id})
    return user
