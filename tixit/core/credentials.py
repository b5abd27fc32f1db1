"""Credential variants for an account.

An account always holds at least one way to sign in. The three shapes are
modelled as separate value objects so "no credential" cannot be built.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class AuthCapability(str, Enum):
    PASSWORD_ONLY = "password_only"
    EXTERNAL_ONLY = "external_only"
    BOTH = "both"


@dataclass(frozen=True)
class PasswordOnly:
    password_hash: str
    capability = AuthCapability.PASSWORD_ONLY

    def __post_init__(self) -> None:
        if not self.password_hash:
            raise ValueError("password_hash is required")


@dataclass(frozen=True)
class ExternalOnly:
    google_id: str
    capability = AuthCapability.EXTERNAL_ONLY

    def __post_init__(self) -> None:
        if not self.google_id:
            raise ValueError("google_id is required")


@dataclass(frozen=True)
class Both:
    password_hash: str
    google_id: str
    capability = AuthCapability.BOTH

    def __post_init__(self) -> None:
        if not self.password_hash or not self.google_id:
            raise ValueError("password_hash and google_id are required")


Credentials = Union[PasswordOnly, ExternalOnly, Both]


def credentials_from(password_hash: str | None, google_id: str | None) -> Credentials:
    """Build the variant from nullable columns; raises ValueError when both are empty."""
    if password_hash and google_id:
        return Both(password_hash=password_hash, google_id=google_id)
    if password_hash:
        return PasswordOnly(password_hash=password_hash)
    if google_id:
        return ExternalOnly(google_id=google_id)
    raise ValueError("account has no credential")


def with_password(creds: Credentials, password_hash: str) -> Credentials:
    """Set or replace the password. ExternalOnly becomes Both."""
    if isinstance(creds, (ExternalOnly, Both)):
        return Both(password_hash=password_hash, google_id=creds.google_id)
    return PasswordOnly(password_hash=password_hash)


def with_google_id(creds: Credentials, google_id: str) -> Credentials:
    """Link an external identity. PasswordOnly becomes Both."""
    if isinstance(creds, (PasswordOnly, Both)):
        return Both(password_hash=creds.password_hash, google_id=google_id)
    return ExternalOnly(google_id=google_id)


def password_hash_of(creds: Credentials) -> str | None:
    return creds.password_hash if isinstance(creds, (PasswordOnly, Both)) else None


def google_id_of(creds: Credentials) -> str | None:
    return creds.google_id if isinstance(creds, (ExternalOnly, Both)) else None
