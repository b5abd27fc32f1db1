from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from tixit.core.config import settings

# PBKDF2 avoids bcrypt backend/version issues and the 72-byte bcrypt input limit.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__rounds=settings.PASSWORD_HASH_ROUNDS,
)
ALGO = "HS256"
STATE_TTL_MINUTES = 10


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    # Accounts created through Google have no hash; they never match a password.
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: str, name: str, email: str, expires_days: int | None = None) -> str:
    if expires_days is None:
        expires_days = settings.TOKEN_EXPIRE_DAYS
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "name": name,
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=expires_days),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGO)


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])


def verify_access_token(token: str | None) -> str | None:
    """Return the user id bound to ``token``, or None.

    Malformed, expired and badly signed tokens all give None.
    """
    if not token:
        return None
    try:
        payload = decode_token(token)
    except JWTError:
        return None
    sub = payload.get("sub")
    return sub if isinstance(sub, str) and sub else None


def create_oauth_state(nonce: str) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=STATE_TTL_MINUTES)
    return jwt.encode({"nonce": nonce, "type": "oauth_state", "exp": exp}, settings.state_secret, algorithm=ALGO)


def verify_oauth_state(state: str | None) -> bool:
    if not state:
        return False
    try:
        payload = jwt.decode(state, settings.state_secret, algorithms=[ALGO])
    except JWTError:
        return False
    return payload.get("type") == "oauth_state"
