import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from tixit.core.credentials import Credentials, with_google_id, with_password
from tixit.models.user import User


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()


def find_user_by_google_id(db: Session, google_id: str) -> User | None:
    return db.execute(select(User).where(User.google_id == google_id)).scalar_one_or_none()


def create_user(db: Session, name: str, email: str, credentials: Credentials) -> User:
    """Insert a user. The unique email/google_id indexes raise IntegrityError on a race."""
    user = User(id=str(uuid.uuid4()), name=name, email=normalize_email(email))
    user.credentials = credentials
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user_password(db: Session, user: User, password_hash: str) -> User:
    user.credentials = with_password(user.credentials, password_hash)
    db.commit()
    db.refresh(user)
    return user


def link_google_id(db: Session, user: User, google_id: str) -> User:
    user.credentials = with_google_id(user.credentials, google_id)
    db.commit()
    db.refresh(user)
    return user
