from sqlalchemy import String, Text, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone

from tixit.core.credentials import Credentials, credentials_from, password_hash_of, google_id_of
from tixit.db.session import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("password_hash IS NOT NULL OR google_id IS NOT NULL", name="ck_users_has_credential"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(Text)  # stored HTML-escaped
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)  # always stored lower-cased
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    google_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    @property
    def credentials(self) -> Credentials:
        return credentials_from(self.password_hash, self.google_id)

    @credentials.setter
    def credentials(self, creds: Credentials) -> None:
        self.password_hash = password_hash_of(creds)
        self.google_id = google_id_of(creds)
