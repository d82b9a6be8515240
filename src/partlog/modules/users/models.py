"""User database models."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from partlog.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from partlog.core.database.base import DBElement, TimestampMixin


class User(DBElement, TimestampMixin):
    """User model representing an account that can change elements.

    Attributes:
        name: Unique login name
        email: Contact email address
        first_name: Given name
        last_name: Family name
        password: Hashed password (nullable for external accounts)
        need_pw_change: Whether the password must be changed on next login
        google_authenticator_secret: TOTP secret for two-factor auth
        backup_codes: Two-factor backup codes
        backup_codes_generation_date: When the backup codes were generated
        trusted_device_cookie_version: Bumped to invalidate trusted devices
        pw_reset_token: Token of a pending password reset
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        unique=True,
    )
    email: Mapped[str | None] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=True,
    )
    first_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    last_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )

    # Credentials
    password: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    need_pw_change: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    google_authenticator_secret: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    backup_codes: Mapped[list[Any] | None] = mapped_column(
        JSON,
        nullable=True,
    )
    backup_codes_generation_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    trusted_device_cookie_version: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    pw_reset_token: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name})>"
