"""User factory for tests."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from partlog.modules.users.models import User


class UserFactory(SQLAlchemyFactory[User]):
    """Factory for creating test User instances."""

    __model__ = User
    __set_primary_key__ = False
    __set_relationships__ = False

    @classmethod
    def name(cls) -> str:
        """Generate a unique login name."""
        return f"user-{uuid4().hex[:8]}"

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@example.com"

    @classmethod
    def first_name(cls) -> str:
        return "Test"

    @classmethod
    def last_name(cls) -> str:
        return f"User {uuid4().hex[:4]}"

    @classmethod
    def password(cls) -> str:
        """Generate a password hash (bcrypt)."""
        # This is a bcrypt hash of "testpassword123"
        return "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.xzQvGxRGlKHOHO"

    @classmethod
    def need_pw_change(cls) -> bool:
        return False

    @classmethod
    def google_authenticator_secret(cls) -> str | None:
        return None

    @classmethod
    def backup_codes(cls) -> list[Any] | None:
        return None

    @classmethod
    def backup_codes_generation_date(cls) -> datetime | None:
        return None

    @classmethod
    def trusted_device_cookie_version(cls) -> int:
        return 0

    @classmethod
    def pw_reset_token(cls) -> str | None:
        return None

    @classmethod
    def created_at(cls) -> datetime:
        return datetime.now(UTC)

    @classmethod
    def updated_at(cls) -> datetime:
        return datetime.now(UTC)
