"""Users module."""

from partlog.modules.users.models import User


__all__ = ["User"]
