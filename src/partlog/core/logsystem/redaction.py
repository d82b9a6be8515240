"""Field redaction for log payloads.

Sensitive fields (password hashes, 2FA secrets, ...) must never end up
in the old data of a log entry. The policy maps an element class to the
field names that may not be stored for it or any of its subclasses.
"""

from collections.abc import Iterable, Mapping
from typing import Any


class RedactionPolicy:
    """Static mapping of element class to forbidden field names.

    The blacklist of a class is the union of the blacklists of every class
    in its MRO. It is resolved on first use and cached per class, the
    table itself never changes after construction.

    Usage:
        policy = RedactionPolicy({User: ["password", "pw_reset_token"]})
        policy.filter(User, {"name": "alice", "password": "..."})
        # {"name": "alice"}
    """

    def __init__(self, blacklist: Mapping[type, Iterable[str]] | None = None) -> None:
        self._blacklist: dict[type, frozenset[str]] = {
            kind: frozenset(fields) for kind, fields in (blacklist or {}).items()
        }
        self._resolved: dict[type, frozenset[str]] = {}

    def forbidden_fields(self, kind: type) -> frozenset[str]:
        """Get every field name that may not be saved for the given class."""
        try:
            return self._resolved[kind]
        except KeyError:
            pass

        fields: frozenset[str] = frozenset()
        for base in kind.__mro__:
            fields |= self._blacklist.get(base, frozenset())

        self._resolved[kind] = fields
        return fields

    def is_restricted(self, kind: type) -> bool:
        """Check whether the class has any restricted field."""
        return bool(self.forbidden_fields(kind))

    def should_field_be_saved(self, kind: type, field_name: str) -> bool:
        """Check whether the field of the class may be stored in a log."""
        return field_name not in self.forbidden_fields(kind)

    def filter(self, kind: type, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Drop every forbidden key, keeping the order of the rest."""
        forbidden = self.forbidden_fields(kind)
        if not forbidden:
            return dict(fields)
        return {key: value for key, value in fields.items() if key not in forbidden}

    def filter_fields(self, kind: type, field_names: Iterable[str]) -> list[str]:
        """Drop every forbidden name from a list of field names."""
        forbidden = self.forbidden_fields(kind)
        return [name for name in field_names if name not in forbidden]
