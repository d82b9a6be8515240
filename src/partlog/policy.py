"""Default event log policy tables of the application."""

from partlog.core.logsystem.redaction import RedactionPolicy
from partlog.modules.parts.models import Attachment, Orderdetail, PartLot, Pricedetail
from partlog.modules.users.models import User


# These fields are never stored in a log, they contain sensitive information
FIELD_BLACKLIST: dict[type, list[str]] = {
    User: [
        "password",
        "need_pw_change",
        "google_authenticator_secret",
        "backup_codes",
        "trusted_device_cookie_version",
        "pw_reset_token",
        "backup_codes_generation_date",
    ],
}

# Deleting an element of these classes also logs its removal from the
# collection on the other side of the given associations
TRIGGER_ASSOCIATION_LOG_WHITELIST: dict[type, list[str]] = {
    PartLot: ["part"],
    Orderdetail: ["part"],
    Pricedetail: ["orderdetail"],
    Attachment: ["element"],
}


def default_redaction_policy() -> RedactionPolicy:
    """Build the redaction policy from FIELD_BLACKLIST."""
    return RedactionPolicy(FIELD_BLACKLIST)
