"""Parts module."""

from partlog.modules.parts.models import (
    Attachment,
    Orderdetail,
    Part,
    PartLot,
    Pricedetail,
)


__all__ = [
    "Attachment",
    "Orderdetail",
    "Part",
    "PartLot",
    "Pricedetail",
]
