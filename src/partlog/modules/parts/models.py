"""Part database models."""

from decimal import Decimal

from sqlalchemy import Float, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partlog.core.constants import MAX_NAME_LENGTH
from partlog.core.database.base import DBElement, TimestampMixin


class Part(DBElement, TimestampMixin):
    """A part kept in stock.

    Attributes:
        name: Part name
        description: Free-text description
        comment: Internal notes
        part_lots: Storage lots holding this part
        orderdetails: Supplier order information
        attachments: Files attached to the part
    """

    __tablename__ = "parts"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
    )
    comment: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
    )

    # Relationships
    part_lots: Mapped[list["PartLot"]] = relationship(
        back_populates="part",
        cascade="all, delete-orphan",
    )
    orderdetails: Mapped[list["Orderdetail"]] = relationship(
        back_populates="part",
        cascade="all, delete-orphan",
    )
    attachments: Mapped[list["Attachment"]] = relationship(
        back_populates="element",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Part(id={self.id}, name={self.name})>"


class PartLot(DBElement):
    """An amount of a part at one storage location."""

    __tablename__ = "part_lots"

    part_id: Mapped[int] = mapped_column(
        ForeignKey("parts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
    )
    amount: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
    )

    part: Mapped["Part"] = relationship(back_populates="part_lots")


class Orderdetail(DBElement):
    """Ordering information of a part at one supplier."""

    __tablename__ = "orderdetails"

    part_id: Mapped[int] = mapped_column(
        ForeignKey("parts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    supplierpartnr: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        default="",
        nullable=False,
    )

    part: Mapped["Part"] = relationship(back_populates="orderdetails")
    pricedetails: Mapped[list["Pricedetail"]] = relationship(
        back_populates="orderdetail",
        cascade="all, delete-orphan",
    )


class Pricedetail(DBElement):
    """Price of an orderdetail from a minimum quantity on."""

    __tablename__ = "pricedetails"

    orderdetail_id: Mapped[int] = mapped_column(
        ForeignKey("orderdetails.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(11, 5),
        nullable=False,
    )
    min_discount_quantity: Mapped[float] = mapped_column(
        Float,
        default=1.0,
        nullable=False,
    )

    orderdetail: Mapped["Orderdetail"] = relationship(back_populates="pricedetails")


class Attachment(DBElement):
    """A file attached to a part."""

    __tablename__ = "attachments"

    element_id: Mapped[int] = mapped_column(
        ForeignKey("parts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    path: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
    )

    element: Mapped["Part"] = relationship(back_populates="attachments")
