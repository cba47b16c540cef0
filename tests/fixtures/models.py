"""
Entity models used across the test suite.

    Contact <- Company <- Person
                  ^
                  +---- Invoice ----> InvoiceLine (owned collection)
"""

import enum
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from datafile_kernel.db.base import UUID, Entity


class Status(str, enum.Enum):
    ACTIVE = "active"
    ON_HOLD = "on_hold"


class Contact(Entity):
    __tablename__ = "test_contact"
    __business_key__ = "name"

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)


class Company(Entity):
    __tablename__ = "test_company"
    __business_key__ = "name"
    __plural_alias__ = "Companies"

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    code: Mapped[str | None] = mapped_column(
        String(10), nullable=True, info={"format_mask": "AA-###", "display_name": "Company Code"}
    )
    contact_id: Mapped[UUID | None] = mapped_column(ForeignKey("test_contact.id"), nullable=True)
    contact: Mapped[Contact | None] = relationship()
    invoices: Mapped[list["Invoice"]] = relationship(viewonly=True)


class Person(Entity):
    __tablename__ = "test_person"
    __business_key__ = "name"
    __singular_alias__ = "Person"
    __plural_alias__ = "People"

    name: Mapped[str | None] = mapped_column(
        String(100), nullable=True, info={"display_name": "Full Name"}
    )
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    followers: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    email: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
        info={
            "validator": {
                "kind": "regex",
                "regex": r"[^@\s]+@[^@\s]+",
                "message": "Expected an email address.",
            }
        },
    )
    active: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    status: Mapped[Status | None] = mapped_column(Enum(Status), nullable=True)
    born: Mapped[date | None] = mapped_column(Date, nullable=True)
    starts_at: Mapped[time | None] = mapped_column(Time, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    favourite_colour: Mapped[str | None] = mapped_column(
        String(7), nullable=True, info={"attribute_type": "colour"}
    )
    company_id: Mapped[UUID | None] = mapped_column(ForeignKey("test_company.id"), nullable=True)
    company: Mapped[Company | None] = relationship()


class Invoice(Entity):
    __tablename__ = "test_invoice"
    __business_key__ = "invoice_no"

    invoice_no: Mapped[str | None] = mapped_column(
        String(20), nullable=True, info={"display_name": "Invoice Number"}
    )
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 5), nullable=True)
    due: Mapped[date | None] = mapped_column(Date, nullable=True)
    issued_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    company_id: Mapped[UUID | None] = mapped_column(ForeignKey("test_company.id"), nullable=True)
    company: Mapped[Company | None] = relationship()
    lines: Mapped[list["InvoiceLine"]] = relationship(
        back_populates="invoice", cascade="all, delete-orphan"
    )


class InvoiceLine(Entity):
    __tablename__ = "test_invoice_line"
    __business_key__ = "description"

    description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    invoice_id: Mapped[UUID | None] = mapped_column(ForeignKey("test_invoice.id"), nullable=True)
    invoice: Mapped[Invoice | None] = relationship(back_populates="lines")
