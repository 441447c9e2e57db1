"""Admission service models.

Record tables are append-only and keyed by the padded member identifier. They
carry no foreign key to ``members`` because the door log records scans of
unknown identifiers too.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.identifiers import IDENTIFIER_LENGTH
from libs.db.base import Base
from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column


class Member(Base):
    """Registered member. Read-only to the admission engine."""

    __tablename__ = "members"

    identifier: Mapped[str] = mapped_column(
        String(IDENTIFIER_LENGTH), primary_key=True
    )
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Member {self.identifier} name={self.name!r}>"


class WaiverRecord(Base):
    __tablename__ = "waivers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_identifier: Mapped[str] = mapped_column(
        String(IDENTIFIER_LENGTH), nullable=False, index=True
    )
    valid_until: Mapped[date] = mapped_column(Date, nullable=False)
    signed_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self):
        return f"<WaiverRecord {self.member_identifier} until={self.valid_until}>"


class PaymentRecord(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_identifier: Mapped[str] = mapped_column(
        String(IDENTIFIER_LENGTH), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    valid_until: Mapped[date] = mapped_column(Date, nullable=False)

    def __repr__(self):
        return f"<PaymentRecord {self.member_identifier} until={self.valid_until}>"


class WarningRecord(Base):
    """Unpaid-entry warning.

    A member is warned at most once: after that the warning's age alone decides
    grace admissions. The unique constraint stops two concurrent door scans
    from both issuing one.
    """

    __tablename__ = "warnings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_identifier: Mapped[str] = mapped_column(
        String(IDENTIFIER_LENGTH), nullable=False, index=True
    )
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("member_identifier", name="uq_warning_member"),
    )

    def __repr__(self):
        return f"<WarningRecord {self.member_identifier} at={self.issued_at}>"


class SignInRecord(Base):
    """Door audit log, one row per admission evaluation."""

    __tablename__ = "sign_ins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_identifier: Mapped[str] = mapped_column(
        String(IDENTIFIER_LENGTH), nullable=False, index=True
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False, index=True
    )
    admitted: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def __repr__(self):
        return (
            f"<SignInRecord {self.member_identifier} at={self.timestamp} "
            f"admitted={self.admitted}>"
        )


class WaiverTerm(Base):
    """Named waiver term. ``valid_until`` of NULL means open-ended."""

    __tablename__ = "waiver_terms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    valid_until: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class PaymentTerm(Base):
    """Named payment term with its price."""

    __tablename__ = "payment_terms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    valid_until: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
