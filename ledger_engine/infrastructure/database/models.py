"""
Infrastructure - SQLModel database models.

Balances and ledgers are derived on read; nothing here stores a balance.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Index, UniqueConstraint
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, Relationship, SQLModel

from ledger_engine.domain.value_objects import utcnow


class UTCDateTime(TypeDecorator):
    """Timestamp stored and returned in UTC; SQLite drops the offset, so naive reads are UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def _timestamp(**kwargs):
    return Field(sa_type=UTCDateTime, **kwargs)


class Account(SQLModel, table=True):
    """Chart of accounts row; code is unique per company."""

    __table_args__ = (
        UniqueConstraint("company_id", "code", name="uq_account_company_code"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    company_id: UUID = Field(index=True)
    code: str
    name_en: str
    name_ar: str | None = None
    account_type: str  # asset, liability, equity, income, expense
    is_vat_account: bool = False
    is_system_account: bool = False
    is_active: bool = True
    is_archived: bool = False
    created_at: datetime = _timestamp(default_factory=utcnow)
    updated_at: datetime | None = _timestamp(default=None)

    journal_lines: list["JournalLine"] = Relationship(back_populates="account")


class JournalEntry(SQLModel, table=True):
    """Entry header; entry_number is unique per company."""

    __table_args__ = (
        UniqueConstraint("company_id", "entry_number", name="uq_journal_entry_company_number"),
        Index("ix_journal_entry_company_status_date", "company_id", "status", "entry_date"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    company_id: UUID = Field(index=True)
    entry_number: str
    sequence: int  # numeric suffix of entry_number
    entry_date: date = Field(index=True)
    memo: str | None = None
    status: str = "draft"  # draft, posted, void
    source: str = "manual"
    source_id: UUID | None = None
    reversed_entry_id: UUID | None = Field(default=None, foreign_key="journalentry.id", index=True)
    reversal_reason: str | None = None
    created_by: str
    created_at: datetime = _timestamp(default_factory=utcnow)
    posted_by: str | None = None
    posted_at: datetime | None = _timestamp(default=None)
    updated_by: str | None = None
    updated_at: datetime | None = _timestamp(default=None)

    lines: list["JournalLine"] = Relationship(
        back_populates="journal_entry",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "JournalLine.line_number",
        },
    )


class JournalLine(SQLModel, table=True):
    """Debit or credit movement; cannot outlive its entry."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    entry_id: UUID = Field(foreign_key="journalentry.id", index=True)
    account_id: UUID = Field(foreign_key="account.id", index=True)
    line_number: int
    debit: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    credit: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    description: str | None = None

    journal_entry: "JournalEntry" = Relationship(back_populates="lines")
    account: "Account" = Relationship(back_populates="journal_lines")


class EntrySequence(SQLModel, table=True):
    """Per-company, per-day counter used to allocate entry numbers."""

    __table_args__ = (
        UniqueConstraint("company_id", "day_prefix", name="uq_entry_sequence_company_day"),
    )

    id: int | None = Field(default=None, primary_key=True)
    company_id: UUID = Field(index=True)
    day_prefix: str  # e.g. JE-20240105
    next_value: int = 1
    updated_at: datetime = _timestamp(default_factory=utcnow)
