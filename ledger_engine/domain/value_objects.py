"""
Domain Layer - Value objects of the general ledger.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import UUID

ZERO = Decimal("0")
CENT = Decimal("0.01")
BALANCE_TOLERANCE = Decimal("0.01")  # currency minor unit


class AccountType(str, Enum):
    """Account classification; decides the normal balance side."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def is_debit_normal(self) -> bool:
        return self in (AccountType.ASSET, AccountType.EXPENSE)

    def signed_movement(self, debit: Decimal, credit: Decimal) -> Decimal:
        """Movement of (debit, credit) expressed in this type's normal balance."""
        if self.is_debit_normal:
            return debit - credit
        return credit - debit


class EntryStatus(str, Enum):
    DRAFT = "draft"
    POSTED = "posted"
    VOID = "void"


class EntrySource(str, Enum):
    MANUAL = "manual"
    INVOICE = "invoice"
    RECEIPT = "receipt"
    PAYMENT = "payment"
    REVERSAL = "reversal"
    IMPORT = "import"
    SYSTEM = "system"


def to_amount(value) -> Decimal:
    """Coerce a stored or user supplied amount to Decimal (None -> 0)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def as_utc_date(value: date | datetime) -> date:
    """Calendar day of a date or datetime; aware datetimes are taken in UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class PostingLine:
    """One proposed debit-or-credit movement, before persistence."""
    account_id: UUID
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: str | None = None

    @property
    def is_memo(self) -> bool:
        return self.debit == ZERO and self.credit == ZERO

    def swapped(self, description: str | None = None) -> "PostingLine":
        return PostingLine(
            account_id=self.account_id,
            debit=self.credit,
            credit=self.debit,
            description=description if description is not None else self.description,
        )


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive date window; either bound may be open."""
    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        if self.start and self.end and self.start > self.end:
            raise ValueError("Date range start must not be after its end")


@dataclass(frozen=True, slots=True)
class LedgerFilters:
    date_start: date | None = None
    date_end: date | None = None
    search: str | None = None
    limit: int | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 1:
            raise ValueError("limit must be positive")
        if self.offset < 0:
            raise ValueError("offset must not be negative")
        if self.date_start and self.date_end and self.date_start > self.date_end:
            raise ValueError("date_start must not be after date_end")


@dataclass(frozen=True, slots=True)
class InvoiceLineItem:
    """Invoice line - vat_rate is a fraction (0.05 for 5%)."""
    quantity: Decimal
    unit_price: Decimal
    vat_rate: Decimal = ZERO

    @property
    def net_amount(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def vat_amount(self) -> Decimal:
        return self.quantity * self.unit_price * self.vat_rate


@dataclass(frozen=True, slots=True)
class InvoiceTotals:
    subtotal: Decimal
    vat_amount: Decimal
    total: Decimal


def entry_day_prefix(value: date | datetime, prefix: str = "JE") -> str:
    """Per-day numbering scope, e.g. JE-20240105."""
    return f"{prefix}-{as_utc_date(value):%Y%m%d}"


def format_entry_number(day_prefix: str, sequence: int) -> str:
    return f"{day_prefix}-{sequence:03d}"


def entry_number_sequence(entry_number: str) -> int | None:
    """Trailing sequence of an entry number, None when it does not parse."""
    _, _, tail = entry_number.rpartition("-")
    return int(tail) if tail.isdigit() else None
