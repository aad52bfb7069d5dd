"""
Domain Entities - Chart of accounts, journal entries and derived ledger views.
"""

import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from decimal import Decimal

from ledger_engine.core.exceptions import EntryStateError, ValidationError
from ledger_engine.domain.value_objects import (
    BALANCE_TOLERANCE,
    ZERO,
    AccountType,
    EntrySource,
    EntryStatus,
    PostingLine,
    utcnow,
)


@dataclass
class Account:
    """
    Entity - Account in a company's chart of accounts.
    System accounts are never archived or deleted; an account with journal
    lines is only ever archived.
    """
    company_id: uuid.UUID
    code: str
    name_en: str
    account_type: AccountType
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    name_ar: str | None = None
    is_vat_account: bool = False
    is_system_account: bool = False
    is_active: bool = True
    is_archived: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    @property
    def can_post(self) -> bool:
        return self.is_active and not self.is_archived

    def archive(self) -> "Account":
        if self.is_system_account:
            raise ValidationError(f"System account {self.code} cannot be archived")
        return replace(self, is_archived=True, is_active=False, updated_at=utcnow())


@dataclass(frozen=True, slots=True)
class AccountCreate:
    code: str
    name_en: str
    account_type: AccountType
    name_ar: str | None = None
    is_vat_account: bool = False
    is_system_account: bool = False


@dataclass(frozen=True, slots=True)
class AccountUpdate:
    """Editable account fields; None leaves the field unchanged."""
    name_en: str | None = None
    name_ar: str | None = None
    code: str | None = None
    account_type: AccountType | None = None
    is_vat_account: bool | None = None
    is_active: bool | None = None

    def changes(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass
class JournalLine:
    entry_id: uuid.UUID
    account_id: uuid.UUID
    line_number: int
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_posting_line(self) -> PostingLine:
        return PostingLine(
            account_id=self.account_id,
            debit=self.debit,
            credit=self.credit,
            description=self.description,
        )


@dataclass(frozen=True, slots=True)
class EntryHeader:
    """Header of a journal entry about to be written."""
    company_id: uuid.UUID
    date: date
    created_by: str
    memo: str | None = None
    source: EntrySource = EntrySource.MANUAL
    source_id: uuid.UUID | None = None
    reversed_entry_id: uuid.UUID | None = None
    reversal_reason: str | None = None


@dataclass(frozen=True, slots=True)
class EntryUpdate:
    """Editable header fields of a draft entry."""
    entry_date: date | None = None
    memo: str | None = None

    def changes(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass
class JournalEntry:
    """
    Entity - Dated, numbered set of balanced debit/credit lines.
    Only posted entries count toward balances and ledgers.
    """
    company_id: uuid.UUID
    entry_number: str
    date: date
    created_by: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    memo: str | None = None
    status: EntryStatus = EntryStatus.DRAFT
    source: EntrySource = EntrySource.MANUAL
    source_id: uuid.UUID | None = None
    reversed_entry_id: uuid.UUID | None = None
    reversal_reason: str | None = None
    posted_by: str | None = None
    posted_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    lines: list[JournalLine] = field(default_factory=list)

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), ZERO)

    def is_balanced(self) -> bool:
        return abs(self.total_debit - self.total_credit) <= BALANCE_TOLERANCE

    def can_modify(self) -> bool:
        return self.status == EntryStatus.DRAFT

    def ensure_draft(self, action: str) -> None:
        if self.status == EntryStatus.POSTED:
            raise EntryStateError(
                f"Entry {self.entry_number} is posted and cannot be {action}; reverse it instead"
            )
        if self.status == EntryStatus.VOID:
            raise EntryStateError(f"Entry {self.entry_number} is void and cannot be {action}")


@dataclass(frozen=True, slots=True)
class AccountBalance:
    """Value Object - Totals and normal-side balance of one account."""
    account: Account
    balance: Decimal
    debit_total: Decimal
    credit_total: Decimal


@dataclass(frozen=True, slots=True)
class LedgerLine:
    """One posted line in an account ledger, with the balance after it."""
    line_id: uuid.UUID
    entry_id: uuid.UUID
    entry_number: str
    date: date
    description: str
    memo: str | None
    source: EntrySource
    status: EntryStatus
    debit: Decimal
    credit: Decimal
    running_balance: Decimal


@dataclass(frozen=True, slots=True)
class PostedLineRow:
    """Posted journal line joined to its entry header, as read from storage."""
    line_id: uuid.UUID
    entry_id: uuid.UUID
    entry_number: str
    date: date
    memo: str | None
    source: EntrySource
    status: EntryStatus
    debit: Decimal
    credit: Decimal
    line_description: str | None
    line_number: int = 0


@dataclass(frozen=True)
class AccountLedger:
    account: Account
    entries: list[LedgerLine]
    opening_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal
    total_count: int


@dataclass(frozen=True)
class TrialBalanceRow:
    account: Account
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class TrialBalance:
    rows: list[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal

    @property
    def difference(self) -> Decimal:
        return self.total_debit - self.total_credit

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) <= BALANCE_TOLERANCE
