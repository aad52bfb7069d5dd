"""
API DTOs - Data Transfer Objects for API requests/responses.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ledger_engine.domain.entities import AccountCreate, AccountUpdate, EntryUpdate
from ledger_engine.domain.value_objects import (
    AccountType,
    EntrySource,
    EntryStatus,
    InvoiceLineItem,
    PostingLine,
)


class AccountCreateDTO(BaseModel):
    """DTO - Create an account in a company's chart."""
    code: str = Field(..., min_length=1, max_length=20, description="Account code, unique per company")
    name_en: str = Field(..., min_length=1, description="English name")
    name_ar: str | None = Field(None, description="Arabic name")
    account_type: AccountType
    is_vat_account: bool = False
    is_system_account: bool = False

    def to_domain(self) -> AccountCreate:
        return AccountCreate(**self.model_dump())


class AccountBulkCreateDTO(BaseModel):
    """DTO - All-or-nothing batch of accounts."""
    accounts: list[AccountCreateDTO] = Field(..., min_length=1)


class AccountUpdateDTO(BaseModel):
    """DTO - Editable account fields; omitted fields are left unchanged."""
    name_en: str | None = Field(None, min_length=1)
    name_ar: str | None = None
    code: str | None = Field(None, min_length=1, max_length=20)
    account_type: AccountType | None = None
    is_vat_account: bool | None = None
    is_active: bool | None = None

    model_config = ConfigDict(extra="forbid")

    def to_domain(self) -> AccountUpdate:
        return AccountUpdate(**self.model_dump(exclude_unset=True))


class AccountResponseDTO(BaseModel):
    id: UUID
    company_id: UUID
    code: str
    name_en: str
    name_ar: str | None
    account_type: AccountType
    is_vat_account: bool
    is_system_account: bool
    is_active: bool
    is_archived: bool
    created_at: datetime
    updated_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class JournalLineCreateDTO(BaseModel):
    """DTO - One debit or credit line."""
    account_id: UUID
    debit: Decimal = Field(Decimal("0"), ge=0, description="Debit amount")
    credit: Decimal = Field(Decimal("0"), ge=0, description="Credit amount")
    description: str | None = Field(None, max_length=500)

    def to_domain(self) -> PostingLine:
        return PostingLine(
            account_id=self.account_id,
            debit=self.debit,
            credit=self.credit,
            description=self.description,
        )


class JournalEntryCreateDTO(BaseModel):
    """DTO - Manual journal entry."""
    company_id: UUID
    date: date
    memo: str | None = Field(None, max_length=500)
    source: EntrySource = EntrySource.MANUAL
    source_id: UUID | None = None
    post: bool = Field(False, description="Post immediately instead of saving a draft")
    lines: list[JournalLineCreateDTO] = Field(..., min_length=2)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "company_id": "00000000-0000-0000-0000-000000000001",
            "date": "2024-01-05",
            "memo": "Owner capital injection",
            "lines": [
                {"account_id": "00000000-0000-0000-0000-00000000a001", "debit": "200.00"},
                {"account_id": "00000000-0000-0000-0000-00000000a002", "credit": "200.00"},
            ],
        }
    })


class JournalEntryUpdateDTO(BaseModel):
    """DTO - Replace a draft's header fields and lines."""
    entry_date: date | None = Field(None, alias="date")
    memo: str | None = Field(None, max_length=500)
    lines: list[JournalLineCreateDTO] = Field(..., min_length=2)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_domain(self) -> EntryUpdate:
        return EntryUpdate(entry_date=self.entry_date, memo=self.memo)


class ReverseEntryDTO(BaseModel):
    reason: str | None = Field(None, max_length=500)
    reversal_date: date | None = None


class JournalLineResponseDTO(BaseModel):
    id: UUID
    account_id: UUID
    line_number: int
    debit: Decimal
    credit: Decimal
    description: str | None

    model_config = ConfigDict(from_attributes=True)


class JournalEntryResponseDTO(BaseModel):
    """DTO - Journal entry with its lines."""
    id: UUID
    company_id: UUID
    entry_number: str
    date: date
    memo: str | None
    status: EntryStatus
    source: EntrySource
    source_id: UUID | None
    reversed_entry_id: UUID | None
    reversal_reason: str | None
    created_by: str
    created_at: datetime
    posted_by: str | None
    posted_at: datetime | None
    updated_by: str | None
    updated_at: datetime | None
    total_debit: Decimal
    total_credit: Decimal
    lines: list[JournalLineResponseDTO]

    model_config = ConfigDict(from_attributes=True)


class EntryNumberResponseDTO(BaseModel):
    company_id: UUID
    entry_number: str


class AccountBalanceResponseDTO(BaseModel):
    """DTO - Account with its balance over posted lines."""
    account: AccountResponseDTO
    balance: Decimal
    debit_total: Decimal
    credit_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class LedgerLineResponseDTO(BaseModel):
    line_id: UUID
    entry_id: UUID
    entry_number: str
    date: date
    description: str
    memo: str | None
    source: EntrySource
    status: EntryStatus
    debit: Decimal
    credit: Decimal
    running_balance: Decimal

    model_config = ConfigDict(from_attributes=True)


class AccountLedgerResponseDTO(BaseModel):
    """DTO - Account ledger; totals cover the whole filtered period, entries one page."""
    account: AccountResponseDTO
    entries: list[LedgerLineResponseDTO]
    opening_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal
    total_count: int

    model_config = ConfigDict(from_attributes=True)


class TrialBalanceRowDTO(BaseModel):
    account: AccountResponseDTO
    debit: Decimal
    credit: Decimal

    model_config = ConfigDict(from_attributes=True)


class TrialBalanceResponseDTO(BaseModel):
    """DTO - Trial balance; debits must equal credits."""
    rows: list[TrialBalanceRowDTO]
    total_debit: Decimal
    total_credit: Decimal
    difference: Decimal
    is_balanced: bool

    model_config = ConfigDict(from_attributes=True)


class InvoiceLineItemDTO(BaseModel):
    description: str | None = None
    quantity: Decimal = Field(..., ge=0)
    unit_price: Decimal = Field(..., ge=0)
    vat_rate: Decimal = Field(Decimal("0"), ge=0, le=1, description="Fraction, 0.05 for 5%")

    def to_domain(self) -> InvoiceLineItem:
        return InvoiceLineItem(quantity=self.quantity, unit_price=self.unit_price, vat_rate=self.vat_rate)


class InvoiceTotalsRequestDTO(BaseModel):
    items: list[InvoiceLineItemDTO] = Field(..., min_length=1)


class InvoiceTotalsResponseDTO(BaseModel):
    subtotal: Decimal
    vat_amount: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class InvoicePostDTO(BaseModel):
    """DTO - Recognize an invoice's revenue as a draft entry."""
    company_id: UUID
    invoice_number: str = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1)
    invoice_date: date
    items: list[InvoiceLineItemDTO] = Field(..., min_length=1)
    receivable_account_id: UUID | None = None
    revenue_account_id: UUID | None = None
    vat_account_id: UUID | None = None
    source_id: UUID | None = None


class InvoicePaymentDTO(BaseModel):
    """DTO - Payment received against an invoice."""
    company_id: UUID
    invoice_number: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    payment_date: date
    payment_account_id: UUID | None = None
    receivable_account_id: UUID | None = None
    source_id: UUID | None = None


class ExpensePostDTO(BaseModel):
    """DTO - Expense receipt, posted immediately."""
    company_id: UUID
    amount: Decimal = Field(..., ge=0, description="Net amount")
    vat_amount: Decimal = Field(Decimal("0"), ge=0)
    expense_date: date
    debit_account_id: UUID | None = Field(None, description="Expense account")
    credit_account_id: UUID | None = Field(None, description="Cash or bank account paid from")
    merchant: str | None = None
    category: str | None = None
    source_id: UUID | None = None
