"""
Domain Services - Business logic that operates on multiple entities.

Posting flow: DocumentPoster -> PostingValidator -> EntryNumberSequencer ->
journal repository (atomic write) -> BalanceAggregator / LedgerViewBuilder.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from ledger_engine.core.exceptions import (
    AccountInUseError,
    AccountNotFoundError,
    ConcurrencyError,
    DuplicateAccountCodeError,
    DuplicateEntryNumberError,
    EntryNotFoundError,
    EntryStateError,
    InvalidAccountReferenceError,
    UnbalancedEntryError,
    ValidationError,
)
from ledger_engine.domain import chart_of_accounts
from ledger_engine.domain.entities import (
    Account,
    AccountBalance,
    AccountCreate,
    AccountLedger,
    AccountUpdate,
    EntryHeader,
    EntryUpdate,
    JournalEntry,
    LedgerLine,
    PostedLineRow,
    TrialBalance,
    TrialBalanceRow,
)
from ledger_engine.domain.value_objects import (
    BALANCE_TOLERANCE,
    ZERO,
    AccountType,
    DateRange,
    EntrySource,
    EntryStatus,
    InvoiceLineItem,
    InvoiceTotals,
    LedgerFilters,
    PostingLine,
    entry_day_prefix,
    format_entry_number,
    round_money,
    utcnow,
)

logger = logging.getLogger(__name__)


class IAccountRepository(ABC):

    @abstractmethod
    def get(self, account_id: UUID) -> Account | None:
        ...

    @abstractmethod
    def get_by_code(self, company_id: UUID, code: str) -> Account | None:
        ...

    @abstractmethod
    def get_many(self, account_ids: Iterable[UUID]) -> dict[UUID, Account]:
        ...

    @abstractmethod
    def list_by_company(self, company_id: UUID, include_archived: bool = True) -> list[Account]:
        ...

    @abstractmethod
    def list_vat_accounts(self, company_id: UUID) -> list[Account]:
        ...

    @abstractmethod
    def add_many(self, accounts: Sequence[Account]) -> list[Account]:
        """Insert all accounts in one transaction or none of them."""
        ...

    @abstractmethod
    def save(self, account: Account) -> Account:
        ...

    @abstractmethod
    def delete(self, account_id: UUID) -> None:
        ...

    @abstractmethod
    def has_lines(self, account_id: UUID) -> bool:
        ...


class IJournalEntryRepository(ABC):

    @abstractmethod
    def get(self, entry_id: UUID) -> JournalEntry | None:
        ...

    @abstractmethod
    def list_by_company(self, company_id: UUID, status: EntryStatus | None = None) -> list[JournalEntry]:
        ...

    @abstractmethod
    def find_reversal(self, entry_id: UUID) -> JournalEntry | None:
        ...

    @abstractmethod
    def peek_sequence(self, company_id: UUID, day_prefix: str) -> int:
        """Sequence the next allocation for this company/day would receive."""
        ...

    @abstractmethod
    def create(
        self,
        header: EntryHeader,
        lines: Sequence[PostingLine],
        day_prefix: str,
        status: EntryStatus = EntryStatus.DRAFT,
        posted_by: str | None = None,
    ) -> JournalEntry:
        """
        Allocate the next number for (company, day_prefix), insert the header
        and all lines, and commit as one unit.
        Raises DuplicateEntryNumberError or ConcurrencyError when the
        allocation raced; nothing is persisted in that case.
        """
        ...

    @abstractmethod
    def replace_draft(
        self,
        entry_id: UUID,
        changes: dict,
        lines: Sequence[PostingLine],
        updated_by: str,
    ) -> JournalEntry | None:
        """Update header fields and replace all lines, only while draft."""
        ...

    @abstractmethod
    def transition(
        self,
        entry_id: UUID,
        expected: EntryStatus,
        target: EntryStatus,
        user: str,
    ) -> JournalEntry | None:
        """Change status only if the entry is still in `expected`."""
        ...

    @abstractmethod
    def delete(self, entry_id: UUID) -> None:
        ...


class ILedgerQueryRepository(ABC):
    """Read side over posted lines; all filtering happens in the store."""

    @abstractmethod
    def posted_totals_by_account(
        self, company_id: UUID, date_range: DateRange | None = None
    ) -> dict[UUID, tuple[Decimal, Decimal]]:
        """(debit_total, credit_total) per account, grouped in one query."""
        ...

    @abstractmethod
    def posted_totals_before(self, account_id: UUID, before: date) -> tuple[Decimal, Decimal]:
        ...

    @abstractmethod
    def posted_lines(
        self,
        account_id: UUID,
        date_start: date | None = None,
        date_end: date | None = None,
        search: str | None = None,
    ) -> list[PostedLineRow]:
        """Posted lines ordered by (date, entry_number, line_number)."""
        ...


class PostingValidator:
    """
    Double-entry check run before any write.
    Pure: looks accounts up in the supplied mapping only.
    """

    def validate(
        self,
        lines: Sequence[PostingLine],
        accounts: Mapping[UUID, Account],
        company_id: UUID | None = None,
    ) -> tuple[Decimal, Decimal]:
        if not lines:
            raise ValidationError("Journal entry must have at least one line")

        total_debit = ZERO
        total_credit = ZERO
        for index, line in enumerate(lines, start=1):
            account = accounts.get(line.account_id)
            if account is None:
                raise InvalidAccountReferenceError(
                    f"Line {index}: account {line.account_id} does not exist"
                )
            if company_id is not None and account.company_id != company_id:
                raise InvalidAccountReferenceError(
                    f"Line {index}: account {account.code} belongs to another company"
                )
            if not account.can_post:
                raise InvalidAccountReferenceError(
                    f"Line {index}: account {account.code} is archived or inactive"
                )
            if line.debit < ZERO or line.credit < ZERO:
                raise ValidationError(f"Line {index}: amounts must not be negative")
            if line.debit > ZERO and line.credit > ZERO:
                raise ValidationError(f"Line {index}: a line is either a debit or a credit")
            if line.is_memo:
                logger.debug("Line %d on account %s carries no amount", index, account.code)
            total_debit += line.debit
            total_credit += line.credit

        if abs(total_debit - total_credit) > BALANCE_TOLERANCE:
            raise UnbalancedEntryError(total_debit, total_credit)
        if total_debit == ZERO or total_credit == ZERO:
            raise ValidationError("Entry must have at least one debit and one credit")
        return total_debit, total_credit


class EntryNumberSequencer:
    """JE-YYYYMMDD-NNN numbers, reset daily per company."""

    def __init__(self, journal_repo: IJournalEntryRepository, prefix: str = "JE"):
        self.journal_repo = journal_repo
        self.prefix = prefix

    def day_prefix(self, value: date | datetime) -> str:
        return entry_day_prefix(value, self.prefix)

    def next_entry_number(self, company_id: UUID, value: date | datetime) -> str:
        """
        Number the next entry for this company/day would receive.
        Informational only: the number is allocated atomically when the
        entry is written, so a concurrent writer may take this one first.
        """
        day_prefix = self.day_prefix(value)
        return format_entry_number(day_prefix, self.journal_repo.peek_sequence(company_id, day_prefix))


class JournalService:
    """
    Service - Journal store: atomic creation and the draft/posted/void lifecycle.
    Only draft entries are mutable; posted entries are corrected by reversal.
    """

    def __init__(
        self,
        account_repo: IAccountRepository,
        journal_repo: IJournalEntryRepository,
        validator: PostingValidator | None = None,
        sequencer: EntryNumberSequencer | None = None,
        max_retries: int = 5,
    ):
        self.account_repo = account_repo
        self.journal_repo = journal_repo
        self.validator = validator or PostingValidator()
        self.sequencer = sequencer or EntryNumberSequencer(journal_repo)
        self.max_retries = max(1, max_retries)

    def validate_lines(self, lines: Sequence[PostingLine], company_id: UUID) -> tuple[Decimal, Decimal]:
        accounts = self.account_repo.get_many({line.account_id for line in lines})
        return self.validator.validate(lines, accounts, company_id)

    def create_entry(
        self,
        header: EntryHeader,
        lines: Sequence[PostingLine],
        post: bool = False,
    ) -> JournalEntry:
        self.validate_lines(lines, header.company_id)

        status = EntryStatus.POSTED if post else EntryStatus.DRAFT
        posted_by = header.created_by if post else None
        day_prefix = self.sequencer.day_prefix(header.date)

        for attempt in range(1, self.max_retries + 1):
            try:
                entry = self.journal_repo.create(header, lines, day_prefix, status, posted_by)
            except (DuplicateEntryNumberError, ConcurrencyError) as exc:
                logger.warning(
                    "Entry number allocation for %s conflicted (attempt %d/%d): %s",
                    day_prefix, attempt, self.max_retries, exc,
                )
                continue
            logger.info(
                "Created journal entry %s (%s, %s) with %d lines",
                entry.entry_number, entry.status.value, entry.source.value, len(entry.lines),
            )
            return entry

        raise ConcurrencyError(
            f"Could not allocate an entry number for {day_prefix} after {self.max_retries} attempts"
        )

    def get_entry(self, entry_id: UUID) -> JournalEntry:
        entry = self.journal_repo.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def list_entries(self, company_id: UUID, status: EntryStatus | None = None) -> list[JournalEntry]:
        return self.journal_repo.list_by_company(company_id, status)

    def next_entry_number(self, company_id: UUID, value: date | datetime) -> str:
        return self.sequencer.next_entry_number(company_id, value)

    def update_draft(
        self,
        entry_id: UUID,
        update: EntryUpdate,
        lines: Sequence[PostingLine],
        updated_by: str,
    ) -> JournalEntry:
        entry = self.get_entry(entry_id)
        entry.ensure_draft("modified")
        self.validate_lines(lines, entry.company_id)

        updated = self.journal_repo.replace_draft(entry_id, update.changes(), lines, updated_by)
        if updated is None:
            raise EntryStateError(f"Entry {entry.entry_number} is no longer a draft")
        logger.info("Updated draft entry %s", updated.entry_number)
        return updated

    def post_entry(self, entry_id: UUID, posted_by: str) -> JournalEntry:
        entry = self.get_entry(entry_id)
        if entry.status == EntryStatus.POSTED:
            raise EntryStateError(f"Entry {entry.entry_number} is already posted")
        entry.ensure_draft("posted")
        self.validate_lines([line.to_posting_line() for line in entry.lines], entry.company_id)

        posted = self.journal_repo.transition(entry_id, EntryStatus.DRAFT, EntryStatus.POSTED, posted_by)
        if posted is None:
            raise EntryStateError(f"Entry {entry.entry_number} is no longer a draft")
        logger.info("Posted journal entry %s", posted.entry_number)
        return posted

    def void_entry(self, entry_id: UUID, user: str) -> JournalEntry:
        entry = self.get_entry(entry_id)
        entry.ensure_draft("voided")

        voided = self.journal_repo.transition(entry_id, EntryStatus.DRAFT, EntryStatus.VOID, user)
        if voided is None:
            raise EntryStateError(f"Entry {entry.entry_number} is no longer a draft")
        logger.info("Voided draft entry %s", voided.entry_number)
        return voided

    def reverse_entry(
        self,
        entry_id: UUID,
        user: str,
        reason: str | None = None,
        reversal_date: date | None = None,
    ) -> JournalEntry:
        """
        Post a mirror entry with debits and credits swapped.
        The original stays posted, so the pair nets to zero.
        """
        entry = self.get_entry(entry_id)
        if entry.status != EntryStatus.POSTED:
            raise EntryStateError("Only posted entries can be reversed")
        existing = self.journal_repo.find_reversal(entry_id)
        if existing is not None:
            raise EntryStateError(
                f"Entry {entry.entry_number} was already reversed by {existing.entry_number}"
            )

        header = EntryHeader(
            company_id=entry.company_id,
            date=reversal_date or utcnow().date(),
            created_by=user,
            memo=f"Reversal of {entry.entry_number}: {reason or 'No reason provided'}",
            source=EntrySource.REVERSAL,
            source_id=entry.id,
            reversed_entry_id=entry.id,
            reversal_reason=reason,
        )
        lines = [
            line.to_posting_line().swapped(f"Reversal: {line.description or ''}")
            for line in entry.lines
        ]
        reversal = self.create_entry(header, lines, post=True)
        logger.info("Reversed %s with %s", entry.entry_number, reversal.entry_number)
        return reversal

    def delete_entry(self, entry_id: UUID) -> None:
        entry = self.get_entry(entry_id)
        if entry.status == EntryStatus.POSTED:
            raise EntryStateError(
                f"Entry {entry.entry_number} is posted and cannot be deleted; reverse it instead"
            )
        self.journal_repo.delete(entry_id)
        logger.info("Deleted journal entry %s", entry.entry_number)


class BalanceAggregator:
    """
    Service - Per-account totals over posted lines.
    Asset/expense balances are debit-normal, the rest credit-normal.
    """

    def __init__(self, account_repo: IAccountRepository, ledger_repo: ILedgerQueryRepository):
        self.account_repo = account_repo
        self.ledger_repo = ledger_repo

    def balances_for_company(
        self, company_id: UUID, date_range: DateRange | None = None
    ) -> list[AccountBalance]:
        accounts = self.account_repo.list_by_company(company_id, include_archived=True)
        totals = self.ledger_repo.posted_totals_by_account(company_id, date_range)

        results = []
        for account in accounts:
            debit_total, credit_total = totals.get(account.id, (ZERO, ZERO))
            results.append(AccountBalance(
                account=account,
                balance=account.account_type.signed_movement(debit_total, credit_total),
                debit_total=debit_total,
                credit_total=credit_total,
            ))
        return results

    def trial_balance(self, company_id: UUID, date_range: DateRange | None = None) -> TrialBalance:
        rows = []
        total_debit = ZERO
        total_credit = ZERO
        for item in self.balances_for_company(company_id, date_range):
            net = item.debit_total - item.credit_total
            debit = net if net > ZERO else ZERO
            credit = -net if net < ZERO else ZERO
            total_debit += debit
            total_credit += credit
            rows.append(TrialBalanceRow(account=item.account, debit=debit, credit=credit))
        return TrialBalance(rows=rows, total_debit=total_debit, total_credit=total_credit)


def running_balances(
    account_type: AccountType,
    opening_balance: Decimal,
    rows: Sequence[PostedLineRow],
) -> list[LedgerLine]:
    """Replay rows in order from the opening balance."""
    running = opening_balance
    ledger = []
    for row in rows:
        running += account_type.signed_movement(row.debit, row.credit)
        ledger.append(LedgerLine(
            line_id=row.line_id,
            entry_id=row.entry_id,
            entry_number=row.entry_number,
            date=row.date,
            description=row.line_description or row.memo or "",
            memo=row.memo,
            source=row.source,
            status=row.status,
            debit=row.debit,
            credit=row.credit,
            running_balance=running,
        ))
    return ledger


class LedgerViewBuilder:
    """
    Service - Chronological ledger of one account.

    Lines are ordered by (date, entry_number). Running balances are computed
    over the whole filtered period before pagination slices the result.
    """

    def __init__(self, account_repo: IAccountRepository, ledger_repo: ILedgerQueryRepository):
        self.account_repo = account_repo
        self.ledger_repo = ledger_repo

    def ledger_for(self, account_id: UUID, filters: LedgerFilters | None = None) -> AccountLedger:
        filters = filters or LedgerFilters()
        account = self.account_repo.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        account_type = account.account_type

        opening_balance = ZERO
        if filters.date_start:
            prior_debit, prior_credit = self.ledger_repo.posted_totals_before(account_id, filters.date_start)
            opening_balance = account_type.signed_movement(prior_debit, prior_credit)

        search = filters.search.strip() if filters.search else None
        rows = self.ledger_repo.posted_lines(
            account_id,
            date_start=filters.date_start,
            date_end=filters.date_end,
            search=search or None,
        )
        entries = running_balances(account_type, opening_balance, rows)

        total_debit = sum((line.debit for line in entries), ZERO)
        total_credit = sum((line.credit for line in entries), ZERO)
        closing_balance = opening_balance + account_type.signed_movement(total_debit, total_credit)

        start = filters.offset
        page = entries[start:start + filters.limit] if filters.limit is not None else entries[start:]

        return AccountLedger(
            account=account,
            entries=page,
            opening_balance=opening_balance,
            total_debit=total_debit,
            total_credit=total_credit,
            closing_balance=closing_balance,
            total_count=len(entries),
        )


class AccountRegistryService:
    """
    Service - Chart of accounts.
    Bulk creation is all-or-nothing; accounts with lines are archived, never deleted.
    """

    def __init__(self, account_repo: IAccountRepository):
        self.account_repo = account_repo

    def get_account(self, account_id: UUID) -> Account:
        account = self.account_repo.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def get_account_by_code(self, company_id: UUID, code: str) -> Account:
        account = self.account_repo.get_by_code(company_id, code)
        if account is None:
            raise AccountNotFoundError(f"{company_id}/{code}")
        return account

    def list_accounts(self, company_id: UUID, include_archived: bool = False) -> list[Account]:
        return self.account_repo.list_by_company(company_id, include_archived)

    def vat_accounts(self, company_id: UUID) -> list[Account]:
        return self.account_repo.list_vat_accounts(company_id)

    def create_account(self, company_id: UUID, data: AccountCreate) -> Account:
        return self.bulk_create_accounts(company_id, [data])[0]

    def bulk_create_accounts(self, company_id: UUID, items: Sequence[AccountCreate]) -> list[Account]:
        if not items:
            return []

        seen: set[str] = set()
        duplicates = []
        for item in items:
            if item.code in seen:
                duplicates.append(item.code)
            seen.add(item.code)
        if duplicates:
            raise DuplicateAccountCodeError(sorted(set(duplicates)))

        existing = {a.code for a in self.account_repo.list_by_company(company_id, include_archived=True)}
        clashes = sorted(seen & existing)
        if clashes:
            raise DuplicateAccountCodeError(clashes)

        accounts = [
            Account(
                company_id=company_id,
                code=item.code,
                name_en=item.name_en,
                name_ar=item.name_ar,
                account_type=item.account_type,
                is_vat_account=item.is_vat_account,
                is_system_account=item.is_system_account,
            )
            for item in items
        ]
        created = self.account_repo.add_many(accounts)
        logger.info("Created %d accounts for company %s", len(created), company_id)
        return created

    def seed_default_chart(self, company_id: UUID) -> list[Account]:
        """Seed the default chart once; a company with accounts is left alone."""
        if self.account_repo.list_by_company(company_id, include_archived=True):
            logger.info("Company %s already has a chart of accounts", company_id)
            return []
        return self.bulk_create_accounts(company_id, chart_of_accounts.default_chart())

    def update_account(self, account_id: UUID, update: AccountUpdate) -> Account:
        account = self.get_account(account_id)
        changes = update.changes()
        if not changes:
            return account

        structural = {"code", "account_type"} & {
            key for key, value in changes.items() if value != getattr(account, key)
        }
        if structural and self.account_repo.has_lines(account_id):
            raise AccountInUseError(
                f"Account {account.code} has journal lines; its {', '.join(sorted(structural))} cannot change"
            )
        if "code" in changes and changes["code"] != account.code:
            if self.account_repo.get_by_code(account.company_id, changes["code"]) is not None:
                raise DuplicateAccountCodeError([changes["code"]])
        if changes.get("is_active") and account.is_archived:
            raise ValidationError(f"Account {account.code} is archived and cannot be reactivated")

        return self.account_repo.save(replace(account, **changes, updated_at=utcnow()))

    def archive_account(self, account_id: UUID) -> Account:
        account = self.get_account(account_id)
        archived = self.account_repo.save(account.archive())
        logger.info("Archived account %s", account.code)
        return archived

    def delete_account(self, account_id: UUID) -> None:
        account = self.get_account(account_id)
        if account.is_system_account:
            raise ValidationError(f"System account {account.code} cannot be deleted")
        if self.account_repo.has_lines(account_id):
            raise AccountInUseError(
                f"Account {account.code} has journal lines and can only be archived"
            )
        self.account_repo.delete(account_id)
        logger.info("Deleted account %s", account.code)


class DocumentPoster:
    """
    Service - Turns invoices, payments and receipts into balanced entries.
    """

    def __init__(self, account_repo: IAccountRepository, journal_service: JournalService):
        self.account_repo = account_repo
        self.journal_service = journal_service

    @staticmethod
    def compute_invoice_totals(items: Iterable[InvoiceLineItem]) -> InvoiceTotals:
        subtotal = ZERO
        vat_amount = ZERO
        for item in items:
            subtotal += item.net_amount
            vat_amount += item.vat_amount
        return InvoiceTotals(subtotal=subtotal, vat_amount=vat_amount, total=subtotal + vat_amount)

    def _resolve(self, company_id: UUID, account_id: UUID | None, default_code: str) -> Account:
        if account_id is not None:
            account = self.account_repo.get(account_id)
            if account is None:
                raise AccountNotFoundError(account_id)
        else:
            account = self.account_repo.get_by_code(company_id, default_code)
            if account is None:
                raise InvalidAccountReferenceError(
                    f"Company {company_id} has no account with code {default_code}"
                )
        if account.company_id != company_id:
            raise InvalidAccountReferenceError(f"Account {account.code} belongs to another company")
        return account

    def post_invoice(
        self,
        company_id: UUID,
        invoice_number: str,
        customer_name: str,
        invoice_date: date,
        items: Sequence[InvoiceLineItem],
        created_by: str,
        receivable_account_id: UUID | None = None,
        revenue_account_id: UUID | None = None,
        vat_account_id: UUID | None = None,
        source_id: UUID | None = None,
    ) -> JournalEntry:
        """Revenue recognition as a draft: Dr receivable / Cr revenue / Cr VAT payable."""
        if not items:
            raise ValidationError("Invoice must have at least one line")
        totals = self.compute_invoice_totals(items)
        subtotal = round_money(totals.subtotal)
        vat_amount = round_money(totals.vat_amount)
        total = subtotal + vat_amount
        if total <= ZERO:
            raise ValidationError("Invoice total must be greater than zero")

        receivable = self._resolve(company_id, receivable_account_id, chart_of_accounts.ACCOUNTS_RECEIVABLE)
        revenue = self._resolve(company_id, revenue_account_id, chart_of_accounts.SALES_REVENUE)

        lines = [
            PostingLine(receivable.id, debit=total, description=f"Invoice {invoice_number} - {customer_name}"),
            PostingLine(revenue.id, credit=subtotal, description=f"Sales revenue - Invoice {invoice_number}"),
        ]
        if vat_amount > ZERO:
            vat_account = self._resolve(company_id, vat_account_id, chart_of_accounts.VAT_PAYABLE)
            lines.append(
                PostingLine(vat_account.id, credit=vat_amount, description=f"VAT output - Invoice {invoice_number}")
            )

        header = EntryHeader(
            company_id=company_id,
            date=invoice_date,
            created_by=created_by,
            memo=f"Sales Invoice {invoice_number} - {customer_name}",
            source=EntrySource.INVOICE,
            source_id=source_id,
        )
        return self.journal_service.create_entry(header, lines, post=False)

    def record_invoice_payment(
        self,
        company_id: UUID,
        invoice_number: str,
        amount: Decimal,
        payment_date: date,
        payment_account_id: UUID | None,
        created_by: str,
        receivable_account_id: UUID | None = None,
        source_id: UUID | None = None,
    ) -> JournalEntry:
        """Payment against an invoice as a draft: Dr cash/bank / Cr receivable."""
        if payment_account_id is None:
            raise ValidationError("Payment account is required when recording a payment")
        amount = round_money(amount)
        if amount <= ZERO:
            raise ValidationError("Payment amount must be greater than zero")

        payment_account = self._resolve(company_id, payment_account_id, chart_of_accounts.CASH)
        if payment_account.account_type != AccountType.ASSET:
            raise InvalidAccountReferenceError("Payment account must be a cash or bank account (asset)")
        receivable = self._resolve(company_id, receivable_account_id, chart_of_accounts.ACCOUNTS_RECEIVABLE)

        header = EntryHeader(
            company_id=company_id,
            date=payment_date,
            created_by=created_by,
            memo=f"Payment received for Invoice {invoice_number}",
            source=EntrySource.PAYMENT,
            source_id=source_id,
        )
        lines = [
            PostingLine(payment_account.id, debit=amount, description=f"Payment received - Invoice {invoice_number}"),
            PostingLine(receivable.id, credit=amount, description=f"Clear A/R - Invoice {invoice_number}"),
        ]
        return self.journal_service.create_entry(header, lines, post=False)

    def post_expense(
        self,
        company_id: UUID,
        amount: Decimal,
        vat_amount: Decimal,
        expense_date: date,
        debit_account_id: UUID | None,
        credit_account_id: UUID | None,
        created_by: str,
        merchant: str | None = None,
        category: str | None = None,
        source_id: UUID | None = None,
    ) -> JournalEntry:
        """Posted receipt: Dr expense gross / Cr cash-or-bank gross."""
        if debit_account_id is None or credit_account_id is None:
            raise ValidationError("Expense account and payment account are required")
        gross = round_money(amount + vat_amount)
        if gross <= ZERO:
            raise ValidationError("Receipt amount must be greater than zero")

        expense_account = self._resolve(company_id, debit_account_id, chart_of_accounts.COGS)
        payment_account = self._resolve(company_id, credit_account_id, chart_of_accounts.CASH)
        if expense_account.account_type != AccountType.EXPENSE:
            raise InvalidAccountReferenceError("Selected account must be an expense account")
        if payment_account.account_type != AccountType.ASSET:
            raise InvalidAccountReferenceError("Payment account must be a cash or bank account (asset)")

        merchant = merchant or "Expense"
        category = category or "General"
        header = EntryHeader(
            company_id=company_id,
            date=expense_date,
            created_by=created_by,
            memo=f"Receipt: {merchant} - {category}",
            source=EntrySource.RECEIPT,
            source_id=source_id,
        )
        lines = [
            PostingLine(expense_account.id, debit=gross, description=f"{merchant} - {category}"),
            PostingLine(payment_account.id, credit=gross, description=f"Payment for {merchant}"),
        ]
        return self.journal_service.create_entry(header, lines, post=True)
