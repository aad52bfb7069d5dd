"""
SQLAlchemy repositories behind the domain interfaces.

Each repository wraps one Session supplied by the caller. Write methods
commit or roll back as a unit.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, selectinload

from ledger_engine.core.exceptions import (
    ConcurrencyError,
    DuplicateAccountCodeError,
    DuplicateEntryNumberError,
)
from ledger_engine.domain.entities import (
    Account,
    EntryHeader,
    JournalEntry,
    JournalLine,
    PostedLineRow,
)
from ledger_engine.domain.services import (
    IAccountRepository,
    IJournalEntryRepository,
    ILedgerQueryRepository,
)
from ledger_engine.domain.value_objects import (
    ZERO,
    AccountType,
    DateRange,
    EntrySource,
    EntryStatus,
    PostingLine,
    entry_number_sequence,
    format_entry_number,
    to_amount,
    utcnow,
)
from ledger_engine.infrastructure.database.models import Account as AccountModel
from ledger_engine.infrastructure.database.models import EntrySequence
from ledger_engine.infrastructure.database.models import JournalEntry as JournalEntryModel
from ledger_engine.infrastructure.database.models import JournalLine as JournalLineModel

logger = logging.getLogger(__name__)


def _to_account(row: AccountModel) -> Account:
    return Account(
        id=row.id,
        company_id=row.company_id,
        code=row.code,
        name_en=row.name_en,
        name_ar=row.name_ar,
        account_type=AccountType(row.account_type),
        is_vat_account=row.is_vat_account,
        is_system_account=row.is_system_account,
        is_active=row.is_active,
        is_archived=row.is_archived,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_entry(row: JournalEntryModel) -> JournalEntry:
    return JournalEntry(
        id=row.id,
        company_id=row.company_id,
        entry_number=row.entry_number,
        date=row.entry_date,
        memo=row.memo,
        status=EntryStatus(row.status),
        source=EntrySource(row.source),
        source_id=row.source_id,
        reversed_entry_id=row.reversed_entry_id,
        reversal_reason=row.reversal_reason,
        created_by=row.created_by,
        created_at=row.created_at,
        posted_by=row.posted_by,
        posted_at=row.posted_at,
        updated_by=row.updated_by,
        updated_at=row.updated_at,
        lines=[
            JournalLine(
                id=line.id,
                entry_id=line.entry_id,
                account_id=line.account_id,
                line_number=line.line_number,
                debit=to_amount(line.debit),
                credit=to_amount(line.credit),
                description=line.description,
            )
            for line in row.lines
        ],
    )


def _line_rows(lines: Sequence[PostingLine]) -> list[JournalLineModel]:
    return [
        JournalLineModel(
            account_id=line.account_id,
            line_number=number,
            debit=line.debit,
            credit=line.credit,
            description=line.description,
        )
        for number, line in enumerate(lines, start=1)
    ]


def _is_lock_error(exc: OperationalError) -> bool:
    message = str(exc.orig).lower()
    return "locked" in message or "deadlock" in message or "could not serialize" in message


class SqlAccountRepository(IAccountRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, account_id: UUID) -> Account | None:
        row = self.db.get(AccountModel, account_id)
        return _to_account(row) if row else None

    def get_by_code(self, company_id: UUID, code: str) -> Account | None:
        row = self.db.query(AccountModel).filter(
            AccountModel.company_id == company_id,
            AccountModel.code == code,
        ).first()
        return _to_account(row) if row else None

    def get_many(self, account_ids: Iterable[UUID]) -> dict[UUID, Account]:
        ids = list(account_ids)
        if not ids:
            return {}
        rows = self.db.query(AccountModel).filter(AccountModel.id.in_(ids)).all()
        return {row.id: _to_account(row) for row in rows}

    def list_by_company(self, company_id: UUID, include_archived: bool = True) -> list[Account]:
        query = self.db.query(AccountModel).filter(AccountModel.company_id == company_id)
        if not include_archived:
            query = query.filter(AccountModel.is_archived.is_(False))
        return [_to_account(row) for row in query.order_by(AccountModel.code).all()]

    def list_vat_accounts(self, company_id: UUID) -> list[Account]:
        rows = self.db.query(AccountModel).filter(
            AccountModel.company_id == company_id,
            AccountModel.is_vat_account.is_(True),
        ).order_by(AccountModel.code).all()
        return [_to_account(row) for row in rows]

    def add_many(self, accounts: Sequence[Account]) -> list[Account]:
        rows = [
            AccountModel(
                id=account.id,
                company_id=account.company_id,
                code=account.code,
                name_en=account.name_en,
                name_ar=account.name_ar,
                account_type=account.account_type.value,
                is_vat_account=account.is_vat_account,
                is_system_account=account.is_system_account,
                is_active=account.is_active,
                is_archived=account.is_archived,
                created_at=account.created_at,
            )
            for account in accounts
        ]
        try:
            self.db.add_all(rows)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateAccountCodeError(sorted(a.code for a in accounts)) from exc
        return [_to_account(row) for row in rows]

    def save(self, account: Account) -> Account:
        row = self.db.get(AccountModel, account.id)
        row.code = account.code
        row.name_en = account.name_en
        row.name_ar = account.name_ar
        row.account_type = account.account_type.value
        row.is_vat_account = account.is_vat_account
        row.is_active = account.is_active
        row.is_archived = account.is_archived
        row.updated_at = account.updated_at or utcnow()
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateAccountCodeError([account.code]) from exc
        return _to_account(row)

    def delete(self, account_id: UUID) -> None:
        row = self.db.get(AccountModel, account_id)
        if row is not None:
            self.db.delete(row)
            self.db.commit()

    def has_lines(self, account_id: UUID) -> bool:
        return self.db.query(
            self.db.query(JournalLineModel).filter(JournalLineModel.account_id == account_id).exists()
        ).scalar()


class SqlJournalEntryRepository(IJournalEntryRepository):
    """
    Entry headers and lines.

    Numbers come from the EntrySequence counter row for (company, day). The
    counter is bumped with a single UPDATE so the row lock serializes
    concurrent writers; the unique (company_id, entry_number) constraint is
    the backstop. A first allocation for a day inserts the counter row, and
    two writers racing on that insert surface as IntegrityError.
    """

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(JournalEntryModel).options(selectinload(JournalEntryModel.lines))

    def get(self, entry_id: UUID) -> JournalEntry | None:
        row = self._query().filter(JournalEntryModel.id == entry_id).first()
        return _to_entry(row) if row else None

    def list_by_company(self, company_id: UUID, status: EntryStatus | None = None) -> list[JournalEntry]:
        query = self._query().filter(JournalEntryModel.company_id == company_id)
        if status is not None:
            query = query.filter(JournalEntryModel.status == status.value)
        rows = query.order_by(
            JournalEntryModel.entry_date.desc(),
            JournalEntryModel.sequence.desc(),
            JournalEntryModel.entry_number.desc(),
        ).all()
        return [_to_entry(row) for row in rows]

    def find_reversal(self, entry_id: UUID) -> JournalEntry | None:
        row = self._query().filter(JournalEntryModel.reversed_entry_id == entry_id).first()
        return _to_entry(row) if row else None

    def _highest_existing(self, company_id: UUID, day_prefix: str) -> int:
        numbers = self.db.query(JournalEntryModel.entry_number).filter(
            JournalEntryModel.company_id == company_id,
            JournalEntryModel.entry_number.like(f"{day_prefix}-%"),
        ).all()
        sequences = [entry_number_sequence(number) or 0 for (number,) in numbers]
        return max([len(sequences), *sequences])

    def peek_sequence(self, company_id: UUID, day_prefix: str) -> int:
        next_value = self.db.query(EntrySequence.next_value).filter(
            EntrySequence.company_id == company_id,
            EntrySequence.day_prefix == day_prefix,
        ).scalar()
        if next_value is not None:
            return next_value
        return self._highest_existing(company_id, day_prefix) + 1

    def _allocate(self, company_id: UUID, day_prefix: str) -> int:
        bumped = self.db.query(EntrySequence).filter(
            EntrySequence.company_id == company_id,
            EntrySequence.day_prefix == day_prefix,
        ).update(
            {
                EntrySequence.next_value: EntrySequence.next_value + 1,
                EntrySequence.updated_at: utcnow(),
            },
            synchronize_session=False,
        )
        if bumped:
            next_value = self.db.query(EntrySequence.next_value).filter(
                EntrySequence.company_id == company_id,
                EntrySequence.day_prefix == day_prefix,
            ).scalar()
            return next_value - 1

        value = self._highest_existing(company_id, day_prefix) + 1
        self.db.add(EntrySequence(company_id=company_id, day_prefix=day_prefix, next_value=value + 1))
        self.db.flush()
        return value

    def create(
        self,
        header: EntryHeader,
        lines: Sequence[PostingLine],
        day_prefix: str,
        status: EntryStatus = EntryStatus.DRAFT,
        posted_by: str | None = None,
    ) -> JournalEntry:
        now = utcnow()
        try:
            sequence = self._allocate(header.company_id, day_prefix)
            row = JournalEntryModel(
                company_id=header.company_id,
                entry_number=format_entry_number(day_prefix, sequence),
                sequence=sequence,
                entry_date=header.date,
                memo=header.memo,
                status=status.value,
                source=header.source.value,
                source_id=header.source_id,
                reversed_entry_id=header.reversed_entry_id,
                reversal_reason=header.reversal_reason,
                created_by=header.created_by,
                created_at=now,
                posted_by=posted_by,
                posted_at=now if status == EntryStatus.POSTED else None,
            )
            row.lines = _line_rows(lines)
            self.db.add(row)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateEntryNumberError(f"Entry number for {day_prefix} already taken") from exc
        except OperationalError as exc:
            self.db.rollback()
            if _is_lock_error(exc):
                raise ConcurrencyError(f"Entry number allocation for {day_prefix} is contended") from exc
            raise
        except Exception:
            self.db.rollback()
            raise
        return _to_entry(row)

    def replace_draft(
        self,
        entry_id: UUID,
        changes: dict,
        lines: Sequence[PostingLine],
        updated_by: str,
    ) -> JournalEntry | None:
        try:
            row = self._query().filter(
                JournalEntryModel.id == entry_id,
                JournalEntryModel.status == EntryStatus.DRAFT.value,
            ).with_for_update().first()
            if row is None:
                self.db.rollback()
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            row.lines = _line_rows(lines)
            row.updated_by = updated_by
            row.updated_at = utcnow()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return _to_entry(row)

    def transition(
        self,
        entry_id: UUID,
        expected: EntryStatus,
        target: EntryStatus,
        user: str,
    ) -> JournalEntry | None:
        now = utcnow()
        values = {
            JournalEntryModel.status: target.value,
            JournalEntryModel.updated_by: user,
            JournalEntryModel.updated_at: now,
        }
        if target == EntryStatus.POSTED:
            values[JournalEntryModel.posted_by] = user
            values[JournalEntryModel.posted_at] = now
        try:
            changed = self.db.query(JournalEntryModel).filter(
                JournalEntryModel.id == entry_id,
                JournalEntryModel.status == expected.value,
            ).update(values, synchronize_session=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        if not changed:
            return None
        self.db.expire_all()
        return self.get(entry_id)

    def delete(self, entry_id: UUID) -> None:
        row = self.db.get(JournalEntryModel, entry_id)
        if row is None:
            return
        try:
            self.db.delete(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


class SqlLedgerQueryRepository(ILedgerQueryRepository):
    """Aggregates and ledger reads over posted lines, filtered in SQL."""

    def __init__(self, db: Session):
        self.db = db

    def _posted(self, query):
        return query.join(
            JournalEntryModel, JournalLineModel.entry_id == JournalEntryModel.id
        ).filter(JournalEntryModel.status == EntryStatus.POSTED.value)

    def posted_totals_by_account(
        self, company_id: UUID, date_range: DateRange | None = None
    ) -> dict[UUID, tuple[Decimal, Decimal]]:
        query = self._posted(self.db.query(
            JournalLineModel.account_id,
            func.coalesce(func.sum(JournalLineModel.debit), 0).label("debit_total"),
            func.coalesce(func.sum(JournalLineModel.credit), 0).label("credit_total"),
        )).filter(JournalEntryModel.company_id == company_id)

        if date_range is not None:
            if date_range.start:
                query = query.filter(JournalEntryModel.entry_date >= date_range.start)
            if date_range.end:
                query = query.filter(JournalEntryModel.entry_date <= date_range.end)

        rows = query.group_by(JournalLineModel.account_id).all()
        return {
            row.account_id: (to_amount(row.debit_total), to_amount(row.credit_total))
            for row in rows
        }

    def posted_totals_before(self, account_id: UUID, before: date) -> tuple[Decimal, Decimal]:
        row = self._posted(self.db.query(
            func.coalesce(func.sum(JournalLineModel.debit), 0).label("debit_total"),
            func.coalesce(func.sum(JournalLineModel.credit), 0).label("credit_total"),
        )).filter(
            JournalLineModel.account_id == account_id,
            JournalEntryModel.entry_date < before,
        ).one()
        return to_amount(row.debit_total), to_amount(row.credit_total)

    def posted_lines(
        self,
        account_id: UUID,
        date_start: date | None = None,
        date_end: date | None = None,
        search: str | None = None,
    ) -> list[PostedLineRow]:
        query = self._posted(self.db.query(
            JournalLineModel.id,
            JournalLineModel.entry_id,
            JournalLineModel.line_number,
            JournalLineModel.debit,
            JournalLineModel.credit,
            JournalLineModel.description,
            JournalEntryModel.entry_number,
            JournalEntryModel.entry_date,
            JournalEntryModel.memo,
            JournalEntryModel.source,
            JournalEntryModel.status,
        )).filter(JournalLineModel.account_id == account_id)

        if date_start:
            query = query.filter(JournalEntryModel.entry_date >= date_start)
        if date_end:
            query = query.filter(JournalEntryModel.entry_date <= date_end)
        if search:
            escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{escaped}%"
            query = query.filter(or_(
                JournalEntryModel.entry_number.ilike(pattern, escape="\\"),
                JournalEntryModel.memo.ilike(pattern, escape="\\"),
                JournalLineModel.description.ilike(pattern, escape="\\"),
            ))

        rows = query.order_by(
            JournalEntryModel.entry_date,
            JournalEntryModel.sequence,
            JournalEntryModel.entry_number,
            JournalLineModel.line_number,
        ).all()
        return [
            PostedLineRow(
                line_id=row.id,
                entry_id=row.entry_id,
                entry_number=row.entry_number,
                date=row.entry_date,
                memo=row.memo,
                source=EntrySource(row.source),
                status=EntryStatus(row.status),
                debit=to_amount(row.debit) if row.debit is not None else ZERO,
                credit=to_amount(row.credit) if row.credit is not None else ZERO,
                line_description=row.description,
                line_number=row.line_number,
            )
            for row in rows
        ]
