"""
Integration tests - Journal store against SQLite: atomic writes, numbering, lifecycle.
"""

from contextlib import contextmanager
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import event

from ledger_engine.core.exceptions import (
    EntryNotFoundError,
    EntryStateError,
    InvalidAccountReferenceError,
    UnbalancedEntryError,
)
from ledger_engine.domain import chart_of_accounts
from ledger_engine.domain.entities import EntryHeader, EntryUpdate
from ledger_engine.domain.value_objects import EntrySource, EntryStatus, PostingLine
from ledger_engine.infrastructure.database.models import EntrySequence, JournalEntry, JournalLine, UTCDateTime


@contextmanager
def refusing_line_writes():
    """Fail every journal line INSERT, after the header and counter are already flushed."""
    def refuse(mapper, connection, target):
        raise RuntimeError("line write refused")

    event.listen(JournalLine, "before_insert", refuse)
    try:
        yield
    finally:
        event.remove(JournalLine, "before_insert", refuse)


class TestCreateEntry:

    def test_header_and_lines_are_persisted(self, make_entry, journal_service, cash, equity):
        entry = make_entry(date(2024, 1, 5), [(cash, 200, 0, "Deposit"), (equity, 0, 200)], memo="Capital")

        stored = journal_service.get_entry(entry.id)
        assert stored.entry_number == "JE-20240105-001"
        assert stored.status == EntryStatus.POSTED
        assert stored.memo == "Capital"
        assert [line.line_number for line in stored.lines] == [1, 2]
        assert stored.lines[0].description == "Deposit"
        assert stored.total_debit == stored.total_credit == Decimal("200.00")

    def test_draft_by_default(self, make_entry, cash, equity):
        entry = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)], post=False)
        assert entry.status == EntryStatus.DRAFT
        assert entry.posted_at is None

    def test_numbers_increase_per_day_and_reset(self, make_entry, cash, equity):
        movements = [(cash, 10, 0), (equity, 0, 10)]
        first = make_entry(date(2024, 1, 5), movements)
        second = make_entry(date(2024, 1, 5), movements, post=False)
        next_day = make_entry(date(2024, 1, 6), movements)

        assert first.entry_number == "JE-20240105-001"
        assert second.entry_number == "JE-20240105-002"
        assert next_day.entry_number == "JE-20240106-001"

    def test_numbering_is_per_company(self, journal_service, chart, other_chart, other_company_id, make_entry, cash, equity):
        make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])
        header = EntryHeader(company_id=other_company_id, date=date(2024, 1, 5), created_by="tester")
        lines = [
            PostingLine(other_chart[chart_of_accounts.CASH].id, debit=Decimal("10")),
            PostingLine(other_chart[chart_of_accounts.OWNERS_EQUITY].id, credit=Decimal("10")),
        ]
        assert journal_service.create_entry(header, lines).entry_number == "JE-20240105-001"

    def test_next_entry_number_preview(self, journal_service, make_entry, sample_company_id, cash, equity):
        assert journal_service.next_entry_number(sample_company_id, date(2024, 1, 5)) == "JE-20240105-001"
        make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])
        assert journal_service.next_entry_number(sample_company_id, date(2024, 1, 5)) == "JE-20240105-002"

    def test_counter_continues_after_numbers_written_without_it(
        self, db, make_entry, journal_service, sample_company_id, cash, equity
    ):
        make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])
        db.query(EntrySequence).delete()
        db.commit()

        entry = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])
        assert entry.entry_number == "JE-20240105-002"

    def test_unbalanced_entry_persists_nothing(self, db, make_entry, cash, equity):
        with pytest.raises(UnbalancedEntryError):
            make_entry(date(2024, 1, 5), [(cash, 100, 0), (equity, 0, 90)])
        assert db.query(JournalEntry).count() == 0
        assert db.query(JournalLine).count() == 0
        assert db.query(EntrySequence).count() == 0

    def test_failed_line_write_rolls_back_header_and_counter(self, db, make_entry, cash, equity):
        make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])

        with refusing_line_writes(), pytest.raises(RuntimeError):
            make_entry(date(2024, 1, 5), [(cash, 20, 0), (equity, 0, 20)])

        assert db.query(JournalEntry).count() == 1
        assert db.query(JournalLine).count() == 2
        assert db.query(EntrySequence.next_value).scalar() == 2
        retried = make_entry(date(2024, 1, 5), [(cash, 20, 0), (equity, 0, 20)])
        assert retried.entry_number == "JE-20240105-002"

    def test_failed_first_write_of_the_day_leaves_no_counter(self, db, make_entry, cash, equity):
        with refusing_line_writes(), pytest.raises(RuntimeError):
            make_entry(date(2024, 1, 5), [(cash, 20, 0), (equity, 0, 20)])

        assert db.query(JournalEntry).count() == 0
        assert db.query(JournalLine).count() == 0
        assert db.query(EntrySequence).count() == 0

    def test_timestamps_are_utc_aware(self, db, make_entry, journal_service, cash, equity):
        entry = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])
        db.expire_all()

        stored = journal_service.get_entry(entry.id)

        assert entry.created_at.utcoffset() == timedelta(0)
        assert stored.created_at.utcoffset() == timedelta(0)
        assert stored.posted_at.utcoffset() == timedelta(0)
        assert isinstance(JournalEntry.__table__.c.created_at.type, UTCDateTime)

    def test_account_of_other_company_is_rejected(self, make_entry, other_chart, cash):
        foreign = other_chart[chart_of_accounts.OWNERS_EQUITY]
        with pytest.raises(InvalidAccountReferenceError):
            make_entry(date(2024, 1, 5), [(cash, 10, 0), (foreign, 0, 10)])

    def test_archived_account_is_rejected(self, registry, make_entry, cash, chart):
        travel = chart[chart_of_accounts.TRAVEL_EXPENSES]
        registry.archive_account(travel.id)
        with pytest.raises(InvalidAccountReferenceError):
            make_entry(date(2024, 1, 5), [(travel, 10, 0), (cash, 0, 10)])


class TestLifecycle:

    def test_post_draft(self, make_entry, journal_service, cash, equity):
        draft = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)], post=False)

        posted = journal_service.post_entry(draft.id, "approver")

        assert posted.status == EntryStatus.POSTED
        assert posted.posted_by == "approver"
        assert posted.posted_at is not None

    def test_posting_twice_is_rejected(self, make_entry, journal_service, cash, equity):
        entry = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])
        with pytest.raises(EntryStateError):
            journal_service.post_entry(entry.id, "approver")

    def test_update_draft_replaces_lines(self, db, make_entry, journal_service, cash, equity, rent):
        draft = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)], post=False)
        lines = [
            PostingLine(rent.id, debit=Decimal("25"), description="Rent"),
            PostingLine(cash.id, credit=Decimal("20")),
            PostingLine(equity.id, credit=Decimal("5")),
        ]

        updated = journal_service.update_draft(
            draft.id, EntryUpdate(entry_date=date(2024, 1, 7), memo="Corrected"), lines, "editor"
        )

        assert updated.date == date(2024, 1, 7)
        assert updated.memo == "Corrected"
        assert updated.updated_by == "editor"
        assert [line.account_id for line in updated.lines] == [rent.id, cash.id, equity.id]
        assert db.query(JournalLine).count() == 3

    def test_posted_entry_cannot_be_updated(self, make_entry, journal_service, cash, equity):
        entry = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])
        lines = [PostingLine(cash.id, debit=Decimal("1")), PostingLine(equity.id, credit=Decimal("1"))]
        with pytest.raises(EntryStateError):
            journal_service.update_draft(entry.id, EntryUpdate(memo="x"), lines, "editor")

    def test_update_is_validated(self, make_entry, journal_service, cash, equity):
        draft = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)], post=False)
        lines = [PostingLine(cash.id, debit=Decimal("5")), PostingLine(equity.id, credit=Decimal("1"))]
        with pytest.raises(UnbalancedEntryError):
            journal_service.update_draft(draft.id, EntryUpdate(), lines, "editor")
        assert journal_service.get_entry(draft.id).total_debit == Decimal("10.00")

    def test_void_draft_then_delete(self, db, make_entry, journal_service, cash, equity):
        draft = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)], post=False)

        voided = journal_service.void_entry(draft.id, "editor")
        assert voided.status == EntryStatus.VOID
        with pytest.raises(EntryStateError):
            journal_service.post_entry(draft.id, "approver")

        journal_service.delete_entry(draft.id)
        with pytest.raises(EntryNotFoundError):
            journal_service.get_entry(draft.id)
        assert db.query(JournalLine).count() == 0

    def test_posted_entry_cannot_be_voided_or_deleted(self, make_entry, journal_service, cash, equity):
        entry = make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])
        with pytest.raises(EntryStateError):
            journal_service.void_entry(entry.id, "editor")
        with pytest.raises(EntryStateError):
            journal_service.delete_entry(entry.id)

    def test_list_entries_by_status(self, make_entry, journal_service, sample_company_id, cash, equity):
        make_entry(date(2024, 1, 5), [(cash, 10, 0), (equity, 0, 10)])
        make_entry(date(2024, 1, 6), [(cash, 10, 0), (equity, 0, 10)], post=False)

        assert len(journal_service.list_entries(sample_company_id)) == 2
        drafts = journal_service.list_entries(sample_company_id, EntryStatus.DRAFT)
        assert [e.entry_number for e in drafts] == ["JE-20240106-001"]


class TestReversal:

    def test_reversal_mirrors_lines_and_keeps_original_posted(
        self, make_entry, journal_service, aggregator, sample_company_id, cash, rent
    ):
        original = make_entry(date(2024, 1, 5), [(rent, 100, 0, "January rent"), (cash, 0, 100)])

        reversal = journal_service.reverse_entry(original.id, "auditor", "Booked twice", date(2024, 1, 9))

        assert reversal.status == EntryStatus.POSTED
        assert reversal.source == EntrySource.REVERSAL
        assert reversal.reversed_entry_id == original.id
        assert reversal.date == date(2024, 1, 9)
        assert reversal.memo == f"Reversal of {original.entry_number}: Booked twice"
        assert reversal.lines[0].credit == Decimal("100.00")
        assert reversal.lines[0].description == "Reversal: January rent"
        assert journal_service.get_entry(original.id).status == EntryStatus.POSTED

        balances = {b.account.id: b.balance for b in aggregator.balances_for_company(sample_company_id)}
        assert balances[rent.id] == Decimal("0")
        assert balances[cash.id] == Decimal("0")

    def test_entry_is_reversed_once(self, make_entry, journal_service, cash, rent):
        original = make_entry(date(2024, 1, 5), [(rent, 100, 0), (cash, 0, 100)])
        journal_service.reverse_entry(original.id, "auditor")
        with pytest.raises(EntryStateError):
            journal_service.reverse_entry(original.id, "auditor")

    def test_draft_cannot_be_reversed(self, make_entry, journal_service, cash, rent):
        draft = make_entry(date(2024, 1, 5), [(rent, 100, 0), (cash, 0, 100)], post=False)
        with pytest.raises(EntryStateError):
            journal_service.reverse_entry(draft.id, "auditor")
