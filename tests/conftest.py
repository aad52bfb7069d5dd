"""
Pytest configuration and fixtures.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from ledger_engine.domain import chart_of_accounts
from ledger_engine.domain.entities import Account, EntryHeader
from ledger_engine.domain.services import (
    AccountRegistryService,
    BalanceAggregator,
    DocumentPoster,
    JournalService,
    LedgerViewBuilder,
)
from ledger_engine.domain.value_objects import AccountType, PostingLine
from ledger_engine.infrastructure.database import build_engine, build_session_factory
from ledger_engine.infrastructure.database.repositories import (
    SqlAccountRepository,
    SqlJournalEntryRepository,
    SqlLedgerQueryRepository,
)


@pytest.fixture
def sample_company_id() -> UUID:
    return UUID("00000000-0000-0000-0000-000000000001")


@pytest.fixture
def other_company_id() -> UUID:
    return UUID("00000000-0000-0000-0000-000000000002")


@pytest.fixture
def cash_account(sample_company_id) -> Account:
    return Account(
        company_id=sample_company_id,
        code="1000",
        name_en="Cash",
        account_type=AccountType.ASSET,
        is_system_account=True,
    )


@pytest.fixture
def rent_account(sample_company_id) -> Account:
    return Account(
        company_id=sample_company_id,
        code="5100",
        name_en="Rent Expense",
        account_type=AccountType.EXPENSE,
    )


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def account_repo(db) -> SqlAccountRepository:
    return SqlAccountRepository(db)


@pytest.fixture
def journal_repo(db) -> SqlJournalEntryRepository:
    return SqlJournalEntryRepository(db)


@pytest.fixture
def ledger_repo(db) -> SqlLedgerQueryRepository:
    return SqlLedgerQueryRepository(db)


@pytest.fixture
def registry(account_repo) -> AccountRegistryService:
    return AccountRegistryService(account_repo)


@pytest.fixture
def journal_service(account_repo, journal_repo) -> JournalService:
    return JournalService(account_repo, journal_repo)


@pytest.fixture
def aggregator(account_repo, ledger_repo) -> BalanceAggregator:
    return BalanceAggregator(account_repo, ledger_repo)


@pytest.fixture
def ledger_builder(account_repo, ledger_repo) -> LedgerViewBuilder:
    return LedgerViewBuilder(account_repo, ledger_repo)


@pytest.fixture
def poster(account_repo, journal_service) -> DocumentPoster:
    return DocumentPoster(account_repo, journal_service)


@pytest.fixture
def chart(registry, sample_company_id) -> dict[str, Account]:
    """Default chart of the sample company, keyed by account code."""
    return {a.code: a for a in registry.seed_default_chart(sample_company_id)}


@pytest.fixture
def other_chart(registry, other_company_id) -> dict[str, Account]:
    return {a.code: a for a in registry.seed_default_chart(other_company_id)}


@pytest.fixture
def cash(chart) -> Account:
    return chart[chart_of_accounts.CASH]


@pytest.fixture
def equity(chart) -> Account:
    return chart[chart_of_accounts.OWNERS_EQUITY]


@pytest.fixture
def rent(chart) -> Account:
    return chart[chart_of_accounts.RENT_EXPENSE]


@pytest.fixture
def make_entry(journal_service, sample_company_id):
    """Create an entry from (account, debit, credit[, description]) tuples."""

    def _make(entry_date: date, movements, post: bool = True, memo: str | None = None, created_by: str = "tester"):
        header = EntryHeader(company_id=sample_company_id, date=entry_date, created_by=created_by, memo=memo)
        lines = []
        for account, debit, credit, *description in movements:
            lines.append(PostingLine(
                account.id,
                debit=Decimal(str(debit)),
                credit=Decimal(str(credit)),
                description=description[0] if description else None,
            ))
        return journal_service.create_entry(header, lines, post=post)

    return _make
