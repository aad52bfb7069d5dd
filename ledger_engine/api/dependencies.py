"""
API dependencies - services built per request around one database session.
"""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ledger_engine.core.config import get_settings
from ledger_engine.domain.services import (
    AccountRegistryService,
    BalanceAggregator,
    DocumentPoster,
    EntryNumberSequencer,
    JournalService,
    LedgerViewBuilder,
)
from ledger_engine.infrastructure.database import get_db
from ledger_engine.infrastructure.database.repositories import (
    SqlAccountRepository,
    SqlJournalEntryRepository,
    SqlLedgerQueryRepository,
)


def get_current_user(x_user_id: str = Header("system")) -> str:
    """Caller identity recorded as created_by / posted_by."""
    return x_user_id.strip() or "system"


def get_account_service(db: Session = Depends(get_db)) -> AccountRegistryService:
    return AccountRegistryService(SqlAccountRepository(db))


def get_journal_service(db: Session = Depends(get_db)) -> JournalService:
    settings = get_settings()
    journal_repo = SqlJournalEntryRepository(db)
    return JournalService(
        account_repo=SqlAccountRepository(db),
        journal_repo=journal_repo,
        sequencer=EntryNumberSequencer(journal_repo, prefix=settings.entry_number_prefix),
        max_retries=settings.entry_number_max_retries,
    )


def get_balance_aggregator(db: Session = Depends(get_db)) -> BalanceAggregator:
    return BalanceAggregator(SqlAccountRepository(db), SqlLedgerQueryRepository(db))


def get_ledger_builder(db: Session = Depends(get_db)) -> LedgerViewBuilder:
    return LedgerViewBuilder(SqlAccountRepository(db), SqlLedgerQueryRepository(db))


def get_document_poster(
    db: Session = Depends(get_db),
    journal_service: JournalService = Depends(get_journal_service),
) -> DocumentPoster:
    return DocumentPoster(SqlAccountRepository(db), journal_service)
