"""Infrastructure layer."""

from ledger_engine.infrastructure.database import SessionLocal, engine, get_db, init_db
from ledger_engine.infrastructure.database.models import (
    Account,
    EntrySequence,
    JournalEntry,
    JournalLine,
)
from ledger_engine.infrastructure.database.repositories import (
    SqlAccountRepository,
    SqlJournalEntryRepository,
    SqlLedgerQueryRepository,
)
