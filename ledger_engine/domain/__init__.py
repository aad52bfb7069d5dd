"""Domain layer - Pure Python business logic."""

from ledger_engine.domain.entities import (
    Account,
    AccountBalance,
    AccountCreate,
    AccountLedger,
    AccountUpdate,
    EntryHeader,
    EntryUpdate,
    JournalEntry,
    JournalLine,
    LedgerLine,
    PostedLineRow,
    TrialBalance,
)
from ledger_engine.domain.services import (
    AccountRegistryService,
    BalanceAggregator,
    DocumentPoster,
    EntryNumberSequencer,
    IAccountRepository,
    IJournalEntryRepository,
    ILedgerQueryRepository,
    JournalService,
    LedgerViewBuilder,
    PostingValidator,
)
from ledger_engine.domain.value_objects import (
    AccountType,
    DateRange,
    EntrySource,
    EntryStatus,
    InvoiceLineItem,
    InvoiceTotals,
    LedgerFilters,
    PostingLine,
)
