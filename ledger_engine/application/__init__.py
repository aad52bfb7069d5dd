"""Application layer - DTOs exposed by the HTTP API."""

from ledger_engine.application.dto.ledger_dto import (
    AccountBalanceResponseDTO,
    AccountCreateDTO,
    AccountLedgerResponseDTO,
    AccountResponseDTO,
    AccountUpdateDTO,
    JournalEntryCreateDTO,
    JournalEntryResponseDTO,
    JournalEntryUpdateDTO,
    TrialBalanceResponseDTO,
)
