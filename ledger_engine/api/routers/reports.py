"""
API Routers - Balances, account ledger and trial balance.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from ledger_engine.api.dependencies import get_balance_aggregator, get_ledger_builder
from ledger_engine.application.dto.ledger_dto import (
    AccountBalanceResponseDTO,
    AccountLedgerResponseDTO,
    TrialBalanceResponseDTO,
)
from ledger_engine.domain.services import BalanceAggregator, LedgerViewBuilder
from ledger_engine.domain.value_objects import DateRange, LedgerFilters

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


def _date_range(start_date: date | None, end_date: date | None) -> DateRange | None:
    if start_date is None and end_date is None:
        return None
    return DateRange(start_date, end_date)


@router.get("/companies/{company_id}/balances", response_model=list[AccountBalanceResponseDTO])
def get_account_balances(
    company_id: UUID,
    start_date: date | None = Query(None, description="Inclusive lower bound"),
    end_date: date | None = Query(None, description="Inclusive upper bound"),
    aggregator: BalanceAggregator = Depends(get_balance_aggregator),
):
    """
    Every account of the company with its balance over posted entries.

    - Asset and expense balances are debit - credit, the rest credit - debit
    - Draft and void entries never count
    """
    balances = aggregator.balances_for_company(company_id, _date_range(start_date, end_date))
    return [AccountBalanceResponseDTO.model_validate(b) for b in balances]


@router.get("/accounts/{account_id}/ledger", response_model=AccountLedgerResponseDTO)
def get_account_ledger(
    account_id: UUID,
    date_start: date | None = None,
    date_end: date | None = None,
    search: str | None = Query(None, max_length=200),
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    builder: LedgerViewBuilder = Depends(get_ledger_builder),
):
    """Chronological posted lines with running balances; opening balance from before date_start."""
    filters = LedgerFilters(
        date_start=date_start,
        date_end=date_end,
        search=search,
        limit=limit,
        offset=offset,
    )
    return AccountLedgerResponseDTO.model_validate(builder.ledger_for(account_id, filters))


@router.get("/companies/{company_id}/trial-balance", response_model=TrialBalanceResponseDTO)
def get_trial_balance(
    company_id: UUID,
    start_date: date | None = None,
    end_date: date | None = None,
    aggregator: BalanceAggregator = Depends(get_balance_aggregator),
):
    trial_balance = aggregator.trial_balance(company_id, _date_range(start_date, end_date))
    return TrialBalanceResponseDTO.model_validate(trial_balance)
