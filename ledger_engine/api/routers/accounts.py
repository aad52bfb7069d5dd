"""
API Routers - Chart of accounts endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ledger_engine.api.dependencies import get_account_service
from ledger_engine.application.dto.ledger_dto import (
    AccountBulkCreateDTO,
    AccountCreateDTO,
    AccountResponseDTO,
    AccountUpdateDTO,
)
from ledger_engine.domain.services import AccountRegistryService

router = APIRouter(prefix="/api/v1", tags=["Accounts"])


@router.post(
    "/companies/{company_id}/accounts",
    response_model=AccountResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
def create_account(
    company_id: UUID,
    dto: AccountCreateDTO,
    service: AccountRegistryService = Depends(get_account_service),
):
    account = service.create_account(company_id, dto.to_domain())
    return AccountResponseDTO.model_validate(account)


@router.post(
    "/companies/{company_id}/accounts/bulk",
    response_model=list[AccountResponseDTO],
    status_code=status.HTTP_201_CREATED,
)
def bulk_create_accounts(
    company_id: UUID,
    dto: AccountBulkCreateDTO,
    service: AccountRegistryService = Depends(get_account_service),
):
    """
    Create several accounts at once.

    - Duplicate codes in the batch or against existing accounts reject the whole batch
    """
    accounts = service.bulk_create_accounts(company_id, [item.to_domain() for item in dto.accounts])
    return [AccountResponseDTO.model_validate(a) for a in accounts]


@router.post(
    "/companies/{company_id}/accounts/seed",
    response_model=list[AccountResponseDTO],
    status_code=status.HTTP_201_CREATED,
)
def seed_default_chart(
    company_id: UUID,
    service: AccountRegistryService = Depends(get_account_service),
):
    """Seed the default chart of accounts; returns [] when the company already has one."""
    return [AccountResponseDTO.model_validate(a) for a in service.seed_default_chart(company_id)]


@router.get("/companies/{company_id}/accounts", response_model=list[AccountResponseDTO])
def list_accounts(
    company_id: UUID,
    include_archived: bool = Query(False),
    service: AccountRegistryService = Depends(get_account_service),
):
    return [AccountResponseDTO.model_validate(a) for a in service.list_accounts(company_id, include_archived)]


@router.get("/companies/{company_id}/accounts/vat", response_model=list[AccountResponseDTO])
def list_vat_accounts(
    company_id: UUID,
    service: AccountRegistryService = Depends(get_account_service),
):
    return [AccountResponseDTO.model_validate(a) for a in service.vat_accounts(company_id)]


@router.get("/companies/{company_id}/accounts/by-code/{code}", response_model=AccountResponseDTO)
def get_account_by_code(
    company_id: UUID,
    code: str,
    service: AccountRegistryService = Depends(get_account_service),
):
    return AccountResponseDTO.model_validate(service.get_account_by_code(company_id, code))


@router.get("/accounts/{account_id}", response_model=AccountResponseDTO)
def get_account(account_id: UUID, service: AccountRegistryService = Depends(get_account_service)):
    return AccountResponseDTO.model_validate(service.get_account(account_id))


@router.patch("/accounts/{account_id}", response_model=AccountResponseDTO)
def update_account(
    account_id: UUID,
    dto: AccountUpdateDTO,
    service: AccountRegistryService = Depends(get_account_service),
):
    return AccountResponseDTO.model_validate(service.update_account(account_id, dto.to_domain()))


@router.post("/accounts/{account_id}/archive", response_model=AccountResponseDTO)
def archive_account(account_id: UUID, service: AccountRegistryService = Depends(get_account_service)):
    return AccountResponseDTO.model_validate(service.archive_account(account_id))


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(account_id: UUID, service: AccountRegistryService = Depends(get_account_service)):
    """Delete an unused account; accounts with journal lines must be archived instead."""
    service.delete_account(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
