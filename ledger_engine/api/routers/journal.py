"""
API Routers - Journal entry endpoints.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ledger_engine.api.dependencies import get_current_user, get_journal_service
from ledger_engine.application.dto.ledger_dto import (
    EntryNumberResponseDTO,
    JournalEntryCreateDTO,
    JournalEntryResponseDTO,
    JournalEntryUpdateDTO,
    ReverseEntryDTO,
)
from ledger_engine.domain.entities import EntryHeader
from ledger_engine.domain.services import JournalService
from ledger_engine.domain.value_objects import EntryStatus

router = APIRouter(prefix="/api/v1", tags=["Journal"])


@router.post("/journal", response_model=JournalEntryResponseDTO, status_code=status.HTTP_201_CREATED)
def create_entry(
    dto: JournalEntryCreateDTO,
    service: JournalService = Depends(get_journal_service),
    current_user: str = Depends(get_current_user),
):
    """
    Create a journal entry, as a draft unless `post` is set.

    - Debits must equal credits within 0.01
    - The entry number is allocated when the entry is written
    """
    header = EntryHeader(
        company_id=dto.company_id,
        date=dto.date,
        created_by=current_user,
        memo=dto.memo,
        source=dto.source,
        source_id=dto.source_id,
    )
    entry = service.create_entry(header, [line.to_domain() for line in dto.lines], post=dto.post)
    return JournalEntryResponseDTO.model_validate(entry)


@router.get("/journal/{entry_id}", response_model=JournalEntryResponseDTO)
def get_entry(entry_id: UUID, service: JournalService = Depends(get_journal_service)):
    return JournalEntryResponseDTO.model_validate(service.get_entry(entry_id))


@router.get("/companies/{company_id}/journal", response_model=list[JournalEntryResponseDTO])
def list_entries(
    company_id: UUID,
    entry_status: EntryStatus | None = Query(None, alias="status"),
    service: JournalService = Depends(get_journal_service),
):
    """Entries of a company, newest first."""
    return [JournalEntryResponseDTO.model_validate(e) for e in service.list_entries(company_id, entry_status)]


@router.get("/companies/{company_id}/entry-number", response_model=EntryNumberResponseDTO)
def next_entry_number(
    company_id: UUID,
    entry_date: date = Query(..., alias="date"),
    service: JournalService = Depends(get_journal_service),
):
    """Preview of the next number for the day; not reserved."""
    return EntryNumberResponseDTO(
        company_id=company_id,
        entry_number=service.next_entry_number(company_id, entry_date),
    )


@router.put("/journal/{entry_id}", response_model=JournalEntryResponseDTO)
def update_entry(
    entry_id: UUID,
    dto: JournalEntryUpdateDTO,
    service: JournalService = Depends(get_journal_service),
    current_user: str = Depends(get_current_user),
):
    entry = service.update_draft(
        entry_id, dto.to_domain(), [line.to_domain() for line in dto.lines], current_user
    )
    return JournalEntryResponseDTO.model_validate(entry)


@router.post("/journal/{entry_id}/post", response_model=JournalEntryResponseDTO)
def post_entry(
    entry_id: UUID,
    service: JournalService = Depends(get_journal_service),
    current_user: str = Depends(get_current_user),
):
    return JournalEntryResponseDTO.model_validate(service.post_entry(entry_id, current_user))


@router.post("/journal/{entry_id}/void", response_model=JournalEntryResponseDTO)
def void_entry(
    entry_id: UUID,
    service: JournalService = Depends(get_journal_service),
    current_user: str = Depends(get_current_user),
):
    return JournalEntryResponseDTO.model_validate(service.void_entry(entry_id, current_user))


@router.post(
    "/journal/{entry_id}/reverse",
    response_model=JournalEntryResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
def reverse_entry(
    entry_id: UUID,
    dto: ReverseEntryDTO | None = None,
    service: JournalService = Depends(get_journal_service),
    current_user: str = Depends(get_current_user),
):
    """
    Reverse a posted entry.

    - Creates a posted mirror entry; the original stays posted
    - An entry can be reversed once
    """
    dto = dto or ReverseEntryDTO()
    reversal = service.reverse_entry(entry_id, current_user, dto.reason, dto.reversal_date)
    return JournalEntryResponseDTO.model_validate(reversal)


@router.delete("/journal/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(entry_id: UUID, service: JournalService = Depends(get_journal_service)):
    """Delete a draft or void entry."""
    service.delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
