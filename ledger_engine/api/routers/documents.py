"""
API Routers - Business documents turned into journal entries.
"""

from fastapi import APIRouter, Depends, status

from ledger_engine.api.dependencies import get_current_user, get_document_poster
from ledger_engine.application.dto.ledger_dto import (
    ExpensePostDTO,
    InvoicePaymentDTO,
    InvoicePostDTO,
    InvoiceTotalsRequestDTO,
    InvoiceTotalsResponseDTO,
    JournalEntryResponseDTO,
)
from ledger_engine.domain.services import DocumentPoster

router = APIRouter(prefix="/api/v1/documents", tags=["Documents"])


@router.post("/invoice-totals", response_model=InvoiceTotalsResponseDTO)
def compute_invoice_totals(dto: InvoiceTotalsRequestDTO):
    totals = DocumentPoster.compute_invoice_totals(item.to_domain() for item in dto.items)
    return InvoiceTotalsResponseDTO.model_validate(totals)


@router.post("/invoices", response_model=JournalEntryResponseDTO, status_code=status.HTTP_201_CREATED)
def post_invoice(
    dto: InvoicePostDTO,
    poster: DocumentPoster = Depends(get_document_poster),
    current_user: str = Depends(get_current_user),
):
    """
    Recognize invoice revenue as a draft entry.

    - Dr Accounts Receivable (total), Cr Sales Revenue (subtotal), Cr VAT Payable (VAT)
    """
    entry = poster.post_invoice(
        company_id=dto.company_id,
        invoice_number=dto.invoice_number,
        customer_name=dto.customer_name,
        invoice_date=dto.invoice_date,
        items=[item.to_domain() for item in dto.items],
        created_by=current_user,
        receivable_account_id=dto.receivable_account_id,
        revenue_account_id=dto.revenue_account_id,
        vat_account_id=dto.vat_account_id,
        source_id=dto.source_id,
    )
    return JournalEntryResponseDTO.model_validate(entry)


@router.post("/invoice-payments", response_model=JournalEntryResponseDTO, status_code=status.HTTP_201_CREATED)
def record_invoice_payment(
    dto: InvoicePaymentDTO,
    poster: DocumentPoster = Depends(get_document_poster),
    current_user: str = Depends(get_current_user),
):
    entry = poster.record_invoice_payment(
        company_id=dto.company_id,
        invoice_number=dto.invoice_number,
        amount=dto.amount,
        payment_date=dto.payment_date,
        payment_account_id=dto.payment_account_id,
        created_by=current_user,
        receivable_account_id=dto.receivable_account_id,
        source_id=dto.source_id,
    )
    return JournalEntryResponseDTO.model_validate(entry)


@router.post("/expenses", response_model=JournalEntryResponseDTO, status_code=status.HTTP_201_CREATED)
def post_expense(
    dto: ExpensePostDTO,
    poster: DocumentPoster = Depends(get_document_poster),
    current_user: str = Depends(get_current_user),
):
    """Post an expense receipt: Dr expense / Cr cash or bank, gross of VAT."""
    entry = poster.post_expense(
        company_id=dto.company_id,
        amount=dto.amount,
        vat_amount=dto.vat_amount,
        expense_date=dto.expense_date,
        debit_account_id=dto.debit_account_id,
        credit_account_id=dto.credit_account_id,
        created_by=current_user,
        merchant=dto.merchant,
        category=dto.category,
        source_id=dto.source_id,
    )
    return JournalEntryResponseDTO.model_validate(entry)
