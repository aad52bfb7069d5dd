#!/usr/bin/env python3
"""
Database Seeding Script - Ledger Engine
Seeds a demo company: default chart of accounts plus a few posted entries.
"""

import sys
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

DEMO_COMPANY_ID = UUID("00000000-0000-0000-0000-000000000001")


def seed(db, company_id: UUID, created_by: str = "seed") -> dict:
    """Seed chart and sample entries; returns counts and the resulting trial balance."""
    from ledger_engine.domain import chart_of_accounts
    from ledger_engine.domain.entities import EntryHeader
    from ledger_engine.domain.services import (
        AccountRegistryService,
        BalanceAggregator,
        DocumentPoster,
        JournalService,
    )
    from ledger_engine.domain.value_objects import InvoiceLineItem, PostingLine
    from ledger_engine.infrastructure.database.repositories import (
        SqlAccountRepository,
        SqlJournalEntryRepository,
        SqlLedgerQueryRepository,
    )

    account_repo = SqlAccountRepository(db)
    registry = AccountRegistryService(account_repo)
    journal = JournalService(account_repo, SqlJournalEntryRepository(db))
    poster = DocumentPoster(account_repo, journal)

    created = registry.seed_default_chart(company_id)
    entries = []
    if created:
        accounts = {a.code: a for a in created}
        capital = journal.create_entry(
            EntryHeader(
                company_id=company_id,
                date=date(2024, 1, 1),
                created_by=created_by,
                memo="Opening capital",
            ),
            [
                PostingLine(accounts[chart_of_accounts.BANK].id, debit=Decimal("50000.00"),
                            description="Capital deposited"),
                PostingLine(accounts[chart_of_accounts.OWNERS_EQUITY].id, credit=Decimal("50000.00"),
                            description="Owner's capital"),
            ],
            post=True,
        )
        entries.append(capital)

        invoice = poster.post_invoice(
            company_id=company_id,
            invoice_number="INV-0001",
            customer_name="Demo Customer LLC",
            invoice_date=date(2024, 1, 10),
            items=[InvoiceLineItem(Decimal("10"), Decimal("250.00"), Decimal("0.05"))],
            created_by=created_by,
        )
        entries.append(journal.post_entry(invoice.id, created_by))

        entries.append(poster.post_expense(
            company_id=company_id,
            amount=Decimal("4000.00"),
            vat_amount=Decimal("200.00"),
            expense_date=date(2024, 1, 15),
            debit_account_id=accounts[chart_of_accounts.RENT_EXPENSE].id,
            credit_account_id=accounts[chart_of_accounts.BANK].id,
            created_by=created_by,
            merchant="Demo Properties",
            category="Office rent",
        ))

    ledger_repo = SqlLedgerQueryRepository(db)
    trial_balance = BalanceAggregator(account_repo, ledger_repo).trial_balance(company_id)
    return {
        "accounts": len(created),
        "entries": len(entries),
        "trial_balance": trial_balance,
    }


def main():
    """Main function."""
    print("=" * 60)
    print("Database Seeding - Ledger Engine")
    print("=" * 60)

    company_id = DEMO_COMPANY_ID
    if len(sys.argv) > 1:
        company_id = uuid4() if sys.argv[1] == "new" else UUID(sys.argv[1])

    from ledger_engine.core.logging_config import configure_logging
    from ledger_engine.infrastructure.database import SessionLocal, init_db

    configure_logging()
    init_db()
    db = SessionLocal()

    try:
        result = seed(db, company_id)
        if result["accounts"]:
            print(f"✓ Seeded {result['accounts']} accounts")
            print(f"✓ Posted {result['entries']} entries")
        else:
            print("✓ Chart of accounts already exists, nothing seeded")

        print("\n=== Validating Seed Data ===")
        trial_balance = result["trial_balance"]
        if trial_balance.is_balanced:
            print(f"✓ Trial balance OK: Debit={trial_balance.total_debit}, Credit={trial_balance.total_credit}")
        else:
            print(f"⚠️ Trial balance off by {trial_balance.difference}")

        print("\n" + "=" * 60)
        print("Seeding completed successfully!")
        print(f"Company ID: {company_id}")
        print("=" * 60)

    except Exception as e:
        print(f"\n❌ Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
