"""
Integration tests - HTTP API through FastAPI's TestClient.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from ledger_engine.domain import chart_of_accounts
from ledger_engine.infrastructure.database import get_db
from ledger_engine.main import app

COMPANY_ID = "00000000-0000-0000-0000-000000000001"


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def accounts(client) -> dict[str, str]:
    response = client.post(f"/api/v1/companies/{COMPANY_ID}/accounts/seed")
    assert response.status_code == 201
    return {a["code"]: a["id"] for a in response.json()}


def _entry(accounts, entry_date, debit_code, credit_code, amount, post=True, memo=None):
    return {
        "company_id": COMPANY_ID,
        "date": entry_date,
        "memo": memo,
        "post": post,
        "lines": [
            {"account_id": accounts[debit_code], "debit": amount},
            {"account_id": accounts[credit_code], "credit": amount},
        ],
    }


class TestHealth:

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestAccountsApi:

    def test_seed_is_idempotent(self, client, accounts):
        assert len(accounts) == 15
        again = client.post(f"/api/v1/companies/{COMPANY_ID}/accounts/seed")
        assert again.json() == []

    def test_create_and_conflict(self, client, accounts):
        payload = {"code": "6000", "name_en": "Bank Charges", "account_type": "expense"}
        created = client.post(f"/api/v1/companies/{COMPANY_ID}/accounts", json=payload)
        assert created.status_code == 201
        assert created.json()["account_type"] == "expense"

        duplicate = client.post(f"/api/v1/companies/{COMPANY_ID}/accounts", json=payload)
        assert duplicate.status_code == 409
        assert duplicate.json()["code"] == "DUPLICATE_ACCOUNT_CODE"

    def test_bulk_all_or_nothing(self, client, accounts):
        payload = {"accounts": [
            {"code": "6000", "name_en": "Bank Charges", "account_type": "expense"},
            {"code": "1000", "name_en": "Cash again", "account_type": "asset"},
        ]}
        assert client.post(f"/api/v1/companies/{COMPANY_ID}/accounts/bulk", json=payload).status_code == 409
        listed = client.get(f"/api/v1/companies/{COMPANY_ID}/accounts").json()
        assert "6000" not in {a["code"] for a in listed}

    def test_update_rejects_unknown_fields(self, client, accounts):
        account_id = accounts[chart_of_accounts.TRAVEL_EXPENSES]
        response = client.patch(f"/api/v1/accounts/{account_id}", json={"balance": "100"})
        assert response.status_code == 422

        renamed = client.patch(f"/api/v1/accounts/{account_id}", json={"name_en": "Travel"})
        assert renamed.status_code == 200
        assert renamed.json()["name_en"] == "Travel"

    def test_archive_and_delete(self, client, accounts):
        assert client.post(f"/api/v1/accounts/{accounts[chart_of_accounts.CASH]}/archive").status_code == 400
        assert client.delete(f"/api/v1/accounts/{accounts[chart_of_accounts.MARKETING_EXPENSE]}").status_code == 204
        archived = client.post(f"/api/v1/accounts/{accounts[chart_of_accounts.TRAVEL_EXPENSES]}/archive")
        assert archived.json()["is_archived"] is True

    def test_unknown_account_is_404(self, client):
        response = client.get(f"/api/v1/accounts/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["code"] == "ACCOUNT_NOT_FOUND"


class TestJournalApi:

    def test_create_post_and_read(self, client, accounts):
        response = client.post(
            "/api/v1/journal",
            json=_entry(accounts, "2024-01-05", chart_of_accounts.CASH, chart_of_accounts.OWNERS_EQUITY, "200.00", post=False),
            headers={"X-User-Id": "alice"},
        )
        assert response.status_code == 201
        entry = response.json()
        assert entry["entry_number"] == "JE-20240105-001"
        assert entry["status"] == "draft"
        assert entry["created_by"] == "alice"

        posted = client.post(f"/api/v1/journal/{entry['id']}/post", headers={"X-User-Id": "bob"}).json()
        assert posted["status"] == "posted"
        assert posted["posted_by"] == "bob"

        fetched = client.get(f"/api/v1/journal/{entry['id']}").json()
        assert Decimal(fetched["total_debit"]) == Decimal("200")

    def test_unbalanced_entry_is_400(self, client, accounts):
        payload = _entry(accounts, "2024-01-05", chart_of_accounts.CASH, chart_of_accounts.OWNERS_EQUITY, "200.00")
        payload["lines"][1]["credit"] = "150.00"

        response = client.post("/api/v1/journal", json=payload)

        assert response.status_code == 400
        assert response.json()["code"] == "UNBALANCED_ENTRY"
        assert client.get(f"/api/v1/companies/{COMPANY_ID}/journal").json() == []

    def test_entry_number_preview(self, client, accounts):
        client.post("/api/v1/journal", json=_entry(
            accounts, "2024-01-05", chart_of_accounts.CASH, chart_of_accounts.OWNERS_EQUITY, "10"
        ))
        response = client.get(f"/api/v1/companies/{COMPANY_ID}/entry-number", params={"date": "2024-01-05"})
        assert response.json()["entry_number"] == "JE-20240105-002"

    def test_update_void_delete_draft(self, client, accounts):
        entry = client.post("/api/v1/journal", json=_entry(
            accounts, "2024-01-05", chart_of_accounts.CASH, chart_of_accounts.OWNERS_EQUITY, "10", post=False
        )).json()

        update = _entry(accounts, "2024-01-06", chart_of_accounts.BANK, chart_of_accounts.OWNERS_EQUITY, "12")
        updated = client.put(f"/api/v1/journal/{entry['id']}", json={
            "date": update["date"], "memo": "Moved to bank", "lines": update["lines"],
        })
        assert updated.status_code == 200
        assert updated.json()["date"] == "2024-01-06"
        assert updated.json()["memo"] == "Moved to bank"

        assert client.post(f"/api/v1/journal/{entry['id']}/void").json()["status"] == "void"
        assert client.delete(f"/api/v1/journal/{entry['id']}").status_code == 204
        assert client.get(f"/api/v1/journal/{entry['id']}").status_code == 404

    def test_posted_entry_is_reversed_not_deleted(self, client, accounts):
        entry = client.post("/api/v1/journal", json=_entry(
            accounts, "2024-01-05", chart_of_accounts.RENT_EXPENSE, chart_of_accounts.CASH, "100"
        )).json()

        assert client.delete(f"/api/v1/journal/{entry['id']}").status_code == 400

        reversal = client.post(
            f"/api/v1/journal/{entry['id']}/reverse",
            json={"reason": "Duplicate", "reversal_date": "2024-01-08"},
        )
        assert reversal.status_code == 201
        assert reversal.json()["source"] == "reversal"
        assert reversal.json()["reversed_entry_id"] == entry["id"]

        again = client.post(f"/api/v1/journal/{entry['id']}/reverse")
        assert again.status_code == 400

    def test_list_by_status(self, client, accounts):
        client.post("/api/v1/journal", json=_entry(
            accounts, "2024-01-05", chart_of_accounts.CASH, chart_of_accounts.OWNERS_EQUITY, "10"
        ))
        client.post("/api/v1/journal", json=_entry(
            accounts, "2024-01-05", chart_of_accounts.CASH, chart_of_accounts.OWNERS_EQUITY, "10", post=False
        ))
        drafts = client.get(f"/api/v1/companies/{COMPANY_ID}/journal", params={"status": "draft"}).json()
        assert len(drafts) == 1


class TestReportsApi:

    def test_balances_and_ledger_window(self, client, accounts):
        client.post("/api/v1/journal", json=_entry(
            accounts, "2024-01-05", chart_of_accounts.CASH, chart_of_accounts.OWNERS_EQUITY, "200", memo="Capital"
        ))
        client.post("/api/v1/journal", json=_entry(
            accounts, "2024-02-10", chart_of_accounts.RENT_EXPENSE, chart_of_accounts.CASH, "50", memo="Rent"
        ))

        balances = client.get(f"/api/v1/reports/companies/{COMPANY_ID}/balances").json()
        by_code = {b["account"]["code"]: Decimal(b["balance"]) for b in balances}
        assert by_code[chart_of_accounts.CASH] == Decimal("150")
        assert by_code[chart_of_accounts.OWNERS_EQUITY] == Decimal("200")

        january = client.get(
            f"/api/v1/reports/companies/{COMPANY_ID}/balances",
            params={"start_date": "2024-01-01", "end_date": "2024-01-31"},
        ).json()
        assert {b["account"]["code"]: Decimal(b["balance"]) for b in january}[chart_of_accounts.CASH] == Decimal("200")

        ledger = client.get(
            f"/api/v1/reports/accounts/{accounts[chart_of_accounts.CASH]}/ledger",
            params={"date_start": "2024-02-01"},
        ).json()
        assert Decimal(ledger["opening_balance"]) == Decimal("200")
        assert Decimal(ledger["closing_balance"]) == Decimal("150")
        assert ledger["total_count"] == 1
        assert ledger["entries"][0]["description"] == "Rent"

    def test_inverted_range_is_400(self, client, accounts):
        response = client.get(
            f"/api/v1/reports/companies/{COMPANY_ID}/balances",
            params={"start_date": "2024-02-01", "end_date": "2024-01-01"},
        )
        assert response.status_code == 400

    def test_ledger_for_unknown_account_is_404(self, client):
        assert client.get(f"/api/v1/reports/accounts/{uuid4()}/ledger").status_code == 404

    def test_ledger_limit_must_be_positive(self, client, accounts):
        url = f"/api/v1/reports/accounts/{accounts[chart_of_accounts.CASH]}/ledger"
        assert client.get(url, params={"limit": 0}).status_code == 422
        assert client.get(url, params={"limit": 1}).status_code == 200

    def test_trial_balance(self, client, accounts):
        client.post("/api/v1/journal", json=_entry(
            accounts, "2024-01-05", chart_of_accounts.CASH, chart_of_accounts.OWNERS_EQUITY, "300"
        ))
        trial_balance = client.get(f"/api/v1/reports/companies/{COMPANY_ID}/trial-balance").json()
        assert trial_balance["is_balanced"] is True
        assert Decimal(trial_balance["total_debit"]) == Decimal("300")


class TestDocumentsApi:

    def test_invoice_totals(self, client):
        response = client.post("/api/v1/documents/invoice-totals", json={
            "items": [{"quantity": "1", "unit_price": "100", "vat_rate": "0.05"}],
        })
        body = response.json()
        assert Decimal(body["subtotal"]) == Decimal("100")
        assert Decimal(body["vat_amount"]) == Decimal("5")
        assert Decimal(body["total"]) == Decimal("105")

    def test_invoice_payment_and_expense(self, client, accounts):
        invoice = client.post("/api/v1/documents/invoices", json={
            "company_id": COMPANY_ID,
            "invoice_number": "INV-9",
            "customer_name": "Acme",
            "invoice_date": "2024-03-01",
            "items": [{"quantity": "2", "unit_price": "50", "vat_rate": "0.05"}],
        })
        assert invoice.status_code == 201
        assert invoice.json()["status"] == "draft"
        assert Decimal(invoice.json()["total_debit"]) == Decimal("105")

        payment = client.post("/api/v1/documents/invoice-payments", json={
            "company_id": COMPANY_ID,
            "invoice_number": "INV-9",
            "amount": "105",
            "payment_date": "2024-03-10",
            "payment_account_id": accounts[chart_of_accounts.BANK],
        })
        assert payment.status_code == 201
        assert payment.json()["source"] == "payment"

        expense = client.post("/api/v1/documents/expenses", json={
            "company_id": COMPANY_ID,
            "amount": "40",
            "vat_amount": "2",
            "expense_date": "2024-03-11",
            "debit_account_id": accounts[chart_of_accounts.OFFICE_SUPPLIES],
            "credit_account_id": accounts[chart_of_accounts.CASH],
            "merchant": "Stationer",
        })
        assert expense.status_code == 201
        assert expense.json()["status"] == "posted"
        assert Decimal(expense.json()["total_credit"]) == Decimal("42")

    def test_expense_without_accounts_is_400(self, client, accounts):
        response = client.post("/api/v1/documents/expenses", json={
            "company_id": COMPANY_ID,
            "amount": "40",
            "expense_date": "2024-03-11",
        })
        assert response.status_code == 400
