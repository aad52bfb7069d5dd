"""
Default chart of accounts seeded when a company is onboarded (UAE, 5% VAT).
"""

from ledger_engine.domain.entities import AccountCreate
from ledger_engine.domain.value_objects import AccountType

CASH = "1000"
BANK = "1010"
ACCOUNTS_RECEIVABLE = "1100"
VAT_RECEIVABLE = "1200"
ACCOUNTS_PAYABLE = "2000"
VAT_PAYABLE = "2100"
OWNERS_EQUITY = "3000"
SALES_REVENUE = "4000"
OTHER_INCOME = "4100"
COGS = "5000"
RENT_EXPENSE = "5100"
UTILITIES_EXPENSE = "5200"
MARKETING_EXPENSE = "5300"
OFFICE_SUPPLIES = "5400"
TRAVEL_EXPENSES = "5500"

# (code, name_en, name_ar, type, is_vat_account, is_system_account)
_DEFAULT_ACCOUNTS = [
    (CASH, "Cash", "نقد", AccountType.ASSET, False, True),
    (BANK, "Bank", "بنك", AccountType.ASSET, False, True),
    (ACCOUNTS_RECEIVABLE, "Accounts Receivable", "حسابات مدينة", AccountType.ASSET, False, True),
    (VAT_RECEIVABLE, "VAT Receivable", "ضريبة مستردة", AccountType.ASSET, True, True),
    (ACCOUNTS_PAYABLE, "Accounts Payable", "حسابات دائنة", AccountType.LIABILITY, False, True),
    (VAT_PAYABLE, "VAT Payable", "ضريبة مستحقة", AccountType.LIABILITY, True, True),
    (OWNERS_EQUITY, "Owner's Equity", "حقوق الملكية", AccountType.EQUITY, False, True),
    (SALES_REVENUE, "Sales Revenue", "إيرادات المبيعات", AccountType.INCOME, False, True),
    (OTHER_INCOME, "Other Income", "إيرادات أخرى", AccountType.INCOME, False, False),
    (COGS, "COGS", "تكلفة البضاعة المباعة", AccountType.EXPENSE, False, False),
    (RENT_EXPENSE, "Rent Expense", "مصروف الإيجار", AccountType.EXPENSE, False, False),
    (UTILITIES_EXPENSE, "Utilities Expense", "مصروف المرافق", AccountType.EXPENSE, False, False),
    (MARKETING_EXPENSE, "Marketing Expense", "مصروف التسويق", AccountType.EXPENSE, False, False),
    (OFFICE_SUPPLIES, "Office Supplies", "مستلزمات مكتبية", AccountType.EXPENSE, False, False),
    (TRAVEL_EXPENSES, "Travel Expenses", "مصروفات السفر", AccountType.EXPENSE, False, False),
]


def default_chart() -> list[AccountCreate]:
    return [
        AccountCreate(
            code=code,
            name_en=name_en,
            name_ar=name_ar,
            account_type=account_type,
            is_vat_account=is_vat,
            is_system_account=is_system,
        )
        for code, name_en, name_ar, account_type, is_vat, is_system in _DEFAULT_ACCOUNTS
    ]
