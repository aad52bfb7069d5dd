"""
Error taxonomy of the ledger engine.

Validation errors are raised before anything is written. The only retried
failure is entry-number allocation, which surfaces as ConcurrencyError once
the retry budget is spent.
"""

from decimal import Decimal


class LedgerError(Exception):
    code = "LEDGER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError, ValueError):
    code = "VALIDATION_ERROR"


class UnbalancedEntryError(ValidationError):
    code = "UNBALANCED_ENTRY"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.difference = total_debit - total_credit
        super().__init__(
            f"Debits ({total_debit:.2f}) must equal credits ({total_credit:.2f}); "
            f"difference {self.difference:.2f}"
        )


class InvalidAccountReferenceError(ValidationError):
    code = "INVALID_ACCOUNT"


class EntryStateError(ValidationError):
    code = "INVALID_ENTRY_STATE"


class NotFoundError(LedgerError):
    code = "NOT_FOUND"


class AccountNotFoundError(NotFoundError):
    code = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class EntryNotFoundError(NotFoundError):
    code = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id):
        self.entry_id = entry_id
        super().__init__(f"Journal entry not found: {entry_id}")


class ConflictError(LedgerError):
    code = "CONFLICT"


class DuplicateEntryNumberError(ConflictError):
    code = "DUPLICATE_ENTRY_NUMBER"


class DuplicateAccountCodeError(ConflictError):
    code = "DUPLICATE_ACCOUNT_CODE"

    def __init__(self, codes: list[str]):
        self.codes = codes
        super().__init__(f"Account code already exists: {', '.join(codes)}")


class AccountInUseError(ConflictError):
    code = "ACCOUNT_IN_USE"


class ConcurrencyError(LedgerError):
    code = "CONCURRENCY_CONFLICT"
