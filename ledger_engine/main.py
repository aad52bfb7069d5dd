"""
Main FastAPI application - General ledger engine.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ledger_engine import __version__
from ledger_engine.api.routers import accounts, documents, journal, reports
from ledger_engine.core.exceptions import (
    ConcurrencyError,
    ConflictError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from ledger_engine.core.logging_config import configure_logging
from ledger_engine.infrastructure.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan - startup and shutdown events."""
    configure_logging()
    init_db()
    logger.info("Ledger engine %s started", __version__)
    yield


app = FastAPI(
    title="Ledger Engine API",
    description="""
## General ledger engine

### Features:
- **Chart of accounts**: per-company accounts, default chart seeding, archiving
- **Journal**: balanced double-entry postings, draft / posted / void lifecycle, reversals
- **Numbering**: JE-YYYYMMDD-NNN, unique per company under concurrent writers
- **Reports**: account balances, account ledger with running balance, trial balance
- **Documents**: invoices, invoice payments and expense receipts posted as entries

### Rules:
- Only posted entries count toward balances and ledgers
- Posted entries are never edited; they are reversed
    """,
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(accounts.router)
app.include_router(journal.router)
app.include_router(reports.router)
app.include_router(documents.router)


@app.get("/")
def root():
    return {
        "name": "Ledger Engine API",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "database": "connected"}


def _error_response(status_code: int, exc: LedgerError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code}
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(400, exc)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(404, exc)


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    logger.warning("Conflict on %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(409, exc)


@app.exception_handler(ConcurrencyError)
async def concurrency_error_handler(request: Request, exc: ConcurrencyError):
    logger.error("Concurrency failure on %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(503, exc)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return _error_response(500, exc)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
