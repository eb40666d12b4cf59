"""HTTP API for ChilliLedger.

JSON endpoints for customers, loans, recoveries and chillies trades plus the
dashboard statistics. Request bodies are passed through untyped and parsed by
chilli_ledger.validation, so every malformed field is reported as a 400 with
the offending field names.
"""
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from chilli_ledger.config import settings, configure_logging
from chilli_ledger.database import DatabaseManager
from chilli_ledger.engine import LedgerEngine
from chilli_ledger.exceptions import CustomerNotFoundError, DatabaseError, ValidationError
from chilli_ledger.reports import ReportGenerator
from chilli_ledger.services import (
    calculate_loan_with_interest, get_loan_status, get_balance_status,
    summarize_loans, summarize_recoveries, summarize_chillies
)

log = logging.getLogger(__name__)

EXPORTABLE = {
    'customers': 'customers',
    'loans': 'loans',
    'recoveries': 'recoveries',
    'chillies': 'chillies_transactions',
}


# Pydantic models
# Fields stay untyped; chilli_ledger.validation does the parsing.
class CustomerRequest(BaseModel):
    name: Any = None
    phone: Any = None
    address: Any = None


class LoanRequest(BaseModel):
    customer_id: Any = None
    amount: Any = None
    interest_rate: Any = None
    loan_date: Any = None


class RecoveryRequest(BaseModel):
    customer_id: Any = None
    amount: Any = None
    recovery_date: Any = None


class ChilliesRequest(BaseModel):
    customer_id: Any = None
    number_of_bags: Any = None
    weight_kg: Any = None
    market_rate: Any = None
    transaction_date: Any = None


def _loan_view(loan, as_of):
    data = loan.to_dict()
    data['current_value'] = calculate_loan_with_interest(loan, as_of)
    data['status'] = get_loan_status(loan, as_of).status
    return data


def _customer_view(customer, balance):
    data = customer.to_dict()
    data['balance'] = balance
    data['balance_status'] = get_balance_status(balance).status
    return data


def register_error_handlers(app: FastAPI):
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={'error': exc.message, 'fields': exc.errors})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = {".".join(str(p) for p in err.get('loc', ())): err.get('msg') for err in exc.errors()}
        return JSONResponse(status_code=400, content={'error': "Invalid request body", 'fields': fields})

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        log.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={'error': "Database error"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={'error': exc.detail})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        log.exception("Server error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={'error': "Internal server error"})


def build_router(engine: LedgerEngine, reports: ReportGenerator) -> APIRouter:
    router = APIRouter(prefix="/api")

    # ==================== CUSTOMERS ====================

    @router.get("/customers")
    def list_customers(as_of: Optional[date] = None):
        snapshot = engine.load_snapshot(as_of)
        balances = snapshot.stats.customer_balances
        return [_customer_view(c, balances.get(c.id, 0.0)) for c in snapshot.customers]

    @router.post("/customers", status_code=201)
    def create_customer(request: CustomerRequest):
        return engine.add_customer(request.model_dump()).to_dict()

    @router.put("/customers/{customer_id}")
    def update_customer(customer_id: int, request: CustomerRequest):
        try:
            customer = engine.update_customer(customer_id, request.model_dump(exclude_unset=True))
        except CustomerNotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)
        return customer.to_dict()

    @router.delete("/customers/{customer_id}", status_code=204)
    def delete_customer(customer_id: int):
        try:
            engine.delete_customer(customer_id)
        except CustomerNotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)
        return Response(status_code=204)

    @router.get("/customers/{customer_id}/balance")
    def customer_balance(customer_id: int, as_of: Optional[date] = None):
        try:
            balance = engine.get_customer_balance(customer_id, as_of)
        except CustomerNotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)
        return {'customer_id': customer_id, 'balance': balance,
                'status': get_balance_status(balance).status}

    # ==================== LOANS ====================

    @router.get("/loans")
    def list_loans(as_of: Optional[date] = None):
        as_of = as_of or date.today()
        return [_loan_view(loan, as_of) for loan in engine.db.get_loans()]

    @router.post("/loans", status_code=201)
    def create_loan(request: LoanRequest):
        loan = engine.add_loan(request.model_dump())
        return _loan_view(loan, date.today())

    # ==================== RECOVERIES ====================

    @router.get("/recoveries")
    def list_recoveries():
        return [r.to_dict() for r in engine.db.get_recoveries()]

    @router.post("/recoveries", status_code=201)
    def create_recovery(request: RecoveryRequest):
        return engine.add_recovery(request.model_dump()).to_dict()

    # ==================== CHILLIES ====================

    @router.get("/chillies")
    def list_chillies():
        return [t.to_dict() for t in engine.db.get_chillies_transactions()]

    @router.post("/chillies", status_code=201)
    def create_chillies(request: ChilliesRequest):
        return engine.add_chillies_transaction(request.model_dump()).to_dict()

    @router.post("/chillies/preview")
    def preview_chillies(request: ChilliesRequest):
        return engine.settle_chillies_transaction(request.model_dump()).to_dict()

    # ==================== DASHBOARD ====================

    @router.get("/dashboard")
    def dashboard(as_of: Optional[date] = None):
        snapshot = engine.load_snapshot(as_of)
        data = snapshot.stats.to_dict()
        data['as_of'] = snapshot.as_of.isoformat()
        data['loans'] = summarize_loans(snapshot.loans, snapshot.as_of).to_dict()
        data['recoveries'] = summarize_recoveries(snapshot.recoveries, snapshot.as_of).to_dict()
        data['chillies'] = summarize_chillies(snapshot.transactions).to_dict()
        return data

    @router.get("/export/{collection}")
    def export_collection(collection: str):
        if collection not in EXPORTABLE:
            raise HTTPException(status_code=404, detail=f"Unknown collection: {collection}")
        csv_text = reports.collection_csv(EXPORTABLE[collection])
        return Response(content=csv_text, media_type="text/csv",
                        headers={'Content-Disposition': f'attachment; filename="{collection}.csv"'})

    return router


def create_app(db_path: str = None) -> FastAPI:
    """Build the API around one DatabaseManager.

    Args:
        db_path: SQLite file (or ":memory:"); defaults to settings.database_path.
    """
    db = DatabaseManager(db_path or settings.database_path)
    engine = LedgerEngine(db)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        db.close()

    app = FastAPI(title="ChilliLedger", lifespan=lifespan)
    app.state.db = db
    app.state.engine = engine
    register_error_handlers(app)
    app.include_router(build_router(engine, ReportGenerator(db)))
    return app


def serve():
    """Entry point for the HTTP server."""
    configure_logging()
    log.info("Starting ChilliLedger API on %s:%s (db: %s)",
             settings.api_host, settings.api_port, settings.database_path)
    uvicorn.run(create_app(), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    serve()
