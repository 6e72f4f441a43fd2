"""
Bank Ledger HTTP API

FastAPI application exposing transaction posting, interest rules and
monthly statements. Amounts are serialized as decimal strings.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import uvicorn

from . import __version__
from .errors import LedgerError, Result
from .models import InterestRule, Statement, Transaction
from .money import format_amount
from .system import LedgerSystem
from .validation import TransactionRequest, InterestRuleRequest, StatementRequest, validate


ERROR_STATUS = {
    "VALIDATION_ERROR": 400,
    "NOT_FOUND": 404,
    "BUSINESS_RULE_VIOLATION": 422,
    "INTERNAL_ERROR": 500,
}


def transaction_to_dict(txn: Transaction) -> Dict[str, Any]:
    return {
        "transaction_id": txn.transaction_id,
        "date": txn.date.isoformat(),
        "account_id": txn.account_id,
        "type": txn.type.value,
        "amount": format_amount(txn.amount),
    }


def rule_to_dict(rule: InterestRule) -> Dict[str, Any]:
    return {
        "date": rule.date.isoformat(),
        "rule_id": rule.rule_id,
        "rate": str(rule.rate),
    }


def statement_to_dict(statement: Statement) -> Dict[str, Any]:
    return {
        "account_id": statement.account_id,
        "year": statement.year,
        "month": statement.month,
        "opening_balance": format_amount(statement.opening_balance),
        "closing_balance": format_amount(statement.closing_balance),
        "interest": format_amount(statement.interest),
        "rows": [
            {
                "date": row.date.isoformat(),
                "transaction_id": row.transaction_id,
                "type": row.type.value,
                "amount": format_amount(row.amount),
                "balance": format_amount(row.balance),
            }
            for row in statement.rows
        ],
    }


def _raise_for_failure(result: Result) -> None:
    if not result.ok:
        raise HTTPException(status_code=ERROR_STATUS.get(result.code, 400), detail=result.message)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    message = str(errors[0].get("msg", "Invalid request."))
    return message.removeprefix("Value error, ")


def get_system(request: Request) -> LedgerSystem:
    return request.app.state.system


def create_app(system: Optional[LedgerSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Bank Ledger API",
        description="Deposits, withdrawals, interest rules and monthly statements",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.system = system if system is not None else LedgerSystem()

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        return JSONResponse(status_code=ERROR_STATUS.get(exc.code, 400), content={"detail": exc.message})

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "bank_ledger_api", "version": __version__}

    @app.post("/transactions", status_code=201)
    async def post_transaction(
        request: TransactionRequest,
        system: LedgerSystem = Depends(get_system)
    ):
        """Post a deposit or withdrawal"""
        result = system.engine.post_transaction(
            request.date, request.account_id, request.type, request.amount
        )
        _raise_for_failure(result)
        return {**transaction_to_dict(result.value), "message": result.message}

    @app.post("/interest-rules", status_code=201)
    async def post_interest_rule(
        request: InterestRuleRequest,
        system: LedgerSystem = Depends(get_system)
    ):
        """Add or replace the interest rule for a date"""
        result = system.engine.post_interest_rule(request.date, request.rule_id, request.rate)
        _raise_for_failure(result)
        return {**rule_to_dict(result.value), "message": result.message}

    @app.get("/interest-rules")
    async def list_interest_rules(system: LedgerSystem = Depends(get_system)) -> List[Dict[str, Any]]:
        """All interest rules ordered by date"""
        return [rule_to_dict(rule) for rule in system.engine.list_interest_rules()]

    @app.get("/accounts/{account_id}/statements/{year}/{month}")
    async def get_statement(
        account_id: str,
        year: int,
        month: int,
        system: LedgerSystem = Depends(get_system)
    ):
        """Monthly statement for an account"""
        request = validate(StatementRequest, {"account_id": account_id, "year": year, "month": month})
        result = system.engine.get_statement(request.account_id, request.year, request.month)
        _raise_for_failure(result)
        return statement_to_dict(result.value)

    return app


def run_server(host: str = "0.0.0.0", port: int = 8090, debug: bool = False):
    """Run the FastAPI server"""
    uvicorn.run(
        create_app(),
        host=host,
        port=port,
        log_level="debug" if debug else "info"
    )
