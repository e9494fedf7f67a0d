from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from ..banking import Account, Ledger, Loan
from .common import get_ledger, ok

banking_router = APIRouter(prefix="/banking", tags=["banking"])


class TransferRequest(BaseModel):
    """Тело перевода: `{"from": ..., "to": ..., "amount": ...}`."""

    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(..., alias="from")
    target: str = Field(..., alias="to")
    amount: int


@banking_router.get("/accounts")
async def list_accounts(ledger: Ledger = Depends(get_ledger)) -> dict[str, Any]:
    return ok(ledger.list_accounts())


@banking_router.post("/accounts", status_code=status.HTTP_201_CREATED)
async def create_account(payload: Account, ledger: Ledger = Depends(get_ledger)) -> dict[str, Any]:
    return ok(ledger.create_account(payload))


@banking_router.post("/accounts/{account_id}/close")
async def close_account(account_id: str, ledger: Ledger = Depends(get_ledger)) -> dict[str, Any]:
    return ok(ledger.close_account(account_id))


@banking_router.post("/transfer")
async def transfer(payload: TransferRequest, ledger: Ledger = Depends(get_ledger)) -> dict[str, Any]:
    source, target = ledger.transfer(payload.source, payload.target, payload.amount)
    return ok({"from": source, "to": target, "amount": payload.amount})


@banking_router.get("/dashboard")
async def dashboard(ledger: Ledger = Depends(get_ledger)) -> dict[str, Any]:
    return ok(ledger.summary())


@banking_router.get("/audit")
async def audit(ledger: Ledger = Depends(get_ledger)) -> dict[str, Any]:
    return ok(ledger.audit_log)


@banking_router.get("/loans")
async def list_loans(ledger: Ledger = Depends(get_ledger)) -> dict[str, Any]:
    return ok(ledger.list_loans())


@banking_router.post("/loans", status_code=status.HTTP_201_CREATED)
async def create_loan(payload: Loan, ledger: Ledger = Depends(get_ledger)) -> dict[str, Any]:
    """Выдать займ; без id или с неположительной суммой — 400."""
    return ok(ledger.create_loan(payload))
