from typing import List

from fastapi import APIRouter, Depends, HTTPException

from meatshop.application.container import Services
from meatshop.domain.schemas import BankAccountIn, BankAccountOut, BankAccountUpdate, SuccessResponse
from meatshop.interfaces.dependencies import RequestContext, get_services, require_admin

router = APIRouter(prefix="/api/bank-accounts", tags=["bank-accounts"])


@router.get("", response_model=List[BankAccountOut])
def list_bank_accounts(services: Services = Depends(get_services)):
    return services.bank_accounts.list_accounts()


@router.get("/default", response_model=BankAccountOut)
def get_default_bank_account(services: Services = Depends(get_services)):
    account = services.bank_accounts.get_default()
    if not account:
        raise HTTPException(status_code=404, detail="No default account")
    return account


@router.post("", response_model=BankAccountOut, status_code=201)
def create_bank_account(
    payload: BankAccountIn,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    return services.bank_accounts.create_account(payload)


@router.patch("/{account_id}", response_model=BankAccountOut)
def update_bank_account(
    account_id: int,
    payload: BankAccountUpdate,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    account = services.bank_accounts.update_account(account_id, payload)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account


@router.delete("/{account_id}", response_model=SuccessResponse)
def delete_bank_account(
    account_id: int,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    if not services.bank_accounts.delete_account(account_id):
        raise HTTPException(status_code=400, detail="Account not found or is default")
    return SuccessResponse()


@router.post("/{account_id}/default", response_model=SuccessResponse)
def set_default_bank_account(
    account_id: int,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    if not services.bank_accounts.set_default(account_id):
        raise HTTPException(status_code=404, detail="Account not found")
    return SuccessResponse()
