from typing import List

import pandas as pd
from fastapi import APIRouter, HTTPException, Query
from sqlmodel import Session, select

import schemas
from api.api_v1.deps import RegistryDep, SessionDep
from models import PricePerShareHistory, Vault, VaultEventRecord
from services.vault import TokenizedVault
from services.vault_registry import VaultRegistry
from utils.web3_utils import is_valid_wallet_address

router = APIRouter()


def _to_schema(vault: Vault, registry: VaultRegistry) -> schemas.Vault:
    schema_vault = schemas.Vault.model_validate(vault)
    live_vault = registry.get(vault.contract_address)
    if live_vault is not None:
        schema_vault.state = live_vault.state()
    return schema_vault


def _checked_address(address: str) -> str:
    checksum_address = is_valid_wallet_address(address)
    if not checksum_address:
        raise HTTPException(status_code=400, detail=f"Invalid address: {address}")
    return checksum_address


def get_vault_record(session: Session, vault_address: str) -> Vault:
    vault = session.exec(
        select(Vault).where(Vault.contract_address == _checked_address(vault_address))
    ).first()
    if vault is None:
        raise HTTPException(
            status_code=404,
            detail="The data not found in the database.",
        )
    return vault


def get_live_vault(registry: VaultRegistry, vault_address: str) -> TokenizedVault:
    vault = registry.get(_checked_address(vault_address))
    if vault is None:
        raise HTTPException(
            status_code=404,
            detail=f"Vault {vault_address} is not loaded.",
        )
    return vault


@router.get("/", response_model=List[schemas.Vault])
async def get_all_vaults(session: SessionDep, registry: RegistryDep):
    vaults = session.exec(select(Vault).where(Vault.is_active == True)).all()
    return [_to_schema(vault, registry) for vault in vaults]


@router.get("/{vault_address}", response_model=schemas.Vault)
async def get_vault_info(session: SessionDep, registry: RegistryDep, vault_address: str):
    vault = get_vault_record(session, vault_address)
    return _to_schema(vault, registry)


@router.get("/{vault_address}/preview/{operation}", response_model=schemas.PreviewResult)
async def preview_operation(
    registry: RegistryDep,
    vault_address: str,
    operation: schemas.VaultOperation,
    amount: int = Query(..., ge=0),
    account: str = Query(None),
):
    vault = get_live_vault(registry, vault_address)

    previews = {
        schemas.VaultOperation.deposit: (vault.preview_deposit, vault.max_deposit),
        schemas.VaultOperation.mint: (vault.preview_mint, vault.max_mint),
        schemas.VaultOperation.withdraw: (vault.preview_withdraw, vault.max_withdraw),
        schemas.VaultOperation.redeem: (vault.preview_redeem, vault.max_redeem),
    }
    preview, max_fn = previews[operation]

    result = schemas.PreviewResult(operation=operation, amount=amount, result=preview(amount))
    if account is not None:
        result.account = _checked_address(account)
        result.limit = max_fn(result.account)
        result.within_limit = amount <= result.limit
    return result


@router.get("/{vault_address}/accounts/{account}", response_model=schemas.AccountPosition)
async def get_account_position(registry: RegistryDep, vault_address: str, account: str):
    vault = get_live_vault(registry, vault_address)
    account = _checked_address(account)
    shares = vault.balance_of(account)
    return schemas.AccountPosition(
        account=account,
        shares=shares,
        assets=vault.convert_to_assets(shares),
        max_deposit=vault.max_deposit(account),
        max_mint=vault.max_mint(account),
        max_withdraw=vault.max_withdraw(account),
        max_redeem=vault.max_redeem(account),
    )


@router.get("/{vault_address}/pps-history")
async def get_pps_history(session: SessionDep, vault_address: str):
    vault = get_vault_record(session, vault_address)
    pps_history = session.exec(
        select(PricePerShareHistory)
        .where(PricePerShareHistory.vault_id == vault.id)
        .order_by(PricePerShareHistory.datetime.asc())
    ).all()
    if len(pps_history) == 0:
        return {"date": [], "price_per_share": []}

    pps_history_df = pd.DataFrame(
        [
            {"date": rec.datetime, "price_per_share": rec.price_per_share}
            for rec in pps_history
        ]
    )
    pps_history_df["date"] = pd.to_datetime(pps_history_df["date"]).dt.strftime(
        "%Y-%m-%dT%H:%M:%S"
    )
    return pps_history_df[["date", "price_per_share"]].to_dict(orient="list")


@router.get("/{vault_address}/events", response_model=schemas.VaultEvents)
async def get_vault_events(
    session: SessionDep,
    vault_address: str,
    event_name: str = Query(None),
    owner: str = Query(None),
):
    vault = get_vault_record(session, vault_address)
    statement = select(VaultEventRecord).where(VaultEventRecord.vault_id == vault.id)
    if event_name:
        statement = statement.where(VaultEventRecord.event_name == event_name)
    if owner:
        statement = statement.where(VaultEventRecord.owner == _checked_address(owner))
    records = session.exec(statement.order_by(VaultEventRecord.created_on.asc())).all()
    return schemas.VaultEvents(
        events=[schemas.VaultEvent.model_validate(rec) for rec in records]
    )
