import enum

from pydantic import BaseModel


class VaultOperation(str, enum.Enum):
    deposit = "deposit"
    mint = "mint"
    withdraw = "withdraw"
    redeem = "redeem"


class PreviewResult(BaseModel):
    operation: VaultOperation
    amount: int
    # shares for deposit/withdraw, assets for mint/redeem
    result: int
    account: str | None = None
    limit: int | None = None
    within_limit: bool | None = None


class AccountPosition(BaseModel):
    account: str
    shares: int
    assets: int
    max_deposit: int
    max_mint: int
    max_withdraw: int
    max_redeem: int
