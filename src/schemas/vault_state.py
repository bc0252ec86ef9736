from pydantic import BaseModel


class VaultState(BaseModel):
    total_assets: int = 0
    total_shares: int = 0
    decimals: int = 18
    underlying_decimals: int = 18
    price_per_share: float = 1.0
    is_collateralized: bool = True
