from typing import Callable

from core.constants import UINT256_MAX
from core.exceptions import BelowMinimumDeposit, LimitExceeded
from services.conversion import ConversionEngine, PoolState
from utils.fixed_point import Rounding


class LimitPolicy:
    """Largest argument each vault operation accepts for an account."""

    def __init__(
        self,
        engine: ConversionEngine,
        share_balance_of: Callable[[str], int],
        min_initial_deposit: int = 0,
    ):
        self.engine = engine
        self.share_balance_of = share_balance_of
        self.min_initial_deposit = min_initial_deposit

    def max_deposit(self, pool: PoolState, account: str) -> int:
        # shares outstanding against no assets: the rate is broken, take nothing more
        return UINT256_MAX if pool.is_collateralized else 0

    def max_mint(self, pool: PoolState, account: str) -> int:
        return UINT256_MAX

    def max_withdraw(self, pool: PoolState, owner: str) -> int:
        return self.engine.to_assets(pool, self.share_balance_of(owner), Rounding.down)

    def max_redeem(self, pool: PoolState, owner: str) -> int:
        return self.share_balance_of(owner)

    def check(self, operation: str, account: str, amount: int, limit: int):
        if amount > limit:
            raise LimitExceeded(operation, account, amount, limit)

    def check_initial_deposit(self, pool: PoolState, account: str, assets: int):
        """Reject seeding an empty pool with less than the configured minimum."""
        if pool.total_shares == 0 and 0 < assets < self.min_initial_deposit:
            raise BelowMinimumDeposit(account, assets, self.min_initial_deposit)
