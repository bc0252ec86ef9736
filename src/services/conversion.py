"""Asset <-> share exchange rate.

The engine is pure: callers pass a `PoolState` snapshot read at the start of
their operation and an explicit rounding direction. How an empty or
degenerate pool converts is delegated to a `ConversionPolicy`.
"""
from dataclasses import dataclass
from typing import Tuple

from core.constants import MAX_DECIMALS_OFFSET
from core.exceptions import ArithmeticImpossible
from utils.fixed_point import Rounding, check_uint256, mul_div


@dataclass(frozen=True)
class PoolState:
    total_assets: int
    total_shares: int

    @property
    def is_collateralized(self) -> bool:
        return self.total_assets > 0 or self.total_shares == 0


class ConversionPolicy:
    decimals_offset: int = 0

    def to_shares(self, pool: PoolState, assets: int, rounding: Rounding) -> int:
        raise NotImplementedError

    def to_assets(self, pool: PoolState, shares: int, rounding: Rounding) -> int:
        raise NotImplementedError

    def exchange_rate(self, pool: PoolState) -> Tuple[int, int]:
        """Exact price of a share as an (assets, shares) pair of base units."""
        raise NotImplementedError


class BootstrapPolicy(ConversionPolicy):
    """1:1 while no shares exist, proportional afterwards."""

    def to_shares(self, pool: PoolState, assets: int, rounding: Rounding) -> int:
        if pool.total_shares == 0 or assets == 0:
            return assets
        if pool.total_assets == 0:
            raise ArithmeticImpossible(
                f"cannot price {assets} assets: {pool.total_shares} shares are backed by no assets"
            )
        return mul_div(assets, pool.total_shares, pool.total_assets, rounding)

    def to_assets(self, pool: PoolState, shares: int, rounding: Rounding) -> int:
        if pool.total_shares == 0:
            return shares
        return mul_div(shares, pool.total_assets, pool.total_shares, rounding)

    def exchange_rate(self, pool: PoolState) -> Tuple[int, int]:
        if pool.total_shares == 0:
            return 1, 1
        return pool.total_assets, pool.total_shares


class VirtualOffsetPolicy(ConversionPolicy):
    """Price against 10**offset virtual shares and one virtual asset.

    The virtual amounts make the rate defined in every pool state and make a
    donation to an empty vault cost the donor far more than it can take from
    the next depositor.
    """

    def __init__(self, decimals_offset: int):
        # 10**offset virtual shares must themselves fit in uint256
        if decimals_offset < 0 or decimals_offset > MAX_DECIMALS_OFFSET:
            raise ValueError(
                f"decimals_offset must be between 0 and {MAX_DECIMALS_OFFSET}, got {decimals_offset}"
            )
        self.decimals_offset = decimals_offset

    @property
    def virtual_shares(self) -> int:
        return 10**self.decimals_offset

    def to_shares(self, pool: PoolState, assets: int, rounding: Rounding) -> int:
        return mul_div(
            assets, pool.total_shares + self.virtual_shares, pool.total_assets + 1, rounding
        )

    def to_assets(self, pool: PoolState, shares: int, rounding: Rounding) -> int:
        return mul_div(
            shares, pool.total_assets + 1, pool.total_shares + self.virtual_shares, rounding
        )

    def exchange_rate(self, pool: PoolState) -> Tuple[int, int]:
        return pool.total_assets + 1, pool.total_shares + self.virtual_shares


def policy_from_offset(decimals_offset: int) -> ConversionPolicy:
    if decimals_offset == 0:
        return BootstrapPolicy()
    return VirtualOffsetPolicy(decimals_offset)


class ConversionEngine:
    def __init__(self, policy: ConversionPolicy = None):
        self.policy = policy or BootstrapPolicy()

    def to_shares(self, pool: PoolState, assets: int, rounding: Rounding) -> int:
        return self.policy.to_shares(pool, check_uint256(assets, "assets"), Rounding(rounding))

    def to_assets(self, pool: PoolState, shares: int, rounding: Rounding) -> int:
        return self.policy.to_assets(pool, check_uint256(shares, "shares"), Rounding(rounding))
