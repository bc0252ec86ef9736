"""Tokenized vault: deposit an asset, receive proportional shares.

Every state-changing operation has two phases. The compute phase reads the
pool state once, checks limits and converts. The effect phase then runs in a
fixed order: the asset is pulled in before shares are minted, and shares are
burned before the asset is paid out. An asset whose transfer calls back into
the vault therefore always finds settled state.
"""
import logging
from contextlib import contextmanager
from typing import Optional

from core.config import settings
from core.constants import UINT8_MAX, ZERO_ADDRESS
from core.exceptions import ArithmeticImpossible, InvalidAddress, ReentrantCall
from schemas.vault_events import Deposit, Withdraw
from schemas.vault_state import VaultState
from services.asset_ledger import AssetLedger, safe_credit, safe_debit
from services.conversion import (
    ConversionEngine,
    ConversionPolicy,
    PoolState,
    policy_from_offset,
)
from services.events import EventBus
from services.limits import LimitPolicy
from services.share_ledger import ShareLedger
from utils.fixed_point import Rounding, check_uint256
from utils.web3_utils import to_account

logger = logging.getLogger(__name__)


def probe_decimals(asset) -> Optional[int]:
    """Ask the asset for its decimals without letting a bad answer escape."""
    probe = getattr(asset, "decimals", None)
    if probe is None:
        return None
    try:
        value = probe() if callable(probe) else probe
    except Exception as e:
        logger.warning(f"Decimals probe failed: {e}")
        return None

    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= UINT8_MAX:
        logger.warning(f"Decimals probe returned an unusable value: {value!r}")
        return None
    return value


class TokenizedVault:
    def __init__(
        self,
        asset: AssetLedger,
        address: str,
        name: str = "Vault Share",
        symbol: str = "vSHARE",
        policy: ConversionPolicy = None,
        min_initial_deposit: int = None,
        reentrancy_guard: bool = None,
        event_bus: EventBus = None,
    ):
        self._asset = asset
        self.address = to_account(address)
        self.name = name
        self.symbol = symbol

        self.policy = policy or policy_from_offset(settings.VAULT_DECIMALS_OFFSET)
        self.engine = ConversionEngine(self.policy)
        self.events = event_bus or EventBus()
        self.shares = ShareLedger(emit=self.events.publish)
        if min_initial_deposit is None:
            min_initial_deposit = settings.VAULT_MIN_INITIAL_DEPOSIT
        self.limits = LimitPolicy(self.engine, self.shares.balance_of, min_initial_deposit)

        if reentrancy_guard is None:
            reentrancy_guard = settings.VAULT_REENTRANCY_GUARD
        self._reentrancy_guard = reentrancy_guard
        self._entered = False

        underlying_decimals = probe_decimals(asset)
        if underlying_decimals is None:
            underlying_decimals = settings.VAULT_DEFAULT_DECIMALS
        self._underlying_decimals = underlying_decimals

        logger.info(
            f"Vault {self.symbol} created at {self.address}, decimals {self.decimals}, "
            f"policy {type(self.policy).__name__}"
        )

    # Views

    @property
    def asset(self) -> AssetLedger:
        return self._asset

    @property
    def decimals(self) -> int:
        return self._underlying_decimals + self.policy.decimals_offset

    @property
    def underlying_decimals(self) -> int:
        return self._underlying_decimals

    def total_assets(self) -> int:
        return self._asset.balance_of(self.address)

    def total_supply(self) -> int:
        return self.shares.total_supply

    def balance_of(self, account: str) -> int:
        return self.shares.balance_of(to_account(account))

    def allowance(self, owner: str, spender: str) -> int:
        return self.shares.allowance(to_account(owner), to_account(spender))

    def pool_state(self) -> PoolState:
        return PoolState(total_assets=self.total_assets(), total_shares=self.total_supply())

    def convert_to_shares(self, assets: int) -> int:
        return self.engine.to_shares(self.pool_state(), assets, Rounding.down)

    def convert_to_assets(self, shares: int) -> int:
        return self.engine.to_assets(self.pool_state(), shares, Rounding.down)

    def max_deposit(self, receiver: str) -> int:
        return self.limits.max_deposit(self.pool_state(), to_account(receiver))

    def max_mint(self, receiver: str) -> int:
        return self.limits.max_mint(self.pool_state(), to_account(receiver))

    def max_withdraw(self, owner: str) -> int:
        return self.limits.max_withdraw(self.pool_state(), to_account(owner))

    def max_redeem(self, owner: str) -> int:
        return self.limits.max_redeem(self.pool_state(), to_account(owner))

    def preview_deposit(self, assets: int) -> int:
        return self.engine.to_shares(self.pool_state(), assets, Rounding.down)

    def preview_mint(self, shares: int) -> int:
        return self.engine.to_assets(self.pool_state(), shares, Rounding.up)

    def preview_withdraw(self, assets: int) -> int:
        return self.engine.to_shares(self.pool_state(), assets, Rounding.up)

    def preview_redeem(self, shares: int) -> int:
        return self.engine.to_assets(self.pool_state(), shares, Rounding.down)

    def price_per_share(self, pool: Optional[PoolState] = None) -> float:
        """Underlying units one whole share is worth, unrounded and uncapped."""
        if pool is None:
            pool = self.pool_state()
        assets, shares = self.policy.exchange_rate(pool)
        return assets * 10**self.policy.decimals_offset / shares

    def state(self) -> VaultState:
        pool = self.pool_state()
        return VaultState(
            total_assets=pool.total_assets,
            total_shares=pool.total_shares,
            decimals=self.decimals,
            underlying_decimals=self._underlying_decimals,
            price_per_share=self.price_per_share(pool),
            is_collateralized=pool.is_collateralized,
        )

    # Vault operations

    def deposit(self, assets: int, receiver: str, *, caller: str) -> int:
        caller, receiver = to_account(caller), self._receiver(receiver)
        check_uint256(assets, "assets")

        with self._operation("deposit"):
            pool = self.pool_state()
            self.limits.check("deposit", receiver, assets, self.limits.max_deposit(pool, receiver))
            self.limits.check_initial_deposit(pool, receiver, assets)
            shares = self.engine.to_shares(pool, assets, Rounding.down)

            self._settle_deposit(caller, receiver, assets, shares)

        logger.info(f"Deposit {assets} assets by {caller} for {receiver}: {shares} shares")
        return shares

    def mint(self, shares: int, receiver: str, *, caller: str) -> int:
        caller, receiver = to_account(caller), self._receiver(receiver)
        check_uint256(shares, "shares")

        with self._operation("mint"):
            pool = self.pool_state()
            self.limits.check("mint", receiver, shares, self.limits.max_mint(pool, receiver))
            assets = self.engine.to_assets(pool, shares, Rounding.up)
            self.limits.check_initial_deposit(pool, receiver, assets)

            self._settle_deposit(caller, receiver, assets, shares)

        logger.info(f"Mint {shares} shares by {caller} for {receiver}: {assets} assets")
        return assets

    def withdraw(self, assets: int, receiver: str, owner: str, *, caller: str) -> int:
        caller, receiver, owner = to_account(caller), self._receiver(receiver), to_account(owner)
        check_uint256(assets, "assets")

        with self._operation("withdraw"):
            pool = self.pool_state()
            self.limits.check("withdraw", owner, assets, self.limits.max_withdraw(pool, owner))
            shares = self.engine.to_shares(pool, assets, Rounding.up)

            self._settle_withdraw(caller, receiver, owner, assets, shares)

        logger.info(
            f"Withdraw {assets} assets by {caller} from {owner} to {receiver}: {shares} shares"
        )
        return shares

    def redeem(self, shares: int, receiver: str, owner: str, *, caller: str) -> int:
        caller, receiver, owner = to_account(caller), self._receiver(receiver), to_account(owner)
        check_uint256(shares, "shares")

        with self._operation("redeem"):
            pool = self.pool_state()
            self.limits.check("redeem", owner, shares, self.limits.max_redeem(pool, owner))
            assets = self.engine.to_assets(pool, shares, Rounding.down)

            self._settle_withdraw(caller, receiver, owner, assets, shares)

        logger.info(
            f"Redeem {shares} shares by {caller} from {owner} to {receiver}: {assets} assets"
        )
        return assets

    # Share token

    def transfer(self, to: str, shares: int, *, caller: str) -> bool:
        caller, to = to_account(caller), self._receiver(to)
        check_uint256(shares, "shares")
        with self._operation("transfer"):
            self.shares.transfer(caller, to, shares)
        return True

    def approve(self, spender: str, shares: int, *, caller: str) -> bool:
        caller, spender = to_account(caller), self._receiver(spender)
        check_uint256(shares, "shares")
        with self._operation("approve"):
            self.shares.approve(caller, spender, shares)
        return True

    def transfer_from(self, owner: str, to: str, shares: int, *, caller: str) -> bool:
        caller, owner, to = to_account(caller), to_account(owner), self._receiver(to)
        check_uint256(shares, "shares")
        with self._operation("transfer_from"):
            self.shares.spend_allowance(owner, caller, shares)
            self.shares.transfer(owner, to, shares)
        return True

    # Effects

    def _settle_deposit(self, caller: str, receiver: str, assets: int, shares: int):
        if not self.shares.can_mint(shares):
            raise ArithmeticImpossible(f"minting {shares} shares overflows the share supply")

        # pull the assets first: a callback from the asset must not see unbacked shares
        safe_debit(self._asset, caller, self.address, assets)
        self.shares.mint(receiver, shares)

        settled = self.pool_state()
        self.events.publish(
            Deposit(
                caller=caller,
                receiver=receiver,
                assets=assets,
                shares=shares,
                total_assets=settled.total_assets,
                total_shares=settled.total_shares,
            )
        )

    def _settle_withdraw(self, caller: str, receiver: str, owner: str, assets: int, shares: int):
        if caller != owner:
            self.shares.spend_allowance(owner, caller, shares)

        # burn before paying out: a callback from the asset must not find the shares still there
        self.shares.burn(owner, shares)
        safe_credit(self._asset, self.address, receiver, assets)

        settled = self.pool_state()
        self.events.publish(
            Withdraw(
                caller=caller,
                receiver=receiver,
                owner=owner,
                assets=assets,
                shares=shares,
                total_assets=settled.total_assets,
                total_shares=settled.total_shares,
            )
        )

    def _receiver(self, account: str) -> str:
        account = to_account(account)
        if account == ZERO_ADDRESS:
            raise InvalidAddress("The zero address cannot receive or spend vault funds")
        return account

    @contextmanager
    def _operation(self, name: str):
        if self._reentrancy_guard and self._entered:
            raise ReentrantCall(f"{name} called while another vault operation is in progress")

        outer = not self._entered
        self._entered = True
        mark = self.events.begin()
        try:
            with self.shares.atomic():
                yield
        except BaseException as e:
            self.events.rollback(mark)
            logger.info(f"{name} on {self.address} reverted: {e}")
            raise
        else:
            self.events.commit()
        finally:
            if outer:
                self._entered = False
