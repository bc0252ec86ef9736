import logging
from typing import Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from core.constants import UINT256_MAX
from core.exceptions import UnderlyingTransferFailed, VaultError

logger = logging.getLogger(__name__)

TransferHook = Callable[[str, str, int], None]


@runtime_checkable
class AssetLedger(Protocol):
    """Contract a vault expects from the ledger of its underlying asset.

    `decimals()` is optional and only probed once when a vault is created.
    """

    def debit(self, payer: str, vault: str, amount: int): ...

    def credit(self, vault: str, receiver: str, amount: int): ...

    def balance_of(self, account: str) -> int: ...


def _call_transfer(kind: str, fn, sender: str, recipient: str, amount: int):
    try:
        result = fn(sender, recipient, amount)
    except VaultError:
        # a vault call re-entered from the asset's hook failed, keep its reason
        raise
    except Exception as e:
        raise UnderlyingTransferFailed(
            f"{kind} of {amount} from {sender} to {recipient} failed: {e}"
        ) from e

    # ledgers that report failure by returning False must not pass silently
    if result is False:
        raise UnderlyingTransferFailed(
            f"{kind} of {amount} from {sender} to {recipient} returned False"
        )


def safe_debit(ledger: AssetLedger, payer: str, vault: str, amount: int):
    _call_transfer("debit", ledger.debit, payer, vault, amount)


def safe_credit(ledger: AssetLedger, vault: str, receiver: str, amount: int):
    _call_transfer("credit", ledger.credit, vault, receiver, amount)


class AssetLedgerError(Exception):
    pass


class InMemoryAssetLedger:
    """Reference asset ledger with ERC-20 style balances and allowances.

    Hooks registered with `add_transfer_hook` run after every balance
    movement, before control returns to the caller, which is how tests
    simulate tokens that call back into a vault mid-transfer.
    """

    def __init__(self, symbol: str = "ASSET", decimals: Optional[int] = 18):
        self.symbol = symbol
        self._decimals = decimals
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0
        self._hooks: List[TransferHook] = []

    def decimals(self) -> int:
        if self._decimals is None:
            raise AssetLedgerError(f"{self.symbol} does not expose decimals")
        return self._decimals

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def add_transfer_hook(self, hook: TransferHook):
        self._hooks.append(hook)

    def remove_transfer_hook(self, hook: TransferHook):
        self._hooks.remove(hook)

    def mint(self, account: str, amount: int):
        if self._total_supply + amount > UINT256_MAX:
            raise AssetLedgerError("total supply overflow")
        self._balances[account] = self.balance_of(account) + amount
        self._total_supply += amount

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        self._move(sender, recipient, amount)
        return True

    def debit(self, payer: str, vault: str, amount: int) -> bool:
        allowed = self.allowance(payer, vault)
        if allowed < amount:
            raise AssetLedgerError(
                f"{vault} is allowed {allowed} {self.symbol} from {payer}, needs {amount}"
            )
        spend = allowed != UINT256_MAX
        self._move(payer, vault, amount, spend_allowance=(payer, vault) if spend else None)
        return True

    def credit(self, vault: str, receiver: str, amount: int) -> bool:
        self._move(vault, receiver, amount)
        return True

    def _move(self, sender: str, recipient: str, amount: int, spend_allowance=None):
        balance = self.balance_of(sender)
        if balance < amount:
            raise AssetLedgerError(
                f"{sender} holds {balance} {self.symbol}, needs {amount}"
            )

        # a failing hook reverts the whole transfer, nested transfers included
        balances = dict(self._balances)
        allowances = dict(self._allowances)
        try:
            if spend_allowance is not None:
                self._allowances[spend_allowance] -= amount
            self._balances[sender] = balance - amount
            self._balances[recipient] = self.balance_of(recipient) + amount
            logger.debug(f"{self.symbol} transfer {sender} -> {recipient}: {amount}")

            for hook in list(self._hooks):
                hook(sender, recipient, amount)
        except BaseException:
            self._balances = balances
            self._allowances = allowances
            raise
