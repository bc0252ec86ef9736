import logging
from contextlib import contextmanager
from typing import Callable, Dict, Optional, Tuple

from core.constants import UINT256_MAX, ZERO_ADDRESS
from core.exceptions import (
    ArithmeticImpossible,
    InsufficientAllowance,
    InsufficientShares,
)
from schemas.vault_events import Approval, Transfer, VaultEvent

logger = logging.getLogger(__name__)


class ShareLedger:
    """Balances, allowances and supply of the shares a vault issues.

    Every mutation goes through `atomic()` so a failing vault operation puts
    the ledger back exactly where it was, nested operations included.
    """

    def __init__(self, emit: Optional[Callable[[VaultEvent], None]] = None):
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0
        self._emit = emit

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def holders(self) -> Dict[str, int]:
        return dict(self._balances)

    @contextmanager
    def atomic(self):
        balances = dict(self._balances)
        allowances = dict(self._allowances)
        total_supply = self._total_supply
        try:
            yield self
        except BaseException:
            self._balances = balances
            self._allowances = allowances
            self._total_supply = total_supply
            logger.debug("Share ledger rolled back")
            raise

    def can_mint(self, shares: int) -> bool:
        return self._total_supply + shares <= UINT256_MAX

    def mint(self, account: str, shares: int):
        if not self.can_mint(shares):
            raise ArithmeticImpossible(
                f"minting {shares} shares overflows a total supply of {self._total_supply}"
            )
        self._total_supply += shares
        self._balances[account] = self.balance_of(account) + shares
        self._notify(Transfer(sender=ZERO_ADDRESS, recipient=account, value=shares))

    def burn(self, account: str, shares: int):
        balance = self.balance_of(account)
        if balance < shares:
            raise InsufficientShares(account, shares, balance)
        # a holder burned to zero keeps a zero entry
        self._balances[account] = balance - shares
        self._total_supply -= shares
        self._notify(Transfer(sender=account, recipient=ZERO_ADDRESS, value=shares))

    def transfer(self, sender: str, recipient: str, shares: int):
        balance = self.balance_of(sender)
        if balance < shares:
            raise InsufficientShares(sender, shares, balance)
        self._balances[sender] = balance - shares
        self._balances[recipient] = self.balance_of(recipient) + shares
        self._notify(Transfer(sender=sender, recipient=recipient, value=shares))

    def approve(self, owner: str, spender: str, shares: int):
        self._allowances[(owner, spender)] = shares
        self._notify(Approval(owner=owner, spender=spender, value=shares))

    def spend_allowance(self, owner: str, spender: str, shares: int):
        current = self.allowance(owner, spender)
        if current == UINT256_MAX:
            return
        if current < shares:
            raise InsufficientAllowance(owner, spender, shares, current)
        self._allowances[(owner, spender)] = current - shares

    def _notify(self, event: VaultEvent):
        if self._emit is not None:
            self._emit(event)
