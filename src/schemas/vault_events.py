from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict

from core.constants import EVENT_TOPICS


class VaultEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: ClassVar[str] = ""

    @property
    def topic(self) -> str:
        return EVENT_TOPICS[self.name]


class Deposit(VaultEvent):
    name: ClassVar[str] = "Deposit"

    caller: str
    receiver: str
    assets: int
    shares: int
    # pool totals right after this operation settled; not part of the on-chain log
    total_assets: Optional[int] = None
    total_shares: Optional[int] = None


class Withdraw(VaultEvent):
    name: ClassVar[str] = "Withdraw"

    caller: str
    receiver: str
    owner: str
    assets: int
    shares: int
    total_assets: Optional[int] = None
    total_shares: Optional[int] = None


class Transfer(VaultEvent):
    name: ClassVar[str] = "Transfer"

    sender: str
    recipient: str
    value: int


class Approval(VaultEvent):
    name: ClassVar[str] = "Approval"

    owner: str
    spender: str
    value: int
