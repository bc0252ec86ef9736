from typing import List
import uuid
from pydantic import BaseModel, ConfigDict
from datetime import datetime

from models.vaults import ConversionPolicyKind

from .vault_state import VaultState


class VaultBase(BaseModel):
    id: uuid.UUID
    name: str
    symbol: str
    slug: str | None = None
    contract_address: str
    asset_symbol: str | None = None
    decimals: int
    underlying_decimals: int
    policy: ConversionPolicyKind
    decimals_offset: int = 0
    is_active: bool = True
    created_at: datetime | None = None


# Properties shared by models stored in DB
class VaultInDBBase(VaultBase):
    model_config = ConfigDict(from_attributes=True)


# Properties to return to client
class Vault(VaultInDBBase):
    # None when the vault is not loaded in this process
    state: VaultState | None = None


class VaultEvent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_name: str
    topic: str
    caller: str
    receiver: str
    owner: str | None = None
    assets: int
    shares: int
    created_on: datetime


class VaultEvents(BaseModel):
    events: List[VaultEvent] = []
