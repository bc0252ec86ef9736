from datetime import datetime, timezone
import enum
import uuid

import sqlmodel


# conversion policy a vault was created with
class ConversionPolicyKind(str, enum.Enum):
    bootstrap = "bootstrap"
    virtual_offset = "virtual_offset"


class VaultBase(sqlmodel.SQLModel):
    id: uuid.UUID = sqlmodel.Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    symbol: str
    slug: str | None = sqlmodel.Field(default=None, index=True)
    contract_address: str = sqlmodel.Field(index=True, unique=True)
    asset_symbol: str | None = None
    decimals: int
    underlying_decimals: int
    policy: ConversionPolicyKind = sqlmodel.Field(default=ConversionPolicyKind.bootstrap)
    decimals_offset: int = 0
    min_initial_deposit: str = "0"
    is_active: bool = True
    created_at: datetime = sqlmodel.Field(default_factory=lambda: datetime.now(timezone.utc))


# Database model, database table inferred from class name
class Vault(VaultBase, table=True):
    __tablename__ = "vaults"
