from datetime import datetime, timezone
import uuid

from sqlmodel import SQLModel, Field


# uint256 amounts do not fit SQL integer columns, they are stored as decimal strings
class VaultEventRecord(SQLModel, table=True):
    __tablename__ = "vault_events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    vault_id: uuid.UUID = Field(foreign_key="vaults.id", index=True)
    event_name: str = Field(index=True)
    topic: str
    caller: str = Field(index=True)
    receiver: str
    owner: str | None = Field(default=None, index=True)
    assets: str
    shares: str
    created_on: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
