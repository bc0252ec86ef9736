import logging
from typing import Dict, List, Optional

from sqlmodel import Session, select

from models import ConversionPolicyKind, Vault
from services.conversion import VirtualOffsetPolicy
from services.event_recorder import EventRecorder
from services.vault import TokenizedVault
from utils.slug import slugify
from utils.web3_utils import to_account

logger = logging.getLogger(__name__)


class VaultRegistry:
    """Live vaults of this process, each backed by a `vaults` row."""

    def __init__(self):
        self._vaults: Dict[str, TokenizedVault] = {}
        self._recorders: Dict[str, EventRecorder] = {}

    def register(self, session: Session, vault: TokenizedVault) -> Vault:
        record = session.exec(
            select(Vault).where(Vault.contract_address == vault.address)
        ).first()
        if record is None:
            policy = (
                ConversionPolicyKind.virtual_offset
                if isinstance(vault.policy, VirtualOffsetPolicy)
                else ConversionPolicyKind.bootstrap
            )
            record = Vault(
                name=vault.name,
                symbol=vault.symbol,
                slug=slugify(vault.name),
                contract_address=vault.address,
                asset_symbol=getattr(vault.asset, "symbol", None),
                decimals=vault.decimals,
                underlying_decimals=vault.underlying_decimals,
                policy=policy,
                decimals_offset=vault.policy.decimals_offset,
                min_initial_deposit=str(vault.limits.min_initial_deposit),
            )
            session.add(record)
            session.commit()
            session.refresh(record)
            logger.info(f"Vault {vault.name} registered at {vault.address}")
        else:
            logger.info(f"Vault with address {vault.address} already registered")

        previous = self._recorders.pop(vault.address, None)
        if previous is not None:
            previous.detach()
        self._vaults[vault.address] = vault
        self._recorders[vault.address] = EventRecorder(session, record, vault).attach()
        return record

    def get(self, address: str) -> Optional[TokenizedVault]:
        return self._vaults.get(to_account(address))

    def all(self) -> List[TokenizedVault]:
        return list(self._vaults.values())

    def clear(self):
        for recorder in self._recorders.values():
            recorder.detach()
        self._recorders.clear()
        self._vaults.clear()


registry = VaultRegistry()
