import logging

import pendulum
from sqlmodel import Session

from models import PricePerShareHistory, Vault, VaultEventRecord
from schemas.vault_events import Deposit, VaultEvent, Withdraw
from services.conversion import PoolState
from services.vault import TokenizedVault

logger = logging.getLogger(__name__)


class EventRecorder:
    """Persist a vault's Deposit/Withdraw notifications and its price per share.

    Notifications from nested operations arrive together once the outermost
    call commits, so each price snapshot is taken from the pool totals carried
    by its own event rather than from the vault's current state.
    """

    def __init__(self, session: Session, vault_record: Vault, vault: TokenizedVault):
        self.session = session
        self.vault_record = vault_record
        self.vault = vault

    def attach(self):
        self.vault.events.subscribe(self.handle_event, Deposit)
        self.vault.events.subscribe(self.handle_event, Withdraw)
        return self

    def detach(self):
        self.vault.events.unsubscribe(self.handle_event)

    def _settled_pool(self, event: VaultEvent) -> PoolState:
        if event.total_assets is None or event.total_shares is None:
            return self.vault.pool_state()
        return PoolState(total_assets=event.total_assets, total_shares=event.total_shares)

    def handle_event(self, event: VaultEvent):
        pool = self._settled_pool(event)
        price_per_share = self.vault.price_per_share(pool)

        record = VaultEventRecord(
            vault_id=self.vault_record.id,
            event_name=event.name,
            topic=event.topic,
            caller=event.caller,
            receiver=event.receiver,
            owner=getattr(event, "owner", None),
            assets=str(event.assets),
            shares=str(event.shares),
        )
        pps = PricePerShareHistory(
            vault_id=self.vault_record.id,
            datetime=pendulum.now(tz=pendulum.UTC),
            price_per_share=price_per_share,
            total_assets=str(pool.total_assets),
            total_shares=str(pool.total_shares),
        )
        try:
            self.session.add(record)
            self.session.add(pps)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(
            f"Recorded {event.name} for vault {self.vault_record.name}, pps {price_per_share}"
        )
