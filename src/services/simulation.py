import logging
from dataclasses import dataclass

from core.constants import UINT256_MAX
from core.exceptions import LimitExceeded
from services.asset_ledger import InMemoryAssetLedger
from services.conversion import policy_from_offset
from services.vault import TokenizedVault

logger = logging.getLogger(__name__)

SIM_VAULT_ADDRESS = "0x9000000000000000000000000000000000000009"
SIM_ATTACKER_ADDRESS = "0x1000000000000000000000000000000000000001"
SIM_VICTIM_ADDRESS = "0x2000000000000000000000000000000000000002"


@dataclass
class DonationAttackResult:
    blocked: bool
    attacker_shares: int = 0
    victim_shares: int = 0
    victim_assets_out: int = 0
    attacker_assets_out: int = 0
    attacker_spent: int = 0
    victim_deposit: int = 0

    @property
    def victim_loss(self) -> int:
        return self.victim_deposit - self.victim_assets_out

    @property
    def attacker_profit(self) -> int:
        return self.attacker_assets_out - self.attacker_spent


def simulate_donation_attack(
    victim_deposit: int,
    donation: int,
    attacker_deposit: int = 1,
    decimals_offset: int = 0,
    min_initial_deposit: int = 0,
) -> DonationAttackResult:
    """Front-run a victim's first deposit by seeding the vault and donating to it.

    The attacker deposits a dust amount into the empty vault, transfers
    `donation` assets straight to the vault to inflate the share price, lets
    the victim deposit, then both redeem everything.
    """
    asset = InMemoryAssetLedger(symbol="SIM")
    vault = TokenizedVault(
        asset,
        SIM_VAULT_ADDRESS,
        name="Simulation Vault",
        symbol="vSIM",
        policy=policy_from_offset(decimals_offset),
        min_initial_deposit=min_initial_deposit,
        reentrancy_guard=False,
    )
    attacker, victim = SIM_ATTACKER_ADDRESS, SIM_VICTIM_ADDRESS
    asset.mint(attacker, attacker_deposit + donation)
    asset.mint(victim, victim_deposit)
    asset.approve(attacker, vault.address, UINT256_MAX)
    asset.approve(victim, vault.address, UINT256_MAX)

    try:
        attacker_shares = vault.deposit(attacker_deposit, attacker, caller=attacker)
    except LimitExceeded as e:
        logger.info(f"Attacker seed deposit rejected: {e}")
        return DonationAttackResult(blocked=True, victim_deposit=victim_deposit)

    asset.transfer(attacker, vault.address, donation)
    victim_shares = vault.deposit(victim_deposit, victim, caller=victim)

    attacker_out = vault.redeem(attacker_shares, attacker, attacker, caller=attacker)
    victim_out = vault.redeem(victim_shares, victim, victim, caller=victim)

    return DonationAttackResult(
        blocked=False,
        attacker_shares=attacker_shares,
        victim_shares=victim_shares,
        victim_assets_out=victim_out,
        attacker_assets_out=attacker_out,
        attacker_spent=attacker_deposit + donation,
        victim_deposit=victim_deposit,
    )
