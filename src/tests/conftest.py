import pytest
from sqlmodel import Session

from core.constants import UINT256_MAX
from core.db import get_engine, init_db
from services.asset_ledger import InMemoryAssetLedger
from services.conversion import BootstrapPolicy
from services.vault import TokenizedVault

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
CAROL = "0x3333333333333333333333333333333333333333"
VAULT_ADDRESS = "0x9999999999999999999999999999999999999999"


@pytest.fixture
def asset():
    ledger = InMemoryAssetLedger(symbol="USDC", decimals=6)
    for account in (ALICE, BOB, CAROL):
        ledger.mint(account, 1_000_000)
        ledger.approve(account, VAULT_ADDRESS, UINT256_MAX)
    return ledger


@pytest.fixture
def vault(asset):
    return TokenizedVault(
        asset,
        VAULT_ADDRESS,
        name="USDC Vault",
        symbol="vUSDC",
        policy=BootstrapPolicy(),
        min_initial_deposit=0,
        reentrancy_guard=False,
    )


@pytest.fixture
def db_engine():
    engine = get_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = Session(db_engine)
    yield session
    session.close()
