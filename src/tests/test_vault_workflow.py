import pytest
from eth_utils import to_checksum_address

from core.constants import UINT256_MAX, ZERO_ADDRESS
from core.exceptions import (
    ArithmeticImpossible,
    InsufficientAllowance,
    InvalidAddress,
    InvalidAmount,
    LimitExceeded,
    UnderlyingTransferFailed,
)
from schemas.vault_events import Deposit, Transfer, Withdraw
from tests.conftest import ALICE, BOB, CAROL, VAULT_ADDRESS


@pytest.fixture
def events(vault):
    received = []
    vault.events.subscribe(received.append)
    return received


@pytest.fixture
def uneven_pool(vault, asset):
    # 1000 assets backing 333 shares, all held by alice
    vault.deposit(333, ALICE, caller=ALICE)
    asset.transfer(CAROL, VAULT_ADDRESS, 667)
    return vault


def test_deposit_into_empty_vault(vault, asset, events):
    shares = vault.deposit(1000, ALICE, caller=ALICE)

    assert shares == 1000
    assert vault.balance_of(ALICE) == 1000
    assert vault.total_supply() == 1000
    assert vault.total_assets() == 1000
    assert asset.balance_of(ALICE) == 999_000
    assert [type(e) for e in events] == [Transfer, Deposit]
    assert events[-1] == Deposit(
        caller=ALICE,
        receiver=ALICE,
        assets=1000,
        shares=1000,
        total_assets=1000,
        total_shares=1000,
    )


def test_deposit_for_another_receiver(vault, asset):
    vault.deposit(500, BOB, caller=ALICE)
    assert vault.balance_of(BOB) == 500
    assert vault.balance_of(ALICE) == 0
    assert asset.balance_of(ALICE) == 999_500


def test_worked_example(vault, asset):
    vault.deposit(500, ALICE, caller=ALICE)
    asset.transfer(CAROL, VAULT_ADDRESS, 500)

    assert vault.total_assets() == 1000
    assert vault.total_supply() == 500
    assert vault.convert_to_shares(100) == 50
    assert vault.convert_to_assets(50) == 100


def test_mint_rounds_up(uneven_pool, asset, events):
    assert uneven_pool.preview_mint(10) == 31

    assets = uneven_pool.mint(10, BOB, caller=BOB)

    assert assets == 31
    assert uneven_pool.balance_of(BOB) == 10
    assert asset.balance_of(BOB) == 1_000_000 - 31
    assert events[-1] == Deposit(
        caller=BOB, receiver=BOB, assets=31, shares=10, total_assets=1031, total_shares=343
    )


def test_withdraw_rounds_up(uneven_pool, asset, events):
    assert uneven_pool.max_withdraw(ALICE) == 1000
    assert uneven_pool.preview_withdraw(100) == 34

    shares = uneven_pool.withdraw(100, ALICE, ALICE, caller=ALICE)

    assert shares == 34
    assert uneven_pool.balance_of(ALICE) == 299
    assert uneven_pool.total_assets() == 900
    assert asset.balance_of(ALICE) == 1_000_000 - 333 + 100
    assert events[-1] == Withdraw(
        caller=ALICE,
        receiver=ALICE,
        owner=ALICE,
        assets=100,
        shares=34,
        total_assets=900,
        total_shares=299,
    )


def test_redeem_rounds_down(uneven_pool, asset):
    assert uneven_pool.preview_redeem(33) == 99

    assets = uneven_pool.redeem(33, BOB, ALICE, caller=ALICE)

    assert assets == 99
    assert uneven_pool.balance_of(ALICE) == 300
    assert asset.balance_of(BOB) == 1_000_099


def test_previews_match_execution(uneven_pool):
    expected = uneven_pool.preview_deposit(250)
    assert uneven_pool.deposit(250, BOB, caller=BOB) == expected

    expected = uneven_pool.preview_redeem(40)
    assert uneven_pool.redeem(40, BOB, BOB, caller=BOB) == expected


def test_withdraw_by_spender_needs_allowance(uneven_pool, asset):
    with pytest.raises(InsufficientAllowance):
        uneven_pool.withdraw(100, BOB, ALICE, caller=BOB)
    assert uneven_pool.balance_of(ALICE) == 333
    assert uneven_pool.total_assets() == 1000

    uneven_pool.approve(BOB, 34, caller=ALICE)
    shares = uneven_pool.withdraw(100, BOB, ALICE, caller=BOB)

    assert shares == 34
    assert uneven_pool.allowance(ALICE, BOB) == 0
    assert asset.balance_of(BOB) == 1_000_100


def test_redeem_by_spender_with_infinite_allowance(uneven_pool):
    uneven_pool.approve(BOB, UINT256_MAX, caller=ALICE)
    uneven_pool.redeem(100, BOB, ALICE, caller=BOB)
    assert uneven_pool.allowance(ALICE, BOB) == UINT256_MAX


def test_withdraw_over_limit_changes_nothing(uneven_pool, asset, events):
    events.clear()
    with pytest.raises(LimitExceeded) as exc_info:
        uneven_pool.withdraw(1001, ALICE, ALICE, caller=ALICE)

    assert exc_info.value.limit == 1000
    assert uneven_pool.balance_of(ALICE) == 333
    assert uneven_pool.total_assets() == 1000
    assert events == []


def test_redeem_over_limit(uneven_pool):
    with pytest.raises(LimitExceeded):
        uneven_pool.redeem(334, ALICE, ALICE, caller=ALICE)


def test_zero_deposit(vault, events):
    assert vault.deposit(0, ALICE, caller=ALICE) == 0
    assert vault.total_supply() == 0
    assert events[-1] == Deposit(
        caller=ALICE, receiver=ALICE, assets=0, shares=0, total_assets=0, total_shares=0
    )


def test_decollateralized_vault_refuses_deposits(vault, asset):
    vault.deposit(100, ALICE, caller=ALICE)
    # assets leave the vault without shares being burned
    asset.credit(VAULT_ADDRESS, CAROL, 100)

    assert vault.total_assets() == 0
    assert vault.total_supply() == 100
    assert vault.max_deposit(BOB) == 0
    with pytest.raises(LimitExceeded):
        vault.deposit(1, BOB, caller=BOB)
    with pytest.raises(ArithmeticImpossible):
        vault.preview_deposit(1)


def test_decollateralized_vault_mints_for_free(vault, asset):
    vault.deposit(100, ALICE, caller=ALICE)
    asset.credit(VAULT_ADDRESS, CAROL, 100)

    assert vault.max_mint(BOB) == UINT256_MAX
    assert vault.mint(10, BOB, caller=BOB) == 0
    assert vault.balance_of(BOB) == 10
    assert vault.max_withdraw(ALICE) == 0


def test_round_trip_never_gains(uneven_pool):
    shares = uneven_pool.deposit(100, BOB, caller=BOB)
    assert shares == 33
    assets_out = uneven_pool.redeem(shares, BOB, BOB, caller=BOB)
    assert assets_out <= 100


def test_max_withdraw_after_first_deposit(vault):
    vault.deposit(12345, ALICE, caller=ALICE)
    assert vault.max_withdraw(ALICE) == 12345
    assert vault.max_redeem(ALICE) == 12345


def test_failed_credit_rolls_back_burn(uneven_pool, asset, events):
    def refuse_payout(sender, recipient, amount):
        if sender == VAULT_ADDRESS:
            raise RuntimeError("receiver rejected the transfer")

    asset.add_transfer_hook(refuse_payout)
    events.clear()

    with pytest.raises(UnderlyingTransferFailed):
        uneven_pool.redeem(100, ALICE, ALICE, caller=ALICE)

    assert uneven_pool.balance_of(ALICE) == 333
    assert uneven_pool.total_supply() == 333
    assert uneven_pool.total_assets() == 1000
    assert events == []


def test_failed_debit_mints_nothing(vault, asset):
    asset.approve(BOB, VAULT_ADDRESS, 10)
    with pytest.raises(UnderlyingTransferFailed):
        vault.deposit(11, BOB, caller=BOB)
    assert vault.total_supply() == 0
    assert vault.balance_of(BOB) == 0
    assert asset.balance_of(BOB) == 1_000_000


def test_share_transfers(vault):
    vault.deposit(100, ALICE, caller=ALICE)
    vault.transfer(BOB, 30, caller=ALICE)
    assert vault.balance_of(BOB) == 30

    vault.approve(CAROL, 20, caller=BOB)
    vault.transfer_from(BOB, CAROL, 15, caller=CAROL)
    assert vault.balance_of(CAROL) == 15
    assert vault.allowance(BOB, CAROL) == 5

    with pytest.raises(InsufficientAllowance):
        vault.transfer_from(BOB, CAROL, 6, caller=CAROL)
    assert vault.balance_of(BOB) == 15


def test_invalid_inputs(vault):
    with pytest.raises(InvalidAddress):
        vault.deposit(1, "not-an-address", caller=ALICE)
    with pytest.raises(InvalidAddress):
        vault.deposit(1, ZERO_ADDRESS, caller=ALICE)
    with pytest.raises(InvalidAmount):
        vault.deposit(-1, ALICE, caller=ALICE)
    with pytest.raises(InvalidAmount):
        vault.redeem(UINT256_MAX + 1, ALICE, ALICE, caller=ALICE)


def test_payout_to_zero_address_rejected(uneven_pool, asset):
    with pytest.raises(InvalidAddress):
        uneven_pool.withdraw(100, ZERO_ADDRESS, ALICE, caller=ALICE)
    with pytest.raises(InvalidAddress):
        uneven_pool.redeem(33, ZERO_ADDRESS, ALICE, caller=ALICE)

    assert uneven_pool.balance_of(ALICE) == 333
    assert uneven_pool.total_assets() == 1000
    assert asset.balance_of(ZERO_ADDRESS) == 0


def test_mixed_case_addresses_are_normalized(vault, asset):
    receiver = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
    vault.deposit(10, receiver, caller=ALICE)
    assert vault.balance_of(receiver) == 10
    assert vault.balance_of(to_checksum_address(receiver)) == 10


def test_state_snapshot(uneven_pool):
    state = uneven_pool.state()
    assert state.total_assets == 1000
    assert state.total_shares == 333
    assert state.decimals == 6
    assert state.is_collateralized
    assert state.price_per_share == pytest.approx(1000 / 333, rel=1e-6)
