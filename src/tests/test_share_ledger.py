import pytest

from core.constants import UINT256_MAX, ZERO_ADDRESS
from core.exceptions import ArithmeticImpossible, InsufficientAllowance, InsufficientShares
from schemas.vault_events import Approval, Transfer
from services.share_ledger import ShareLedger

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"


@pytest.fixture
def emitted():
    return []


@pytest.fixture
def ledger(emitted):
    return ShareLedger(emit=emitted.append)


def test_mint_and_burn(ledger, emitted):
    ledger.mint(ALICE, 100)
    ledger.burn(ALICE, 40)

    assert ledger.balance_of(ALICE) == 60
    assert ledger.total_supply == 60
    assert emitted == [
        Transfer(sender=ZERO_ADDRESS, recipient=ALICE, value=100),
        Transfer(sender=ALICE, recipient=ZERO_ADDRESS, value=40),
    ]


def test_burn_to_zero_keeps_holder(ledger):
    ledger.mint(ALICE, 10)
    ledger.burn(ALICE, 10)
    assert ledger.holders() == {ALICE: 0}


def test_burn_more_than_balance(ledger):
    ledger.mint(ALICE, 10)
    with pytest.raises(InsufficientShares):
        ledger.burn(ALICE, 11)
    assert ledger.balance_of(ALICE) == 10


def test_mint_overflow(ledger):
    ledger.mint(ALICE, UINT256_MAX)
    assert not ledger.can_mint(1)
    with pytest.raises(ArithmeticImpossible):
        ledger.mint(BOB, 1)


def test_transfer(ledger):
    ledger.mint(ALICE, 10)
    ledger.transfer(ALICE, BOB, 4)
    assert ledger.balance_of(ALICE) == 6
    assert ledger.balance_of(BOB) == 4
    assert ledger.total_supply == 10

    with pytest.raises(InsufficientShares):
        ledger.transfer(BOB, ALICE, 5)


def test_allowance_spending(ledger, emitted):
    ledger.approve(ALICE, BOB, 10)
    assert emitted[-1] == Approval(owner=ALICE, spender=BOB, value=10)

    ledger.spend_allowance(ALICE, BOB, 4)
    assert ledger.allowance(ALICE, BOB) == 6

    with pytest.raises(InsufficientAllowance) as exc_info:
        ledger.spend_allowance(ALICE, BOB, 7)
    assert exc_info.value.needed == 7
    assert exc_info.value.allowance == 6


def test_infinite_allowance_not_decremented(ledger):
    ledger.approve(ALICE, BOB, UINT256_MAX)
    ledger.spend_allowance(ALICE, BOB, 10**30)
    assert ledger.allowance(ALICE, BOB) == UINT256_MAX


def test_atomic_rolls_back_everything(ledger):
    ledger.mint(ALICE, 100)
    ledger.approve(ALICE, BOB, 50)

    with pytest.raises(RuntimeError):
        with ledger.atomic():
            ledger.spend_allowance(ALICE, BOB, 20)
            ledger.burn(ALICE, 30)
            ledger.mint(BOB, 5)
            raise RuntimeError("boom")

    assert ledger.balance_of(ALICE) == 100
    assert ledger.balance_of(BOB) == 0
    assert ledger.allowance(ALICE, BOB) == 50
    assert ledger.total_supply == 100


def test_nested_atomic_outer_failure_undoes_inner(ledger):
    with pytest.raises(RuntimeError):
        with ledger.atomic():
            ledger.mint(ALICE, 10)
            with ledger.atomic():
                ledger.mint(BOB, 10)
            raise RuntimeError("outer fails")

    assert ledger.total_supply == 0
    assert ledger.balance_of(BOB) == 0


def test_nested_atomic_inner_failure_keeps_outer(ledger):
    with ledger.atomic():
        ledger.mint(ALICE, 10)
        with pytest.raises(InsufficientShares):
            with ledger.atomic():
                ledger.mint(BOB, 5)
                ledger.burn(BOB, 6)

    assert ledger.balance_of(ALICE) == 10
    assert ledger.balance_of(BOB) == 0
    assert ledger.total_supply == 10
