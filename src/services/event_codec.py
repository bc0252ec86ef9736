"""Encode vault notifications as EVM log entries and decode them back.

Indexed address arguments go into topics (left padded to 32 bytes), the
uint256 amounts are packed into `data` as 32-byte big-endian words, which is
the layout any ERC-4626 vault emits on chain.
"""
from hexbytes import HexBytes

from core.constants import DEPOSIT_EVENT_TOPIC, WITHDRAW_EVENT_TOPIC
from schemas.vault_events import Deposit, VaultEvent, Withdraw
from utils.web3_utils import parse_hex_to_int, to_account


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def _address_topic(address: str) -> HexBytes:
    return HexBytes("0x" + _strip_0x(address).lower().rjust(64, "0"))


def _topic_address(topic) -> str:
    return to_account(f"0x{HexBytes(topic).hex()[-40:]}")


def _uint_word(value: int) -> str:
    return "{:064x}".format(value)


def encode_log(vault_address: str, event: VaultEvent) -> dict:
    if isinstance(event, Deposit):
        topics = [_address_topic(event.caller), _address_topic(event.receiver)]
    elif isinstance(event, Withdraw):
        topics = [
            _address_topic(event.caller),
            _address_topic(event.receiver),
            _address_topic(event.owner),
        ]
    else:
        raise ValueError(f"Unsupported event for log encoding: {event.name}")

    return {
        "address": vault_address,
        "topics": [HexBytes("0x" + _strip_0x(event.topic))] + topics,
        "data": HexBytes("0x" + _uint_word(event.assets) + _uint_word(event.shares)),
    }


def decode_log(entry: dict) -> VaultEvent:
    topic0 = _strip_0x(HexBytes(entry["topics"][0]).hex())
    data = _strip_0x(HexBytes(entry["data"]).hex())
    if len(data) != 128:
        raise ValueError(f"Expected two uint256 words in log data, got {len(data) // 2} bytes")

    assets = parse_hex_to_int(data[:64], is_signed=False)
    shares = parse_hex_to_int(data[64:128], is_signed=False)

    if topic0 == _strip_0x(DEPOSIT_EVENT_TOPIC):
        return Deposit(
            caller=_topic_address(entry["topics"][1]),
            receiver=_topic_address(entry["topics"][2]),
            assets=assets,
            shares=shares,
        )
    if topic0 == _strip_0x(WITHDRAW_EVENT_TOPIC):
        return Withdraw(
            caller=_topic_address(entry["topics"][1]),
            receiver=_topic_address(entry["topics"][2]),
            owner=_topic_address(entry["topics"][3]),
            assets=assets,
            shares=shares,
        )
    raise ValueError(f"Unknown event topic: 0x{topic0}")
