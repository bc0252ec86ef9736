from eth_utils import is_address, to_checksum_address

from core.exceptions import InvalidAddress


def to_account(address: str) -> str:
    """Normalize an account address to its EIP-55 checksum form."""
    if not isinstance(address, str) or not is_address(address):
        raise InvalidAddress(f"Invalid account address: {address!r}")
    return to_checksum_address(address)


def is_valid_wallet_address(wallet_address):
    if not is_address(wallet_address):
        return False
    return to_checksum_address(wallet_address)


def parse_hex_to_int(hex_str: str, is_signed=True) -> int:
    """Parse a big-endian hexadecimal string without the '0x' prefix."""
    if is_signed:
        return int.from_bytes(bytes.fromhex(hex_str), byteorder="big", signed=True)
    return int(hex_str, 16)
