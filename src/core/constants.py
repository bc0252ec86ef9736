from web3 import Web3

UINT8_MAX = (1 << 8) - 1
UINT256_MAX = (1 << 256) - 1
# largest n with 10**n <= UINT256_MAX
MAX_DECIMALS_OFFSET = 77

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

DEPOSIT_EVENT_SIGNATURE = "Deposit(address,address,uint256,uint256)"
WITHDRAW_EVENT_SIGNATURE = "Withdraw(address,address,address,uint256,uint256)"
TRANSFER_EVENT_SIGNATURE = "Transfer(address,address,uint256)"
APPROVAL_EVENT_SIGNATURE = "Approval(address,address,uint256)"

DEPOSIT_EVENT_TOPIC: str = Web3.solidity_keccak(
    ["string"], [DEPOSIT_EVENT_SIGNATURE]
).hex()
WITHDRAW_EVENT_TOPIC: str = Web3.solidity_keccak(
    ["string"], [WITHDRAW_EVENT_SIGNATURE]
).hex()
TRANSFER_EVENT_TOPIC: str = Web3.solidity_keccak(
    ["string"], [TRANSFER_EVENT_SIGNATURE]
).hex()
APPROVAL_EVENT_TOPIC: str = Web3.solidity_keccak(
    ["string"], [APPROVAL_EVENT_SIGNATURE]
).hex()

EVENT_TOPICS = {
    "Deposit": DEPOSIT_EVENT_TOPIC,
    "Withdraw": WITHDRAW_EVENT_TOPIC,
    "Transfer": TRANSFER_EVENT_TOPIC,
    "Approval": APPROVAL_EVENT_TOPIC,
}
