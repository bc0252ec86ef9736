class VaultError(Exception):
    """Base class for every failure raised by the vault engine."""


class LimitExceeded(VaultError):
    def __init__(self, operation: str, account: str, amount: int, limit: int):
        self.operation = operation
        self.account = account
        self.amount = amount
        self.limit = limit
        super().__init__(
            f"{operation} of {amount} for {account} exceeds the limit of {limit}"
        )


class ArithmeticImpossible(VaultError):
    pass


class InsufficientAllowance(VaultError):
    def __init__(self, owner: str, spender: str, needed: int, allowance: int):
        self.owner = owner
        self.spender = spender
        self.needed = needed
        self.allowance = allowance
        super().__init__(
            f"{spender} needs an allowance of {needed} from {owner}, has {allowance}"
        )


class InsufficientShares(VaultError):
    def __init__(self, account: str, needed: int, balance: int):
        self.account = account
        self.needed = needed
        self.balance = balance
        super().__init__(f"{account} holds {balance} shares, needs {needed}")


class UnderlyingTransferFailed(VaultError):
    pass


class InvalidAmount(VaultError, ValueError):
    pass


class InvalidAddress(VaultError, ValueError):
    pass


class ReentrantCall(VaultError):
    pass


class BelowMinimumDeposit(LimitExceeded):
    def __init__(self, account: str, amount: int, minimum: int):
        super().__init__("initial deposit", account, amount, minimum)
        self.args = (
            f"initial deposit of {amount} from {account} is below the minimum of {minimum}",
        )
