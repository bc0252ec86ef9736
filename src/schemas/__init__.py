from .vault import Vault, VaultEvent, VaultEvents, VaultInDBBase
from .vault_state import VaultState
from .preview import AccountPosition, PreviewResult, VaultOperation
from .vault_events import Approval, Deposit, Transfer, Withdraw
