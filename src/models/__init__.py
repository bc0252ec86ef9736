from .vaults import ConversionPolicyKind, Vault, VaultBase
from .pps_history import PricePerShareHistory, PricePerShareHistoryBase
from .vault_event import VaultEventRecord
